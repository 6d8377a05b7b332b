"""Two‑phase batch executor.

Phase 1 is a pure validation pass over every target; a single rejected target
rejects the whole batch before any work starts. Phase 2 runs the action once
per accepted target and never aborts early: each target's exception is
captured in its own :class:`TargetOutcome`.

This module is deliberately *framework‑free* so it can be unit‑tested
without an ASGI stack.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, Optional, TypeVar

from loguru import logger

T = TypeVar("T")


class BatchRejected(ValueError):
    """Validation pass failed; nothing was executed."""

    def __init__(self, message: str, rejected: list[str]):
        super().__init__(message)
        self.rejected = rejected


@dataclass(frozen=True)
class TargetOutcome(Generic[T]):
    target: str
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def accept_targets(
    targets: Iterable[str],
    is_valid: Callable[[str], bool],
    *,
    describe: Callable[[str], str] = lambda t: f"Invalid target: {t}",
) -> list[str]:
    """Return *targets* de‑duplicated in order, or raise :class:`BatchRejected`."""
    accepted: list[str] = []
    rejected: list[str] = []
    for target in targets:
        if not is_valid(target):
            rejected.append(target)
        elif target not in accepted:
            accepted.append(target)

    if rejected:
        raise BatchRejected(describe(rejected[0]), rejected)
    return accepted


async def run_independently(
    targets: list[str],
    action: Callable[[str], Awaitable[T]],
    *,
    concurrency: int = 1,
    catch: tuple[type[BaseException], ...] = (Exception,),
) -> list[TargetOutcome[T]]:
    """Run *action* for every target, at most *concurrency* at a time.

    Results come back in the order of *targets*. Exceptions matching *catch*
    become failed outcomes; anything else propagates.
    """
    gate = asyncio.Semaphore(max(1, concurrency))

    async def _one(target: str) -> TargetOutcome[T]:
        async with gate:
            try:
                value = await action(target)
            except catch as exc:
                logger.warning("Batch target {} failed: {}", target, exc)
                return TargetOutcome(target=target, error=exc)
            return TargetOutcome(target=target, value=value)

    return list(await asyncio.gather(*(_one(t) for t in targets)))


def summarize(outcomes: list[TargetOutcome[Any]]) -> tuple[int, int]:
    """Return ``(succeeded, failed)`` counts."""
    succeeded = sum(1 for o in outcomes if o.ok)
    return succeeded, len(outcomes) - succeeded
