import asyncio

import pytest

from admin_gateway.services import batch


def test_accept_targets_dedupes_in_order():
    assert batch.accept_targets(["b", "a", "b", "c"], str.isalpha) == ["b", "a", "c"]


def test_accept_targets_rejects_whole_batch():
    with pytest.raises(batch.BatchRejected) as exc_info:
        batch.accept_targets(["ok", "1", "fine", "2"], str.isalpha, describe=lambda t: f"bad: {t}")

    assert str(exc_info.value) == "bad: 1"
    assert exc_info.value.rejected == ["1", "2"]


async def test_run_independently_keeps_going_after_failure():
    seen = []

    async def action(target):
        seen.append(target)
        if target == "a":
            raise RuntimeError("a broke")
        return target.upper()

    outcomes = await batch.run_independently(["a", "b", "c"], action)

    assert seen == ["a", "b", "c"]
    assert [o.ok for o in outcomes] == [False, True, True]
    assert str(outcomes[0].error) == "a broke"
    assert [o.value for o in outcomes[1:]] == ["B", "C"]
    assert batch.summarize(outcomes) == (2, 1)


async def test_run_independently_preserves_order_and_bounds_concurrency():
    running = 0
    peak = 0

    async def action(target):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01 * (5 - int(target)))
        running -= 1
        return target

    outcomes = await batch.run_independently(["1", "2", "3", "4"], action, concurrency=2)

    assert [o.value for o in outcomes] == ["1", "2", "3", "4"]
    assert peak == 2


async def test_uncaught_exception_types_propagate():
    async def action(target):
        raise KeyError(target)

    with pytest.raises(KeyError):
        await batch.run_independently(["x"], action, catch=(ValueError,))
