"""Identifier checks applied before anything is relayed downstream."""
from __future__ import annotations

import re

_OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


class InvalidIdentifierError(ValueError):
    """An identifier is not a 24‑hex‑character object id."""


def is_object_id(value: object) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_PATTERN.fullmatch(value))


def ensure_object_ids(*values: str, message: str) -> None:
    """Raise :class:`InvalidIdentifierError` with *message* unless all *values* are valid."""
    if not all(is_object_id(v) for v in values):
        raise InvalidIdentifierError(message)

