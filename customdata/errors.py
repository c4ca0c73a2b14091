"""Error taxonomy for custom data containers.

Lookup misses are not errors: ``try_get`` reports them through its return
value and ``index_of`` returns ``None``. The exceptions here cover the hard
failures that must reach the caller.
"""

from __future__ import annotations

__all__ = [
    "CustomDataError",
    "UnknownTypeError",
    "InvalidArgumentError",
]


class CustomDataError(Exception):
    """Base class for all customdata failures."""


class UnknownTypeError(CustomDataError, LookupError):
    """Raised when a payload type id is not in the registry listing."""

    def __init__(self, type_id: str | None, message: str | None = None) -> None:
        self.type_id = type_id
        super().__init__(message or f"Unknown payload type: {type_id!r}")


class InvalidArgumentError(CustomDataError, ValueError):
    """Raised for bad keys, bad payload types or malformed persisted entries."""
