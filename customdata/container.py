"""Keyed container of heterogeneous payloads.

``CustomDataContainer`` offers two surfaces over the same ordered entry list:

* the typed accessors ``try_get``/``get``/``get_or_create``/``set``;
* an open, positional editor surface (``entries``, ``add_entry``,
  ``remove_at``, ``rename_at``, ``replace_payload_at``) that is not type
  filtered and goes through the registry to build payloads.

Lookups match on exact key equality AND the payload being an instance of the
requested class. ``set`` matches on the key alone, so it can change the
variant stored under a key out from under a caller expecting the old type.

Callers must not mutate ``entries`` while a lookup over it is running.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import InvalidArgumentError
from .registry import CustomData, PayloadTypeRegistry, default_registry

__all__ = [
    "DEFAULT_ENTRY_KEY",
    "Entry",
    "CustomDataContainer",
]

DEFAULT_ENTRY_KEY = "NewKey"

T = TypeVar("T")


class Entry(BaseModel):
    """A key and the payload stored under it. ``payload`` may be absent."""

    model_config = ConfigDict(validate_assignment=True)

    key: str
    payload: CustomData | None = None


def _check_key(key: object) -> str:
    if not isinstance(key, str):
        raise InvalidArgumentError(f"Key must be a string, got {type(key).__name__}")
    return key


def _check_payload_type(payload_type: object) -> None:
    if not isinstance(payload_type, type):
        raise InvalidArgumentError(f"Expected a payload class, got {payload_type!r}")


class CustomDataContainer:
    """Ordered (key, payload) entries with typed access."""

    def __init__(
        self,
        entries: Iterable[Entry] | None = None,
        registry: PayloadTypeRegistry | None = None,
    ) -> None:
        self.entries: list[Entry] = list(entries or [])
        self.registry = registry if registry is not None else default_registry

    # --- Typed access ---

    def try_get(self, key: str, payload_type: type[T]) -> tuple[bool, T | None]:
        """First entry under ``key`` whose payload is a ``payload_type``.

        Returns:
            ``(True, payload)`` on a match, ``(False, None)`` otherwise.
        """
        _check_key(key)
        _check_payload_type(payload_type)
        for entry in self.entries:
            if entry.payload is None:
                continue
            if entry.key == key and isinstance(entry.payload, payload_type):
                return True, entry.payload
        return False, None

    def get(self, key: str, payload_type: type[T]) -> T | None:
        return self.try_get(key, payload_type)[1]

    def get_or_create(
        self,
        key: str,
        payload_type: type[T],
        factory: Callable[[], T] | None = None,
    ) -> T:
        """Return the matching payload, appending a new one on a miss.

        Args:
            key: Entry key.
            payload_type: Class the payload must be an instance of.
            factory: Builds the new payload; defaults to ``payload_type``.
        """
        found, existing = self.try_get(key, payload_type)
        if found:
            return existing

        created = (factory or payload_type)()
        if not isinstance(created, payload_type) or not isinstance(created, CustomData):
            raise InvalidArgumentError(
                f"Factory for '{key}' returned {type(created).__name__}, "
                f"expected a CustomData {payload_type.__name__}"
            )
        self.entries.append(Entry(key=key, payload=created))
        logger.debug(f"Created '{key}' as {type(created).__name__}")
        return created

    def set(self, key: str, value: CustomData) -> None:
        """Store ``value`` under ``key``, replacing the first entry with that key.

        The existing payload's type is not considered.
        """
        _check_key(key)
        if not isinstance(value, CustomData):
            raise InvalidArgumentError(
                f"Value for '{key}' must be CustomData, got {type(value).__name__}"
            )
        for index, entry in enumerate(self.entries):
            if entry.key == key:
                entry.payload = value
                logger.debug(f"Set '{key}' at index {index} to {type(value).__name__}")
                return
        self.entries.append(Entry(key=key, payload=value))
        logger.debug(f"Appended '{key}' as {type(value).__name__}")

    def keys(self) -> list[str]:
        return [entry.key for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"CustomDataContainer(entries={self.entries!r})"

    # --- Editor surface ---

    def add_entry(self, key: str = DEFAULT_ENTRY_KEY, type_id: str | None = None) -> Entry:
        """Append an entry holding a default payload.

        Uses the first listed registry type when ``type_id`` is omitted; the
        payload is absent if the registry lists nothing.
        """
        _check_key(key)
        if type_id is not None:
            payload = self.registry.instantiate(type_id)
        elif len(self.registry):
            payload = self.registry.list_types()[0].create()
        else:
            payload = None
        entry = Entry(key=key, payload=payload)
        self.entries.append(entry)
        logger.debug(f"Appended entry '{key}' at index {len(self.entries) - 1}")
        return entry

    def remove_at(self, index: int) -> Entry:
        entry = self.entries.pop(index)
        logger.debug(f"Removed entry '{entry.key}' from index {index}")
        return entry

    def rename_at(self, index: int, key: str) -> None:
        entry = self.entries[index]
        try:
            entry.key = key
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid key for entry {index}: {key!r}") from e

    def replace_payload_at(self, index: int, type_id: str) -> CustomData:
        """Swap the payload at ``index`` for a default instance of ``type_id``."""
        entry = self.entries[index]
        payload = self.registry.instantiate(type_id)
        entry.payload = payload
        logger.debug(f"Entry '{entry.key}' at index {index} changed to {type_id}")
        return payload

    def type_index_at(self, index: int) -> int | None:
        return self.registry.index_of(self.entries[index].payload)
