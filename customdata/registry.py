"""Payload type registry.

Payload variants are pydantic models deriving from :class:`CustomData`. Each
variant module registers its classes explicitly, usually through the
:func:`register_payload` decorator, so the set of known types is whatever has
been imported at startup. The registry lists the concrete types sorted by
display name and can build a default instance of any of them by type id.

Example:
    >>> @register_payload
    ... class HealthData(CustomData):
    ...     value: int = 100
    >>> default_registry.instantiate("HealthData").value
    100
"""

from __future__ import annotations

import importlib
import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import cached_property
from typing import Any, TypeVar, overload

from loguru import logger
from pydantic import BaseModel, ConfigDict

from .errors import InvalidArgumentError, UnknownTypeError

__all__ = [
    "CustomData",
    "TypeDescriptor",
    "PayloadTypeRegistry",
    "default_registry",
    "register_payload",
]

P = TypeVar("P", bound=type["CustomData"])


class CustomData(BaseModel):
    """Marker base for everything that can be stored in a container.

    Subclasses declare their fields with defaults so that the registry can
    build them without arguments.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    type_id: str
    display_name: str
    payload_type: type[CustomData]

    def create(self) -> CustomData:
        return self.payload_type()


def _is_instantiable(payload_type: type[CustomData]) -> bool:
    """Abstract classes and models with required fields cannot be built bare."""
    if inspect.isabstract(payload_type):
        return False
    return not any(f.is_required() for f in payload_type.model_fields.values())


class PayloadTypeRegistry:
    """Catalog of payload variants keyed by their declared type id.

    The sorted listing is computed on first use and then cached. Registering a
    new type drops the cached listing; in practice all registration happens at
    import time, before anything asks for the listing.
    """

    def __init__(self) -> None:
        self._declared: dict[str, TypeDescriptor] = {}

    def register(
        self,
        payload_type: type[CustomData],
        type_id: str | None = None,
        display_name: str | None = None,
    ) -> type[CustomData]:
        """Register ``payload_type`` under ``type_id`` (default: class name).

        Args:
            payload_type: A subclass of :class:`CustomData`.
            type_id: Stable identifier persisted alongside the payload.
            display_name: Name used for sorting and display.

        Returns:
            The registered class, so the method works as a decorator body.
        """
        if not (isinstance(payload_type, type) and issubclass(payload_type, CustomData)):
            raise InvalidArgumentError(
                f"Payload types must derive from CustomData, got {payload_type!r}"
            )
        if payload_type is CustomData:
            raise InvalidArgumentError("CustomData itself cannot be registered")

        type_id = type_id or payload_type.__name__
        existing = self._declared.get(type_id)
        if existing is not None:
            if existing.payload_type is payload_type:
                return payload_type
            raise InvalidArgumentError(
                f"Type id '{type_id}' is already registered to "
                f"{existing.payload_type.__qualname__}"
            )

        self._declared[type_id] = TypeDescriptor(
            type_id=type_id,
            display_name=display_name or type_id,
            payload_type=payload_type,
        )
        self.__dict__.pop("_listing", None)
        logger.debug(f"Registered payload type '{type_id}'")
        return payload_type

    @cached_property
    def _listing(self) -> tuple[TypeDescriptor, ...]:
        listed = [d for d in self._declared.values() if _is_instantiable(d.payload_type)]
        listed.sort(key=lambda d: (d.display_name, d.type_id))
        logger.info(f"Payload type listing built with {len(listed)} types")
        return tuple(listed)

    def list_types(self) -> tuple[TypeDescriptor, ...]:
        """Concrete registered types sorted by display name."""
        return self._listing

    def descriptor(self, type_id: str) -> TypeDescriptor:
        for descriptor in self._listing:
            if descriptor.type_id == type_id:
                return descriptor
        raise UnknownTypeError(type_id)

    def instantiate(self, type_id: str) -> CustomData:
        """Build a default instance of the listed type ``type_id``."""
        return self.descriptor(type_id).create()

    def type_id_of(self, payload: CustomData | type[CustomData]) -> str | None:
        """The type id ``payload``'s class was registered under, if any."""
        payload_type = payload if isinstance(payload, type) else type(payload)
        for descriptor in self._declared.values():
            if descriptor.payload_type is payload_type:
                return descriptor.type_id
        return None

    def index_of(self, target: str | CustomData | None) -> int | None:
        """Position of a type id or payload's type in the listing.

        Returns ``None`` for an absent payload or a type that is not listed.
        """
        if target is None:
            return None
        if isinstance(target, str):
            type_id = target
        else:
            type_id = self.type_id_of(target)
            if type_id is None:
                return None
        for index, descriptor in enumerate(self._listing):
            if descriptor.type_id == type_id:
                return index
        return None

    def load_plugins(self, modules: Iterable[str]) -> None:
        """Import modules that register additional payload types.

        While the imports run, ``register_payload`` calls without an explicit
        ``registry`` register into this registry. A module that was already
        imported is not executed again.
        """
        global _loading_registry
        previous, _loading_registry = _loading_registry, self
        try:
            for module_name in modules:
                logger.info(f"Loading payload plugin module: {module_name}")
                importlib.import_module(module_name)
        finally:
            _loading_registry = previous

    def __contains__(self, type_id: object) -> bool:
        return any(d.type_id == type_id for d in self._listing)

    def __len__(self) -> int:
        return len(self._listing)

    def __iter__(self):
        return iter(self._listing)


default_registry = PayloadTypeRegistry()
_loading_registry: PayloadTypeRegistry | None = None


@overload
def register_payload(payload_type: P) -> P: ...


@overload
def register_payload(
    payload_type: None = None,
    *,
    type_id: str | None = None,
    display_name: str | None = None,
    registry: PayloadTypeRegistry | None = None,
) -> Callable[[P], P]: ...


def register_payload(
    payload_type: Any = None,
    *,
    type_id: str | None = None,
    display_name: str | None = None,
    registry: PayloadTypeRegistry | None = None,
) -> Any:
    """Class decorator registering a payload type, with or without arguments.

    Without ``registry`` the type goes to the registry currently loading
    plugins, or to ``default_registry``.
    """

    def decorator(cls: P) -> P:
        target = registry
        if target is None:
            target = _loading_registry if _loading_registry is not None else default_registry
        target.register(cls, type_id=type_id, display_name=display_name)
        return cls

    if payload_type is None:
        return decorator
    return decorator(payload_type)
