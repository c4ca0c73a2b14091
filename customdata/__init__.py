"""customdata - keyed containers of heterogeneous, registry-typed payloads.

A container stores an ordered list of (key, payload) entries. Each payload is
an instance of one of the variant types known to a registry, chosen when the
entry is authored, persisted with its type id, and read back with a
type-checked accessor.

Key Components:
    CustomData: Marker base class for payload variants
    PayloadTypeRegistry: Catalog of variants, builds default instances by id
    CustomDataContainer: Typed get/set/get_or_create over the entry list
    load_document / save_document: YAML or JSON persistence

Example:
    >>> from customdata import CustomDataContainer, FloatData
    >>> data = CustomDataContainer()
    >>> data.set("speed", FloatData(value=2.5))
    >>> data.try_get("speed", FloatData)
    (True, FloatData(value=2.5))
"""

from __future__ import annotations

from .container import DEFAULT_ENTRY_KEY, CustomDataContainer, Entry
from .document import dump_container, load_container, load_document, save_document
from .errors import CustomDataError, InvalidArgumentError, UnknownTypeError
from .payloads import (
    CurveData,
    FloatData,
    IntData,
    ObjectCollection,
    StringData,
    Vec3Data,
)
from .registry import (
    CustomData,
    PayloadTypeRegistry,
    TypeDescriptor,
    default_registry,
    register_payload,
)

__version__ = "1.0.0"
__all__ = [
    "CustomData",
    "CustomDataContainer",
    "Entry",
    "DEFAULT_ENTRY_KEY",
    "PayloadTypeRegistry",
    "TypeDescriptor",
    "default_registry",
    "register_payload",
    "IntData",
    "FloatData",
    "StringData",
    "Vec3Data",
    "CurveData",
    "ObjectCollection",
    "dump_container",
    "load_container",
    "load_document",
    "save_document",
    "CustomDataError",
    "InvalidArgumentError",
    "UnknownTypeError",
]
