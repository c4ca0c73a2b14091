"""Persisted form of a container.

A document is a mapping with a schema version and the ordered entries, each
entry a ``key``/``type_id``/``fields`` triple::

    schema_version: "1.0"
    entries:
      - key: speed
        type_id: FloatData
        fields: {value: 2.5}

The shape is checked against a JSON Schema compiled with fastjsonschema, then
every payload is rebuilt through the registry before the container exists, so
a bad entry anywhere fails the whole load.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any, TypeAlias

import yaml
from loguru import logger
from pydantic import ValidationError

from .container import CustomDataContainer, Entry
from .errors import InvalidArgumentError, UnknownTypeError
from .registry import CustomData, PayloadTypeRegistry, default_registry

Document: TypeAlias = dict[str, Any]
EntryData: TypeAlias = dict[str, Any]

__all__ = [
    "SCHEMA_VERSION",
    "DOCUMENT_SCHEMA",
    "Document",
    "EntryData",
    "validate_document",
    "dump_container",
    "load_container",
    "save_document",
    "load_document",
]

SCHEMA_VERSION = "1.0"

KEY_SCHEMA_VERSION = "schema_version"
KEY_ENTRIES = "entries"
KEY_KEY = "key"
KEY_TYPE_ID = "type_id"
KEY_FIELDS = "fields"

YAML_SUFFIXES = {".yaml", ".yml"}

DOCUMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        KEY_SCHEMA_VERSION: {"type": "string"},
        KEY_ENTRIES: {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    KEY_KEY: {"type": "string"},
                    KEY_TYPE_ID: {"type": ["string", "null"]},
                    KEY_FIELDS: {"type": ["object", "null"]},
                },
                "required": [KEY_KEY, KEY_TYPE_ID],
                "additionalProperties": False,
            },
        },
    },
    "required": [KEY_ENTRIES],
    "additionalProperties": False,
}


@lru_cache(maxsize=1)
def _document_validator() -> Callable[[Any], Any]:
    import fastjsonschema

    return fastjsonschema.compile(DOCUMENT_SCHEMA)


def validate_document(document: Any) -> Document:
    """Check ``document`` against the document schema."""
    import fastjsonschema

    try:
        _document_validator()(document)
    except fastjsonschema.JsonSchemaValueException as e:
        raise InvalidArgumentError(
            f"Malformed document: {e.message.replace('data.', '').replace('data ', '')}"
        ) from e
    return document


def _dump_entry(entry: Entry, registry: PayloadTypeRegistry) -> EntryData:
    if entry.payload is None:
        return {KEY_KEY: entry.key, KEY_TYPE_ID: None, KEY_FIELDS: None}

    type_id = registry.type_id_of(entry.payload)
    if type_id is None or type_id not in registry:
        logger.error(
            f"Entry '{entry.key}' holds unregistered type {type(entry.payload).__name__}"
        )
        raise UnknownTypeError(
            type_id or type(entry.payload).__name__,
            f"Entry '{entry.key}' holds unregistered payload type "
            f"{type(entry.payload).__qualname__}",
        )
    return {
        KEY_KEY: entry.key,
        KEY_TYPE_ID: type_id,
        KEY_FIELDS: entry.payload.model_dump(mode="json"),
    }


def dump_container(
    container: CustomDataContainer, registry: PayloadTypeRegistry | None = None
) -> Document:
    """Convert ``container`` to its plain-data document."""
    if registry is None:
        registry = container.registry
    return {
        KEY_SCHEMA_VERSION: SCHEMA_VERSION,
        KEY_ENTRIES: [_dump_entry(entry, registry) for entry in container.entries],
    }


def _load_payload(
    position: int, data: EntryData, registry: PayloadTypeRegistry
) -> CustomData | None:
    type_id = data[KEY_TYPE_ID]
    fields = data.get(KEY_FIELDS)
    if type_id is None:
        if fields:
            raise InvalidArgumentError(
                f"Entry {position} ('{data[KEY_KEY]}') has fields but no type_id"
            )
        return None

    try:
        payload_type = registry.descriptor(type_id).payload_type
    except UnknownTypeError:
        logger.error(f"Entry {position} ('{data[KEY_KEY]}') has unknown type '{type_id}'")
        raise

    try:
        return payload_type.model_validate(fields or {})
    except ValidationError as e:
        raise InvalidArgumentError(
            f"Entry {position} ('{data[KEY_KEY]}') has invalid {type_id} fields: {e}"
        ) from e


def load_container(
    document: Any, registry: PayloadTypeRegistry | None = None
) -> CustomDataContainer:
    """Rebuild a container from its document.

    Raises:
        InvalidArgumentError: The document or an entry's fields are malformed.
        UnknownTypeError: An entry names a type the registry does not list.
    """
    if registry is None:
        registry = default_registry
    validate_document(document)

    version = document.get(KEY_SCHEMA_VERSION, SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        logger.warning(f"Loading document with schema version {version}")

    entries = [
        Entry(key=data[KEY_KEY], payload=_load_payload(position, data, registry))
        for position, data in enumerate(document[KEY_ENTRIES])
    ]
    return CustomDataContainer(entries, registry=registry)


def save_document(
    container: CustomDataContainer,
    path: str | Path,
    registry: PayloadTypeRegistry | None = None,
) -> Path:
    """Write ``container`` as YAML or JSON depending on the file suffix."""
    filepath = Path(path)
    document = dump_container(container, registry)

    if filepath.suffix.lower() in YAML_SUFFIXES:
        text = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(document, indent=2, ensure_ascii=False) + "\n"

    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(text, encoding="utf-8")
    logger.info(f"Saved {len(container)} entries to: {filepath}")
    return filepath


def load_document(
    path: str | Path, registry: PayloadTypeRegistry | None = None
) -> CustomDataContainer:
    """Read a YAML or JSON document from ``path``."""
    logger.info(f"Loading document from: {path}")
    filepath = Path(path)

    if not filepath.exists():
        raise FileNotFoundError(f"Document not found: {path}")

    with open(filepath, encoding="utf-8") as f:
        if filepath.suffix.lower() in YAML_SUFFIXES:
            try:
                document = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise InvalidArgumentError(f"Invalid YAML in {path}: {e}") from e
        else:
            try:
                document = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidArgumentError(f"Invalid JSON in {path}: {e}") from e

    return load_container(document, registry)
