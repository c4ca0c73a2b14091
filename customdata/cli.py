"""Text-mode editor for custom data documents.

Each command loads the document, applies one edit through the container's
editor surface and saves it back::

    customdata types
    customdata --document items.yaml add --key speed --type FloatData
    customdata --document items.yaml set-field 0 value 2.5
    customdata --document items.yaml show
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence

import yaml
from loguru import logger
from pydantic import ValidationError

from .config import CustomDataConfig
from .container import CustomDataContainer
from .document import load_document, save_document
from .errors import CustomDataError, InvalidArgumentError
from .registry import PayloadTypeRegistry, default_registry

__all__ = ["main", "build_parser"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="customdata",
        description="Inspect and edit keyed custom data documents",
    )
    parser.add_argument(
        "--document",
        help="Path to the YAML or JSON document (default: $CUSTOMDATA_DOCUMENT)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("types", help="List registered payload types")
    commands.add_parser("show", help="List entries and their payloads")

    add = commands.add_parser("add", help="Append an entry with a default payload")
    add.add_argument("--key", help="Entry key (default: $CUSTOMDATA_DEFAULT_KEY)")
    add.add_argument("--type", dest="type_id", help="Payload type id (default: first listed)")

    remove = commands.add_parser("remove", help="Delete the entry at INDEX")
    remove.add_argument("index", type=int)

    rename = commands.add_parser("rename", help="Change the key of the entry at INDEX")
    rename.add_argument("index", type=int)
    rename.add_argument("key")

    retype = commands.add_parser("retype", help="Replace the payload at INDEX with a new TYPE")
    retype.add_argument("index", type=int)
    retype.add_argument("type_id", metavar="type")

    set_field = commands.add_parser("set-field", help="Assign a payload field")
    set_field.add_argument("index", type=int)
    set_field.add_argument("field")
    set_field.add_argument("value", help="Parsed as YAML, e.g. 3, 2.5, '[a, b]'")

    return parser


def _stderr_sink(message: str) -> None:
    sys.stderr.write(message)


def _configure_logging(debug: bool) -> None:
    logger.remove()
    logger.add(_stderr_sink, level="DEBUG" if debug else "WARNING")


def _list_types(registry: PayloadTypeRegistry) -> None:
    for index, descriptor in enumerate(registry.list_types()):
        print(f"{index:>3}  {descriptor.display_name}")


def _show(container: CustomDataContainer, registry: PayloadTypeRegistry) -> None:
    if not len(container):
        print("(no entries)")
        return
    for index, entry in enumerate(container):
        if entry.payload is None:
            print(f"{index:>3}  {entry.key}  -")
            continue
        type_id = registry.type_id_of(entry.payload) or type(entry.payload).__name__
        fields = json.dumps(entry.payload.model_dump(mode="json"), ensure_ascii=False)
        print(f"{index:>3}  {entry.key}  {type_id}  {fields}")


def _set_field(container: CustomDataContainer, index: int, field: str, raw: str) -> None:
    payload = container.entries[index].payload
    if payload is None:
        raise InvalidArgumentError(f"Entry {index} has no payload")
    if field not in type(payload).model_fields:
        raise InvalidArgumentError(
            f"{type(payload).__name__} has no field '{field}'"
        )
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        value = raw
    try:
        setattr(payload, field, value)
        return
    except ValidationError as e:
        if value == raw:
            raise InvalidArgumentError(f"Invalid value for '{field}': {e}") from e
    # string fields take the argument verbatim, e.g. "123" or ""
    try:
        setattr(payload, field, raw)
    except ValidationError as e:
        raise InvalidArgumentError(f"Invalid value for '{field}': {e}") from e


def _run(args: argparse.Namespace, config: CustomDataConfig) -> int:
    registry = default_registry
    registry.load_plugins(config.plugins)

    if args.command == "types":
        _list_types(registry)
        return 0

    path = args.document or config.document_path
    try:
        container = load_document(path, registry)
    except FileNotFoundError:
        if args.command != "add":
            raise
        container = CustomDataContainer(registry=registry)

    if args.command == "show":
        _show(container, registry)
        return 0

    if args.command == "add":
        entry = container.add_entry(args.key or config.default_key, args.type_id)
        print(f"[OK] Added '{entry.key}' at index {len(container) - 1}")
    elif args.command == "remove":
        entry = container.remove_at(args.index)
        print(f"[OK] Removed '{entry.key}'")
    elif args.command == "rename":
        container.rename_at(args.index, args.key)
        print(f"[OK] Renamed entry {args.index} to '{args.key}'")
    elif args.command == "retype":
        container.replace_payload_at(args.index, args.type_id)
        print(f"[OK] Entry {args.index} is now {args.type_id}")
    elif args.command == "set-field":
        _set_field(container, args.index, args.field, args.value)
        print(f"[OK] Set {args.field} on entry {args.index}")

    save_document(container, path, registry)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``customdata`` command."""
    args = build_parser().parse_args(argv)

    try:
        config = CustomDataConfig.from_env()
    except ValueError as e:
        print(f"[ERROR] Configuration error: {e}", file=sys.stderr)
        return 1
    _configure_logging(config.debug)

    try:
        return _run(args, config)
    except IndexError:
        print(f"[ERROR] No entry at index {getattr(args, 'index', '?')}", file=sys.stderr)
        return 1
    except (CustomDataError, FileNotFoundError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
