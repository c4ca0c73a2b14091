"""Configuration loaded from environment variables.

The library itself needs no configuration; ``CustomDataConfig`` drives the
command-line editor: which document to edit, which plugin modules to import
for extra payload types, and the key given to new entries.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .container import DEFAULT_ENTRY_KEY

__all__ = ["CustomDataConfig"]


def _split_modules(raw: str) -> list[str]:
    return [name.strip() for name in raw.split(",") if name.strip()]


@dataclass
class CustomDataConfig:
    """Configuration for the customdata editor loaded from environment variables."""

    document_path: str = "customdata.yaml"
    default_key: str = DEFAULT_ENTRY_KEY
    plugins: list[str] = field(default_factory=list)
    debug: bool = False

    def __post_init__(self):
        if not self.document_path:
            raise ValueError("document_path must not be empty")

    @classmethod
    def from_env(cls) -> CustomDataConfig:
        """Load configuration from environment variables."""
        return cls(
            document_path=os.getenv("CUSTOMDATA_DOCUMENT", "customdata.yaml"),
            default_key=os.getenv("CUSTOMDATA_DEFAULT_KEY", DEFAULT_ENTRY_KEY),
            plugins=_split_modules(os.getenv("CUSTOMDATA_PLUGINS", "")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )
