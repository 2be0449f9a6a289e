"""
JsonSourceCatalog: loads a JSON source catalog and hands the engine a
shuffled view of it.

Usage:
    from relaycast.catalog.source_catalog import JsonSourceCatalog
    catalog = JsonSourceCatalog("data/sources.json")
    engine.load_catalog(catalog)

The file maps entry ids to objects with at least a ``source`` locator:

    {"clip-1": {"source": "https://example.com/a.mp4", "addedAt": 1700000000}}
"""

from __future__ import annotations

import json
import random
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from ..infra.exceptions import CatalogError


class SourceCatalog(Protocol):
    """Anything that can return a shuffled id -> entry mapping."""

    def shuffled(self) -> Mapping[str, Mapping[str, Any]]:
        ...


class JsonSourceCatalog:
    """Read-only SourceCatalog backed by a JSON file."""

    def __init__(self, catalog_path: str | Path, rng: random.Random | None = None) -> None:
        self.catalog_path = Path(catalog_path)
        self._rng = rng or random.Random()

    def load(self) -> dict[str, dict[str, Any]]:
        try:
            with open(self.catalog_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Cannot read source catalog {self.catalog_path}: {e}") from e

        if not isinstance(data, dict):
            raise CatalogError(f"Source catalog {self.catalog_path} must be a JSON object")

        return {
            key: entry
            for key, entry in data.items()
            if isinstance(entry, dict) and isinstance(entry.get("source"), str)
        }

    def shuffled(self) -> dict[str, dict[str, Any]]:
        entries = self.load()
        keys = list(entries)
        self._rng.shuffle(keys)
        return {key: entries[key] for key in keys}
