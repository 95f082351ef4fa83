"""
modules/tool_usage/catalog_tool.py
-----------------------------------
Read-only location catalog collaborator.

The engine only needs ``get_locations(city)``; anything satisfying the
LocationCatalog protocol can be passed in through the EngineContext.
InMemoryCatalog is the bundled implementation, loaded from the JSON files
under config.CATALOG_DIR (one file per city):

    {"city": "Danang", "locations": [ {camelCase Location record}, ... ]}

A bare JSON list of records is accepted as well. Every record goes through
validate_location(); rejected records are logged and skipped.

City lookups are case, accent and whitespace insensitive
("Da Nang" == "Danang" == "đà nẵng").
"""

from __future__ import annotations
import json
import logging
import unicodedata
from pathlib import Path
from typing import Iterable, Optional, Protocol

import config
from modules.validation.ingestion_validator import filter_valid, validate_location
from schemas.location import Location

logger = logging.getLogger(__name__)


def normalize_city(name: str) -> str:
    """Fold a city name to a comparison key."""
    text = unicodedata.normalize("NFKD", str(name or "").lower().replace("đ", "d"))
    return "".join(ch for ch in text if ch.isalnum())


class LocationCatalog(Protocol):
    def get_locations(self, city: str) -> list[Location]:
        ...


class InMemoryCatalog:
    """Immutable snapshot of catalog Locations indexed by city key."""

    def __init__(self, locations: Optional[Iterable[Location]] = None) -> None:
        self._by_city: dict[str, list[Location]] = {}
        self._by_id: dict[str, Location] = {}
        for loc in locations or ():
            self._add(loc)

    # ── Construction ─────────────────────────────────────────────────────────

    @classmethod
    def from_records(cls, records: list[dict]) -> "InMemoryCatalog":
        clean = filter_valid(records, validate_location)
        return cls(Location.from_dict(r) for r in clean)

    @classmethod
    def from_directory(cls, catalog_dir: Optional[Path | str] = None) -> "InMemoryCatalog":
        """Load every ``*.json`` file in the catalog directory."""
        root = Path(catalog_dir) if catalog_dir else config.CATALOG_DIR
        records: list[dict] = []
        if not root.exists():
            logger.warning("Catalog directory %s does not exist; catalog is empty", root)
            return cls()
        for path in sorted(root.glob("*.json")):
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
            file_records = data.get("locations", []) if isinstance(data, dict) else data
            if isinstance(data, dict) and data.get("city"):
                for rec in file_records:
                    rec.setdefault("city", data["city"])
            logger.debug("Loaded %d catalog records from %s", len(file_records), path.name)
            records.extend(file_records)
        return cls.from_records(records)

    def _add(self, loc: Location) -> None:
        if loc.id in self._by_id:
            logger.warning("Duplicate catalog id %r ignored", loc.id)
            return
        self._by_id[loc.id] = loc
        self._by_city.setdefault(normalize_city(loc.city), []).append(loc)

    # ── LocationCatalog ──────────────────────────────────────────────────────

    def get_locations(self, city: str) -> list[Location]:
        return list(self._by_city.get(normalize_city(city), []))

    def get(self, location_id: str) -> Optional[Location]:
        return self._by_id.get(location_id)

    def cities(self) -> list[str]:
        return sorted({locs[0].city for locs in self._by_city.values() if locs})

    def __len__(self) -> int:
        return len(self._by_id)


_default_catalog: Optional[InMemoryCatalog] = None


def get_default_catalog() -> InMemoryCatalog:
    """Lazily load the bundled catalog once per process (read-only afterwards)."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = InMemoryCatalog.from_directory()
        logger.info("Catalog loaded: %d locations in %s", len(_default_catalog), _default_catalog.cities())
    return _default_catalog
