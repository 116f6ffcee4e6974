"""Creature and magic item catalog sources.

Exports:
    load_creatures / load_magic_items: Read catalogs from JSON files.
    parse_records: Validate raw records, skipping invalid ones.
    NotionCatalogClient: Fetch catalogs from Notion databases.
"""

from __future__ import annotations

from encounter_forge.catalog.loader import load_creatures, load_magic_items, parse_records
from encounter_forge.catalog.notion import (
    CreatureProperties,
    MagicItemProperties,
    NotionCatalogClient,
)


__all__ = [
    "load_creatures",
    "load_magic_items",
    "parse_records",
    "NotionCatalogClient",
    "CreatureProperties",
    "MagicItemProperties",
]
