"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Encounter Forge test suite.
"""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator

    from encounter_forge.models import Creature, MagicItem


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from encounter_forge.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    monkeypatch.chdir(tmp_path)
    env_vars = {
        "ENCOUNTER_FORGE_LOG_LEVEL": "DEBUG",
        "ENCOUNTER_FORGE_NOTION_API_KEY": "secret-test-token",
        "ENCOUNTER_FORGE_NOTION_CREATURES_DATABASE_ID": "creatures-db",
        "ENCOUNTER_FORGE_GENERATION_MAX_MONSTERS": "8",
        "ENCOUNTER_FORGE_TREASURE_DROP_CHANCE": "0.5",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def rng() -> random.Random:
    """Provide a seeded random source for reproducible rolls."""
    return random.Random(1234)


# =============================================================================
# Creature Fixtures
# =============================================================================


@pytest.fixture
def creature_records() -> list[dict[str, Any]]:
    """Provide raw creature catalog records.

    Returns:
        List of creature records as a catalog would store them.
    """
    return [
        {
            "id": "goblin",
            "name": "Goblin",
            "challenge_rating": "1/4",
            "creature_type": "Humanoid",
            "alignment": "Neutral Evil",
            "size": "Small",
            "environment": ["Forest", "Grassland", "Underdark"],
        },
        {
            "id": "orc",
            "name": "Orc",
            "challenge_rating": 0.5,
            "creature_type": "Humanoid",
            "alignment": "Chaotic Evil",
            "size": "Medium",
            "environment": ["Forest", "Mountain"],
        },
        {
            "id": "wolf",
            "name": "Wolf",
            "challenge_rating": "1/4",
            "creature_type": "Beast",
            "alignment": "Unaligned",
            "size": "Medium",
            "environment": ["Forest", "Grassland"],
        },
        {
            "id": "ogre",
            "name": "Ogre",
            "challenge_rating": 2,
            "creature_type": "Giant",
            "alignment": "Chaotic Evil",
            "size": "Large",
            "environment": ["Hill", "Forest"],
        },
        {
            "id": "owlbear",
            "name": "Owlbear",
            "challenge_rating": 3,
            "creature_type": "Monstrosity",
            "alignment": "Unaligned",
            "size": "Large",
            "environment": ["Forest"],
        },
        {
            "id": "crocodile",
            "name": "Crocodile",
            "challenge_rating": "1/2",
            "creature_type": "Beast",
            "alignment": "Unaligned",
            "size": "Large",
            "environment": ["Swamp"],
        },
        {
            "id": "young-green-dragon",
            "name": "Young Green Dragon",
            "challenge_rating": 8,
            "creature_type": "Dragon",
            "alignment": "Lawful Evil",
            "size": "Large",
            "environment": ["Forest"],
        },
    ]


@pytest.fixture
def creature_pool(creature_records: list[dict[str, Any]]) -> list[Creature]:
    """Provide a validated creature pool.

    Args:
        creature_records: Raw creature records.

    Returns:
        List of Creature instances.
    """
    from encounter_forge.models import Creature

    return [Creature.model_validate(record) for record in creature_records]


@pytest.fixture
def goblin() -> Creature:
    """Provide a single CR 1/4 goblin."""
    from encounter_forge.models import Creature

    return Creature(
        id="goblin",
        name="Goblin",
        challenge_rating=0.25,
        xp_value=50,
        creature_type="Humanoid",
        alignment="Neutral Evil",
        size="Small",
        environment=("Forest",),
    )


# =============================================================================
# Magic Item Fixtures
# =============================================================================


@pytest.fixture
def item_records() -> list[dict[str, Any]]:
    """Provide raw magic item catalog records."""
    return [
        {"id": "potion", "name": "Potion of Healing", "rarity": "Common", "value": 50, "consumable": True},
        {"id": "bag", "name": "Bag of Holding", "rarity": "Uncommon", "value": 400, "wondrous": True},
        {"id": "sword", "name": "+1 Longsword", "rarity": "Uncommon", "value": 500},
        {"id": "cloak", "name": "Cloak of Protection", "rarity": "Uncommon", "value": 350, "attunement": True},
        {"id": "ring", "name": "Ring of Spell Storing", "rarity": "Rare", "value": 4000, "attunement": True},
        {"id": "scroll", "name": "Spell Scroll (Cantrip)", "rarity": "common", "value": 25, "consumable": True},
        {"id": "trinket", "name": "Strange Trinket", "rarity": "Common", "value": 0},
    ]


@pytest.fixture
def item_pool(item_records: list[dict[str, Any]]) -> list[MagicItem]:
    """Provide a validated magic item pool."""
    from encounter_forge.models import MagicItem

    return [MagicItem.model_validate(record) for record in item_records]


# =============================================================================
# Catalog File Fixtures
# =============================================================================


@pytest.fixture
def creature_catalog_file(tmp_path: Path, creature_records: list[dict[str, Any]]) -> Path:
    """Write the creature records to a JSON catalog file."""
    path = tmp_path / "creatures.json"
    path.write_text(json.dumps({"creatures": creature_records}), encoding="utf-8")
    return path


@pytest.fixture
def item_catalog_file(tmp_path: Path, item_records: list[dict[str, Any]]) -> Path:
    """Write the item records to a JSON catalog file (bare list form)."""
    path = tmp_path / "items.json"
    path.write_text(json.dumps(item_records), encoding="utf-8")
    return path
