"""Encounter Forge - balanced D&D 5E encounters and magic item loot.

Builds encounters under an XP budget from a creature catalog, using the
DMG encounter multiplier and a fixed sequence of selection heuristics,
and rolls weighted magic item treasure under per-creature gold budgets.

Example:
    >>> from encounter_forge import EncounterParameters, generate_encounter, load_creatures
    >>>
    >>> creatures = load_creatures("monsters.json")
    >>> params = EncounterParameters(xp_threshold=450, environment="Forest")
    >>> encounter = generate_encounter(creatures, params)
    >>> print(encounter.encounter_name, encounter.difficulty)

Modules:
    core: Configuration, logging, constants and exceptions.
    models: Pydantic V2 models and the CR/XP rules tables.
    engine: Filtering, selection, generation, analysis and treasure.
    catalog: JSON and Notion catalog sources.
    cli: Command line front end.
"""

from __future__ import annotations

# Core
from encounter_forge.core.config import GenerationConfig, Settings, TreasureConfig, get_settings
from encounter_forge.core.exceptions import (
    EncounterForgeError,
    NoCandidatesError,
    NoViableSelectionError,
)
from encounter_forge.core.logging import configure_logging, get_logger

# Models
from encounter_forge.models import (
    Creature,
    Difficulty,
    EncounterParameters,
    FilterCriteria,
    GeneratedEncounter,
    MagicItem,
    Rarity,
    TreasureResult,
    xp_for_cr,
)

# Engine
from encounter_forge.engine import (
    EncounterGenerator,
    analyze_balance,
    filter_creatures,
    generate_encounter,
    generate_encounter_treasure,
    generate_treasure,
)

# Catalogs
from encounter_forge.catalog import NotionCatalogClient, load_creatures, load_magic_items


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "EncounterForgeError",
    "NoCandidatesError",
    "NoViableSelectionError",
    "Settings",
    "GenerationConfig",
    "TreasureConfig",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Creature",
    "Difficulty",
    "EncounterParameters",
    "FilterCriteria",
    "GeneratedEncounter",
    "MagicItem",
    "Rarity",
    "TreasureResult",
    "xp_for_cr",
    # Engine
    "EncounterGenerator",
    "analyze_balance",
    "filter_creatures",
    "generate_encounter",
    "generate_encounter_treasure",
    "generate_treasure",
    # Catalogs
    "NotionCatalogClient",
    "load_creatures",
    "load_magic_items",
]
