"""Data models for Encounter Forge.

Exports:
    Enums: Rarity, Difficulty, SelectionStrategy, SortKey
    Creatures: Creature, FilterCriteria, EncounterParameters, SelectionEntry
    Encounters: EncounterCreature, GeneratedEncounter, GenerationMetadata,
        ScalingSuggestions
    Treasure: MagicItem, TreasureResult, InstanceTreasure, EncounterTreasure
    Rules: xp_for_cr, multiplier_for_count, adjusted_xp, classify_difficulty,
        party_thresholds, party_xp_budget, parse_challenge_rating
"""

from __future__ import annotations

from encounter_forge.models.enums import Difficulty, Rarity, SelectionStrategy, SortKey
from encounter_forge.models.rules import (
    adjusted_xp,
    classify_difficulty,
    multiplier_for_count,
    parse_challenge_rating,
    party_thresholds,
    party_xp_budget,
    xp_for_cr,
)
from encounter_forge.models.creature import (
    Creature,
    EncounterParameters,
    EncounterSelection,
    FilterCriteria,
    SelectionEntry,
    is_unconstrained,
    normalize_label,
)
from encounter_forge.models.encounter import (
    EncounterCreature,
    GeneratedEncounter,
    GenerationMetadata,
    ScalingSuggestions,
)
from encounter_forge.models.treasure import (
    EncounterTreasure,
    InstanceTreasure,
    MagicItem,
    TreasureResult,
)


__all__ = [
    # Enums
    "Rarity",
    "Difficulty",
    "SelectionStrategy",
    "SortKey",
    # Rules
    "parse_challenge_rating",
    "xp_for_cr",
    "multiplier_for_count",
    "adjusted_xp",
    "classify_difficulty",
    "party_thresholds",
    "party_xp_budget",
    # Creatures
    "Creature",
    "FilterCriteria",
    "EncounterParameters",
    "SelectionEntry",
    "EncounterSelection",
    "normalize_label",
    "is_unconstrained",
    # Encounters
    "EncounterCreature",
    "GeneratedEncounter",
    "GenerationMetadata",
    "ScalingSuggestions",
    # Treasure
    "MagicItem",
    "TreasureResult",
    "InstanceTreasure",
    "EncounterTreasure",
]
