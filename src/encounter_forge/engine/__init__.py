"""Encounter and treasure generation engine.

Everything here is a pure function of its inputs: creature or item pools,
explicit configuration values and an injected random source.
"""

from __future__ import annotations

from encounter_forge.engine.analysis import BalanceReport, analyze_balance, combat_tips
from encounter_forge.engine.filters import (
    catalog_environments,
    filter_creatures,
    matches_criteria,
    sort_creatures,
    widening_steps,
)
from encounter_forge.engine.generator import (
    EncounterGenerator,
    StrategyAttempt,
    encounter_name,
    generate_encounter,
    roll_encounter,
    scaling_suggestions,
    strategy_sequence,
    tactical_notes,
)
from encounter_forge.engine.selection import (
    mixed_candidate_score,
    select_dice,
    select_mixed,
    select_multiple_identical,
    select_single,
    single_creature_score,
)
from encounter_forge.engine.treasure import (
    generate_encounter_treasure,
    generate_treasure,
    item_weight,
    roll_treasure_drop,
    weighted_choice,
)


__all__ = [
    # Filtering
    "matches_criteria",
    "filter_creatures",
    "sort_creatures",
    "widening_steps",
    "catalog_environments",
    # Selection
    "single_creature_score",
    "select_single",
    "select_multiple_identical",
    "mixed_candidate_score",
    "select_mixed",
    "select_dice",
    # Generation
    "StrategyAttempt",
    "strategy_sequence",
    "encounter_name",
    "tactical_notes",
    "scaling_suggestions",
    "EncounterGenerator",
    "generate_encounter",
    "roll_encounter",
    # Analysis
    "BalanceReport",
    "analyze_balance",
    "combat_tips",
    # Treasure
    "item_weight",
    "weighted_choice",
    "roll_treasure_drop",
    "generate_treasure",
    "generate_encounter_treasure",
]
