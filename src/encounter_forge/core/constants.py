"""D&D 5E rules tables and generation constants.

This is the single canonical home of every table the generator uses.
Values follow the Dungeon Master's Guide (chapter 3 and the CR table in
appendix B); nothing else in the package redefines them.
"""

from __future__ import annotations

# =============================================================================
# Challenge Rating → XP (DMG p.274)
# =============================================================================

XP_BY_CR: dict[float, int] = {
    0: 10,
    0.125: 25,
    0.25: 50,
    0.5: 100,
    1: 200,
    2: 450,
    3: 700,
    4: 1100,
    5: 1800,
    6: 2300,
    7: 2900,
    8: 3900,
    9: 5000,
    10: 5900,
    11: 7200,
    12: 8400,
    13: 10000,
    14: 11500,
    15: 13000,
    16: 15000,
    17: 18000,
    18: 20000,
    19: 22000,
    20: 25000,
    21: 33000,
    22: 41000,
    23: 50000,
    24: 62000,
    25: 75000,
    26: 90000,
    27: 105000,
    28: 120000,
    29: 135000,
    30: 155000,
}
"""Experience points awarded per challenge rating."""

FRACTIONAL_CRS: dict[str, float] = {
    "1/8": 0.125,
    "1/4": 0.25,
    "1/2": 0.5,
}

MIN_CR = 0.0
MAX_CR = 30.0

# =============================================================================
# Encounter Multipliers (DMG p.82)
# =============================================================================

# (minimum monster count, multiplier); the last entry whose count is <= n applies
ENCOUNTER_MULTIPLIERS: tuple[tuple[int, float], ...] = (
    (1, 1.0),
    (2, 1.5),
    (3, 2.0),
    (7, 2.5),
    (11, 3.0),
    (15, 4.0),
)

# =============================================================================
# Difficulty
# =============================================================================

EASY_THRESHOLD = 0.5
"""Adjusted XP at or below this fraction of the target is Easy."""

MEDIUM_THRESHOLD = 1.0
"""Adjusted XP at or below the target is Medium."""

HARD_THRESHOLD = 1.5
"""Adjusted XP at or below 1.5x the target is Hard; anything above is Deadly."""

# Per-character XP thresholds by level (DMG p.82)
PARTY_XP_THRESHOLDS: dict[int, tuple[int, int, int, int]] = {
    1: (25, 50, 75, 100),
    2: (50, 100, 150, 200),
    3: (75, 150, 225, 400),
    4: (125, 250, 375, 500),
    5: (250, 500, 750, 1100),
    6: (300, 600, 900, 1400),
    7: (350, 750, 1100, 1700),
    8: (450, 900, 1400, 2100),
    9: (550, 1100, 1600, 2400),
    10: (600, 1200, 1900, 2800),
    11: (800, 1600, 2400, 3600),
    12: (1000, 2000, 3000, 4500),
    13: (1100, 2200, 3400, 5100),
    14: (1250, 2500, 3800, 5700),
    15: (1400, 2800, 4300, 6400),
    16: (1600, 3200, 4800, 7200),
    17: (2000, 3900, 5900, 8800),
    18: (2100, 4200, 6300, 9500),
    19: (2400, 4900, 7300, 10900),
    20: (2800, 5700, 8500, 12700),
}
"""(easy, medium, hard, deadly) XP per character at each level."""

# =============================================================================
# Selection Heuristics
# =============================================================================

SINGLE_OVER_TARGET_PENALTY = 0.7
"""Score factor applied to a single creature whose XP exceeds the target."""

MULTIPLE_BAND_LOW = 0.5
MULTIPLE_BAND_HIGH = 1.6
"""Inclusive adjusted-XP acceptance band for identical groups, as fractions of target."""

MIXED_STOP_FRACTION = 0.9
"""Mixed selection stops once cumulative XP reaches this fraction of target."""

MIXED_EFFICIENCY_WEIGHT = 100.0
MIXED_BUDGET_WEIGHT = 50.0
MIXED_OVERSPEND_BASE = 20.0
MIXED_DIVERSITY_BONUS = 25.0

DEFAULT_MAX_MONSTERS = 6
DEFAULT_MIXED_TYPES = 4

ANY_FILTER = "Any"
"""Filter value meaning 'no constraint'."""

# =============================================================================
# Treasure
# =============================================================================

TREASURE_DROP_CHANCE = 0.25
"""Probability of each successive treasure drop."""

WONDROUS_WEIGHT_FACTOR = 1e-4
"""Extra weight multiplier for wondrous items."""


__all__ = [
    # CR
    "XP_BY_CR",
    "FRACTIONAL_CRS",
    "MIN_CR",
    "MAX_CR",
    # Multipliers
    "ENCOUNTER_MULTIPLIERS",
    # Difficulty
    "EASY_THRESHOLD",
    "MEDIUM_THRESHOLD",
    "HARD_THRESHOLD",
    "PARTY_XP_THRESHOLDS",
    # Selection
    "SINGLE_OVER_TARGET_PENALTY",
    "MULTIPLE_BAND_LOW",
    "MULTIPLE_BAND_HIGH",
    "MIXED_STOP_FRACTION",
    "MIXED_EFFICIENCY_WEIGHT",
    "MIXED_BUDGET_WEIGHT",
    "MIXED_OVERSPEND_BASE",
    "MIXED_DIVERSITY_BONUS",
    "DEFAULT_MAX_MONSTERS",
    "DEFAULT_MIXED_TYPES",
    "ANY_FILTER",
    # Treasure
    "TREASURE_DROP_CHANCE",
    "WONDROUS_WEIGHT_FACTOR",
]
