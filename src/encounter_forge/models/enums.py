"""Enumeration types for Encounter Forge.

Rarity drives loot weighting, Difficulty labels generated encounters,
SelectionStrategy names the heuristic that produced an encounter and
SortKey lists the orderings available for creature pools.
"""

from __future__ import annotations

from enum import StrEnum


class Rarity(StrEnum):
    """Magic item rarities, from most to least common.

    UNKNOWN covers catalog entries whose rarity is missing or
    unrecognised; it weighs the same as COMMON.
    """

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    VERY_RARE = "very_rare"
    LEGENDARY = "legendary"
    ARTIFACT = "artifact"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "Rarity":
        """Parse a catalog rarity string leniently.

        Accepts any casing and either spaces, hyphens or underscores
        ("Very Rare", "very-rare", "VERY_RARE").

        Args:
            value: Raw rarity value from a catalog.

        Returns:
            The matching Rarity, or UNKNOWN.
        """
        if isinstance(value, Rarity):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        normalized = "_".join(value.strip().lower().replace("-", " ").split())
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN

    @property
    def step(self) -> int:
        """Number of rarity steps above Common (Unknown counts as Common)."""
        steps = {
            Rarity.COMMON: 0,
            Rarity.UNCOMMON: 1,
            Rarity.RARE: 2,
            Rarity.VERY_RARE: 3,
            Rarity.LEGENDARY: 4,
            Rarity.ARTIFACT: 5,
            Rarity.UNKNOWN: 0,
        }
        return steps[self]

    @property
    def base_weight(self) -> float:
        """Drop weight before item flags: 1.0 for Common, x0.1 per step up."""
        return 10.0 ** -self.step

    @property
    def display_name(self) -> str:
        """Get human-readable rarity name (e.g., 'Very Rare')."""
        return self.value.replace("_", " ").title()


class Difficulty(StrEnum):
    """Encounter difficulty labels."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    DEADLY = "Deadly"

    @classmethod
    def parse(cls, value: str) -> "Difficulty":
        """Parse a difficulty name case-insensitively.

        Raises:
            ValueError: If the name is not a difficulty.
        """
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        msg = f"Unknown difficulty: {value!r}"
        raise ValueError(msg)


class SelectionStrategy(StrEnum):
    """Heuristics used to pick creatures for an encounter."""

    SINGLE = "single"
    MULTIPLE_IDENTICAL = "multiple_identical"
    MIXED = "mixed"
    DICE = "dice"

    @property
    def display_name(self) -> str:
        """Get human-readable strategy name."""
        names = {
            SelectionStrategy.SINGLE: "Single Creature",
            SelectionStrategy.MULTIPLE_IDENTICAL: "Multiple Identical",
            SelectionStrategy.MIXED: "Mixed Creatures",
            SelectionStrategy.DICE: "Dice Roll",
        }
        return names[self]


class SortKey(StrEnum):
    """Orderings for creature pools."""

    XP = "xp"
    CR = "cr"
    NAME = "name"
    TYPE = "type"


__all__ = [
    "Rarity",
    "Difficulty",
    "SelectionStrategy",
    "SortKey",
]
