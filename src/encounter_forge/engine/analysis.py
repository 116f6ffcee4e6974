"""Post-generation encounter analysis.

Heuristic checks a Dungeon Master can run on a generated encounter
against their actual party: CR spread, creatures far above party level,
and action economy.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from encounter_forge.core.exceptions import ValidationError
from encounter_forge.models.encounter import GeneratedEncounter
from encounter_forge.models.enums import Difficulty


# Largest CR gap between creatures before the fight is flagged as uneven
MAX_CR_SPREAD = 3
# Creatures this many CR above party level are flagged
HIGH_CR_MARGIN = 2
# Monsters per character before action economy becomes a concern
ACTION_ECONOMY_RATIO = 1.5
# Monster count above which identical creatures should share initiative
GROUPED_INITIATIVE_COUNT = 4


class BalanceReport(BaseModel):
    """Result of analyzing an encounter against a party."""

    model_config = ConfigDict(frozen=True)

    is_balanced: bool
    warnings: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()


def analyze_balance(
    encounter: GeneratedEncounter,
    party_level: int,
    party_size: int = 4,
) -> BalanceReport:
    """Check an encounter for common balance problems.

    Args:
        encounter: The encounter to analyze.
        party_level: Average character level (1-20).
        party_size: Number of characters.

    Returns:
        A report; the encounter is balanced when there are no warnings.

    Raises:
        ValidationError: If party level or size are out of range.
    """
    if not 1 <= party_level <= 20:
        raise ValidationError(
            "Party level must be between 1 and 20",
            field_name="party_level",
            invalid_value=party_level,
        )
    if party_size < 1:
        raise ValidationError(
            "Party size must be at least 1",
            field_name="party_size",
            invalid_value=party_size,
        )

    warnings: list[str] = []
    suggestions: list[str] = []

    ratings = [c.challenge_rating for c in encounter.creatures if c.challenge_rating is not None]
    if ratings and max(ratings) - min(ratings) > MAX_CR_SPREAD:
        warnings.append("Large CR spread may create unbalanced combat")

    if any(cr > party_level + HIGH_CR_MARGIN for cr in ratings):
        warnings.append("Contains creatures significantly above party level")

    if encounter.creature_count > party_size * ACTION_ECONOMY_RATIO:
        warnings.append("High monster count may overwhelm action economy")
        suggestions.append("Consider using fewer, stronger creatures")

    return BalanceReport(
        is_balanced=not warnings,
        warnings=tuple(warnings),
        suggestions=tuple(suggestions),
    )


def combat_tips(encounter: GeneratedEncounter) -> list[str]:
    """Table-running tips for an encounter."""
    tips: list[str] = []
    if encounter.creature_count > GROUPED_INITIATIVE_COUNT:
        tips.append("Consider grouping identical creatures for faster initiative")
    tips.append("Use terrain features to create dynamic combat positioning")
    if encounter.difficulty is Difficulty.DEADLY:
        tips.append("Consider having reinforcements arrive in waves")
    return tips


__all__ = [
    "BalanceReport",
    "analyze_balance",
    "combat_tips",
]
