"""D&D 5E rules lookups used by encounter generation.

Challenge rating parsing, the CR to XP table, the group-size encounter
multiplier, difficulty classification and party XP thresholds. Every
function is a pure lookup over the tables in
:mod:`encounter_forge.core.constants`.

Example:
    >>> xp_for_cr("1/4")
    50
    >>> multiplier_for_count(4)
    2.0
    >>> classify_difficulty(50, 45)
    <Difficulty.HARD: 'Hard'>
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from encounter_forge.core import constants
from encounter_forge.core.config import GenerationConfig
from encounter_forge.core.exceptions import ValidationError
from encounter_forge.models.enums import Difficulty


_DEFAULT_CONFIG = GenerationConfig()


def parse_challenge_rating(value: object) -> float | None:
    """Parse a challenge rating from a catalog or request value.

    Accepts numbers, numeric strings and the fractional forms
    ``"1/8"``, ``"1/4"`` and ``"1/2"`` (any ``"a/b"`` fraction, in fact).

    Args:
        value: Raw challenge rating.

    Returns:
        The CR as a float, or None if the value is missing, non-numeric,
        negative or not finite.

    Example:
        >>> parse_challenge_rating("1/2")
        0.5
        >>> parse_challenge_rating("CR 5") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text in constants.FRACTIONAL_CRS:
            return constants.FRACTIONAL_CRS[text]
        try:
            if "/" in text:
                num, denom = text.split("/", 1)
                number = int(num) / int(denom)
            else:
                number = float(text)
        except (ValueError, ZeroDivisionError):
            return None
    else:
        return None

    if not math.isfinite(number) or number < 0:
        return None
    return number


def xp_for_cr(cr: object) -> int:
    """Look up the XP value of a challenge rating.

    Args:
        cr: Challenge rating as a number or string.

    Returns:
        The XP from the DMG table, or 0 if the CR is unknown or malformed.
    """
    parsed = parse_challenge_rating(cr)
    if parsed is None:
        return 0
    return constants.XP_BY_CR.get(parsed, 0)


def multiplier_for_count(count: int) -> float:
    """Get the encounter multiplier for a number of monsters.

    Args:
        count: Total monsters in the encounter. Values <= 0 count as 1.

    Returns:
        1.0 for one monster, 1.5 for two, 2.0 for 3-6, 2.5 for 7-10,
        3.0 for 11-14 and 4.0 for 15 or more.
    """
    count = max(count, 1)
    multiplier = 1.0
    for threshold, value in constants.ENCOUNTER_MULTIPLIERS:
        if count >= threshold:
            multiplier = value
        else:
            break
    return multiplier


def adjusted_xp(base_xp: int, count: int) -> int:
    """Apply the encounter multiplier and round half up to whole XP.

    Args:
        base_xp: Summed XP of all monsters.
        count: Total number of monsters.

    Returns:
        Adjusted XP.
    """
    return math.floor(base_xp * multiplier_for_count(count) + 0.5)


def classify_difficulty(
    adjusted: float,
    target: float,
    config: GenerationConfig | None = None,
) -> Difficulty:
    """Rate an encounter against the XP target.

    Args:
        adjusted: Adjusted XP of the encounter.
        target: Target XP threshold (must be positive).
        config: Thresholds to apply; defaults to 0.5 / 1.0 / 1.5.

    Returns:
        Easy at or below 0.5x target, Medium at or below 1x, Hard at or
        below 1.5x, Deadly otherwise.

    Raises:
        ValidationError: If target is not positive.
    """
    if target <= 0:
        raise ValidationError(
            "Target XP must be positive",
            field_name="target",
            invalid_value=target,
        )
    config = config or _DEFAULT_CONFIG
    if adjusted <= target * config.easy_threshold:
        return Difficulty.EASY
    if adjusted <= target * config.medium_threshold:
        return Difficulty.MEDIUM
    if adjusted <= target * config.hard_threshold:
        return Difficulty.HARD
    return Difficulty.DEADLY


def party_thresholds(levels: Iterable[int]) -> dict[Difficulty, int]:
    """Sum the per-character XP thresholds for a party.

    Args:
        levels: Character levels (1-20), one per party member.

    Returns:
        Mapping of each difficulty to the party's total XP threshold.

    Raises:
        ValidationError: If the party is empty or a level is out of range.

    Example:
        >>> party_thresholds([1, 1, 1, 1])[Difficulty.MEDIUM]
        200
    """
    levels = list(levels)
    if not levels:
        raise ValidationError("Party must contain at least one character", field_name="levels")

    totals = dict.fromkeys(Difficulty, 0)
    for level in levels:
        if level not in constants.PARTY_XP_THRESHOLDS:
            raise ValidationError(
                f"Character level must be between 1 and 20, got {level}",
                field_name="levels",
                invalid_value=level,
            )
        for difficulty, threshold in zip(
            Difficulty, constants.PARTY_XP_THRESHOLDS[level], strict=True
        ):
            totals[difficulty] += threshold
    return totals


def party_xp_budget(levels: Iterable[int], difficulty: Difficulty | str) -> int:
    """XP target for a party at the requested difficulty.

    Args:
        levels: Character levels of the party.
        difficulty: Desired difficulty.

    Returns:
        The XP threshold to pass as ``xp_threshold``.
    """
    if not isinstance(difficulty, Difficulty):
        try:
            difficulty = Difficulty.parse(difficulty)
        except ValueError as exc:
            raise ValidationError(
                str(exc), field_name="difficulty", invalid_value=difficulty
            ) from exc
    return party_thresholds(levels)[difficulty]


__all__ = [
    "parse_challenge_rating",
    "xp_for_cr",
    "multiplier_for_count",
    "adjusted_xp",
    "classify_difficulty",
    "party_thresholds",
    "party_xp_budget",
]
