"""Creature pool filtering, sorting and filter widening.

All string constraints compare case-insensitively after trimming, and
None, blank or "Any" mean no constraint. Filtering is idempotent: running
the same criteria over an already filtered pool returns it unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from encounter_forge.core.logging import get_logger
from encounter_forge.models.creature import (
    Creature,
    FilterCriteria,
    is_unconstrained,
    normalize_label,
)
from encounter_forge.models.enums import SortKey


logger = get_logger(__name__)


def _matches_label(actual: str, wanted: str | None) -> bool:
    if is_unconstrained(wanted):
        return True
    return normalize_label(actual) == normalize_label(wanted)


def matches_criteria(creature: Creature, criteria: FilterCriteria) -> bool:
    """Check one creature against every active constraint.

    A creature whose challenge rating could not be parsed never matches,
    since it cannot be placed in a CR range.
    """
    cr = creature.challenge_rating
    if cr is None or not criteria.min_cr <= cr <= criteria.max_cr:
        return False
    if not is_unconstrained(criteria.environment) and not creature.in_environment(
        criteria.environment or ""
    ):
        return False
    return (
        _matches_label(creature.alignment, criteria.alignment)
        and _matches_label(creature.creature_type, criteria.creature_type)
        and _matches_label(creature.size, criteria.size)
    )


def filter_creatures(
    pool: Iterable[Creature],
    criteria: FilterCriteria,
) -> tuple[Creature, ...]:
    """Narrow a creature pool to the creatures satisfying all constraints.

    If ``criteria.preferred_cr_range`` is set, the result is further
    narrowed to that range, but only when at least one creature remains.

    Args:
        pool: Creatures to filter. Order is preserved.
        criteria: Active constraints.

    Returns:
        The matching creatures.
    """
    matched = tuple(creature for creature in pool if matches_criteria(creature, criteria))

    if criteria.preferred_cr_range is not None and matched:
        low, high = criteria.preferred_cr_range
        preferred = tuple(
            creature
            for creature in matched
            if creature.challenge_rating is not None and low <= creature.challenge_rating <= high
        )
        if preferred:
            matched = preferred
        else:
            logger.debug(
                "Preferred CR range left no creatures, keeping full range",
                preferred_cr_range=criteria.preferred_cr_range,
            )

    logger.debug("Filtered creature pool", matched=len(matched), filters=criteria.active_filters())
    return matched


def sort_creatures(
    pool: Iterable[Creature],
    key: SortKey | str = SortKey.XP,
    *,
    ascending: bool = True,
) -> tuple[Creature, ...]:
    """Sort creatures by XP, CR, name or type.

    Creatures without a challenge rating sort as CR 0. Name and type sort
    case-insensitively. The sort is stable.

    Raises:
        ValueError: If key is not a known sort key.
    """
    key = SortKey(key)
    sort_keys = {
        SortKey.XP: lambda c: c.xp_value,
        SortKey.CR: lambda c: c.challenge_rating or 0.0,
        SortKey.NAME: lambda c: normalize_label(c.name),
        SortKey.TYPE: lambda c: normalize_label(c.creature_type),
    }
    return tuple(sorted(pool, key=sort_keys[key], reverse=not ascending))


def catalog_environments(pool: Iterable[Creature]) -> list[str]:
    """Distinct environment tags offered by a creature pool.

    Tags are trimmed and compared case-insensitively; the first spelling
    seen is kept. Blank tags and the "Unknown" placeholder are skipped.

    Returns:
        Tags sorted case-insensitively.
    """
    seen: dict[str, str] = {}
    for creature in pool:
        for tag in creature.environment:
            label = tag.strip()
            key = normalize_label(label)
            if key and key != "unknown" and key not in seen:
                seen[key] = label
    return [seen[key] for key in sorted(seen)]


def widening_steps(criteria: FilterCriteria, *, relax_environment: bool = True) -> Iterator[FilterCriteria]:
    """Yield progressively looser criteria to try in order.

    The first step is always the strict criteria. When an environment is
    set and relaxing is enabled, a second step drops it ("Any").

    Example:
        >>> strict = FilterCriteria(environment="Swamp")
        >>> [c.environment for c in widening_steps(strict)]
        ['Swamp', 'Any']
    """
    yield criteria
    if relax_environment and not is_unconstrained(criteria.environment):
        yield criteria.with_any_environment()


__all__ = [
    "matches_criteria",
    "filter_creatures",
    "sort_creatures",
    "catalog_environments",
    "widening_steps",
]
