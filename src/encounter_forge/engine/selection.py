"""Encounter selection heuristics.

Three strategies pick creatures for an XP target:

* ``select_single``: one creature, quantity 1, closest to target.
* ``select_multiple_identical``: one creature repeated until the adjusted
  XP lands inside the acceptance band.
* ``select_mixed``: a greedy pick of distinct creatures that favours
  filling the budget and mixing creature types.
* ``select_dice``: a randomised fill that rolls 1d4 quantities of randomly
  chosen affordable creatures, driven by an injected random source.

The first three are deterministic. Each returns an ``EncounterSelection``
or None when it cannot produce one.
Creatures without XP never take part in scoring.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from encounter_forge.core import constants
from encounter_forge.core.config import GenerationConfig
from encounter_forge.core.logging import get_logger
from encounter_forge.models.creature import (
    Creature,
    EncounterSelection,
    SelectionEntry,
    normalize_label,
)
from encounter_forge.models.rules import adjusted_xp


logger = get_logger(__name__)

_DEFAULT_CONFIG = GenerationConfig()


def _scorable(candidates: Sequence[Creature]) -> list[Creature]:
    return [creature for creature in candidates if creature.has_xp]


# =============================================================================
# Single Creature
# =============================================================================


def single_creature_score(
    xp: int,
    target: int,
    penalty: float = constants.SINGLE_OVER_TARGET_PENALTY,
) -> float:
    """Score a lone creature against the target.

    Returns xp/target at or below target, (target/xp) * penalty above it.
    """
    if xp <= target:
        return xp / target
    return (target / xp) * penalty


def select_single(
    candidates: Sequence[Creature],
    target: int,
    config: GenerationConfig | None = None,
) -> EncounterSelection | None:
    """Pick the one creature whose XP best matches the target.

    Args:
        candidates: Filtered creature pool.
        target: Target XP (positive).
        config: Tuning values; only the over-target penalty is used.

    Returns:
        A single entry of quantity 1, or None if no creature has XP.
        Ties keep the earliest candidate.
    """
    config = config or _DEFAULT_CONFIG
    best: Creature | None = None
    best_score = float("-inf")
    for creature in _scorable(candidates):
        score = single_creature_score(creature.xp_value, target, config.single_over_target_penalty)
        if score > best_score:
            best, best_score = creature, score

    if best is None:
        return None
    logger.debug("Single creature selected", creature=best.name, score=round(best_score, 4))
    return (SelectionEntry(creature=best, quantity=1),)


# =============================================================================
# Multiple Identical
# =============================================================================


def select_multiple_identical(
    candidates: Sequence[Creature],
    target: int,
    max_quantity: int,
    config: GenerationConfig | None = None,
) -> EncounterSelection | None:
    """Pick one creature repeated 2..max_quantity times.

    Candidates are tried by descending XP and quantities in increasing
    order; the first combination whose adjusted XP falls inside the
    inclusive band ``[band_low * target, band_high * target]`` wins.

    Args:
        candidates: Filtered creature pool.
        target: Target XP (positive).
        max_quantity: Largest group size to try.
        config: Tuning values; the acceptance band is used.

    Returns:
        A single entry with quantity >= 2, or None.

    Example:
        One creature of XP 50 against target 200: quantity 2 gives an
        adjusted 150, inside [100, 320], and is returned. Quantity 4
        (adjusted 400) would fall outside the band.
    """
    config = config or _DEFAULT_CONFIG
    low = target * config.multiple_band_low
    high = target * config.multiple_band_high

    ordered = sorted(_scorable(candidates), key=lambda c: c.xp_value, reverse=True)
    for creature in ordered:
        for quantity in range(2, max_quantity + 1):
            adjusted = adjusted_xp(creature.xp_value * quantity, quantity)
            if low <= adjusted <= high:
                logger.debug(
                    "Identical group selected",
                    creature=creature.name,
                    quantity=quantity,
                    adjusted_xp=adjusted,
                )
                return (SelectionEntry(creature=creature, quantity=quantity),)
    return None


# =============================================================================
# Mixed Greedy
# =============================================================================


def mixed_candidate_score(
    xp: int,
    current_total: int,
    target: int,
    *,
    new_type: bool,
    diversity_bonus: float = constants.MIXED_DIVERSITY_BONUS,
) -> float:
    """Score one candidate for the next greedy pick.

    Within target the score rewards both the creature's own XP and how
    full the budget gets. Past target it starts at a small base and drops
    with the overshoot, never below zero. Introducing a new creature type
    adds a flat bonus.
    """
    new_total = current_total + xp
    if new_total <= target:
        score = (xp / target) * constants.MIXED_EFFICIENCY_WEIGHT + (
            new_total / target
        ) * constants.MIXED_BUDGET_WEIGHT
    else:
        overshoot = new_total - target
        score = max(0.0, constants.MIXED_OVERSPEND_BASE - (overshoot / target) * 100)
    if new_type:
        score += diversity_bonus
    return score


def select_mixed(
    candidates: Sequence[Creature],
    target: int,
    max_creatures: int,
    config: GenerationConfig | None = None,
) -> EncounterSelection | None:
    """Greedily build a group of distinct creatures, one of each.

    Candidates are scored in descending XP order, so equal scores go to
    the stronger creature. Picks stop when ``max_creatures`` are chosen, the cumulative base XP
    reaches ``mixed_stop_fraction`` of the target, or no remaining
    candidate scores above zero.

    Args:
        candidates: Filtered creature pool.
        target: Target XP (positive).
        max_creatures: Largest number of creatures to pick.
        config: Tuning values.

    Returns:
        Entries of quantity 1 in pick order, or None if nothing was picked.
    """
    config = config or _DEFAULT_CONFIG
    remaining = sorted(_scorable(candidates), key=lambda c: c.xp_value, reverse=True)
    picked: list[SelectionEntry] = []
    picked_types: set[str] = set()
    total = 0

    while remaining and len(picked) < max_creatures:
        if total >= target * config.mixed_stop_fraction:
            break

        best_index = -1
        best_score = 0.0
        for index, creature in enumerate(remaining):
            score = mixed_candidate_score(
                creature.xp_value,
                total,
                target,
                new_type=normalize_label(creature.creature_type) not in picked_types,
                diversity_bonus=config.mixed_diversity_bonus,
            )
            if score > best_score:
                best_index, best_score = index, score

        if best_index < 0:
            break

        creature = remaining.pop(best_index)
        picked.append(SelectionEntry(creature=creature, quantity=1))
        picked_types.add(normalize_label(creature.creature_type))
        total += creature.xp_value

    if not picked:
        return None
    logger.debug("Mixed group selected", creatures=[e.creature.name for e in picked], total_xp=total)
    return tuple(picked)


# =============================================================================
# Dice Roll
# =============================================================================


def _locked(creatures: list[Creature], attribute: str, value: str) -> list[Creature]:
    wanted = normalize_label(value)
    return [
        creature
        for creature in creatures
        if not getattr(creature, attribute) or normalize_label(getattr(creature, attribute)) == wanted
    ]


def select_dice(
    candidates: Sequence[Creature],
    target: int,
    max_monsters: int,
    rng: random.Random,
) -> EncounterSelection | None:
    """Fill the XP budget with randomly chosen creatures in 1d4 groups.

    Creatures worth more than the whole budget are dropped first. Each
    round rolls 1d4, picks a creature at random from those still
    affordable, and adds as many of it as the roll, the remaining budget
    and the creature cap allow. The first creature with an alignment fixes
    the encounter's alignment, and likewise for creature type; later picks
    must share it or leave it blank. Rounds stop when the cap is reached,
    the budget is spent, or nothing affordable is left.

    Budgeting uses base XP, so the adjusted XP of the result can exceed
    the target once the group multiplier applies.

    Args:
        candidates: Filtered creature pool.
        target: XP budget (positive).
        max_monsters: Largest total number of creatures.
        rng: Random source for the rolls and picks.

    Returns:
        Entries in first-pick order, or None if nothing was affordable.

    Example:
        With only Goblins (50 XP) against 120, a first roll of 3 adds two
        (the budget allows no more) and leaves 20 XP, which nothing fits.
    """
    pool = [creature for creature in _scorable(candidates) if creature.xp_value <= target]
    quantities: dict[str, int] = {}
    chosen: dict[str, Creature] = {}
    remaining = target
    added = 0
    alignment: str | None = None
    creature_type: str | None = None

    while added < max_monsters and remaining > 0:
        affordable = [creature for creature in pool if creature.xp_value <= remaining]
        if not affordable:
            break

        roll = rng.randint(1, 4)
        creature = rng.choice(affordable)

        if alignment is None and creature.alignment:
            alignment = creature.alignment
            pool = _locked(pool, "alignment", alignment)
        if creature_type is None and creature.creature_type:
            creature_type = creature.creature_type
            pool = _locked(pool, "creature_type", creature_type)

        quantity = min(roll, remaining // creature.xp_value, max_monsters - added)
        chosen.setdefault(creature.id, creature)
        quantities[creature.id] = quantities.get(creature.id, 0) + quantity
        remaining -= creature.xp_value * quantity
        added += quantity
        logger.debug(
            "Dice round",
            roll=roll,
            creature=creature.name,
            quantity=quantity,
            remaining_xp=remaining,
        )

    if not chosen:
        return None
    return tuple(
        SelectionEntry(creature=creature, quantity=quantities[creature_id])
        for creature_id, creature in chosen.items()
    )


__all__ = [
    "single_creature_score",
    "select_single",
    "select_multiple_identical",
    "mixed_candidate_score",
    "select_mixed",
    "select_dice",
]
