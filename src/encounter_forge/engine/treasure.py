"""Magic item treasure generation.

Each creature instance with a gold budget rolls for treasure:

1. Roll a drop check (25% by default). On failure, stop.
2. Keep the items whose value fits in the remaining gold. If none, stop.
3. Draw one item, weighted by rarity (x0.1 per step above Common, with a
   further x1e-4 for wondrous items), and subtract its value.
4. Go back to 1.

Randomness always comes from an injected ``random.Random`` so results
can be reproduced with a seed. Running out of gold is not an error; it
simply ends the loop.

Example:
    >>> rng = random.Random(7)
    >>> result = generate_treasure(500, items, rng)
    >>> result.total_value <= 500
    True
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable, Mapping, Sequence

from encounter_forge.core.config import TreasureConfig
from encounter_forge.core.exceptions import ValidationError
from encounter_forge.core.logging import get_logger
from encounter_forge.models.encounter import EncounterCreature
from encounter_forge.models.treasure import (
    EncounterTreasure,
    InstanceTreasure,
    MagicItem,
    TreasureResult,
)


logger = get_logger(__name__)

_DEFAULT_CONFIG = TreasureConfig()


def item_weight(item: MagicItem, config: TreasureConfig | None = None) -> float:
    """Relative drop weight of an item.

    Common (and unknown) items weigh 1.0, each rarity step above Common
    divides by ten, and wondrous items are scaled by
    ``config.wondrous_weight_factor``.
    """
    config = config or _DEFAULT_CONFIG
    weight = item.rarity.base_weight
    if item.wondrous:
        weight *= config.wondrous_weight_factor
    return weight


def weighted_choice(
    items: Sequence[MagicItem],
    rng: random.Random,
    config: TreasureConfig | None = None,
) -> tuple[MagicItem, tuple[MagicItem, ...]]:
    """Draw one item with probability proportional to its weight.

    The input is never modified.

    Args:
        items: Items to draw from.
        rng: Random source.
        config: Weighting values.

    Returns:
        The drawn item and the remaining items, in their original order.

    Raises:
        ValueError: If items is empty.
    """
    if not items:
        msg = "Cannot draw from an empty item pool"
        raise ValueError(msg)

    weights = [item_weight(item, config) for item in items]
    roll = rng.random() * sum(weights)
    chosen = len(items) - 1
    for index, weight in enumerate(weights):
        roll -= weight
        if roll < 0:
            chosen = index
            break

    return items[chosen], tuple(items[:chosen]) + tuple(items[chosen + 1 :])


def roll_treasure_drop(rng: random.Random, chance: float | None = None) -> bool:
    """Roll one drop check; True means another item drops."""
    if chance is None:
        chance = _DEFAULT_CONFIG.drop_chance
    return rng.random() < chance


def generate_treasure(
    gold: float,
    items: Iterable[MagicItem],
    rng: random.Random | None = None,
    config: TreasureConfig | None = None,
    *,
    unique: bool = False,
) -> TreasureResult:
    """Generate treasure for one creature instance.

    Args:
        gold: The instance's gold budget. Negative budgets count as 0.
        items: Magic item pool. Items without a positive value never drop.
        rng: Random source; a fresh unseeded one if omitted.
        config: Drop chance and weighting values.
        unique: Draw each item at most once instead of allowing repeats.

    Returns:
        The awarded items in drop order and the gold left over. The summed
        item value never exceeds the starting gold.

    Raises:
        ValidationError: If the gold budget is NaN or infinite.
    """
    config = config or _DEFAULT_CONFIG
    rng = rng or random.Random()
    if not math.isfinite(gold):
        raise ValidationError(
            "Gold budget must be a finite number",
            field_name="gold",
            invalid_value=gold,
        )
    starting_gold = max(float(gold), 0.0)
    remaining_gold = starting_gold
    pool = tuple(item for item in items if item.value > 0)
    awarded: list[MagicItem] = []

    if not pool:
        logger.debug("No items with value available for treasure")
        return TreasureResult(starting_gold=starting_gold, remaining_gold=remaining_gold)

    while roll_treasure_drop(rng, config.drop_chance):
        affordable = tuple(item for item in pool if item.value <= remaining_gold)
        if not affordable:
            break
        item, rest = weighted_choice(affordable, rng, config)
        awarded.append(item)
        remaining_gold -= item.value
        # Items priced out now stay priced out, so the draw remainder is the new pool
        if unique:
            pool = rest

    logger.debug(
        "Treasure generated",
        starting_gold=starting_gold,
        items=[item.name for item in awarded],
        remaining_gold=remaining_gold,
    )
    return TreasureResult(
        starting_gold=starting_gold,
        items=tuple(awarded),
        remaining_gold=max(remaining_gold, 0.0),
    )


def generate_encounter_treasure(
    creatures: Iterable[EncounterCreature],
    gold_by_creature: Mapping[str, Sequence[float]],
    items: Iterable[MagicItem],
    rng: random.Random | None = None,
    config: TreasureConfig | None = None,
) -> EncounterTreasure:
    """Generate independent treasure for every creature instance.

    Args:
        creatures: Encounter rows; each row has ``quantity`` instances.
        gold_by_creature: Gold per instance, keyed by creature id. Missing
            ids or instances get no gold.
        items: Magic item pool shared by all instances.
        rng: Random source shared across instances.
        config: Drop chance and weighting values.

    Returns:
        One InstanceTreasure per creature instance. Instances with no gold
        get an empty result.
    """
    rng = rng or random.Random()
    pool = tuple(items)
    instances: list[InstanceTreasure] = []

    for creature in creatures:
        golds = gold_by_creature.get(creature.id, ())
        for index in range(creature.quantity):
            gold = float(golds[index]) if index < len(golds) else 0.0
            if gold <= 0:
                result = TreasureResult(starting_gold=0.0, remaining_gold=0.0)
            else:
                result = generate_treasure(gold, pool, rng, config)
            instances.append(
                InstanceTreasure(
                    creature_id=creature.id,
                    creature_name=creature.name,
                    instance_index=index,
                    result=result,
                )
            )

    treasure = EncounterTreasure(instances=tuple(instances))
    logger.info(
        "Encounter treasure generated",
        instances=len(instances),
        items=treasure.total_items,
        total_value=treasure.total_value,
    )
    return treasure


__all__ = [
    "item_weight",
    "weighted_choice",
    "roll_treasure_drop",
    "generate_treasure",
    "generate_encounter_treasure",
]
