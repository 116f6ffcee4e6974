"""Magic item and treasure models."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from encounter_forge.models.enums import Rarity


class MagicItem(BaseModel):
    """A magic item from the catalog.

    Attributes:
        id: Catalog identifier.
        name: Display name.
        rarity: Rarity tier.
        value: Price in gold pieces.
        wondrous: Wondrous item flag.
        consumable: Consumable flag.
        attunement: Requires attunement.
        item_url: Optional link to the item's rules text.
        image_url: Optional image.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    rarity: Rarity = Rarity.UNKNOWN
    value: float = Field(default=0.0, ge=0, description="Value in gold pieces")
    wondrous: bool = False
    consumable: bool = False
    attunement: bool = False
    item_url: str | None = None
    image_url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def normalize_catalog_record(cls, data: Any) -> Any:
        """Accept camelCase URL keys and stringify ids."""
        if not isinstance(data, dict):
            return data
        record = dict(data)
        for alias, field in (("itemUrl", "item_url"), ("imageUrl", "image_url")):
            if alias in record:
                record.setdefault(field, record.pop(alias))
        if record.get("id") is not None:
            record["id"] = str(record["id"])
        return record

    @field_validator("rarity", mode="before")
    @classmethod
    def parse_rarity(cls, value: Any) -> Rarity:
        return Rarity.parse(value)

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, value: Any) -> float:
        """Missing, negative or non-numeric values become 0 gp."""
        if value is None or isinstance(value, bool):
            return 0.0
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(number) or number < 0:
            return 0.0
        return number

    @field_validator("wondrous", "consumable", "attunement", mode="before")
    @classmethod
    def coerce_flag(cls, value: Any) -> bool:
        return bool(value)


class TreasureResult(BaseModel):
    """Treasure awarded to one creature instance.

    Attributes:
        starting_gold: Gold budget before any item was bought.
        items: Items awarded, in the order they dropped.
        remaining_gold: Gold left after subtracting item values.
    """

    model_config = ConfigDict(frozen=True)

    starting_gold: float = Field(ge=0)
    items: tuple[MagicItem, ...] = ()
    remaining_gold: float = Field(ge=0)

    @computed_field(description="Summed value of awarded items")
    @property
    def total_value(self) -> float:
        return sum(item.value for item in self.items)


class InstanceTreasure(BaseModel):
    """Treasure for one instance of a creature in an encounter."""

    model_config = ConfigDict(frozen=True)

    creature_id: str
    creature_name: str
    instance_index: int = Field(ge=0)
    result: TreasureResult


class EncounterTreasure(BaseModel):
    """Treasure for every creature instance of an encounter."""

    model_config = ConfigDict(frozen=True)

    instances: tuple[InstanceTreasure, ...] = ()

    @computed_field(description="Number of items across all instances")
    @property
    def total_items(self) -> int:
        return sum(len(instance.result.items) for instance in self.instances)

    @computed_field(description="Summed item value across all instances")
    @property
    def total_value(self) -> float:
        return sum(instance.result.total_value for instance in self.instances)

    @computed_field(description="Gold left across all instances")
    @property
    def remaining_gold(self) -> float:
        return sum(instance.result.remaining_gold for instance in self.instances)


__all__ = [
    "MagicItem",
    "TreasureResult",
    "InstanceTreasure",
    "EncounterTreasure",
]
