"""Generated encounter models.

A GeneratedEncounter is the read-only result of one generation call: the
chosen creatures with quantities, base and adjusted XP, the multiplier,
the difficulty label, and the notes a Dungeon Master sees next to it.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from encounter_forge.models.creature import Creature, SelectionEntry
from encounter_forge.models.enums import Difficulty, SelectionStrategy


class EncounterCreature(BaseModel):
    """One row of a generated encounter: a creature and its quantity."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    challenge_rating: float | None = None
    xp_value: int = Field(ge=0)
    quantity: int = Field(ge=1)
    creature_type: str = ""
    alignment: str = ""
    size: str = ""
    environment: tuple[str, ...] = ()

    @computed_field(description="Base XP of all creatures in this row")
    @property
    def total_xp(self) -> int:
        return self.xp_value * self.quantity

    @classmethod
    def from_entry(cls, entry: SelectionEntry) -> "EncounterCreature":
        """Build a row from a selection entry."""
        creature: Creature = entry.creature
        return cls(
            id=creature.id,
            name=creature.name,
            challenge_rating=creature.challenge_rating,
            xp_value=creature.xp_value,
            quantity=entry.quantity,
            creature_type=creature.creature_type,
            alignment=creature.alignment,
            size=creature.size,
            environment=creature.environment,
        )


class ScalingSuggestions(BaseModel):
    """How to make an encounter easier or harder at the table."""

    model_config = ConfigDict(frozen=True)

    easier: str
    harder: str


class GenerationMetadata(BaseModel):
    """How an encounter was found.

    Attributes:
        strategy: Selection heuristic that produced the encounter.
        attempts_made: Strategy attempts across all phases.
        pool_size: Creatures in the unfiltered pool.
        creatures_considered: Creatures that survived filtering.
        filters: Active filter criteria of the successful phase.
        relaxed_environment: Whether the environment constraint was dropped.
    """

    model_config = ConfigDict(frozen=True)

    strategy: SelectionStrategy
    attempts_made: int = Field(ge=1)
    pool_size: int = Field(ge=0)
    creatures_considered: int = Field(ge=0)
    filters: dict[str, Any] = Field(default_factory=dict)
    relaxed_environment: bool = False


class GeneratedEncounter(BaseModel):
    """A balanced encounter produced by the generator.

    Attributes:
        encounter_name: Readable summary (e.g., '2 Goblins & Orc').
        environment: Environment requested (or 'Any').
        target_xp: The XP threshold the encounter was built for.
        creatures: Chosen creatures with quantities.
        total_xp: Summed base XP.
        multiplier: Encounter multiplier for the total creature count.
        adjusted_xp: Base XP times multiplier, rounded half up.
        difficulty: Difficulty of adjusted XP against the target.
        generation_notes: Step-by-step log of the generation run.
        tactical_notes: Hints about how the encounter plays.
        scaling_suggestions: Ways to tune the encounter at the table.
        metadata: Strategy and search statistics.
    """

    model_config = ConfigDict(frozen=True)

    encounter_name: str
    environment: str
    target_xp: int = Field(gt=0)
    creatures: tuple[EncounterCreature, ...] = Field(min_length=1)
    total_xp: int = Field(ge=0)
    multiplier: float = Field(ge=1)
    adjusted_xp: int = Field(ge=0)
    difficulty: Difficulty
    generation_notes: tuple[str, ...] = ()
    tactical_notes: tuple[str, ...] = ()
    scaling_suggestions: ScalingSuggestions | None = None
    metadata: GenerationMetadata

    @computed_field(description="Total number of creatures")
    @property
    def creature_count(self) -> int:
        return sum(creature.quantity for creature in self.creatures)

    @property
    def strategy(self) -> SelectionStrategy:
        """Selection heuristic that produced this encounter."""
        return self.metadata.strategy


__all__ = [
    "EncounterCreature",
    "ScalingSuggestions",
    "GenerationMetadata",
    "GeneratedEncounter",
]
