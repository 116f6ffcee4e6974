"""Encounter generation pipeline.

Generation runs in explicit phases. Each phase filters the pool with one
set of criteria and tries the selection strategies in a fixed order:

    single -> multiple identical (<= 4) -> mixed (<= 3)
           -> multiple identical (<= 6) -> mixed (<= max monsters)

The first strategy that yields a selection with XP wins. The first phase
uses the caller's criteria; when it fails and relaxing is enabled, a
second phase retries with the environment set to "Any". If every phase
fails, NoViableSelectionError carries the active filters and counts, and
the environments the catalog does offer when an environment was asked for.

:meth:`EncounterGenerator.roll` is the randomised alternative: the same
phases, with a single dice-based strategy driven by an injected
``random.Random``.

Example:
    >>> generator = EncounterGenerator(creatures)
    >>> encounter = generator.generate(EncounterParameters(xp_threshold=450))
    >>> encounter.difficulty
    <Difficulty.MEDIUM: 'Medium'>
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from encounter_forge.core import constants
from encounter_forge.core.config import GenerationConfig
from encounter_forge.core.exceptions import NoCandidatesError, NoViableSelectionError
from encounter_forge.core.logging import get_logger
from encounter_forge.engine.filters import catalog_environments, filter_creatures, widening_steps
from encounter_forge.engine.selection import (
    select_dice,
    select_mixed,
    select_multiple_identical,
    select_single,
)
from encounter_forge.models.creature import (
    Creature,
    EncounterParameters,
    EncounterSelection,
    FilterCriteria,
    is_unconstrained,
    normalize_label,
)
from encounter_forge.models.encounter import (
    EncounterCreature,
    GeneratedEncounter,
    GenerationMetadata,
    ScalingSuggestions,
)
from encounter_forge.models.enums import SelectionStrategy
from encounter_forge.models.rules import (
    adjusted_xp,
    classify_difficulty,
    multiplier_for_count,
)


logger = get_logger(__name__)

Selector = Callable[[Sequence[Creature]], EncounterSelection | None]


@dataclass(frozen=True)
class StrategyAttempt:
    """One step of the strategy sequence.

    Attributes:
        strategy: Heuristic to run.
        limit: Quantity or creature cap for that heuristic (1 for single).
    """

    strategy: SelectionStrategy
    limit: int

    @property
    def label(self) -> str:
        if self.strategy is SelectionStrategy.SINGLE:
            return self.strategy.display_name
        return f"{self.strategy.display_name} (max {self.limit})"


def strategy_sequence(max_monsters: int) -> tuple[StrategyAttempt, ...]:
    """The fixed order in which selection strategies are tried."""
    return (
        StrategyAttempt(SelectionStrategy.SINGLE, 1),
        StrategyAttempt(SelectionStrategy.MULTIPLE_IDENTICAL, min(4, max_monsters)),
        StrategyAttempt(SelectionStrategy.MIXED, min(3, max_monsters)),
        StrategyAttempt(SelectionStrategy.MULTIPLE_IDENTICAL, min(6, max_monsters)),
        StrategyAttempt(SelectionStrategy.MIXED, max_monsters),
    )


def encounter_name(selection: EncounterSelection) -> str:
    """Readable summary of a selection, e.g. '2 Goblins & Orc'."""
    parts = [
        f"{entry.quantity} {entry.creature.name}s" if entry.quantity > 1 else entry.creature.name
        for entry in selection
    ]
    return " & ".join(parts)


def tactical_notes(selection: EncounterSelection) -> list[str]:
    """Observations about how a selection plays at the table."""
    notes: list[str] = []
    types = {normalize_label(e.creature.creature_type) for e in selection if e.creature.creature_type}
    if len(types) > 1:
        notes.append("Diverse creature types provide varied combat abilities and tactics")
    if any(entry.quantity > 1 for entry in selection):
        notes.append("Multiple identical creatures can coordinate attacks effectively")
    sizes = {normalize_label(e.creature.size) for e in selection if e.creature.size}
    if len(sizes) > 1:
        notes.append("Varied creature sizes create interesting battlefield positioning")
    return notes


def scaling_suggestions(selection: EncounterSelection) -> ScalingSuggestions:
    """Suggest how to make a selection easier or harder."""
    if len(selection) == 1 and selection[0].quantity == 1:
        return ScalingSuggestions(
            easier="Use a creature with 1-2 CR lower, or reduce hit points by 25%",
            harder="Add a second creature of similar CR, or increase CR by 1-2",
        )
    if len(selection) == 1:
        quantity = selection[0].quantity
        return ScalingSuggestions(
            easier=f"Remove {max(1, quantity // 2)} creature(s)",
            harder=f"Add {max(1, min(2, quantity // 2))} more creature(s)",
        )
    return ScalingSuggestions(
        easier="Remove the highest CR creature or reduce quantities by 1",
        harder="Add another creature type or increase all quantities by 1",
    )


class EncounterGenerator:
    """Generates balanced encounters from a creature pool.

    The generator holds only the pool and an explicit configuration; every
    call to :meth:`generate` keeps its state in local variables, so one
    instance can serve concurrent requests.

    Attributes:
        creatures: The unfiltered creature pool.
        config: Selection and difficulty tuning.
    """

    def __init__(
        self,
        creatures: Iterable[Creature],
        config: GenerationConfig | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            creatures: Creature pool to draw from.
            config: Tuning values; defaults to the DMG-based values.
        """
        self.creatures: tuple[Creature, ...] = tuple(creatures)
        self.config = config or GenerationConfig()
        unscorable = sum(1 for creature in self.creatures if not creature.has_xp)
        if unscorable:
            logger.warning(
                "Creatures without XP will be ignored by selection",
                count=unscorable,
                pool_size=len(self.creatures),
            )

    def _selector(self, target: int, attempt: StrategyAttempt, rng: random.Random | None) -> Selector:
        if attempt.strategy is SelectionStrategy.SINGLE:
            return lambda pool: select_single(pool, target, self.config)
        if attempt.strategy is SelectionStrategy.MULTIPLE_IDENTICAL:
            return lambda pool: select_multiple_identical(pool, target, attempt.limit, self.config)
        if attempt.strategy is SelectionStrategy.DICE:
            if rng is None:
                msg = "the dice strategy needs a random source"
                raise ValueError(msg)
            return lambda pool: select_dice(pool, target, attempt.limit, rng)
        return lambda pool: select_mixed(pool, target, attempt.limit, self.config)

    def _run_phase(
        self,
        criteria: FilterCriteria,
        params: EncounterParameters,
        notes: list[str],
        sequence: Sequence[StrategyAttempt],
        rng: random.Random | None,
    ) -> tuple[EncounterSelection | None, StrategyAttempt | None, int, int]:
        """Filter the pool and try every strategy of the sequence once.

        Returns:
            The selection, the attempt that produced it, attempts made and
            creatures considered. Selection and attempt are None when every
            strategy failed.

        Raises:
            NoCandidatesError: If filtering leaves no creature with XP.
        """
        candidates = [c for c in filter_creatures(self.creatures, criteria) if c.has_xp]
        notes.append(f"Creatures available after filtering: {len(candidates)}")
        if not candidates:
            raise NoCandidatesError(
                "No creatures match the filter criteria",
                pool_size=len(self.creatures),
                filters=criteria.active_filters(),
            )

        attempts = 0
        for attempt in sequence:
            attempts += 1
            selection = self._selector(params.xp_threshold, attempt, rng)(candidates)
            if selection and sum(entry.total_xp for entry in selection) > 0:
                notes.append(f"Selected with {attempt.label}")
                return selection, attempt, attempts, len(candidates)
            notes.append(f"{attempt.label}: no suitable combination")
        return None, None, attempts, len(candidates)

    def generate(self, params: EncounterParameters) -> GeneratedEncounter:
        """Generate an encounter for the requested XP budget.

        Args:
            params: Target XP, creature cap and filter criteria.

        Returns:
            The generated encounter.

        Raises:
            NoViableSelectionError: If no phase produced a selection.
        """
        return self._generate(params, strategy_sequence(params.max_monsters), None)

    def roll(self, params: EncounterParameters, rng: random.Random) -> GeneratedEncounter:
        """Generate an encounter with the dice-based strategy.

        Args:
            params: Target XP, creature cap and filter criteria.
            rng: Random source; a seeded one makes the roll repeatable.

        Returns:
            The generated encounter.

        Raises:
            NoViableSelectionError: If no creature fits the budget in any phase.
        """
        sequence = (StrategyAttempt(SelectionStrategy.DICE, params.max_monsters),)
        return self._generate(params, sequence, rng)

    def _generate(
        self,
        params: EncounterParameters,
        sequence: Sequence[StrategyAttempt],
        rng: random.Random | None,
    ) -> GeneratedEncounter:
        notes: list[str] = [
            "Starting encounter generation",
            f"Target XP: {params.xp_threshold}, Max Monsters: {params.max_monsters}",
        ]
        strict = params.criteria
        total_attempts = 0
        most_considered = 0

        for phase, criteria in enumerate(
            widening_steps(strict, relax_environment=self.config.relax_environment)
        ):
            relaxed = phase > 0
            if relaxed:
                notes.append("Retrying with environment relaxed to Any")
                logger.info(
                    "Relaxing environment filter",
                    environment=strict.environment,
                    target_xp=params.xp_threshold,
                )
            try:
                selection, attempt, attempts, considered = self._run_phase(
                    criteria, params, notes, sequence, rng
                )
            except NoCandidatesError as exc:
                logger.info("No candidates for phase", phase=phase, **exc.details)
                continue

            total_attempts += attempts
            most_considered = max(most_considered, considered)
            if selection is not None and attempt is not None:
                encounter = self._build(
                    selection,
                    attempt.strategy,
                    params,
                    criteria,
                    notes,
                    attempts_made=total_attempts,
                    considered=considered,
                    relaxed=relaxed,
                )
                logger.info(
                    "Encounter generated",
                    strategy=attempt.strategy,
                    adjusted_xp=encounter.adjusted_xp,
                    target_xp=params.xp_threshold,
                    difficulty=encounter.difficulty,
                    relaxed_environment=relaxed,
                )
                return encounter

        environments = None
        if not is_unconstrained(strict.environment):
            environments = catalog_environments(self.creatures)
        logger.warning(
            "Encounter generation failed",
            target_xp=params.xp_threshold,
            filters=strict.active_filters(),
            pool_size=len(self.creatures),
            available_environments=environments,
        )
        raise NoViableSelectionError(
            "No creatures found matching criteria",
            candidates_considered=most_considered,
            attempts_made=total_attempts,
            available_environments=environments,
            filters=strict.active_filters(),
            details={"pool_size": len(self.creatures)},
        )

    def _build(
        self,
        selection: EncounterSelection,
        strategy: SelectionStrategy,
        params: EncounterParameters,
        criteria: FilterCriteria,
        notes: list[str],
        *,
        attempts_made: int,
        considered: int,
        relaxed: bool,
    ) -> GeneratedEncounter:
        total_xp = sum(entry.total_xp for entry in selection)
        count = sum(entry.quantity for entry in selection)
        adjusted = adjusted_xp(total_xp, count)
        environment = (
            constants.ANY_FILTER if is_unconstrained(criteria.environment) else criteria.environment
        )
        return GeneratedEncounter(
            encounter_name=encounter_name(selection),
            environment=(environment or constants.ANY_FILTER).strip(),
            target_xp=params.xp_threshold,
            creatures=tuple(EncounterCreature.from_entry(entry) for entry in selection),
            total_xp=total_xp,
            multiplier=multiplier_for_count(count),
            adjusted_xp=adjusted,
            difficulty=classify_difficulty(adjusted, params.xp_threshold, self.config),
            generation_notes=tuple(notes),
            tactical_notes=tuple(tactical_notes(selection)),
            scaling_suggestions=scaling_suggestions(selection),
            metadata=GenerationMetadata(
                strategy=strategy,
                attempts_made=attempts_made,
                pool_size=len(self.creatures),
                creatures_considered=considered,
                filters=criteria.active_filters(),
                relaxed_environment=relaxed,
            ),
        )


def generate_encounter(
    creatures: Iterable[Creature],
    params: EncounterParameters,
    config: GenerationConfig | None = None,
) -> GeneratedEncounter:
    """Generate one encounter from a creature pool.

    Convenience wrapper around :class:`EncounterGenerator`.

    Raises:
        NoViableSelectionError: If no creatures can be combined for the request.
    """
    return EncounterGenerator(creatures, config).generate(params)


def roll_encounter(
    creatures: Iterable[Creature],
    params: EncounterParameters,
    rng: random.Random,
    config: GenerationConfig | None = None,
) -> GeneratedEncounter:
    """Roll one encounter with the dice-based strategy.

    Raises:
        NoViableSelectionError: If no creature fits the budget.
    """
    return EncounterGenerator(creatures, config).roll(params, rng)


__all__ = [
    "StrategyAttempt",
    "strategy_sequence",
    "encounter_name",
    "tactical_notes",
    "scaling_suggestions",
    "EncounterGenerator",
    "generate_encounter",
    "roll_encounter",
]
