"""Tests for the encounter generation pipeline."""

from __future__ import annotations

import random

import pytest

from encounter_forge.core.config import GenerationConfig
from encounter_forge.core.exceptions import NoViableSelectionError
from encounter_forge.engine import generator as generator_module
from encounter_forge.engine.generator import (
    EncounterGenerator,
    encounter_name,
    generate_encounter,
    roll_encounter,
    scaling_suggestions,
    strategy_sequence,
    tactical_notes,
)
from encounter_forge.models.creature import Creature, EncounterParameters, SelectionEntry
from encounter_forge.models.enums import Difficulty, SelectionStrategy


# =============================================================================
# Strategy Sequence
# =============================================================================


class TestStrategySequence:
    """Tests for the fixed strategy order."""

    def test_order_and_limits(self) -> None:
        """Test the five attempts and their caps."""
        attempts = strategy_sequence(8)

        assert [(a.strategy, a.limit) for a in attempts] == [
            (SelectionStrategy.SINGLE, 1),
            (SelectionStrategy.MULTIPLE_IDENTICAL, 4),
            (SelectionStrategy.MIXED, 3),
            (SelectionStrategy.MULTIPLE_IDENTICAL, 6),
            (SelectionStrategy.MIXED, 8),
        ]

    def test_caps_clamped_to_max_monsters(self) -> None:
        """Test no cap exceeds the monster limit."""
        assert [a.limit for a in strategy_sequence(2)] == [1, 2, 2, 2, 2]

    def test_labels(self) -> None:
        """Test attempt labels used in the generation notes."""
        attempts = strategy_sequence(6)

        assert attempts[0].label == "Single Creature"
        assert attempts[1].label == "Multiple Identical (max 4)"
        assert attempts[4].label == "Mixed Creatures (max 6)"


# =============================================================================
# Presentation Helpers
# =============================================================================


class TestPresentation:
    """Tests for names, tactical notes and scaling suggestions."""

    def test_encounter_name(self, creature_pool: list[Creature]) -> None:
        """Test quantities are pluralised and joined with '&'."""
        goblin, orc = creature_pool[0], creature_pool[1]
        selection = (SelectionEntry(creature=goblin, quantity=2), SelectionEntry(creature=orc))

        assert encounter_name(selection) == "2 Goblins & Orc"

    def test_tactical_notes_for_mixed_group(self, creature_pool: list[Creature]) -> None:
        """Test diverse types, groups and sizes all produce notes."""
        goblin, wolf = creature_pool[0], creature_pool[2]
        selection = (SelectionEntry(creature=goblin, quantity=2), SelectionEntry(creature=wolf))

        notes = tactical_notes(selection)

        assert len(notes) == 3
        assert any("Diverse creature types" in note for note in notes)
        assert any("coordinate attacks" in note for note in notes)
        assert any("sizes" in note for note in notes)

    def test_no_tactical_notes_for_lone_creature(self, goblin: Creature) -> None:
        """Test a single creature yields no notes."""
        assert tactical_notes((SelectionEntry(creature=goblin),)) == []

    def test_scaling_single(self, goblin: Creature) -> None:
        """Test suggestions for a lone creature."""
        suggestions = scaling_suggestions((SelectionEntry(creature=goblin),))

        assert "CR lower" in suggestions.easier
        assert "second creature" in suggestions.harder

    def test_scaling_identical_group(self, goblin: Creature) -> None:
        """Test suggestions scale with the group size."""
        suggestions = scaling_suggestions((SelectionEntry(creature=goblin, quantity=4),))

        assert suggestions.easier == "Remove 2 creature(s)"
        assert suggestions.harder == "Add 2 more creature(s)"

    def test_scaling_mixed(self, creature_pool: list[Creature]) -> None:
        """Test suggestions for a mixed group."""
        selection = tuple(SelectionEntry(creature=c) for c in creature_pool[:2])

        assert "highest CR" in scaling_suggestions(selection).easier


# =============================================================================
# Generation
# =============================================================================


class TestEncounterGenerator:
    """Tests for EncounterGenerator.generate."""

    def test_goblin_against_45_xp(self, goblin: Creature) -> None:
        """Test a lone Goblin against a 45 XP target is a Hard fight."""
        params = EncounterParameters(xp_threshold=45, max_monsters=3)

        encounter = EncounterGenerator([goblin]).generate(params)

        assert encounter.strategy is SelectionStrategy.SINGLE
        assert encounter.encounter_name == "Goblin"
        assert encounter.creature_count == 1
        assert encounter.total_xp == 50
        assert encounter.multiplier == 1.0
        assert encounter.adjusted_xp == 50
        assert encounter.difficulty is Difficulty.HARD
        assert encounter.environment == "Any"
        assert encounter.metadata.attempts_made == 1
        assert encounter.metadata.relaxed_environment is False

    def test_notes_record_progress(self, goblin: Creature) -> None:
        """Test generation notes describe each step."""
        params = EncounterParameters(xp_threshold=45, max_monsters=3)

        notes = EncounterGenerator([goblin]).generate(params).generation_notes

        assert notes[0] == "Starting encounter generation"
        assert notes[1] == "Target XP: 45, Max Monsters: 3"
        assert "Creatures available after filtering: 1" in notes
        assert notes[-1] == "Selected with Single Creature"

    def test_exact_match_from_pool(self, creature_pool: list[Creature]) -> None:
        """Test the Ogre is chosen for a 450 XP target."""
        encounter = generate_encounter(creature_pool, EncounterParameters(xp_threshold=450))

        assert encounter.encounter_name == "Ogre"
        assert encounter.adjusted_xp == 450
        assert encounter.difficulty is Difficulty.MEDIUM
        assert encounter.metadata.pool_size == len(creature_pool)
        assert encounter.metadata.creatures_considered == len(creature_pool)

    def test_filters_applied(self, creature_pool: list[Creature]) -> None:
        """Test only creatures matching the filters are used."""
        params = EncounterParameters(xp_threshold=100, environment="Swamp")

        encounter = generate_encounter(creature_pool, params)

        assert encounter.encounter_name == "Crocodile"
        assert encounter.environment == "Swamp"
        assert encounter.metadata.filters["environment"] == "Swamp"

    def test_falls_through_to_identical_group(
        self,
        goblin: Creature,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test the next strategy runs when the previous one yields nothing."""
        monkeypatch.setattr(generator_module, "select_single", lambda *args, **kwargs: None)
        params = EncounterParameters(xp_threshold=200, max_monsters=6)

        encounter = EncounterGenerator([goblin]).generate(params)

        assert encounter.strategy is SelectionStrategy.MULTIPLE_IDENTICAL
        assert encounter.encounter_name == "2 Goblins"
        assert encounter.multiplier == 1.5
        assert encounter.adjusted_xp == 150
        assert encounter.difficulty is Difficulty.MEDIUM
        assert encounter.metadata.attempts_made == 2
        assert "Single Creature: no suitable combination" in encounter.generation_notes
        assert "Selected with Multiple Identical (max 4)" in encounter.generation_notes

    def test_relaxes_environment(self, creature_pool: list[Creature]) -> None:
        """Test an empty environment retries with 'Any'."""
        params = EncounterParameters(xp_threshold=700, environment="Desert")

        encounter = generate_encounter(creature_pool, params)

        assert encounter.encounter_name == "Owlbear"
        assert encounter.environment == "Any"
        assert encounter.metadata.relaxed_environment is True
        assert "environment" not in encounter.metadata.filters
        assert "Retrying with environment relaxed to Any" in encounter.generation_notes

    def test_relaxing_disabled_raises(self, creature_pool: list[Creature]) -> None:
        """Test the terminal error lists the active filters and counts."""
        params = EncounterParameters(xp_threshold=700, environment="Desert")
        config = GenerationConfig(relax_environment=False)

        with pytest.raises(NoViableSelectionError) as exc_info:
            generate_encounter(creature_pool, params, config)

        error = exc_info.value
        assert error.message == "No creatures found matching criteria"
        assert error.details["filters"]["environment"] == "Desert"
        assert error.details["attempts_made"] == 0
        assert error.details["candidates_considered"] == 0
        assert error.details["pool_size"] == len(creature_pool)
        assert error.details["available_environments"] == [
            "Forest",
            "Grassland",
            "Hill",
            "Mountain",
            "Swamp",
            "Underdark",
        ]
        assert "Swamp" in str(error)

    def test_other_filters_not_relaxed(self, creature_pool: list[Creature]) -> None:
        """Test only the environment is widened."""
        params = EncounterParameters(xp_threshold=100, environment="Desert", creature_type="Fiend")

        with pytest.raises(NoViableSelectionError) as exc_info:
            generate_encounter(creature_pool, params)

        assert exc_info.value.details["filters"]["creature_type"] == "Fiend"

    def test_empty_pool_raises(self) -> None:
        """Test an empty pool fails with NoViableSelectionError."""
        with pytest.raises(NoViableSelectionError) as exc_info:
            generate_encounter([], EncounterParameters(xp_threshold=100))

        assert "available_environments" not in exc_info.value.details

    def test_creatures_without_xp_ignored(self, goblin: Creature) -> None:
        """Test creatures with no XP never appear in an encounter."""
        broken = Creature(id="x", name="Glitch", challenge_rating="??")

        encounter = generate_encounter([broken, goblin], EncounterParameters(xp_threshold=50))

        assert encounter.encounter_name == "Goblin"
        assert encounter.metadata.creatures_considered == 1

    def test_generator_reusable(self, creature_pool: list[Creature]) -> None:
        """Test one generator serves several requests independently."""
        generator = EncounterGenerator(creature_pool)

        first = generator.generate(EncounterParameters(xp_threshold=450))
        second = generator.generate(EncounterParameters(xp_threshold=100, environment="Swamp"))
        third = generator.generate(EncounterParameters(xp_threshold=450))

        assert first == third
        assert second.encounter_name == "Crocodile"


# =============================================================================
# Dice Rolls
# =============================================================================


class TestRollEncounter:
    """Tests for the dice-based generation mode."""

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_roll_stays_in_budget(self, creature_pool: list[Creature], seed: int) -> None:
        """Test a rolled forest encounter uses affordable forest creatures only."""
        params = EncounterParameters(xp_threshold=300, environment="Forest", max_monsters=4)

        encounter = roll_encounter(creature_pool, params, random.Random(seed))

        assert encounter.strategy is SelectionStrategy.DICE
        assert encounter.total_xp <= 300
        assert 1 <= encounter.creature_count <= 4
        assert {c.name for c in encounter.creatures} <= {"Goblin", "Orc", "Wolf"}
        assert "Selected with Dice Roll (max 4)" in encounter.generation_notes

    def test_seed_repeatable(self, creature_pool: list[Creature]) -> None:
        """Test the same seed rolls the same encounter."""
        generator = EncounterGenerator(creature_pool)
        params = EncounterParameters(xp_threshold=1000, max_monsters=6)

        assert generator.roll(params, random.Random(5)) == generator.roll(params, random.Random(5))

    def test_roll_relaxes_environment(self, creature_pool: list[Creature]) -> None:
        """Test rolling shares the environment relaxing of balanced generation."""
        params = EncounterParameters(xp_threshold=200, environment="Desert")

        encounter = roll_encounter(creature_pool, params, random.Random(3))

        assert encounter.metadata.relaxed_environment is True
        assert encounter.environment == "Any"

    def test_nothing_affordable_raises(self, creature_pool: list[Creature]) -> None:
        """Test a budget below every creature's XP fails with diagnostics."""
        params = EncounterParameters(xp_threshold=10, environment="Swamp")

        with pytest.raises(NoViableSelectionError) as exc_info:
            roll_encounter(creature_pool, params, random.Random(1), GenerationConfig(relax_environment=False))

        assert exc_info.value.details["attempts_made"] == 1
        assert exc_info.value.details["candidates_considered"] == 1
        assert "Swamp" in exc_info.value.details["available_environments"]
