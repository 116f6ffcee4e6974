"""Tests for the command line front end."""

from __future__ import annotations

import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from structlog.testing import capture_logs

from encounter_forge import cli


@pytest.fixture(autouse=True)
def logs(monkeypatch: pytest.MonkeyPatch) -> Generator[list[dict[str, Any]], None, None]:
    """Capture log events instead of configuring real output."""
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    with capture_logs() as captured:
        yield captured


class TestParser:
    """Tests for argument parsing."""

    def test_encounter_requires_source_and_budget(self) -> None:
        """Test the encounter command needs a catalog and a target."""
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["encounter", "--xp", "100"])
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["encounter", "--creatures", "c.json"])

    def test_party_levels_parsed(self) -> None:
        """Test comma-separated levels become integers."""
        args = cli.build_parser().parse_args(
            ["encounter", "--creatures", "c.json", "--party-levels", "3, 3,4"]
        )

        assert args.party_levels == [3, 3, 4]

    def test_bad_party_levels_rejected(self) -> None:
        """Test non-numeric levels are a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["encounter", "--creatures", "c.json", "--party-levels", "3,x"])

        assert exc_info.value.code == 2


class TestEncounterCommand:
    """Tests for the encounter command."""

    def test_xp_target(self, creature_catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test an encounter is printed as JSON."""
        code = cli.main(["encounter", "--creatures", str(creature_catalog_file), "--xp", "450"])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["encounter_name"] == "Ogre"
        assert output["difficulty"] == "Medium"
        assert output["metadata"]["strategy"] == "single"

    def test_party_budget_with_analysis(
        self,
        creature_catalog_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test a party-derived target with balance analysis."""
        code = cli.main([
            "encounter",
            "--creatures",
            str(creature_catalog_file),
            "--party-levels",
            "1,1,1,1",
            "--difficulty",
            "hard",
            "--analyze",
        ])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["encounter"]["target_xp"] == 300
        assert output["encounter"]["encounter_name"] == "Ogre"
        assert output["balance"]["is_balanced"] is True
        assert "Use terrain features to create dynamic combat positioning" in output["combat_tips"]

    def test_no_viable_encounter(
        self,
        creature_catalog_file: Path,
        capsys: pytest.CaptureFixture[str],
        logs: list[dict[str, Any]],
    ) -> None:
        """Test a failed generation exits 1 and reports the reason."""
        code = cli.main([
            "encounter",
            "--creatures",
            str(creature_catalog_file),
            "--xp",
            "300",
            "--environment",
            "Desert",
            "--no-relax",
        ])

        assert code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No creatures found matching criteria" in captured.err
        assert "Underdark" in captured.err
        assert any(entry["event"] == "Command failed" for entry in logs)

    def test_zero_max_monsters_rejected(self, creature_catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test an explicit creature cap of zero is an error, not the default."""
        code = cli.main(["encounter", "--creatures", str(creature_catalog_file), "--xp", "100", "--max-monsters", "0"])

        assert code == 1
        assert "Invalid encounter parameters" in capsys.readouterr().err

    def test_dice_seeded(self, creature_catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a seeded dice roll is repeatable and stays in budget."""
        argv = ["encounter", "--creatures", str(creature_catalog_file), "--xp", "600", "--dice", "--seed", "3"]

        assert cli.main(argv) == 0
        first = json.loads(capsys.readouterr().out)
        assert cli.main(argv) == 0
        second = json.loads(capsys.readouterr().out)

        assert first == second
        assert first["metadata"]["strategy"] == "dice"
        assert first["total_xp"] <= 600

    def test_missing_catalog(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a missing catalog file exits 1."""
        code = cli.main(["encounter", "--creatures", str(tmp_path / "none.json"), "--xp", "100"])

        assert code == 1
        assert "Catalog file not found" in capsys.readouterr().err

    def test_invalid_settings(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        """Test invalid environment settings exit 2."""
        monkeypatch.setenv("ENCOUNTER_FORGE_LOG_LEVEL", "LOUD")

        code = cli.main(["encounter", "--creatures", "c.json", "--xp", "100"])

        assert code == 2
        assert "Configuration error" in capsys.readouterr().err


class TestTreasureCommand:
    """Tests for the treasure command."""

    def test_budget_too_small(self, item_catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a tiny budget awards nothing."""
        code = cli.main(["treasure", "--items", str(item_catalog_file), "--gold", "10", "--drop-chance", "1"])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["items"] == []
        assert output["remaining_gold"] == 10

    def test_unique_seeded(self, item_catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a seeded unique roll stays within budget without duplicates."""
        argv = [
            "treasure",
            "--items",
            str(item_catalog_file),
            "--gold",
            "1000",
            "--seed",
            "5",
            "--drop-chance",
            "0.9",
            "--unique",
        ]

        assert cli.main(argv) == 0
        first = json.loads(capsys.readouterr().out)
        assert cli.main(argv) == 0
        second = json.loads(capsys.readouterr().out)

        ids = [item["id"] for item in first["items"]]
        assert len(ids) == len(set(ids))
        assert first["total_value"] <= 1000
        assert first == second

    def test_drop_chance_out_of_range(self, item_catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a drop chance above 1 exits 1 with a readable error."""
        code = cli.main(["treasure", "--items", str(item_catalog_file), "--gold", "100", "--drop-chance", "2"])

        assert code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Invalid treasure options" in captured.err

    def test_non_finite_gold(self, item_catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a NaN gold budget exits 1 with a readable error."""
        code = cli.main(["treasure", "--items", str(item_catalog_file), "--gold", "nan"])

        assert code == 1
        assert "Gold budget must be a finite number" in capsys.readouterr().err


class TestEnvironmentsCommand:
    """Tests for the environments command."""

    def test_lists_catalog_environments(self, creature_catalog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the environments of a JSON catalog are printed sorted."""
        code = cli.main(["environments", "--creatures", str(creature_catalog_file)])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == [
            "Forest",
            "Grassland",
            "Hill",
            "Mountain",
            "Swamp",
            "Underdark",
        ]
