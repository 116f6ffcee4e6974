"""Command line front end.

Usage:
    encounter-forge encounter --creatures monsters.json --xp 450 --environment Forest
    encounter-forge encounter --notion --party-levels 3,3,3,4 --difficulty hard --analyze
    encounter-forge encounter --creatures monsters.json --xp 600 --dice --seed 3
    encounter-forge environments --creatures monsters.json
    encounter-forge treasure --items items.json --gold 250 --seed 7

Results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from collections.abc import Sequence

import pydantic

from encounter_forge.catalog.loader import load_creatures, load_magic_items
from encounter_forge.catalog.notion import NotionCatalogClient
from encounter_forge.core.config import Settings, TreasureConfig, get_settings
from encounter_forge.core.exceptions import EncounterForgeError, ValidationError
from encounter_forge.core.logging import configure_logging, get_logger, request_context
from encounter_forge.engine.analysis import analyze_balance, combat_tips
from encounter_forge.engine.filters import catalog_environments
from encounter_forge.engine.generator import generate_encounter, roll_encounter
from encounter_forge.engine.treasure import generate_treasure
from encounter_forge.models.creature import Creature, EncounterParameters
from encounter_forge.models.enums import Difficulty
from encounter_forge.models.rules import party_xp_budget
from encounter_forge.models.treasure import MagicItem


logger = get_logger(__name__)


def _parse_levels(value: str) -> list[int]:
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError as exc:
        msg = f"party levels must be comma-separated integers, got {value!r}"
        raise argparse.ArgumentTypeError(msg) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="encounter-forge",
        description="Generate balanced D&D 5E encounters and magic item treasure",
    )
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument("--log-json", action="store_true", help="Render logs as JSON")
    commands = parser.add_subparsers(dest="command", required=True)

    encounter = commands.add_parser("encounter", help="Generate an encounter")
    source = encounter.add_mutually_exclusive_group(required=True)
    source.add_argument("--creatures", help="Path to a JSON creature catalog")
    source.add_argument("--notion", action="store_true", help="Fetch creatures from Notion")
    budget = encounter.add_mutually_exclusive_group(required=True)
    budget.add_argument("--xp", type=int, help="Target XP threshold")
    budget.add_argument(
        "--party-levels",
        type=_parse_levels,
        help="Comma-separated character levels; target XP comes from --difficulty",
    )
    encounter.add_argument(
        "--difficulty",
        default=Difficulty.MEDIUM.value,
        choices=[d.value.lower() for d in Difficulty] + [d.value for d in Difficulty],
        help="Difficulty used with --party-levels (default: Medium)",
    )
    encounter.add_argument("--max-monsters", type=int, default=None, help="Creature cap")
    encounter.add_argument("--min-cr", default=None, help="Lowest CR, e.g. 1/4")
    encounter.add_argument("--max-cr", default=None, help="Highest CR")
    encounter.add_argument("--environment", default=None, help="Environment tag, or Any")
    encounter.add_argument("--alignment", default=None, help="Alignment filter")
    encounter.add_argument("--creature-type", default=None, help="Creature type filter")
    encounter.add_argument("--size", default=None, help="Size filter")
    encounter.add_argument(
        "--no-relax",
        action="store_true",
        help="Fail instead of retrying with environment Any",
    )
    encounter.add_argument(
        "--analyze",
        action="store_true",
        help="Include a balance report and combat tips (needs --party-levels)",
    )
    encounter.add_argument(
        "--dice",
        action="store_true",
        help="Roll random 1d4 groups instead of the balanced strategies",
    )
    encounter.add_argument("--seed", type=int, default=None, help="Random seed for --dice")

    environments = commands.add_parser("environments", help="List the environments a catalog offers")
    env_source = environments.add_mutually_exclusive_group(required=True)
    env_source.add_argument("--creatures", help="Path to a JSON creature catalog")
    env_source.add_argument("--notion", action="store_true", help="Read environments from Notion")

    treasure = commands.add_parser("treasure", help="Roll magic item treasure for one creature")
    item_source = treasure.add_mutually_exclusive_group(required=True)
    item_source.add_argument("--items", help="Path to a JSON magic item catalog")
    item_source.add_argument("--notion", action="store_true", help="Fetch items from Notion")
    treasure.add_argument("--gold", type=float, required=True, help="Gold budget in gp")
    treasure.add_argument("--seed", type=int, default=None, help="Random seed")
    treasure.add_argument("--drop-chance", type=float, default=None, help="Chance of each drop")
    treasure.add_argument("--unique", action="store_true", help="Award each item at most once")
    return parser


def _creature_pool(args: argparse.Namespace, settings: Settings) -> list[Creature]:
    if args.notion:
        with NotionCatalogClient(settings.notion) as client:
            return client.fetch_creatures()
    return load_creatures(args.creatures)


def _item_pool(args: argparse.Namespace, settings: Settings) -> list[MagicItem]:
    if args.notion:
        with NotionCatalogClient(settings.notion) as client:
            return client.fetch_magic_items()
    return load_magic_items(args.items)


def run_encounter(args: argparse.Namespace, settings: Settings) -> str:
    """Handle the ``encounter`` command and return the JSON output."""
    defaults = settings.generation
    if args.xp is not None:
        target = args.xp
    else:
        target = party_xp_budget(args.party_levels, args.difficulty)

    params = EncounterParameters.from_request({
        "xp_threshold": target,
        "max_monsters": args.max_monsters if args.max_monsters is not None else defaults.max_monsters,
        "min_cr": args.min_cr if args.min_cr is not None else defaults.min_cr,
        "max_cr": args.max_cr if args.max_cr is not None else defaults.max_cr,
        "environment": args.environment,
        "alignment": args.alignment,
        "creature_type": args.creature_type,
        "size": args.size,
    })
    config = defaults.to_config()
    if args.no_relax:
        config = config.model_copy(update={"relax_environment": False})

    if args.dice:
        encounter = roll_encounter(_creature_pool(args, settings), params, random.Random(args.seed), config)
    else:
        encounter = generate_encounter(_creature_pool(args, settings), params, config)
    if not args.analyze:
        return encounter.model_dump_json(indent=2)

    output: dict[str, object] = {
        "encounter": encounter.model_dump(mode="json"),
        "combat_tips": combat_tips(encounter),
    }
    if args.party_levels:
        levels = args.party_levels
        average_level = round(sum(levels) / len(levels))
        report = analyze_balance(encounter, average_level, len(levels))
        output["balance"] = report.model_dump(mode="json")
    return json.dumps(output, indent=2)


def run_treasure(args: argparse.Namespace, settings: Settings) -> str:
    """Handle the ``treasure`` command and return the JSON output."""
    seed = args.seed if args.seed is not None else settings.treasure.seed
    config = settings.treasure.to_config()
    if args.drop_chance is not None:
        try:
            config = TreasureConfig(
                drop_chance=args.drop_chance,
                wondrous_weight_factor=config.wondrous_weight_factor,
            )
        except pydantic.ValidationError as exc:
            first = exc.errors()[0]
            raise ValidationError(
                f"Invalid treasure options: {first.get('msg')}",
                field_name="drop_chance",
                invalid_value=args.drop_chance,
            ) from exc
    result = generate_treasure(
        args.gold,
        _item_pool(args, settings),
        random.Random(seed),
        config,
        unique=args.unique,
    )
    return result.model_dump_json(indent=2)


def run_environments(args: argparse.Namespace, settings: Settings) -> str:
    """Handle the ``environments`` command and return the JSON output.

    With ``--notion`` the configured environments database is read when
    there is one; otherwise the environments come from the creatures.
    """
    if args.notion and settings.notion.environments_database_id:
        with NotionCatalogClient(settings.notion) as client:
            return json.dumps(client.fetch_environments(), indent=2)
    return json.dumps(catalog_environments(_creature_pool(args, settings)), indent=2)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = get_settings()
    except EncounterForgeError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    configure_logging(
        level=args.log_level or settings.log_level,
        json_format=args.log_json or settings.log_json,
    )
    commands = {
        "encounter": run_encounter,
        "environments": run_environments,
        "treasure": run_treasure,
    }
    with request_context(command=args.command):
        try:
            output = commands[args.command](args, settings)
        except EncounterForgeError as exc:
            logger.error("Command failed", error=exc.message, **exc.details)
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
