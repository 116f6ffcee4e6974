"""JSON catalog loading.

Creature and magic item catalogs may be stored as a bare JSON list of
records or as an object wrapping the list (``{"creatures": [...]}`` or
``{"magic_items": [...]}``). Records that fail validation are skipped
with a warning so one bad entry never sinks a whole catalog.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel

from encounter_forge.core.exceptions import CatalogLoadError
from encounter_forge.core.logging import get_logger
from encounter_forge.models.creature import Creature
from encounter_forge.models.treasure import MagicItem


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _read_records(path: Path, collection_key: str) -> list[Any]:
    """Read the record list from a JSON catalog file.

    Raises:
        CatalogLoadError: If the file is missing, unreadable, not JSON, or
            does not contain a record list.
    """
    if not path.exists():
        raise CatalogLoadError(f"Catalog file not found: {path}", source=str(path))

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CatalogLoadError(
            f"Failed to read catalog: {exc}",
            source=str(path),
        ) from exc
    except json.JSONDecodeError as exc:
        raise CatalogLoadError(
            f"Catalog is not valid JSON: {exc.msg}",
            source=str(path),
            details={"line": exc.lineno, "column": exc.colno},
        ) from exc

    if isinstance(data, dict):
        data = data.get(collection_key)
    if not isinstance(data, list):
        raise CatalogLoadError(
            f"Catalog must be a list or an object with a '{collection_key}' list",
            source=str(path),
        )
    return data


def parse_records(
    records: Iterable[Any],
    model: type[ModelT],
    *,
    source: str = "<memory>",
) -> list[ModelT]:
    """Validate raw records into models, skipping invalid ones.

    Args:
        records: Raw catalog records (normally dicts).
        model: Model class to validate into.
        source: Where the records came from, for log messages.

    Returns:
        The records that validated, in input order.
    """
    parsed: list[ModelT] = []
    skipped = 0
    for index, record in enumerate(records):
        try:
            parsed.append(model.model_validate(record))
        except pydantic.ValidationError as exc:
            skipped += 1
            logger.warning(
                "Skipping invalid catalog record",
                source=source,
                index=index,
                model=model.__name__,
                errors=exc.error_count(),
                first_error=exc.errors()[0].get("msg"),
            )
    logger.info(
        "Catalog records parsed",
        source=source,
        model=model.__name__,
        loaded=len(parsed),
        skipped=skipped,
    )
    return parsed


def load_creatures(path: str | Path) -> list[Creature]:
    """Load a creature catalog from a JSON file.

    Args:
        path: Path to the catalog.

    Returns:
        Valid creatures; invalid records are skipped.

    Raises:
        CatalogLoadError: If the file cannot be read as a catalog.
    """
    path = Path(path)
    return parse_records(_read_records(path, "creatures"), Creature, source=str(path))


def load_magic_items(path: str | Path) -> list[MagicItem]:
    """Load a magic item catalog from a JSON file.

    Args:
        path: Path to the catalog.

    Returns:
        Valid magic items; invalid records are skipped.

    Raises:
        CatalogLoadError: If the file cannot be read as a catalog.
    """
    path = Path(path)
    return parse_records(_read_records(path, "magic_items"), MagicItem, source=str(path))


__all__ = [
    "parse_records",
    "load_creatures",
    "load_magic_items",
]
