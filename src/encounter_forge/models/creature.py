"""Creature reference data and encounter request models.

Creatures arrive from external catalogs with loosely typed fields: CR may
be a number, a numeric string or a fraction such as ``"1/4"``, XP may be
absent, environments may be a list or a single string. ``Creature``
normalises all of that at the boundary so the selection heuristics only
ever see clean, immutable values.

Example:
    >>> goblin = Creature(id="1", name="Goblin", challenge_rating="1/4")
    >>> goblin.xp_value
    50
"""

from __future__ import annotations

from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from encounter_forge.core import constants
from encounter_forge.core.exceptions import ValidationError
from encounter_forge.core.logging import get_logger
from encounter_forge.models.rules import parse_challenge_rating, xp_for_cr


logger = get_logger(__name__)


def normalize_label(value: object) -> str:
    """Trim and lowercase a label for comparison."""
    if value is None:
        return ""
    return str(value).strip().lower()


def is_unconstrained(value: str | None) -> bool:
    """Whether a filter value means 'no constraint' (absent, blank or Any)."""
    return value is None or normalize_label(value) in ("", normalize_label(constants.ANY_FILTER))


# =============================================================================
# Creature
# =============================================================================


class Creature(BaseModel):
    """A creature from the catalog.

    Attributes:
        id: Catalog identifier.
        name: Display name.
        challenge_rating: Parsed CR, or None if the catalog value was malformed.
        xp_value: XP per creature; explicit override or derived from CR.
        creature_type: Creature type (e.g., 'Humanoid').
        alignment: Alignment text (e.g., 'Neutral Evil').
        size: Size category (e.g., 'Small').
        environment: Environment tags.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1, description="Catalog identifier")
    name: str = Field(min_length=1, description="Creature name")
    challenge_rating: float | None = Field(default=None, description="Challenge rating")
    xp_value: int = Field(default=0, ge=0, description="XP awarded per creature")
    creature_type: str = Field(default="", description="Creature type")
    alignment: str = Field(default="", description="Alignment")
    size: str = Field(default="", description="Size category")
    environment: tuple[str, ...] = Field(default=(), description="Environment tags")

    @model_validator(mode="before")
    @classmethod
    def normalize_catalog_record(cls, data: Any) -> Any:
        """Map catalog aliases and derive XP from CR.

        Accepts ``cr`` for ``challenge_rating``, ``xp`` for ``xp_value`` and
        ``type`` for ``creature_type``. Malformed CR or XP never raises: the
        creature keeps XP 0 and a warning is logged.
        """
        if not isinstance(data, dict):
            return data
        record = dict(data)

        for alias, field in (("cr", "challenge_rating"), ("xp", "xp_value"), ("type", "creature_type")):
            if alias in record and field not in record:
                record[field] = record.pop(alias)
            else:
                record.pop(alias, None)

        if "id" in record and record["id"] is not None:
            record["id"] = str(record["id"])

        raw_cr = record.get("challenge_rating")
        cr = parse_challenge_rating(raw_cr)
        if raw_cr is not None and cr is None:
            logger.warning(
                "Malformed challenge rating, treating XP as 0",
                creature=record.get("name"),
                challenge_rating=raw_cr,
            )
        record["challenge_rating"] = cr

        raw_xp = record.get("xp_value")
        xp: int | None = None
        if raw_xp is not None and not isinstance(raw_xp, bool):
            try:
                xp = int(float(raw_xp))
            except (TypeError, ValueError, OverflowError):
                xp = None
            if xp is None or xp < 0:
                logger.warning(
                    "Malformed XP value, deriving from challenge rating",
                    creature=record.get("name"),
                    xp_value=raw_xp,
                )
                xp = None
        # An explicit 0 falls back to the CR table, as catalogs use 0 for "unset"
        if not xp:
            xp = xp_for_cr(cr) if cr is not None else 0
        record["xp_value"] = xp

        for field in ("creature_type", "alignment", "size"):
            value = record.get(field)
            record[field] = "" if value is None else str(value).strip()

        return record

    @field_validator("environment", mode="before")
    @classmethod
    def coerce_environment(cls, value: Any) -> tuple[str, ...]:
        """Accept a single string, a comma list or any iterable of tags."""
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        return tuple(tag.strip() for tag in (str(v) for v in value if v is not None) if tag.strip())

    @property
    def has_xp(self) -> bool:
        """Whether this creature can take part in XP-based scoring."""
        return self.xp_value > 0

    def in_environment(self, environment: str) -> bool:
        """Case-insensitive, trimmed membership test for an environment tag."""
        wanted = normalize_label(environment)
        return any(normalize_label(tag) == wanted for tag in self.environment)


# =============================================================================
# Filter Criteria & Encounter Parameters
# =============================================================================


class FilterCriteria(BaseModel):
    """Constraints for narrowing a creature pool.

    Every string constraint is optional; None, blank and "Any" all mean
    no constraint.

    Attributes:
        min_cr: Lowest allowed CR (inclusive).
        max_cr: Highest allowed CR (inclusive).
        environment: Required environment tag.
        alignment: Required alignment.
        creature_type: Required creature type.
        size: Required size.
        preferred_cr_range: CR range to narrow to when that keeps candidates.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_cr: float = Field(default=constants.MIN_CR, ge=0, le=constants.MAX_CR)
    max_cr: float = Field(default=constants.MAX_CR, ge=0, le=constants.MAX_CR)
    environment: str | None = None
    alignment: str | None = None
    creature_type: str | None = None
    size: str | None = None
    preferred_cr_range: tuple[float, float] | None = None

    @field_validator("min_cr", "max_cr", mode="before")
    @classmethod
    def parse_cr_bound(cls, value: Any) -> Any:
        """Allow fractional strings such as '1/4' for CR bounds."""
        if isinstance(value, str):
            parsed = parse_challenge_rating(value)
            return value if parsed is None else parsed
        return value

    @model_validator(mode="after")
    def validate_ranges(self) -> "FilterCriteria":
        """Reject inverted CR ranges."""
        if self.min_cr > self.max_cr:
            msg = f"min_cr ({self.min_cr}) must not exceed max_cr ({self.max_cr})"
            raise ValueError(msg)
        if self.preferred_cr_range is not None:
            low, high = self.preferred_cr_range
            if low > high:
                msg = f"preferred_cr_range lower bound ({low}) exceeds upper bound ({high})"
                raise ValueError(msg)
        return self

    def active_filters(self) -> dict[str, Any]:
        """Constraints that actually narrow the pool, for diagnostics."""
        active: dict[str, Any] = {"min_cr": self.min_cr, "max_cr": self.max_cr}
        for name in ("environment", "alignment", "creature_type", "size"):
            value = getattr(self, name)
            if not is_unconstrained(value):
                active[name] = value.strip()
        if self.preferred_cr_range is not None:
            active["preferred_cr_range"] = self.preferred_cr_range
        return active

    def with_any_environment(self) -> "FilterCriteria":
        """Copy of these criteria with the environment constraint removed."""
        return self.model_copy(update={"environment": constants.ANY_FILTER})


class EncounterParameters(FilterCriteria):
    """A caller's encounter request.

    Attributes:
        xp_threshold: Target XP budget.
        max_monsters: Maximum number of creatures in the encounter.
    """

    xp_threshold: int = Field(gt=0, description="Target XP")
    max_monsters: int = Field(default=constants.DEFAULT_MAX_MONSTERS, ge=1, description="Creature cap")

    @classmethod
    def from_request(cls, data: dict[str, Any]) -> "EncounterParameters":
        """Build parameters from untrusted request data.

        Accepts the camelCase keys used by web clients (``xpThreshold``,
        ``maxMonsters``, ``minCR``, ``maxCR``, ``creatureType``).

        Raises:
            ValidationError: If the data does not describe a valid request.
        """
        aliases = {
            "xpThreshold": "xp_threshold",
            "maxMonsters": "max_monsters",
            "minCR": "min_cr",
            "maxCR": "max_cr",
            "creatureType": "creature_type",
            "preferredCRRange": "preferred_cr_range",
        }
        payload = {aliases.get(key, key): value for key, value in data.items()}
        try:
            return cls.model_validate(payload)
        except pydantic.ValidationError as exc:
            first = exc.errors()[0]
            field_name = ".".join(str(part) for part in first.get("loc", ())) or None
            raise ValidationError(
                f"Invalid encounter parameters: {first.get('msg')}",
                field_name=field_name,
                invalid_value=first.get("input"),
                details={"error_count": exc.error_count()},
            ) from exc

    @property
    def criteria(self) -> FilterCriteria:
        """The filtering part of this request."""
        return FilterCriteria.model_validate(
            self.model_dump(include=set(FilterCriteria.model_fields))
        )


# =============================================================================
# Selection
# =============================================================================


class SelectionEntry(BaseModel):
    """One creature and how many of it an encounter uses."""

    model_config = ConfigDict(frozen=True)

    creature: Creature
    quantity: int = Field(default=1, ge=1)

    @property
    def total_xp(self) -> int:
        """Base XP contributed by this entry."""
        return self.creature.xp_value * self.quantity


EncounterSelection = tuple[SelectionEntry, ...]
"""Ordered (creature, quantity) pairs chosen by a selection strategy."""


__all__ = [
    "Creature",
    "FilterCriteria",
    "EncounterParameters",
    "SelectionEntry",
    "EncounterSelection",
    "normalize_label",
    "is_unconstrained",
]
