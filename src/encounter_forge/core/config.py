"""Configuration management for Encounter Forge.

Two layers live here:

* ``Settings`` and its sections are pydantic-settings classes read from
  environment variables and ``.env`` files. They are cached by
  :func:`get_settings` and used only at the application edge (CLI, catalog
  clients).
* ``GenerationConfig`` and ``TreasureConfig`` are plain frozen values that
  the pure generation functions take as explicit arguments. Nothing in the
  engine reads global settings.

Example:
    >>> from encounter_forge.core.config import get_settings
    >>> config = get_settings().generation.to_config()
    >>> config.single_over_target_penalty
    0.7

Environment Variables:
    ENCOUNTER_FORGE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    ENCOUNTER_FORGE_NOTION_API_KEY: Notion integration token
    ENCOUNTER_FORGE_NOTION_CREATURES_DATABASE_ID: Creature catalog database
    ENCOUNTER_FORGE_NOTION_MAGIC_ITEMS_DATABASE_ID: Magic item catalog database
    ENCOUNTER_FORGE_NOTION_ENVIRONMENTS_DATABASE_ID: Environment list database
    ENCOUNTER_FORGE_GENERATION_MAX_MONSTERS: Default monster cap
    ENCOUNTER_FORGE_TREASURE_DROP_CHANCE: Probability of each treasure drop
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from encounter_forge.core import constants
from encounter_forge.core.exceptions import ConfigurationError


# =============================================================================
# Explicit Configuration Values
# =============================================================================


class GenerationConfig(BaseModel):
    """Tuning values for encounter selection and difficulty rating.

    Passed explicitly into the generator so concurrent generations with
    different tuning never interfere.

    Attributes:
        single_over_target_penalty: Score factor for a lone creature above target.
        multiple_band_low: Lower bound of the identical-group acceptance band.
        multiple_band_high: Upper bound of the identical-group acceptance band.
        mixed_stop_fraction: Cumulative XP fraction that ends mixed selection.
        mixed_diversity_bonus: Score bonus for a not-yet-selected creature type.
        easy_threshold: Adjusted/target ratio at or below which a fight is Easy.
        medium_threshold: Ratio at or below which a fight is Medium.
        hard_threshold: Ratio at or below which a fight is Hard.
        relax_environment: Retry with environment "Any" when the strict run fails.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    single_over_target_penalty: float = Field(
        default=constants.SINGLE_OVER_TARGET_PENALTY, gt=0, le=1
    )
    multiple_band_low: float = Field(default=constants.MULTIPLE_BAND_LOW, gt=0)
    multiple_band_high: float = Field(default=constants.MULTIPLE_BAND_HIGH, gt=0)
    mixed_stop_fraction: float = Field(default=constants.MIXED_STOP_FRACTION, gt=0, le=1)
    mixed_diversity_bonus: float = Field(default=constants.MIXED_DIVERSITY_BONUS, ge=0)
    easy_threshold: float = Field(default=constants.EASY_THRESHOLD, gt=0)
    medium_threshold: float = Field(default=constants.MEDIUM_THRESHOLD, gt=0)
    hard_threshold: float = Field(default=constants.HARD_THRESHOLD, gt=0)
    relax_environment: bool = True

    @model_validator(mode="after")
    def validate_ordering(self) -> "GenerationConfig":
        """Ensure the band and the difficulty thresholds are ordered.

        Raises:
            ConfigurationError: If a lower bound is not below its upper bound.
        """
        if self.multiple_band_low >= self.multiple_band_high:
            raise ConfigurationError(
                f"multiple_band_low ({self.multiple_band_low}) must be less than "
                f"multiple_band_high ({self.multiple_band_high})",
                config_key="multiple_band_low",
            )
        if not self.easy_threshold < self.medium_threshold < self.hard_threshold:
            raise ConfigurationError(
                "Difficulty thresholds must satisfy easy < medium < hard",
                config_key="easy_threshold",
                details={
                    "easy": self.easy_threshold,
                    "medium": self.medium_threshold,
                    "hard": self.hard_threshold,
                },
            )
        return self


class TreasureConfig(BaseModel):
    """Tuning values for treasure generation.

    Attributes:
        drop_chance: Probability that each successive drop check succeeds.
        wondrous_weight_factor: Extra weight multiplier for wondrous items.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    drop_chance: float = Field(default=constants.TREASURE_DROP_CHANCE, ge=0, le=1)
    wondrous_weight_factor: float = Field(
        default=constants.WONDROUS_WEIGHT_FACTOR, gt=0, le=1
    )


# =============================================================================
# Environment Settings
# =============================================================================


class NotionSettings(BaseSettings):
    """Configuration for the Notion catalog source.

    Attributes:
        api_key: Notion integration token.
        creatures_database_id: Database holding the creature catalog.
        magic_items_database_id: Database holding the magic item catalog.
        environments_database_id: Database listing the known environments.
        api_url: Base URL of the Notion REST API.
        api_version: Value of the ``Notion-Version`` header.
        page_size: Page size for database queries (Notion caps it at 100).
        timeout_seconds: Per-request timeout.
        max_retries: Attempts for transient failures (429, 5xx, connection).
    """

    model_config = SettingsConfigDict(
        env_prefix="ENCOUNTER_FORGE_NOTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: SecretStr | None = Field(default=None, description="Notion integration token")
    creatures_database_id: str | None = Field(
        default=None,
        description="Creature catalog database id",
    )
    magic_items_database_id: str | None = Field(
        default=None,
        description="Magic item catalog database id",
    )
    environments_database_id: str | None = Field(
        default=None,
        description="Environment list database id",
    )
    api_url: str = Field(default="https://api.notion.com/v1", description="Notion API base URL")
    api_version: str = Field(default="2022-06-28", description="Notion-Version header")
    page_size: int = Field(default=100, ge=1, le=100, description="Query page size")
    timeout_seconds: float = Field(default=30.0, gt=0, le=300, description="Request timeout")
    max_retries: int = Field(default=3, ge=1, le=10, description="Attempts per request")

    @property
    def is_configured(self) -> bool:
        """Whether an API key is present."""
        return self.api_key is not None and bool(self.api_key.get_secret_value())


class GenerationSettings(BaseSettings):
    """Defaults for encounter requests and selection tuning.

    Attributes:
        max_monsters: Default monster cap when the caller gives none.
        min_cr: Default lower CR bound.
        max_cr: Default upper CR bound.
        single_over_target_penalty: See GenerationConfig.
        multiple_band_low: See GenerationConfig.
        multiple_band_high: See GenerationConfig.
        relax_environment: See GenerationConfig.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENCOUNTER_FORGE_GENERATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_monsters: int = Field(default=constants.DEFAULT_MAX_MONSTERS, ge=1, le=50)
    min_cr: float = Field(default=constants.MIN_CR, ge=0, le=30)
    max_cr: float = Field(default=constants.MAX_CR, ge=0, le=30)
    single_over_target_penalty: float = Field(
        default=constants.SINGLE_OVER_TARGET_PENALTY, gt=0, le=1
    )
    multiple_band_low: float = Field(default=constants.MULTIPLE_BAND_LOW, gt=0)
    multiple_band_high: float = Field(default=constants.MULTIPLE_BAND_HIGH, gt=0)
    relax_environment: bool = Field(default=True)

    @model_validator(mode="after")
    def validate_cr_range(self) -> "GenerationSettings":
        """Ensure the default CR range is not inverted.

        Raises:
            ConfigurationError: If min_cr > max_cr.
        """
        if self.min_cr > self.max_cr:
            raise ConfigurationError(
                f"min_cr ({self.min_cr}) must not exceed max_cr ({self.max_cr})",
                config_key="min_cr",
            )
        return self

    def to_config(self) -> GenerationConfig:
        """Build the explicit configuration value for the generator."""
        return GenerationConfig(
            single_over_target_penalty=self.single_over_target_penalty,
            multiple_band_low=self.multiple_band_low,
            multiple_band_high=self.multiple_band_high,
            relax_environment=self.relax_environment,
        )


class TreasureSettings(BaseSettings):
    """Defaults for treasure generation.

    Attributes:
        drop_chance: Probability of each successive treasure drop.
        seed: Optional seed for reproducible loot rolls.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENCOUNTER_FORGE_TREASURE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    drop_chance: float = Field(default=constants.TREASURE_DROP_CHANCE, ge=0, le=1)
    seed: int | None = Field(default=None, description="Random seed for loot rolls")

    def to_config(self) -> TreasureConfig:
        """Build the explicit configuration value for the treasure generator."""
        return TreasureConfig(drop_chance=self.drop_chance)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        log_level: Application logging level.
        log_json: Render logs as JSON.
        notion: Notion catalog settings.
        generation: Encounter generation defaults.
        treasure: Treasure generation defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENCOUNTER_FORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(default=False, description="Render logs as JSON")

    notion: NotionSettings = Field(default_factory=NotionSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    treasure: TreasureSettings = Field(default_factory=TreasureSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached application settings.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    Mostly useful in tests or after environment variables change.
    """
    get_settings.cache_clear()


__all__ = [
    "GenerationConfig",
    "TreasureConfig",
    "NotionSettings",
    "GenerationSettings",
    "TreasureSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
