"""Core module providing configuration, logging, constants and exceptions.

Exports:
    Exceptions:
        EncounterForgeError: Base exception for all library errors.
        NoCandidatesError / NoViableSelectionError: Generation failures.
        CatalogError and subclasses: Catalog loading and fetching failures.

    Configuration:
        Settings: Environment-driven application settings.
        GenerationConfig / TreasureConfig: Explicit tuning values for the engine.
        get_settings: Get the cached settings.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from encounter_forge.core.config import (
    GenerationConfig,
    GenerationSettings,
    NotionSettings,
    Settings,
    TreasureConfig,
    TreasureSettings,
    clear_settings_cache,
    get_settings,
)
from encounter_forge.core.exceptions import (
    CatalogError,
    CatalogFetchError,
    CatalogLoadError,
    CatalogRateLimitError,
    ConfigurationError,
    EncounterForgeError,
    GenerationError,
    NoCandidatesError,
    NoViableSelectionError,
    ValidationError,
)
from encounter_forge.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "EncounterForgeError",
    # Generation exceptions
    "GenerationError",
    "NoCandidatesError",
    "NoViableSelectionError",
    # Catalog exceptions
    "CatalogError",
    "CatalogLoadError",
    "CatalogFetchError",
    "CatalogRateLimitError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Configuration
    "Settings",
    "NotionSettings",
    "GenerationSettings",
    "TreasureSettings",
    "GenerationConfig",
    "TreasureConfig",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
