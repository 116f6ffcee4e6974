"""Custom exception hierarchy for Encounter Forge.

All exceptions inherit from EncounterForgeError so callers can handle
every failure of the library at one boundary while still seeing the
domain-specific context attached to each error.

Example:
    >>> from encounter_forge.core.exceptions import CatalogLoadError
    >>> raise CatalogLoadError("Catalog file is not valid JSON", source="creatures.json")
"""

from __future__ import annotations

from typing import Any


class EncounterForgeError(Exception):
    """Base exception for all Encounter Forge errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Generation Domain Exceptions
# =============================================================================


class GenerationError(EncounterForgeError):
    """Base exception for encounter generation failures."""

    def __init__(
        self,
        message: str,
        *,
        filters: dict[str, Any] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize generation error with the active filters.

        Args:
            message: Human-readable error description.
            filters: The filter criteria that were active when generation failed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = dict(details or {})
        if filters:
            combined_details["filters"] = filters
        super().__init__(message, details=combined_details)


class NoCandidatesError(GenerationError):
    """Raised when filtering leaves no creatures to choose from.

    This is recoverable: the generator widens the filter criteria and
    tries again before giving up.
    """

    def __init__(
        self,
        message: str,
        *,
        pool_size: int | None = None,
        filters: dict[str, Any] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize no-candidates error with pool context.

        Args:
            message: Human-readable error description.
            pool_size: Number of creatures in the unfiltered pool.
            filters: The filter criteria that emptied the pool.
            details: Optional dictionary containing additional error context.
        """
        combined_details = dict(details or {})
        if pool_size is not None:
            combined_details["pool_size"] = pool_size
        super().__init__(message, filters=filters, details=combined_details)


class NoViableSelectionError(GenerationError):
    """Raised when every selection strategy and fallback has been exhausted."""

    def __init__(
        self,
        message: str,
        *,
        candidates_considered: int | None = None,
        attempts_made: int | None = None,
        available_environments: list[str] | None = None,
        filters: dict[str, Any] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize terminal generation error with search context.

        Args:
            message: Human-readable error description.
            candidates_considered: Creatures that survived filtering.
            attempts_made: Number of strategy attempts made.
            available_environments: Environments the catalog does offer,
                listed when an environment filter was active.
            filters: The filter criteria of the last attempt.
            details: Optional dictionary containing additional error context.
        """
        combined_details = dict(details or {})
        if candidates_considered is not None:
            combined_details["candidates_considered"] = candidates_considered
        if attempts_made is not None:
            combined_details["attempts_made"] = attempts_made
        if available_environments is not None:
            combined_details["available_environments"] = available_environments
        super().__init__(message, filters=filters, details=combined_details)


# =============================================================================
# Catalog Domain Exceptions
# =============================================================================


class CatalogError(EncounterForgeError):
    """Base exception for creature and magic item catalog errors."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize catalog error with source context.

        Args:
            message: Human-readable error description.
            source: File path or database id the catalog came from.
            details: Optional dictionary containing additional error context.
        """
        combined_details = dict(details or {})
        if source:
            combined_details["source"] = source
        super().__init__(message, details=combined_details)


class CatalogLoadError(CatalogError):
    """Raised when a local catalog file cannot be read or parsed."""


class CatalogFetchError(CatalogError):
    """Raised when a remote catalog request fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize fetch error with HTTP context.

        Args:
            message: Human-readable error description.
            status_code: HTTP status returned by the remote API.
            source: Database or page id being fetched.
            details: Optional dictionary containing additional error context.
        """
        combined_details = dict(details or {})
        if status_code is not None:
            combined_details["status_code"] = status_code
        super().__init__(message, source=source, details=combined_details)


class CatalogRateLimitError(CatalogFetchError):
    """Raised when the remote API rate limit is exceeded.

    Retried automatically by the Notion client; surfaces only once the
    retry budget is spent.
    """

    def __init__(
        self,
        message: str,
        *,
        retry_after_seconds: float | None = None,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = dict(details or {})
        if retry_after_seconds is not None:
            combined_details["retry_after_seconds"] = retry_after_seconds
        super().__init__(message, status_code=429, source=source, details=combined_details)


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(EncounterForgeError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = dict(details or {})
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(EncounterForgeError):
    """Raised when caller-supplied data fails validation.

    Covers encounter parameters, party levels and other untrusted input.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = dict(details or {})
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


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
]
