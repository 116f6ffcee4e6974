"""Notion database catalog source.

Fetches creature, magic item and environment catalogs from Notion
databases over the REST API and maps page properties to catalog records
with a fixed, configurable property mapping.

Relation properties (challenge rating, environments, creature type,
rarity) are resolved to the title of the related page. Transient
failures (HTTP 429, 5xx, connection errors, timeouts) are retried with
exponential backoff; anything else raises CatalogFetchError.

Example:
    >>> with NotionCatalogClient(get_settings().notion) as client:
    ...     creatures = client.fetch_creatures()
"""

from __future__ import annotations

from typing import Any

import requests
from pydantic import BaseModel, ConfigDict
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from encounter_forge.catalog.loader import parse_records
from encounter_forge.core.config import NotionSettings
from encounter_forge.core.exceptions import (
    CatalogFetchError,
    CatalogRateLimitError,
    ConfigurationError,
)
from encounter_forge.core.logging import get_logger
from encounter_forge.models.creature import Creature
from encounter_forge.models.treasure import MagicItem


logger = get_logger(__name__)


# =============================================================================
# Property Mapping
# =============================================================================


class CreatureProperties(BaseModel):
    """Names of the Notion properties holding creature fields."""

    model_config = ConfigDict(frozen=True)

    name: str = "Name"
    challenge_rating: str = "Challenge Rating"
    xp_value: str = "XP"
    creature_type: str = "Creature Type"
    alignment: str = "Alignment"
    size: str = "Size"
    environment: str = "Environment"


class MagicItemProperties(BaseModel):
    """Names of the Notion properties holding magic item fields."""

    model_config = ConfigDict(frozen=True)

    name: str = "Name"
    rarity: str = "Rarity"
    value: str = "Value"
    wondrous: str = "Wondrous"
    consumable: str = "Consumable"
    attunement: str = "Attunement"
    item_url: str = "Link"


def _rich_text(fragments: list[dict[str, Any]] | None) -> str:
    return "".join(fragment.get("plain_text", "") for fragment in fragments or []).strip()


def property_value(prop: dict[str, Any] | None) -> Any:
    """Extract the plain value of a Notion property.

    Returns text for title, rich text and select properties, a list of
    names for multi-select, a list of page ids for relations, and the raw
    value for number, checkbox and url properties. Unknown types give None.
    """
    if not prop:
        return None
    kind = prop.get("type")
    value = prop.get(kind) if kind else None
    if kind in ("title", "rich_text"):
        return _rich_text(value)
    if kind in ("select", "status"):
        return value.get("name") if value else None
    if kind == "multi_select":
        return [option.get("name", "") for option in value or []]
    if kind == "relation":
        return [relation["id"] for relation in value or [] if relation.get("id")]
    if kind in ("number", "checkbox", "url"):
        return value
    if kind == "formula" and value:
        return value.get(value.get("type"))
    return None


def page_image_url(page: dict[str, Any]) -> str | None:
    """URL of a page's icon or, failing that, its cover image."""
    for key in ("icon", "cover"):
        media = page.get(key) or {}
        kind = media.get("type")
        if kind in ("external", "file"):
            url = (media.get(kind) or {}).get("url")
            if url:
                return url
    return None


# =============================================================================
# Client
# =============================================================================


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, requests.ConnectionError | requests.Timeout | CatalogRateLimitError):
        return True
    if isinstance(exc, CatalogFetchError):
        status = exc.details.get("status_code")
        return status is not None and status >= 500
    return False


class NotionCatalogClient:
    """Reads creature, magic item and environment catalogs from Notion.

    Attributes:
        settings: Connection settings.
        creature_properties: Property names for creature pages.
        item_properties: Property names for magic item pages.
    """

    def __init__(
        self,
        settings: NotionSettings | None = None,
        *,
        session: requests.Session | None = None,
        creature_properties: CreatureProperties | None = None,
        item_properties: MagicItemProperties | None = None,
        backoff: float = 1.0,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Notion settings; read from the environment if omitted.
            session: HTTP session to use; a new one if omitted.
            creature_properties: Creature property mapping.
            item_properties: Magic item property mapping.
            backoff: Multiplier for the exponential retry wait, in seconds.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        self.settings = settings or NotionSettings()
        if not self.settings.is_configured:
            raise ConfigurationError(
                "Notion API key is not configured",
                config_key="ENCOUNTER_FORGE_NOTION_API_KEY",
            )
        self.creature_properties = creature_properties or CreatureProperties()
        self.item_properties = item_properties or MagicItemProperties()
        self.backoff = backoff
        self._titles: dict[str, str] = {}

        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {self.settings.api_key.get_secret_value()}",
            "Notion-Version": self.settings.api_version,
            "Content-Type": "application/json",
        })

    def __enter__(self) -> "NotionCatalogClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send one API request, retrying transient failures.

        Raises:
            CatalogRateLimitError: If still rate limited after all retries.
            CatalogFetchError: For any other failed request.
        """
        url = f"{self.settings.api_url.rstrip('/')}/{path.lstrip('/')}"

        @retry(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self.settings.max_retries),
            wait=wait_exponential(multiplier=self.backoff, max=10),
            reraise=True,
        )
        def _call() -> dict[str, Any]:
            response = self._session.request(
                method,
                url,
                json=payload,
                timeout=self.settings.timeout_seconds,
            )
            if response.status_code == 429:
                retry_after = response.headers.get("Retry-After")
                logger.warning("Notion rate limit hit, retrying", path=path, retry_after=retry_after)
                raise CatalogRateLimitError(
                    "Notion API rate limit exceeded",
                    retry_after_seconds=float(retry_after) if retry_after else None,
                    source=path,
                )
            if response.status_code >= 400:
                raise CatalogFetchError(
                    f"Notion API request failed: {response.text[:200]}",
                    status_code=response.status_code,
                    source=path,
                )
            return response.json()

        try:
            return _call()
        except requests.JSONDecodeError as exc:
            raise CatalogFetchError(
                "Notion API returned invalid JSON",
                source=path,
            ) from exc
        except requests.RequestException as exc:
            raise CatalogFetchError(
                f"Failed to reach Notion API: {exc}",
                source=path,
            ) from exc

    def query_database(self, database_id: str) -> list[dict[str, Any]]:
        """Fetch every page of a database, following pagination cursors."""
        pages: list[dict[str, Any]] = []
        cursor: str | None = None
        while True:
            payload: dict[str, Any] = {"page_size": self.settings.page_size}
            if cursor:
                payload["start_cursor"] = cursor
            data = self._request("POST", f"databases/{database_id}/query", payload)
            pages.extend(data.get("results", []))
            logger.debug("Fetched database page", database_id=database_id, total=len(pages))
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break
        logger.info("Database fetched", database_id=database_id, pages=len(pages))
        return pages

    def page_title(self, page_id: str) -> str:
        """Title of a page, fetched once and then cached."""
        if page_id not in self._titles:
            page = self._request("GET", f"pages/{page_id}")
            title = ""
            for prop in (page.get("properties") or {}).values():
                if prop.get("type") == "title":
                    title = _rich_text(prop.get("title"))
                    break
            self._titles[page_id] = title
        return self._titles[page_id]

    def _text(self, prop: dict[str, Any] | None) -> Any:
        """Single value of a property; a relation resolves to its first title."""
        value = property_value(prop)
        if prop and prop.get("type") == "relation":
            return self.page_title(value[0]) if value else None
        if isinstance(value, list):
            return value[0] if value else None
        return value

    def _names(self, prop: dict[str, Any] | None) -> list[str]:
        """List value of a property; relations resolve to titles."""
        value = property_value(prop)
        if prop and prop.get("type") == "relation":
            return [self.page_title(page_id) for page_id in value]
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [value]
        return []

    # -------------------------------------------------------------------------
    # Catalogs
    # -------------------------------------------------------------------------

    def creature_record(self, page: dict[str, Any]) -> dict[str, Any]:
        """Map a creature page to a catalog record."""
        props = page.get("properties") or {}
        mapping = self.creature_properties
        return {
            "id": page.get("id"),
            "name": self._text(props.get(mapping.name)),
            "challenge_rating": self._text(props.get(mapping.challenge_rating)),
            "xp_value": self._text(props.get(mapping.xp_value)),
            "creature_type": self._text(props.get(mapping.creature_type)),
            "alignment": self._text(props.get(mapping.alignment)),
            "size": self._text(props.get(mapping.size)),
            "environment": self._names(props.get(mapping.environment)),
        }

    def item_record(self, page: dict[str, Any]) -> dict[str, Any]:
        """Map a magic item page to a catalog record."""
        props = page.get("properties") or {}
        mapping = self.item_properties
        return {
            "id": page.get("id"),
            "name": self._text(props.get(mapping.name)),
            "rarity": self._text(props.get(mapping.rarity)),
            "value": self._text(props.get(mapping.value)),
            "wondrous": self._text(props.get(mapping.wondrous)),
            "consumable": self._text(props.get(mapping.consumable)),
            "attunement": self._text(props.get(mapping.attunement)),
            "item_url": self._text(props.get(mapping.item_url)) or page.get("url"),
            "image_url": page_image_url(page),
        }

    def fetch_creatures(self, database_id: str | None = None) -> list[Creature]:
        """Fetch and parse the creature catalog.

        Args:
            database_id: Database to read; defaults to the configured one.

        Raises:
            ConfigurationError: If no database id is given or configured.
            CatalogFetchError: If the API request fails.
        """
        database_id = database_id or self.settings.creatures_database_id
        if not database_id:
            raise ConfigurationError(
                "Creature database id is not configured",
                config_key="ENCOUNTER_FORGE_NOTION_CREATURES_DATABASE_ID",
            )
        records = [self.creature_record(page) for page in self.query_database(database_id)]
        return parse_records(records, Creature, source=f"notion:{database_id}")

    def fetch_magic_items(self, database_id: str | None = None) -> list[MagicItem]:
        """Fetch and parse the magic item catalog.

        Args:
            database_id: Database to read; defaults to the configured one.

        Raises:
            ConfigurationError: If no database id is given or configured.
            CatalogFetchError: If the API request fails.
        """
        database_id = database_id or self.settings.magic_items_database_id
        if not database_id:
            raise ConfigurationError(
                "Magic item database id is not configured",
                config_key="ENCOUNTER_FORGE_NOTION_MAGIC_ITEMS_DATABASE_ID",
            )
        records = [self.item_record(page) for page in self.query_database(database_id)]
        return parse_records(records, MagicItem, source=f"notion:{database_id}")

    def fetch_environments(self, database_id: str | None = None) -> list[str]:
        """Fetch the environment names listed in the environments database.

        Each page contributes the text of its title property. Blank titles
        and duplicates are skipped; names come back sorted.

        Raises:
            ConfigurationError: If no database id is given or configured.
            CatalogFetchError: If the API request fails.
        """
        database_id = database_id or self.settings.environments_database_id
        if not database_id:
            raise ConfigurationError(
                "Environments database id is not configured",
                config_key="ENCOUNTER_FORGE_NOTION_ENVIRONMENTS_DATABASE_ID",
            )
        names: set[str] = set()
        for page in self.query_database(database_id):
            for prop in (page.get("properties") or {}).values():
                if prop.get("type") == "title":
                    title = _rich_text(prop.get("title"))
                    if title:
                        names.add(title)
                    break
        return sorted(names, key=str.lower)


__all__ = [
    "CreatureProperties",
    "MagicItemProperties",
    "property_value",
    "page_image_url",
    "NotionCatalogClient",
]
