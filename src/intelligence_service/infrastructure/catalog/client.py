"""Client for the external flashlight catalog service.

The catalog is read-only from this service's point of view. A snapshot is
the full list of active items, paged in from ``GET /flashlights``.
"""

from typing import Any, Protocol

import httpx
import structlog
from pydantic import ValidationError

from intelligence_service.config import Settings
from intelligence_service.errors import UpstreamUnavailable
from intelligence_service.infrastructure.redis import CatalogSnapshotCache
from intelligence_service.models import CatalogItem

logger = structlog.get_logger()

# Hard stop so a misbehaving upstream cannot page forever
MAX_PAGES = 500


class CatalogSource(Protocol):
    """Anything that can produce the current catalog snapshot."""

    async def fetch_catalog(self) -> list[CatalogItem]: ...


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared HTTP client for the catalog API."""
    headers = {"Accept": "application/json"}
    if settings.catalog_api_key:
        headers["X-API-Key"] = settings.catalog_api_key
    return httpx.AsyncClient(
        base_url=settings.catalog_api_base_url,
        timeout=settings.catalog_api_timeout,
        headers=headers,
    )


class CatalogClient:
    """Fetches complete catalog snapshots, optionally through a Redis cache."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        page_size: int = 100,
        retries: int = 2,
        cache: CatalogSnapshotCache | None = None,
    ):
        self.http = http
        self.page_size = page_size
        self.retries = retries
        self.cache = cache

    async def fetch_catalog(self) -> list[CatalogItem]:
        """Return every catalog item, or raise UpstreamUnavailable.

        A partial snapshot is never returned.
        """
        raw_items = await self.cache.load() if self.cache else None
        from_cache = raw_items is not None
        if raw_items is None:
            raw_items = await self._fetch_all_pages()

        try:
            items = [CatalogItem.model_validate(raw) for raw in raw_items]
        except ValidationError as e:
            logger.error("Catalog payload rejected", error=str(e), from_cache=from_cache)
            raise UpstreamUnavailable("catalog returned malformed items") from e

        if self.cache and not from_cache:
            await self.cache.store(raw_items)

        logger.info("Catalog snapshot loaded", items=len(items), from_cache=from_cache)
        return items

    async def _fetch_all_pages(self) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        page = 1
        while page <= MAX_PAGES:
            payload = await self._get_page(page)
            batch = payload.get("items")
            if not isinstance(batch, list):
                raise UpstreamUnavailable("catalog page is missing its items list")
            items.extend(batch)

            total_pages = payload.get("total_pages")
            if not isinstance(total_pages, int):
                # A short page is unambiguous; a full one may have more behind it
                if len(batch) < self.page_size:
                    return items
                raise UpstreamUnavailable("catalog page is missing total_pages")
            if not batch or page >= total_pages:
                return items
            page += 1
        raise UpstreamUnavailable(f"catalog exceeded {MAX_PAGES} pages")

    async def _get_page(self, page: int) -> dict[str, Any]:
        params = {"page": page, "page_size": self.page_size}
        last_error = ""
        for attempt in range(self.retries + 1):
            try:
                response = await self.http.get("/flashlights", params=params)
            except httpx.HTTPError as e:
                last_error = str(e) or type(e).__name__
                logger.warning("Catalog request failed", page=page, attempt=attempt, error=last_error)
                continue

            if response.status_code >= 500:
                last_error = f"status {response.status_code}"
                logger.warning("Catalog server error", page=page, attempt=attempt, status=response.status_code)
                continue
            if response.status_code != 200:
                raise UpstreamUnavailable(f"catalog responded with status {response.status_code}")

            try:
                payload = response.json()
            except ValueError as e:
                raise UpstreamUnavailable("catalog returned invalid JSON") from e
            if not isinstance(payload, dict):
                raise UpstreamUnavailable("catalog returned an unexpected payload")
            return payload

        raise UpstreamUnavailable(f"catalog unreachable: {last_error}")
