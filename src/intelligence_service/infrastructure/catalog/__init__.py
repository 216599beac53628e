"""External catalog service integration."""

from intelligence_service.infrastructure.catalog.client import (
    CatalogClient,
    CatalogSource,
    build_http_client,
)

__all__ = [
    "CatalogClient",
    "CatalogSource",
    "build_http_client",
]
