"""Remote catalog adapters."""

from summary_player.infrastructure.catalog.http_catalog_client import HttpCatalogClient

__all__ = [
    "HttpCatalogClient",
]
