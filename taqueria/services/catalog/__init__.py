"""
Catalog Service Factory

Returns the in-memory (seeded) or HTTP catalog based on ENV_MODE.
"""

import logging
from functools import lru_cache

from taqueria.core.config import get_settings
from taqueria.services.catalog.base import BaseCatalogService
from taqueria.services.catalog.http import HttpCatalogService
from taqueria.services.catalog.memory import InMemoryCatalogService

logger = logging.getLogger(__name__)


@lru_cache()
def get_catalog_service() -> BaseCatalogService:
    """Get the configured catalog service."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Catalog Service: Using InMemoryCatalogService (development mode)")
        return InMemoryCatalogService.with_sample_menu(
            restaurant_name=settings.restaurant_name,
            default_estimated_minutes=settings.default_estimated_minutes,
        )
    else:
        logger.info(f"Catalog Service: Using HttpCatalogService ({settings.env_mode.value} mode)")
        return HttpCatalogService(
            base_url=settings.catalog_base_url,
            owner_key=settings.owner_api_key,
            timeout=settings.catalog_timeout_seconds,
        )


def reset_catalog_service() -> None:
    """Clear the cached service instance."""
    get_catalog_service.cache_clear()


__all__ = [
    "get_catalog_service",
    "reset_catalog_service",
    "BaseCatalogService",
    "HttpCatalogService",
    "InMemoryCatalogService",
]
