"""Singleton catalog gateway configured from environment variables."""

from __future__ import annotations

import logging
import os
import threading

from franchise_mapper.models.catalog_models import CatalogConfig, RetryPolicy
from franchise_mapper.services.catalog.anilist_gateway import AniListGateway
from franchise_mapper.services.catalog.base import BaseCatalogGateway

logger = logging.getLogger(__name__)

# Module-level singleton
_gateway: BaseCatalogGateway | None = None
_lock = threading.Lock()


def _config_from_env() -> CatalogConfig:
    """Build CatalogConfig from environment variables."""
    return CatalogConfig(
        url=os.environ.get("ANILIST_URL", "https://graphql.anilist.co"),
        timeout=float(os.environ.get("CATALOG_TIMEOUT", "30")),
        min_interval=float(os.environ.get("CATALOG_MIN_INTERVAL", "0")),
        retry=RetryPolicy(
            max_retries=int(os.environ.get("CATALOG_MAX_RETRIES", "2")),
            backoff_seconds=float(os.environ.get("CATALOG_BACKOFF_SECONDS", "5")),
        ),
    )


def get_gateway() -> BaseCatalogGateway:
    """Return the process-wide gateway, creating it on first use."""
    global _gateway
    if _gateway is not None:
        return _gateway
    with _lock:
        if _gateway is None:
            config = _config_from_env()
            logger.info("Catalog gateway ready: %s (retries=%d)", config.url, config.retry.max_retries)
            _gateway = AniListGateway(config)
    return _gateway


def set_gateway(gateway: BaseCatalogGateway | None) -> None:
    """Replace (or with None, reset) the process-wide gateway."""
    global _gateway
    with _lock:
        _gateway = gateway
