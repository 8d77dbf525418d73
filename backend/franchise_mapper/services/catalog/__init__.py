"""Catalog gateway: AniList access with retry policy and pacing."""

from franchise_mapper.services.catalog.base import MAX_BATCH_SIZE, BaseCatalogGateway
from franchise_mapper.services.catalog.service import get_gateway, set_gateway

__all__ = [
    "MAX_BATCH_SIZE",
    "BaseCatalogGateway",
    "get_gateway",
    "set_gateway",
]
