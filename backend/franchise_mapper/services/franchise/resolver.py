"""Franchise resolution: search → root climb → crawl → face selection."""

from __future__ import annotations

import logging
import os

from franchise_mapper.models.catalog_models import FranchiseSettings
from franchise_mapper.models.franchise_models import Franchise, FranchiseResponse
from franchise_mapper.services.catalog.base import BaseCatalogGateway
from franchise_mapper.services.errors import EmptyResultError, NotFoundError
from franchise_mapper.services.franchise.cache import FranchiseCache
from franchise_mapper.services.franchise.crawler import crawl
from franchise_mapper.services.franchise.face_selector import select_face
from franchise_mapper.services.franchise.root_resolver import resolve_root

logger = logging.getLogger(__name__)


def _settings_from_env() -> FranchiseSettings:
    return FranchiseSettings(
        max_hops=int(os.environ.get("FRANCHISE_MAX_HOPS", "5")),
        max_rounds=int(os.environ.get("FRANCHISE_MAX_ROUNDS", "10")),
        batch_size=int(os.environ.get("FRANCHISE_BATCH_SIZE", "50")),
        cache_ttl=float(os.environ.get("FRANCHISE_CACHE_TTL", "86400")),
    )


_settings = _settings_from_env()
_cache = FranchiseCache(ttl=_settings.cache_ttl)


def get_settings() -> FranchiseSettings:
    return _settings


def get_cache() -> FranchiseCache:
    return _cache


async def _start_id(gateway: BaseCatalogGateway, query: int | str) -> int:
    if isinstance(query, int):
        return query
    term = query.strip()
    if not term:
        raise NotFoundError("Empty search term")
    media_id = await gateway.search_id(term)
    if media_id is None:
        raise NotFoundError(f"No anime matches {term!r}")
    return media_id


async def resolve_franchise(
    gateway: BaseCatalogGateway,
    query: int | str,
    settings: FranchiseSettings | None = None,
) -> FranchiseResponse:
    """Resolve a start id or search term to its full franchise.

    Raises NotFoundError when nothing resolves, EmptyResultError when the
    crawl keeps no node, and lets RateLimitedError/UpstreamError propagate.
    Nothing is returned until the crawl has completed.
    """
    settings = settings if settings is not None else _settings
    start_id = await _start_id(gateway, query)

    root = await resolve_root(gateway, start_id, max_hops=settings.max_hops)
    result = await crawl(
        gateway,
        root.root_id,
        max_rounds=settings.max_rounds,
        batch_size=settings.batch_size,
    )
    if not result.nodes:
        raise EmptyResultError(f"No trackable entries related to {query!r}")

    face = select_face(result.nodes.values())
    franchise = Franchise(id=face.id, title=face.title, cover=face.cover, nodes=result.nodes)
    logger.info(
        "Resolved %r: root %d, face %d (%s), %d nodes",
        query, root.root_id, face.id, face.title.best(), len(result.nodes),
    )
    return FranchiseResponse(
        franchise=franchise,
        root_id=root.root_id,
        hops=root.hops,
        rounds=result.rounds,
        truncated=root.truncated or result.truncated,
    )


async def get_or_resolve_franchise(
    gateway: BaseCatalogGateway,
    query: int | str,
    refresh: bool = False,
    cache: FranchiseCache | None = None,
    settings: FranchiseSettings | None = None,
) -> FranchiseResponse:
    """Serve a fresh cached franchise, or crawl and publish a new one."""
    cache = cache if cache is not None else _cache
    if not refresh:
        cached = cache.lookup(query)
        if cached is not None:
            return cached.model_copy(update={"cached": True})

    response = await resolve_franchise(gateway, query, settings=settings)
    cache.put(query, response)
    return response
