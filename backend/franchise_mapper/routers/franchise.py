"""Franchise resolution and timeline endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from franchise_mapper.models.franchise_models import (
    Franchise,
    FranchiseRequest,
    FranchiseResponse,
    SortMode,
    TimelineRequest,
    TimelineResponse,
    ViewPolicy,
)
from franchise_mapper.rate_limit import limiter
from franchise_mapper.routers.errors import to_http_exception
from franchise_mapper.services.catalog import BaseCatalogGateway, get_gateway
from franchise_mapper.services.errors import CatalogError
from franchise_mapper.services.franchise import build_hierarchy
from franchise_mapper.services.franchise.resolver import get_cache, get_or_resolve_franchise

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/franchise", tags=["franchise"])


@router.post("/resolve", response_model=FranchiseResponse)
@limiter.limit("20/minute")
async def resolve(
    request: Request,
    body: FranchiseRequest,
    gateway: BaseCatalogGateway = Depends(get_gateway),
) -> FranchiseResponse:
    """Crawl (or serve from cache) the franchise a title belongs to."""
    try:
        return await get_or_resolve_franchise(gateway, body.query, refresh=body.refresh)
    except CatalogError as exc:
        logger.info("Franchise resolution for %r failed: %s", body.query, exc)
        raise to_http_exception(exc)


@router.post("/timeline", response_model=TimelineResponse)
async def timeline(body: TimelineRequest) -> TimelineResponse:
    """Build the era timeline for an explicit node set."""
    try:
        eras = build_hierarchy(body.nodes, body.policy)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TimelineResponse(eras=eras, total_nodes=len(body.nodes))


@router.get("/{franchise_id}", response_model=Franchise)
async def get_franchise(franchise_id: int) -> Franchise:
    """Return a cached franchise by its face id."""
    cached = get_cache().get(franchise_id)
    if cached is None:
        raise HTTPException(status_code=404, detail="Franchise not cached")
    return cached.franchise


@router.get("/{franchise_id}/timeline", response_model=TimelineResponse)
async def get_franchise_timeline(
    franchise_id: int,
    sort: SortMode = SortMode.YEAR,
    formats: list[str] | None = Query(default=None),
    hide: list[int] = Query(default=[]),
) -> TimelineResponse:
    """Era timeline of a cached franchise under the given view policy."""
    cached = get_cache().get(franchise_id)
    if cached is None:
        raise HTTPException(status_code=404, detail="Franchise not cached")
    nodes = list(cached.franchise.nodes.values())
    policy = ViewPolicy(sort=sort, formats=formats, hidden_ids=hide)
    return TimelineResponse(
        franchise_id=franchise_id,
        eras=build_hierarchy(nodes, policy),
        total_nodes=len(nodes),
    )
