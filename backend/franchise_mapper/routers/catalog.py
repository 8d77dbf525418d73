"""Catalog passthrough endpoints: live search and the detail view."""

from fastapi import APIRouter, Depends, HTTPException, Request

from franchise_mapper.models.media_models import MediaDetail, SearchSuggestion
from franchise_mapper.rate_limit import limiter
from franchise_mapper.routers.errors import to_http_exception
from franchise_mapper.services.catalog import BaseCatalogGateway, get_gateway
from franchise_mapper.services.errors import CatalogError

router = APIRouter(prefix="/api/catalog", tags=["catalog"])

_MIN_SEARCH_LENGTH = 3


@router.get("/search", response_model=list[SearchSuggestion])
@limiter.limit("60/minute")
async def search(
    request: Request,
    q: str = "",
    gateway: BaseCatalogGateway = Depends(get_gateway),
) -> list[SearchSuggestion]:
    term = q.strip()
    if len(term) < _MIN_SEARCH_LENGTH:
        return []
    try:
        return await gateway.search_suggestions(term)
    except CatalogError as exc:
        raise to_http_exception(exc)


@router.get("/media/{media_id}", response_model=MediaDetail)
@limiter.limit("60/minute")
async def media_detail(
    request: Request,
    media_id: int,
    gateway: BaseCatalogGateway = Depends(get_gateway),
) -> MediaDetail:
    try:
        detail = await gateway.fetch_details(media_id)
    except CatalogError as exc:
        raise to_http_exception(exc)
    if detail is None:
        raise HTTPException(status_code=404, detail="Media not found")
    return detail
