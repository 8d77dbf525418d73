"""Translate catalog errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException

from franchise_mapper.services.errors import (
    CatalogError,
    EmptyResultError,
    NotFoundError,
    RateLimitedError,
    UpstreamError,
)


def to_http_exception(exc: CatalogError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc) or "Title not found")
    if isinstance(exc, EmptyResultError):
        return HTTPException(status_code=422, detail=str(exc) or "No trackable related entries")
    if isinstance(exc, RateLimitedError):
        headers = None
        if exc.retry_after is not None:
            headers = {"Retry-After": str(int(exc.retry_after))}
        return HTTPException(status_code=429, detail="Catalog rate limit exceeded, retry later", headers=headers)
    if isinstance(exc, UpstreamError):
        return HTTPException(status_code=502, detail=f"Catalog API error: {exc}")
    return HTTPException(status_code=500, detail="Catalog failure")
