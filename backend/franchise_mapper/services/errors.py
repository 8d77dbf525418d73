"""Error kinds surfaced by the catalog gateway and franchise resolution."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog and franchise failures."""


class NotFoundError(CatalogError):
    """A search term or id resolves to no catalog record."""


class EmptyResultError(CatalogError):
    """A crawl completed but every discovered node was filtered away."""


class RateLimitedError(CatalogError):
    """The upstream catalog throttled the request (HTTP 429)."""

    def __init__(self, message: str = "Catalog rate limit exceeded", retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamError(CatalogError):
    """Any other non-success response or transport failure from the catalog."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
