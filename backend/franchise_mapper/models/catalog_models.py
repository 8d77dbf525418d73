"""Configuration models for the catalog gateway and franchise crawler."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RetryPolicy(BaseModel):
    """Retry/backoff policy applied by the gateway, never by the crawl loop."""

    max_retries: int = Field(default=2, ge=0)
    backoff_seconds: float = Field(default=5.0, ge=0)  # linear: (attempt + 1) * backoff
    max_wait_seconds: float = Field(default=60.0, ge=0)
    retry_statuses: frozenset[int] = frozenset({429, 500, 502, 503})


class CatalogConfig(BaseModel):
    url: str = "https://graphql.anilist.co"
    timeout: float = 30.0
    min_interval: float = 0.0  # seconds between outbound requests
    retry: RetryPolicy = RetryPolicy()


class FranchiseSettings(BaseModel):
    max_hops: int = Field(default=5, ge=1)
    max_rounds: int = Field(default=10, ge=1)
    batch_size: int = Field(default=50, ge=1, le=50)
    cache_ttl: float = 86400.0
