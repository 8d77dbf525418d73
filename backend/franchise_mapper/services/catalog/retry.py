"""Retry wrapper applying a RetryPolicy to gateway requests.

Throttled requests (429) wait for the upstream Retry-After hint when one is
given, otherwise back off linearly. Server errors back off linearly. Once the
policy is exhausted the last error is re-raised unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from franchise_mapper.models.catalog_models import RetryPolicy
from franchise_mapper.services.errors import RateLimitedError, UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _retry_wait(policy: RetryPolicy, exc: Exception, attempt: int) -> float | None:
    """Seconds to wait before the next attempt, or None if exc is not retryable."""
    if isinstance(exc, RateLimitedError):
        if 429 not in policy.retry_statuses:
            return None
        if exc.retry_after is not None:
            return min(exc.retry_after + 1, policy.max_wait_seconds)
    elif isinstance(exc, UpstreamError):
        if exc.status_code not in policy.retry_statuses:
            return None
    else:
        return None
    return min((attempt + 1) * policy.backoff_seconds, policy.max_wait_seconds)


async def run_with_retry(
    make_request: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    label: str = "",
) -> T:
    attempt = 0
    while True:
        try:
            return await make_request()
        except (RateLimitedError, UpstreamError) as exc:
            wait = _retry_wait(policy, exc, attempt)
            if wait is None or attempt >= policy.max_retries:
                raise
            logger.warning(
                "%s failed (%s), retrying in %.1fs (attempt %d/%d)",
                label or "Catalog request", exc, wait, attempt + 1, policy.max_retries,
            )
            await asyncio.sleep(wait)
            attempt += 1
