"""AniList GraphQL gateway."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from franchise_mapper.models.catalog_models import CatalogConfig
from franchise_mapper.models.media_models import (
    CoverImage,
    MediaDetail,
    MediaRecord,
    MediaTitle,
    RelationEdge,
    SearchSuggestion,
)
from franchise_mapper.services.catalog.base import MAX_BATCH_SIZE, BaseCatalogGateway
from franchise_mapper.services.catalog.queries import (
    BATCH_QUERY,
    DETAILS_QUERY,
    RELATIONS_QUERY,
    SEARCH_QUERY,
    SUGGESTION_QUERY,
)
from franchise_mapper.services.catalog.retry import run_with_retry
from franchise_mapper.services.errors import RateLimitedError, UpstreamError

logger = logging.getLogger(__name__)

_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "User-Agent": "FranchiseMapper/0.1 (+https://anilist.co)",
}


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _format_date(date_obj: dict | None) -> str | None:
    if not date_obj or not date_obj.get("year"):
        return None
    y = date_obj["year"]
    m = date_obj.get("month") or 1
    d = date_obj.get("day") or 1
    return f"{y:04d}-{m:02d}-{d:02d}"


def _parse_edges(media: dict) -> list[RelationEdge]:
    edges = []
    for edge in (media.get("relations") or {}).get("edges") or []:
        node = edge.get("node") or {}
        if node.get("id") is None or not edge.get("relationType"):
            continue
        edges.append(
            RelationEdge(
                relation_type=edge["relationType"],
                target_id=node["id"],
                target_type=node.get("type"),
                target_format=node.get("format"),
            )
        )
    return edges


def _parse_title(media: dict) -> MediaTitle:
    return MediaTitle(**(media.get("title") or {}))


def _parse_record(media: dict) -> MediaRecord:
    cover = media.get("coverImage") or {}
    return MediaRecord(
        id=media["id"],
        title=_parse_title(media),
        format=media.get("format"),
        start_year=(media.get("startDate") or {}).get("year"),
        popularity=media.get("popularity"),
        cover_image=CoverImage(large=cover.get("large"), medium=cover.get("medium")),
        relations=_parse_edges(media),
    )


def _parse_detail(media: dict) -> MediaDetail:
    cover = media.get("coverImage") or {}
    studios = (media.get("studios") or {}).get("nodes") or []
    return MediaDetail(
        id=media["id"],
        title=_parse_title(media),
        cover_image=CoverImage(large=cover.get("large"), extra_large=cover.get("extraLarge")),
        banner_image=media.get("bannerImage"),
        description=media.get("description"),
        format=media.get("format"),
        episodes=media.get("episodes"),
        duration=media.get("duration"),
        status=media.get("status"),
        average_score=media.get("averageScore"),
        popularity=media.get("popularity"),
        start_date=_format_date(media.get("startDate")),
        genres=media.get("genres") or [],
        studios=[s["name"] for s in studios if s.get("name")],
    )


class AniListGateway(BaseCatalogGateway):
    """Catalog gateway backed by the AniList GraphQL API.

    Every request goes through the configured RetryPolicy; once it is
    exhausted, throttling surfaces as RateLimitedError and any other failure
    as UpstreamError.
    """

    def __init__(self, config: CatalogConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config or CatalogConfig()
        self._transport = transport
        self._pace_lock = asyncio.Lock()
        self._last_request = float("-inf")
        self.total_requests = 0

    async def _pace(self) -> None:
        """Enforce the configured minimum gap between outbound requests."""
        if self.config.min_interval <= 0:
            return
        async with self._pace_lock:
            gap = self.config.min_interval - (time.monotonic() - self._last_request)
            if gap > 0:
                await asyncio.sleep(gap)
            self._last_request = time.monotonic()

    async def _post_once(self, query: str, variables: dict, allow_not_found: bool) -> dict | None:
        await self._pace()
        self.total_requests += 1
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
                resp = await client.post(
                    self.config.url,
                    json={"query": query, "variables": variables},
                    headers=_HEADERS,
                )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Catalog request failed: {e}") from e

        if resp.status_code == 429:
            raise RateLimitedError(retry_after=_parse_retry_after(resp.headers.get("Retry-After")))
        if resp.status_code == 404 and allow_not_found:
            return None
        if resp.status_code != 200:
            detail = "Catalog API error"
            try:
                errors = resp.json().get("errors") or []
                if errors:
                    detail = errors[0].get("message", detail)
            except ValueError:
                pass
            logger.warning("Catalog API error (status=%d): %s", resp.status_code, detail)
            raise UpstreamError(detail, status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            raise UpstreamError("Catalog returned invalid JSON", status_code=resp.status_code) from e
        if payload.get("errors") and not payload.get("data"):
            raise UpstreamError(payload["errors"][0].get("message", "Catalog query failed"), status_code=resp.status_code)
        return payload.get("data") or {}

    async def _post(self, query: str, variables: dict, label: str, allow_not_found: bool = False) -> dict | None:
        return await run_with_retry(
            lambda: self._post_once(query, variables, allow_not_found),
            self.config.retry,
            label=label,
        )

    async def search_id(self, term: str) -> int | None:
        data = await self._post(SEARCH_QUERY, {"search": term}, "search", allow_not_found=True)
        media = (data or {}).get("Media")
        return media["id"] if media else None

    async def fetch_relations(self, media_id: int) -> list[RelationEdge] | None:
        data = await self._post(RELATIONS_QUERY, {"id": media_id}, f"relations {media_id}", allow_not_found=True)
        media = (data or {}).get("Media")
        if not media:
            return None
        return _parse_edges(media)

    async def fetch_batch(self, media_ids: list[int]) -> list[MediaRecord]:
        if len(media_ids) > MAX_BATCH_SIZE:
            raise ValueError(f"Batch of {len(media_ids)} ids exceeds the limit of {MAX_BATCH_SIZE}")
        if not media_ids:
            return []
        data = await self._post(
            BATCH_QUERY,
            {"ids": media_ids, "perPage": MAX_BATCH_SIZE},
            f"batch of {len(media_ids)}",
        )
        media_list = ((data or {}).get("Page") or {}).get("media") or []
        return [_parse_record(m) for m in media_list if m]

    async def fetch_details(self, media_id: int) -> MediaDetail | None:
        data = await self._post(DETAILS_QUERY, {"id": media_id}, f"details {media_id}", allow_not_found=True)
        media = (data or {}).get("Media")
        return _parse_detail(media) if media else None

    async def search_suggestions(self, term: str) -> list[SearchSuggestion]:
        data = await self._post(SUGGESTION_QUERY, {"search": term}, "suggestions")
        results = []
        for m in ((data or {}).get("Page") or {}).get("media") or []:
            results.append(
                SearchSuggestion(
                    id=m["id"],
                    title=_parse_title(m),
                    format=m.get("format"),
                    year=(m.get("startDate") or {}).get("year"),
                    cover=(m.get("coverImage") or {}).get("medium"),
                )
            )
        return results
