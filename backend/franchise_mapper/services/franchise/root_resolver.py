"""Climb the prequel chain from a starting title to its oldest ancestor."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from franchise_mapper.models.media_models import MediaKind, RelationType
from franchise_mapper.services.catalog.base import BaseCatalogGateway
from franchise_mapper.services.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RootResolution:
    root_id: int
    hops: int
    truncated: bool = False  # hop bound reached before the chain ended


async def resolve_root(gateway: BaseCatalogGateway, start_id: int, max_hops: int = 5) -> RootResolution:
    """Follow PREQUEL edges (anime targets only) from start_id.

    Issues at most max_hops requests, one per hop. Reaching the bound returns
    the last visited id instead of failing; an unresolvable start id raises
    NotFoundError.
    """
    current_id = start_id
    previous_id: int | None = None
    seen = {start_id}
    hops = 0

    for _ in range(max_hops):
        edges = await gateway.fetch_relations(current_id)
        if edges is None:
            if previous_id is None:
                raise NotFoundError(f"No catalog record for id {start_id}")
            logger.warning("Prequel %d in the chain from %d has no record", current_id, start_id)
            return RootResolution(root_id=previous_id, hops=hops - 1)

        prequel = next(
            (
                e for e in edges
                if e.relation_type == RelationType.PREQUEL and e.target_type == MediaKind.ANIME
            ),
            None,
        )
        if prequel is None:
            return RootResolution(root_id=current_id, hops=hops)
        if prequel.target_id in seen:
            logger.warning("Prequel cycle at %d while resolving root of %d", prequel.target_id, start_id)
            return RootResolution(root_id=current_id, hops=hops)

        previous_id = current_id
        current_id = prequel.target_id
        seen.add(current_id)
        hops += 1

    if hops:
        logger.warning("Root climb from %d stopped at hop bound %d (last id %d)", start_id, max_hops, current_id)
    return RootResolution(root_id=current_id, hops=hops, truncated=hops > 0)
