"""Bounded breadth-first crawl of a franchise's relation graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from franchise_mapper.models.franchise_models import UNKNOWN_YEAR, FranchiseNode
from franchise_mapper.models.media_models import (
    MediaFormat,
    MediaKind,
    MediaRecord,
    MediaTitle,
    RelationEdge,
    RelationType,
)
from franchise_mapper.services.catalog.base import MAX_BATCH_SIZE, BaseCatalogGateway

logger = logging.getLogger(__name__)

ALLOWED_FORMATS: frozenset[str] = frozenset(
    f.value for f in (
        MediaFormat.TV,
        MediaFormat.MOVIE,
        MediaFormat.OVA,
        MediaFormat.SPECIAL,
        MediaFormat.ONA,
        MediaFormat.TV_SHORT,
    )
)

# OTHER/CHARACTER/SOURCE/ADAPTATION are left out: incidental OTHER links merge
# unrelated franchises.
TRAVERSABLE_RELATIONS: frozenset[str] = frozenset(
    r.value for r in (
        RelationType.PREQUEL,
        RelationType.SEQUEL,
        RelationType.PARENT,
        RelationType.SIDE_STORY,
        RelationType.ALTERNATIVE,
        RelationType.SPIN_OFF,
        RelationType.SUMMARY,
    )
)


@dataclass
class CrawlResult:
    nodes: dict[int, FranchiseNode] = field(default_factory=dict)
    rounds: int = 0
    truncated: bool = False  # round bound reached with ids still pending


def filter_edges(edges: list[RelationEdge]) -> list[RelationEdge]:
    """Keep traversable relations that point at anime entries."""
    return [
        e for e in edges
        if e.relation_type in TRAVERSABLE_RELATIONS and e.target_type == MediaKind.ANIME
    ]


def to_franchise_node(record: MediaRecord) -> FranchiseNode:
    title = record.title
    if not title.best():
        title = MediaTitle(romaji="Unknown")
    return FranchiseNode(
        id=record.id,
        title=title,
        format=record.format,
        year=record.start_year if record.start_year is not None else UNKNOWN_YEAR,
        popularity=record.popularity or 0,
        cover=record.cover_image.large or record.cover_image.medium or "",
        edges=filter_edges(record.relations),
    )


async def crawl(
    gateway: BaseCatalogGateway,
    root_id: int,
    max_rounds: int = 10,
    batch_size: int = MAX_BATCH_SIZE,
) -> CrawlResult:
    """Collect every allow-listed node reachable from root_id.

    One batched request per round, rounds strictly sequential. Every
    requested id is marked visited, whether or not it comes back or survives
    the format filter, so no id is ever fetched twice. Ids beyond the batch
    size wait for the next round. Stopping at max_rounds with work pending is
    an accepted approximation and only flags the result as truncated.
    """
    batch_size = min(batch_size, MAX_BATCH_SIZE)
    result = CrawlResult()
    visited: set[int] = set()
    queue: list[int] = [root_id]
    queued: set[int] = {root_id}

    while queue and result.rounds < max_rounds:
        batch, queue = queue[:batch_size], queue[batch_size:]
        queued.difference_update(batch)
        visited.update(batch)

        records = await gateway.fetch_batch(batch)
        result.rounds += 1
        kept = 0

        for record in records:
            if record.format not in ALLOWED_FORMATS:
                continue
            node = to_franchise_node(record)
            result.nodes[node.id] = node
            visited.add(node.id)
            kept += 1

            for edge in node.edges:
                if edge.target_id not in visited and edge.target_id not in queued:
                    queue.append(edge.target_id)
                    queued.add(edge.target_id)

        logger.debug(
            "Crawl round %d from %d: requested %d, received %d, kept %d, pending %d",
            result.rounds, root_id, len(batch), len(records), kept, len(queue),
        )

    if queue:
        result.truncated = True
        logger.warning(
            "Crawl from %d stopped at round bound %d with %d ids pending",
            root_id, max_rounds, len(queue),
        )

    # Ascending id order keeps downstream iteration reproducible.
    result.nodes = dict(sorted(result.nodes.items()))
    logger.info("Crawl from %d: %d nodes in %d rounds", root_id, len(result.nodes), result.rounds)
    return result
