"""Pydantic models for crawled franchises and their timeline hierarchy."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from franchise_mapper.models.media_models import MediaTitle, RelationEdge

# Missing release years sort as the most recent entry.
UNKNOWN_YEAR = 9999


class FranchiseNode(BaseModel):
    """A crawled, allow-listed catalog entry. Never mutated after the crawl."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: MediaTitle = MediaTitle(romaji="Unknown")
    format: str
    year: int = UNKNOWN_YEAR
    popularity: int = 0
    cover: str = ""
    edges: list[RelationEdge] = []


class Franchise(BaseModel):
    """The connected relation-graph component of one title.

    ``id``, ``title`` and ``cover`` come from the face node (most popular member);
    ``nodes`` holds every member keyed by id in ascending id order.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    title: MediaTitle
    cover: str = ""
    nodes: dict[int, FranchiseNode]


class FranchiseRequest(BaseModel):
    query: int | str
    refresh: bool = False


class FranchiseResponse(BaseModel):
    franchise: Franchise
    root_id: int
    hops: int = 0
    rounds: int = 0
    truncated: bool = False  # a root-climb or crawl bound was hit
    cached: bool = False


# --- Timeline ---


class SortMode(str, Enum):
    YEAR = "year"
    TITLE = "title"


class ViewPolicy(BaseModel):
    """Pre-filtering and ordering applied before the hierarchy is built."""

    sort: SortMode = SortMode.YEAR
    formats: list[str] | None = None  # None keeps every format
    hidden_ids: list[int] = []


class TimelineNode(FranchiseNode):
    children: list[TimelineNode] = []
    relation_to_parent: str | None = None


class Era(BaseModel):
    main: TimelineNode
    extras: list[TimelineNode] = []


class TimelineRequest(BaseModel):
    nodes: list[FranchiseNode]
    policy: ViewPolicy = ViewPolicy()


class TimelineResponse(BaseModel):
    franchise_id: int | None = None
    eras: list[Era]
    total_nodes: int
