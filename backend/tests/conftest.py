import os

import pytest

# Disable rate limiting for tests
os.environ["FRANCHISE_MAPPER_NO_RATE_LIMIT"] = "true"

from franchise_mapper.models.media_models import (  # noqa: E402
    CoverImage,
    MediaDetail,
    MediaRecord,
    MediaTitle,
    RelationEdge,
    SearchSuggestion,
)
from franchise_mapper.services.catalog.base import MAX_BATCH_SIZE, BaseCatalogGateway  # noqa: E402


class FakeCatalogGateway(BaseCatalogGateway):
    """In-memory catalog that records every request it answers."""

    def __init__(self):
        self.records: dict[int, MediaRecord] = {}
        self.search_index: dict[str, int] = {}
        self.relation_calls: list[int] = []
        self.batch_calls: list[list[int]] = []
        self.search_calls: list[str] = []

    def add(
        self,
        media_id: int,
        format: str | None = "TV",
        year: int | None = 2000,
        popularity: int | None = 0,
        relations: tuple = (),
        title: str | None = None,
    ) -> MediaRecord:
        """Register a record. relations are (type, target_id) or (type, target_id, target_kind)."""
        edges = []
        for rel in relations:
            kind = rel[2] if len(rel) > 2 else "ANIME"
            edges.append(RelationEdge(relation_type=rel[0], target_id=rel[1], target_type=kind))
        record = MediaRecord(
            id=media_id,
            title=MediaTitle(english=title or f"Title {media_id}"),
            format=format,
            start_year=year,
            popularity=popularity,
            cover_image=CoverImage(large=f"https://img.example/{media_id}.jpg"),
            relations=edges,
        )
        self.records[media_id] = record
        return record

    async def search_id(self, term: str) -> int | None:
        self.search_calls.append(term)
        return self.search_index.get(term.casefold())

    async def fetch_relations(self, media_id: int) -> list[RelationEdge] | None:
        self.relation_calls.append(media_id)
        record = self.records.get(media_id)
        return list(record.relations) if record else None

    async def fetch_batch(self, media_ids: list[int]) -> list[MediaRecord]:
        assert len(media_ids) <= MAX_BATCH_SIZE
        self.batch_calls.append(list(media_ids))
        return [self.records[i] for i in media_ids if i in self.records]

    async def fetch_details(self, media_id: int) -> MediaDetail | None:
        record = self.records.get(media_id)
        if record is None:
            return None
        return MediaDetail(id=record.id, title=record.title, format=record.format)

    async def search_suggestions(self, term: str) -> list[SearchSuggestion]:
        self.search_calls.append(term)
        return [
            SearchSuggestion(id=r.id, title=r.title, format=r.format, year=r.start_year)
            for r in self.records.values()
            if term.casefold() in r.title.best().casefold()
        ][:5]


@pytest.fixture
def catalog() -> FakeCatalogGateway:
    return FakeCatalogGateway()
