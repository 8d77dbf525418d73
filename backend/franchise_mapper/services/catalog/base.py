"""Abstract base class for catalog gateways."""

from abc import ABC, abstractmethod

from franchise_mapper.models.media_models import MediaDetail, MediaRecord, RelationEdge, SearchSuggestion

# Upper bound on ids per batched lookup.
MAX_BATCH_SIZE = 50


class BaseCatalogGateway(ABC):
    @abstractmethod
    async def search_id(self, term: str) -> int | None:
        """Resolve a free-text search to the best-matching anime id."""
        ...

    @abstractmethod
    async def fetch_relations(self, media_id: int) -> list[RelationEdge] | None:
        """Return one record's relation edges, or None if the id has no record."""
        ...

    @abstractmethod
    async def fetch_batch(self, media_ids: list[int]) -> list[MediaRecord]:
        """Return the records for up to MAX_BATCH_SIZE ids. Unknown ids are omitted."""
        ...

    @abstractmethod
    async def fetch_details(self, media_id: int) -> MediaDetail | None:
        """Return the full display record for one id."""
        ...

    @abstractmethod
    async def search_suggestions(self, term: str) -> list[SearchSuggestion]:
        """Return a handful of search hits for live search."""
        ...
