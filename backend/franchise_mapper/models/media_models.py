"""Pydantic models for catalog records returned by the AniList gateway."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class MediaFormat(str, Enum):
    TV = "TV"
    TV_SHORT = "TV_SHORT"
    MOVIE = "MOVIE"
    SPECIAL = "SPECIAL"
    OVA = "OVA"
    ONA = "ONA"
    MUSIC = "MUSIC"
    MANGA = "MANGA"
    NOVEL = "NOVEL"
    ONE_SHOT = "ONE_SHOT"


class MediaKind(str, Enum):
    ANIME = "ANIME"
    MANGA = "MANGA"


class RelationType(str, Enum):
    PREQUEL = "PREQUEL"
    SEQUEL = "SEQUEL"
    PARENT = "PARENT"
    SIDE_STORY = "SIDE_STORY"
    ALTERNATIVE = "ALTERNATIVE"
    SPIN_OFF = "SPIN_OFF"
    SUMMARY = "SUMMARY"
    OTHER = "OTHER"
    CHARACTER = "CHARACTER"
    SOURCE = "SOURCE"
    ADAPTATION = "ADAPTATION"
    COMPILATION = "COMPILATION"
    CONTAINS = "CONTAINS"


class MediaTitle(BaseModel):
    english: str | None = None
    romaji: str | None = None
    native: str | None = None

    def best(self) -> str:
        """Best available localized title (english, then romaji, then native)."""
        return self.english or self.romaji or self.native or ""


class CoverImage(BaseModel):
    large: str | None = None
    medium: str | None = None
    extra_large: str | None = None


class RelationEdge(BaseModel):
    """An outbound relation from one catalog entry to another."""

    model_config = ConfigDict(frozen=True)

    relation_type: str  # RelationType value; unknown vocabulary is kept as-is
    target_id: int
    target_type: str | None = None  # MediaKind value
    target_format: str | None = None


class MediaRecord(BaseModel):
    """One entry of a batched lookup."""

    id: int
    title: MediaTitle = MediaTitle()
    format: str | None = None
    start_year: int | None = None
    popularity: int | None = None
    cover_image: CoverImage = CoverImage()
    relations: list[RelationEdge] = []


class MediaDetail(BaseModel):
    """Full display record for a single entry."""

    id: int
    title: MediaTitle = MediaTitle()
    cover_image: CoverImage = CoverImage()
    banner_image: str | None = None
    description: str | None = None
    format: str | None = None
    episodes: int | None = None
    duration: int | None = None  # minutes per episode
    status: str | None = None
    average_score: int | None = None
    popularity: int | None = None
    start_date: str | None = None  # YYYY-MM-DD, missing parts default to 01
    genres: list[str] = []
    studios: list[str] = []


class SearchSuggestion(BaseModel):
    id: int
    title: MediaTitle = MediaTitle()
    format: str | None = None
    year: int | None = None
    cover: str | None = None
