"""GraphQL documents sent to AniList."""

from __future__ import annotations

SUGGESTION_QUERY = """
query ($search: String) {
  Page(perPage: 5) {
    media(search: $search, type: ANIME, sort: SEARCH_MATCH) {
      id
      title { english romaji }
      format
      startDate { year }
      coverImage { medium }
    }
  }
}
"""

SEARCH_QUERY = """
query ($search: String) {
  Media(search: $search, type: ANIME, sort: SEARCH_MATCH) {
    id
  }
}
"""

RELATIONS_QUERY = """
query ($id: Int) {
  Media(id: $id) {
    id
    relations {
      edges {
        relationType
        node { id type format }
      }
    }
  }
}
"""

BATCH_QUERY = """
query ($ids: [Int], $perPage: Int) {
  Page(perPage: $perPage) {
    media(id_in: $ids) {
      id
      title { english romaji }
      format
      startDate { year }
      popularity
      coverImage { large medium }
      relations {
        edges {
          relationType
          node { id type format }
        }
      }
    }
  }
}
"""

DETAILS_QUERY = """
query ($id: Int) {
  Media(id: $id) {
    id
    title { english romaji native }
    coverImage { large extraLarge }
    bannerImage
    description(asHtml: false)
    format
    episodes
    duration
    status
    averageScore
    popularity
    startDate { year month day }
    genres
    studios(isMain: true) {
      nodes { name }
    }
  }
}
"""
