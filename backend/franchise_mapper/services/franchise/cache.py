"""In-process franchise cache with a freshness window.

Entries are whole franchises published after a completed crawl. An expired
entry counts as missing; franchises are never partially updated. Expired
entries and the aliases pointing at them are purged on every write.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from franchise_mapper.models.franchise_models import FranchiseResponse


def query_key(query: int | str) -> str:
    """Cache alias for a start id or search term.

    Only integer queries are ids; a digit-only string is a title search.
    """
    if isinstance(query, int):
        return f"id:{query}"
    return "search:" + " ".join(query.casefold().split())


class FranchiseCache:
    def __init__(self, ttl: float = 86400.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[int, tuple[float, FranchiseResponse]] = {}
        self._aliases: dict[str, int] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at > self.ttl

    def _fresh(self, franchise_id: int) -> FranchiseResponse | None:
        entry = self._entries.get(franchise_id)
        if entry is None:
            return None
        stored_at, response = entry
        if self._expired(stored_at, self._clock()):
            del self._entries[franchise_id]
            return None
        return response

    def _purge(self) -> None:
        now = self._clock()
        for fid in [fid for fid, (stored_at, _) in self._entries.items() if self._expired(stored_at, now)]:
            del self._entries[fid]
        for key in [key for key, fid in self._aliases.items() if fid not in self._entries]:
            del self._aliases[key]

    def get(self, franchise_id: int) -> FranchiseResponse | None:
        with self._lock:
            return self._fresh(franchise_id)

    def lookup(self, query: int | str) -> FranchiseResponse | None:
        """Find a cached franchise by start id, search term, or member id."""
        with self._lock:
            franchise_id = self._aliases.get(query_key(query))
            if franchise_id is not None:
                response = self._fresh(franchise_id)
                if response is not None:
                    return response
            if isinstance(query, int):
                for fid, (_, response) in list(self._entries.items()):
                    if query in response.franchise.nodes and self._fresh(fid) is not None:
                        return response
            return None

    def put(self, query: int | str, response: FranchiseResponse) -> None:
        franchise_id = response.franchise.id
        with self._lock:
            self._purge()
            self._entries[franchise_id] = (self._clock(), response)
            self._aliases[query_key(query)] = franchise_id
            self._aliases[query_key(franchise_id)] = franchise_id

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._aliases.clear()
