# src/library/history.py
from __future__ import annotations

from core.models import Song
from db.persistence import PersistenceLayer

RECENT_LIMIT = 10
SEARCH_HISTORY_LIMIT = 10


class RecentlyPlayed:
    """Most-recent-first ring of played songs, unique by track id."""

    def __init__(self, persistence: PersistenceLayer, limit: int = RECENT_LIMIT):
        self._persistence = persistence
        self.limit = limit
        self._songs: list[Song] = persistence.load_recent()[:limit]

    @property
    def songs(self) -> tuple[Song, ...]:
        return tuple(self._songs)

    def __len__(self) -> int:
        return len(self._songs)

    def push(self, song: Song) -> None:
        rest = [s for s in self._songs if s.track_id != song.track_id]
        self._songs = [song, *rest][: self.limit]
        self._persistence.save_recent(self._songs)


class SearchHistory:
    """Most-recent-first search terms, unique by exact string."""

    def __init__(self, persistence: PersistenceLayer, limit: int = SEARCH_HISTORY_LIMIT):
        self._persistence = persistence
        self.limit = limit
        self._terms: list[str] = persistence.load_search_history()[:limit]

    @property
    def terms(self) -> tuple[str, ...]:
        return tuple(self._terms)

    def add(self, term: str) -> None:
        term = (term or "").strip()
        if not term:
            return
        self._terms = [term, *(t for t in self._terms if t != term)][: self.limit]
        self._persistence.save_search_history(self._terms)

    def clear(self) -> None:
        self._terms = []
        self._persistence.clear_search_history()
