from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Callable, Iterable, Optional

from core.models import Playlist, Song
from db.database import kv_get, kv_remove, kv_set

logger = logging.getLogger(__name__)

FAVORITES_KEY = "groovewave_favorites"
PLAYLISTS_KEY = "groovewave_playlists"
RECENT_KEY = "groovewave_recent"
SEARCH_HISTORY_KEY = "groovewave_search_history"
VOLUME_KEY = "groovewave_volume"

DEFAULT_VOLUME = 1.0


class PersistenceLayer:
    """
    Load/save of the stored collections as JSON strings in the key/value table.

    Loads never raise: missing or unparsable data comes back as an empty
    collection. Saves log storage errors instead of raising them.
    """

    def __init__(self, db: sqlite3.Connection):
        self.db = db

    # ------------------ raw ------------------
    def _read_json(self, key: str) -> Any:
        try:
            raw = kv_get(self.db, key)
        except sqlite3.Error as e:
            logger.warning("Could not read %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding malformed data stored under %s", key)
            return None

    def _write(self, key: str, value: str) -> None:
        try:
            kv_set(self.db, key, value)
        except sqlite3.Error as e:
            logger.error("Could not save %s: %s", key, e)

    def _load_list(self, key: str, parse: Callable[[Any], Any]) -> list:
        data = self._read_json(key)
        if not isinstance(data, list):
            return []
        items = []
        for item in data:
            try:
                items.append(parse(item))
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("Skipping malformed entry in %s", key)
        return items

    # ------------------ songs ------------------
    def load_favorites(self) -> list[Song]:
        return self._load_list(FAVORITES_KEY, Song.from_dict)

    def save_favorites(self, songs: Iterable[Song]) -> None:
        self._write(FAVORITES_KEY, json.dumps([s.to_dict() for s in songs]))

    def load_recent(self) -> list[Song]:
        return self._load_list(RECENT_KEY, Song.from_dict)

    def save_recent(self, songs: Iterable[Song]) -> None:
        self._write(RECENT_KEY, json.dumps([s.to_dict() for s in songs]))

    # ------------------ playlists ------------------
    def load_playlists(self) -> list[Playlist]:
        return self._load_list(PLAYLISTS_KEY, Playlist.from_dict)

    def save_playlists(self, playlists: Iterable[Playlist]) -> None:
        self._write(PLAYLISTS_KEY, json.dumps([p.to_dict() for p in playlists]))

    # ------------------ search history ------------------
    def load_search_history(self) -> list[str]:
        return [t for t in self._load_list(SEARCH_HISTORY_KEY, lambda t: t) if isinstance(t, str)]

    def save_search_history(self, terms: Iterable[str]) -> None:
        self._write(SEARCH_HISTORY_KEY, json.dumps(list(terms)))

    def clear_search_history(self) -> None:
        try:
            kv_remove(self.db, SEARCH_HISTORY_KEY)
        except sqlite3.Error as e:
            logger.error("Could not clear search history: %s", e)

    # ------------------ volume ------------------
    def load_volume(self) -> float:
        data: Optional[Any] = self._read_json(VOLUME_KEY)
        try:
            v = float(data)
        except (TypeError, ValueError):
            return DEFAULT_VOLUME
        if v != v:  # NaN
            return DEFAULT_VOLUME
        return min(1.0, max(0.0, v))

    def save_volume(self, volume: float) -> None:
        self._write(VOLUME_KEY, str(min(1.0, max(0.0, float(volume)))))
