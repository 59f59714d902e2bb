"""Favorites and playlists.

Both are kept in memory and written through to the persistence layer right
after every mutation. Operations that name a playlist which no longer exists
do nothing: the playlist may have been deleted while a UI action was queued.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from core.models import Playlist, Song
from core.utils import new_playlist_id, now_ms
from db.persistence import PersistenceLayer

logger = logging.getLogger(__name__)


class LibraryStore:
    def __init__(self, persistence: PersistenceLayer):
        self._persistence = persistence
        self._favorites: list[Song] = persistence.load_favorites()
        self._playlists: list[Playlist] = persistence.load_playlists()

    # ------------------ reads ------------------
    @property
    def favorites(self) -> tuple[Song, ...]:
        return tuple(self._favorites)

    @property
    def playlists(self) -> tuple[Playlist, ...]:
        return tuple(self._playlists)

    def is_favorite(self, track_id: int) -> bool:
        return any(s.track_id == track_id for s in self._favorites)

    def get_playlist(self, playlist_id: str) -> Optional[Playlist]:
        for pl in self._playlists:
            if pl.id == playlist_id:
                return pl
        return None

    def playlist_songs(self, playlist_id: str) -> tuple[Song, ...]:
        pl = self.get_playlist(playlist_id)
        return tuple(pl.songs) if pl else ()

    # ------------------ favorites ------------------
    def toggle_favorite(self, song: Song) -> bool:
        """Flip membership of ``song``; returns True if it is now a favorite."""
        if self.is_favorite(song.track_id):
            self._favorites = [s for s in self._favorites if s.track_id != song.track_id]
            added = False
        else:
            self._favorites = [*self._favorites, song]
            added = True
        self._persistence.save_favorites(self._favorites)
        return added

    # ------------------ playlists ------------------
    def create_playlist(self, name: str) -> Playlist:
        name = (name or "").strip()
        if not name:
            raise ValueError("Playlist name must not be empty")

        playlist = Playlist(id=new_playlist_id(), name=name, songs=(), created_at=now_ms())
        self._playlists = [*self._playlists, playlist]
        self._persistence.save_playlists(self._playlists)
        logger.info("Created playlist %s (%s)", playlist.id, name)
        return playlist

    def add_song_to_playlist(self, playlist_id: str, song: Song) -> bool:
        pl = self.get_playlist(playlist_id)
        if pl is None or pl.contains(song.track_id):
            return False
        self._replace_playlist(replace(pl, songs=(*pl.songs, song)))
        return True

    def remove_song_from_playlist(self, playlist_id: str, track_id: int) -> None:
        pl = self.get_playlist(playlist_id)
        if pl is None:
            return
        self._replace_playlist(replace(pl, songs=tuple(s for s in pl.songs if s.track_id != track_id)))

    def _replace_playlist(self, updated: Playlist) -> None:
        self._playlists = [updated if p.id == updated.id else p for p in self._playlists]
        self._persistence.save_playlists(self._playlists)

    def delete_playlist(self, playlist_id: str) -> None:
        """Remove the playlist. Asking the user for confirmation is up to the caller."""
        if self.get_playlist(playlist_id) is None:
            return
        self._playlists = [p for p in self._playlists if p.id != playlist_id]
        self._persistence.save_playlists(self._playlists)
        logger.info("Deleted playlist %s", playlist_id)
