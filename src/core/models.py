from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RepeatMode(str, Enum):
    OFF = "off"
    ALL = "all"
    ONE = "one"

    def cycled(self) -> "RepeatMode":
        # off -> all -> one -> off
        order = (RepeatMode.OFF, RepeatMode.ALL, RepeatMode.ONE)
        return order[(order.index(self) + 1) % len(order)]


@dataclass(frozen=True)
class Song:
    """A playable track from the search service.

    Identity is the upstream ``track_id``: two Song objects with the same id
    compare equal and hash the same even if their metadata differs.
    """
    track_id: int
    title: str = field(compare=False)
    artist: str = field(compare=False)
    collection: str = field(default="", compare=False)
    artwork_url: str = field(default="", compare=False)
    preview_url: str = field(default="", compare=False)
    release_date: str = field(default="", compare=False)
    genre: str = field(default="", compare=False)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Song":
        # Same record shape as the search service (camelCase keys).
        return Song(
            track_id=int(data["trackId"]),
            title=str(data.get("trackName") or ""),
            artist=str(data.get("artistName") or ""),
            collection=str(data.get("collectionName") or ""),
            artwork_url=str(data.get("artworkUrl100") or ""),
            preview_url=str(data.get("previewUrl") or ""),
            release_date=str(data.get("releaseDate") or ""),
            genre=str(data.get("primaryGenreName") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "trackId": self.track_id,
            "trackName": self.title,
            "artistName": self.artist,
            "collectionName": self.collection,
            "artworkUrl100": self.artwork_url,
            "previewUrl": self.preview_url,
            "releaseDate": self.release_date,
            "primaryGenreName": self.genre,
        }

    def artwork(self, size: int = 100) -> str:
        """Artwork URL at ``size``x``size`` (the service serves 100x100 by default)."""
        if size == 100:
            return self.artwork_url
        return self.artwork_url.replace("100x100", f"{size}x{size}")

    @property
    def release_year(self) -> str:
        return self.release_date[:4]


@dataclass(frozen=True)
class Playlist:
    id: str
    name: str
    songs: tuple[Song, ...] = ()
    created_at: int = 0  # epoch ms

    def contains(self, track_id: int) -> bool:
        return any(s.track_id == track_id for s in self.songs)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Playlist":
        return Playlist(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            songs=tuple(Song.from_dict(s) for s in data.get("songs") or []),
            created_at=int(data.get("createdAt") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "songs": [s.to_dict() for s in self.songs],
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class FetchResult:
    songs: tuple[Song, ...]
    next_cursor: int
    exhausted: bool
    attempts: int = 0


@dataclass
class NowPlaying:
    track_id: int
    title: str
    artist: str | None
    url: str
