from __future__ import annotations

import logging
import os

import requests

from core.models import Song
from core.utils import preview_file_name, song_key

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://itunes.apple.com/search"


class SearchError(Exception):
    """Transport or parse failure while talking to the search service."""


class ItunesClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        country: str = "US",
        timeout_s: float = 15,
        user_agent: str = "groovewave-pyside6/0.1",
    ):
        self.base_url = base_url.rstrip("/")
        self.country = country
        self.timeout_s = timeout_s
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def search(self, term: str, offset: int = 0, limit: int = 50) -> list[Song]:
        """
        One page of playable songs for ``term``.

        Records without a preview URL are dropped, and records repeating an
        (artist, title) pair already seen on this page are dropped too.
        Raises SearchError on any transport or parse failure.
        """
        params = {
            "term": term.strip(),
            "media": "music",
            "entity": "song",
            "limit": int(limit),
            "offset": int(offset),
            "country": self.country,
        }
        try:
            r = self.session.get(self.base_url, params=params, timeout=self.timeout_s)
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            logger.warning("Search request failed for %r at offset %d: %s", term, offset, e)
            raise SearchError(f"API Error: {e}") from e
        except ValueError as e:
            raise SearchError(f"Malformed response: {e}") from e

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise SearchError("Malformed response: missing results")

        seen: set[str] = set()
        songs: list[Song] = []
        for item in results:
            if not isinstance(item, dict) or not item.get("previewUrl"):
                continue
            key = song_key(item.get("artistName", ""), item.get("trackName", ""))
            if key in seen:
                continue
            try:
                song = Song.from_dict(item)
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping record without a usable trackId: %r", item)
                continue
            seen.add(key)
            songs.append(song)
        return songs

    def download_preview(self, song: Song, dest_dir: str) -> str:
        """Save the preview audio of ``song`` into ``dest_dir``; returns the file path."""
        os.makedirs(dest_dir, exist_ok=True)
        path = os.path.join(dest_dir, preview_file_name(song.title, song.artist))
        try:
            with self.session.get(song.preview_url, stream=True, timeout=self.timeout_s) as r:
                r.raise_for_status()
                with open(path, "wb") as fh:
                    for chunk in r.iter_content(chunk_size=64 * 1024):
                        if chunk:
                            fh.write(chunk)
        except requests.RequestException as e:
            logger.error("Download failed for %s: %s", song.track_id, e)
            raise SearchError(f"Download failed: {e}") from e
        return path
