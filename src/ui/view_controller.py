from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from core.itunes_client import SearchError
from core.models import NowPlaying, Playlist, RepeatMode, Song
from core.search_session import FETCH_ERROR_MESSAGE, FetchTicket
from core.utils import share_text
from player.sleep_timer import SleepTimer
from ui.workers.search_worker import SearchWorker

logger = logging.getLogger(__name__)

VIEW_DISCOVER = "discover"
VIEW_FAVORITES = "favorites"
VIEW_PLAYLISTS = "playlists"
VIEW_PLAYLIST_DETAIL = "playlist-detail"
VIEW_SONG_DETAIL = "song-detail"

GENRES = ["Top 100", "Pop", "Hip-Hop", "Rock", "Electronic", "R&B", "Indie", "K-Pop", "Classical", "Jazz"]
SURPRISE_TERMS = [
    "Summer Vibes", "Lo-Fi Study", "Workout Hype", "Acoustic Chill", "90s Hits",
    "Cyberpunk", "Road Trip", "Piano Ballads", "Synthwave", "Coffee Shop",
]


class ViewController(QObject):
    """
    Non-visual caller layer between whatever renders the app and the stores.

    Tracks which view is shown (and therefore which list is active), forwards
    intents to the playback session, the library and the search session, and
    keeps the audio device in step with the playback session.
    """

    viewChanged = Signal(str)
    resultsChanged = Signal()
    searchStateChanged = Signal()
    libraryChanged = Signal()
    historyChanged = Signal()
    playbackChanged = Signal()

    def __init__(self, app_state, fetch_runner: Optional[Callable[[FetchTicket], None]] = None, parent=None):
        super().__init__(parent)
        self.app_state = app_state

        self.current_view: str = VIEW_DISCOVER
        self.active_playlist_id: Optional[str] = None
        self.selected_song: Optional[Song] = None

        # add-to-playlist prompt
        self.song_to_add: Optional[Song] = None
        self.playlist_prompt_open: bool = False

        self.muted: bool = False
        self.volume: float = app_state.persistence.load_volume()

        self._workers: list[SearchWorker] = []
        self._fetch_runner = fetch_runner or self._run_in_worker

        self.sleep_timer = SleepTimer(self)
        self.sleep_timer.expired.connect(self.pause)

        player = app_state.player
        if player is not None:
            player.set_volume(self.volume)
            player.ended.connect(self.on_track_ended)
            player.errorOccurred.connect(self._on_playback_error)

    # ------------------ views ------------------
    def _set_view(self, view: str) -> None:
        self.current_view = view
        self.viewChanged.emit(view)

    def open_discover(self):
        self._set_view(VIEW_DISCOVER)

    def open_favorites(self):
        self._set_view(VIEW_FAVORITES)

    def open_playlists(self):
        self._set_view(VIEW_PLAYLISTS)

    def open_playlist(self, playlist_id: str):
        self.active_playlist_id = playlist_id
        self._set_view(VIEW_PLAYLIST_DETAIL)

    def open_song_detail(self, song: Song):
        self.selected_song = song
        self._set_view(VIEW_SONG_DETAIL)

    def active_list(self) -> tuple[Song, ...]:
        """Songs that next/previous step through for the current view."""
        if self.current_view == VIEW_FAVORITES:
            return self.app_state.library.favorites
        if self.current_view == VIEW_PLAYLIST_DETAIL and self.active_playlist_id:
            return self.app_state.library.playlist_songs(self.active_playlist_id)
        return tuple(self.app_state.search.results)

    # ------------------ search ------------------
    def search(self, term: str) -> bool:
        """Fresh search; False when refused because another one is still running."""
        self.open_discover()
        ticket = self.app_state.search.begin_search(term)
        if ticket is None:
            return False
        self.searchStateChanged.emit()
        self._fetch_runner(ticket)
        return True

    def submit_search(self, term: str) -> bool:
        term = (term or "").strip()
        if not term:
            return False
        self.app_state.search_history.add(term)
        self.historyChanged.emit()
        return self.search(term)

    def clear_search_history(self):
        self.app_state.search_history.clear()
        self.historyChanged.emit()

    def load_more(self) -> bool:
        ticket = self.app_state.search.begin_load_more()
        if ticket is None:
            return False
        self.searchStateChanged.emit()
        self._fetch_runner(ticket)
        return True

    def retry(self) -> bool:
        return self.search(self.app_state.search.term or self.app_state.config.default_term)

    def surprise_me(self) -> bool:
        return self.search(self.app_state.playback.rng.choice(SURPRISE_TERMS))

    def fetch_finished(self, ticket: FetchTicket, result) -> None:
        if not self.app_state.search.complete(ticket, result):
            logger.debug("Ignoring stale result for %r (generation %d)", ticket.term, ticket.generation)
            return
        self.resultsChanged.emit()
        self.searchStateChanged.emit()

    def fetch_failed(self, ticket: FetchTicket, message: str = FETCH_ERROR_MESSAGE) -> None:
        if not self.app_state.search.fail(ticket, message):
            return
        self.searchStateChanged.emit()
        self.app_state.notify(message, "error")

    def _run_in_worker(self, ticket: FetchTicket) -> None:
        self._workers = [w for w in self._workers if not w.isFinished()]

        worker = SearchWorker(self.app_state.fetcher, ticket, self)
        worker.finished_ok.connect(self.fetch_finished)
        worker.failed.connect(self.fetch_failed)
        self._workers.append(worker)
        worker.start()

    # ------------------ playback ------------------
    def play(self, song: Song):
        loaded = self.app_state.playback.play(song)
        self._sync_device(loaded)

    def toggle_play(self):
        self.app_state.playback.toggle_playing()
        self._sync_device(None)

    def pause(self):
        self.app_state.playback.pause()
        self._sync_device(None)

    def play_next(self):
        self._sync_device(self.app_state.playback.next(self.active_list()))

    def play_prev(self):
        self._sync_device(self.app_state.playback.previous(self.active_list()))

    def on_track_ended(self):
        self._sync_device(self.app_state.playback.on_track_ended(self.active_list()))

    def toggle_shuffle(self):
        self.app_state.playback.toggle_shuffle()
        self.playbackChanged.emit()

    def cycle_repeat(self):
        mode = self.app_state.playback.cycle_repeat()
        if self.app_state.player is not None:
            self.app_state.player.set_looping(mode is RepeatMode.ONE)
        self.playbackChanged.emit()

    def play_playlist(self, playlist_id: str):
        songs = self.app_state.library.playlist_songs(playlist_id)
        if songs:
            self.play(songs[0])

    def _sync_device(self, loaded: Optional[Song]) -> None:
        playback = self.app_state.playback
        player = self.app_state.player

        if player is not None:
            if loaded is not None:
                meta = NowPlaying(track_id=loaded.track_id, title=loaded.title, artist=loaded.artist, url=loaded.preview_url)
                player.play_url(loaded.preview_url, meta)
            elif playback.current is not None:
                if playback.playing:
                    player.play()
                else:
                    player.pause()

        self.playbackChanged.emit()

    def _on_playback_error(self, message: str):
        self.app_state.notify(f"Playback failed: {message}", "error")

    # ------------------ volume / sleep ------------------
    def set_volume(self, volume: float):
        self.volume = min(1.0, max(0.0, float(volume)))
        self.app_state.persistence.save_volume(self.volume)
        if self.app_state.player is not None:
            self.app_state.player.set_volume(self.volume)

    def toggle_mute(self):
        self.muted = not self.muted
        if self.app_state.player is not None:
            self.app_state.player.set_muted(self.muted)

    def set_sleep_timer(self, minutes: Optional[int]):
        self.sleep_timer.set_minutes(minutes)

    # ------------------ library ------------------
    def is_favorite(self, track_id: int) -> bool:
        return self.app_state.library.is_favorite(track_id)

    def toggle_favorite(self, song: Song) -> bool:
        added = self.app_state.library.toggle_favorite(song)
        self.libraryChanged.emit()
        return added

    def open_add_to_playlist(self, song: Optional[Song] = None):
        self.song_to_add = song
        self.playlist_prompt_open = True

    def close_playlist_prompt(self):
        self.song_to_add = None
        self.playlist_prompt_open = False

    def create_playlist(self, name: str) -> Optional[Playlist]:
        """Create a playlist; a song waiting in the add prompt goes straight into it."""
        try:
            playlist = self.app_state.library.create_playlist(name)
        except ValueError:
            return None

        if self.song_to_add is not None:
            self.app_state.library.add_song_to_playlist(playlist.id, self.song_to_add)
            self.close_playlist_prompt()
            playlist = self.app_state.library.get_playlist(playlist.id)

        self.libraryChanged.emit()
        return playlist

    def add_to_playlist(self, playlist_id: str, song: Optional[Song] = None) -> bool:
        song = song or self.song_to_add
        if song is None:
            return False
        added = self.app_state.library.add_song_to_playlist(playlist_id, song)
        self.close_playlist_prompt()
        self.libraryChanged.emit()
        return added

    def remove_from_playlist(self, playlist_id: str, track_id: int):
        self.app_state.library.remove_song_from_playlist(playlist_id, track_id)
        self.libraryChanged.emit()

    def delete_playlist(self, playlist_id: str, confirm: Optional[Callable[[], bool]] = None) -> bool:
        if confirm is not None and not confirm():
            return False

        self.app_state.library.delete_playlist(playlist_id)
        if self.current_view == VIEW_PLAYLIST_DETAIL and self.active_playlist_id == playlist_id:
            self.active_playlist_id = None
            self._set_view(VIEW_PLAYLISTS)

        self.libraryChanged.emit()
        return True

    # ------------------ misc ------------------
    def share_text(self, song: Song) -> str:
        return share_text(song.title, song.artist)

    def download_preview(self, song: Song, dest_dir: str) -> Optional[str]:
        try:
            path = self.app_state.client.download_preview(song, dest_dir)
        except SearchError as e:
            self.app_state.notify(str(e), "error")
            return None
        self.app_state.notify(f"Saved {path}", "success")
        return path

    def handle_key(self, code: str) -> bool:
        """Keyboard shortcuts; ``code`` uses KeyboardEvent.code names (Space, ArrowRight, ...)."""
        if code == "Space":
            self.toggle_play()
        elif code == "ArrowRight":
            self.play_next()
        elif code == "ArrowLeft":
            self.play_prev()
        elif code == "KeyM":
            self.toggle_mute()
        elif code == "Escape":
            self.close_playlist_prompt()
        else:
            return False
        return True
