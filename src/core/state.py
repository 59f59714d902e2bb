from __future__ import annotations
import random
import sqlite3
from dataclasses import dataclass
from PySide6.QtCore import QObject, Signal, Slot

from core.itunes_client import ItunesClient
from core.search_fetcher import SearchFetcher
from core.search_session import SearchSession
from db.database import get_config
from db.models import Config
from db.persistence import PersistenceLayer
from library.history import RecentlyPlayed, SearchHistory
from library.library_store import LibraryStore
from player.session import PlaybackSession

@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warn/error

class AppState(QObject):
    """Session context: owns every store and hands them to whoever needs them."""

    notification = Signal(object)   # emits Notify

    def __init__(self):
        super().__init__()
        self.db: sqlite3.Connection | None = None
        self.player = None
        self.config: Config = Config()
        self.persistence: PersistenceLayer | None = None
        self.library: LibraryStore | None = None
        self.recent: RecentlyPlayed | None = None
        self.search_history: SearchHistory | None = None
        self.playback: PlaybackSession | None = None
        self.client = None
        self.fetcher: SearchFetcher | None = None
        self.search = SearchSession()
        self.queued_notifications: list[Notify] = []

    def load_session(self, db: sqlite3.Connection, client=None, rng: random.Random | None = None) -> None:
        """Build the stores on top of ``db``; ``client`` defaults to the iTunes search client."""
        self.db = db
        self.config = get_config(db)
        self.persistence = PersistenceLayer(db)
        self.library = LibraryStore(self.persistence)
        self.recent = RecentlyPlayed(self.persistence)
        self.search_history = SearchHistory(self.persistence)
        self.playback = PlaybackSession(self.recent, rng=rng)

        if client is None:
            client = ItunesClient(
                base_url=self.config.search_base_url,
                country=self.config.country,
                timeout_s=self.config.request_timeout_s,
            )
        self.client = client
        self.fetcher = SearchFetcher(client, page_size=self.config.page_size, max_attempts=self.config.max_attempts)

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))
