# ui/workers/search_worker.py
from __future__ import annotations

import logging

from PySide6.QtCore import QThread, Signal

from core.itunes_client import SearchError
from core.search_session import FETCH_ERROR_MESSAGE

logger = logging.getLogger(__name__)

class SearchWorker(QThread):
    finished_ok = Signal(object, object)   # FetchTicket, FetchResult
    failed = Signal(object, str)           # FetchTicket, message

    def __init__(self, fetcher, ticket, parent=None):
        super().__init__(parent)
        self.fetcher = fetcher
        self.ticket = ticket

    def run(self):
        t = self.ticket
        try:
            result = self.fetcher.fetch(t.term, t.cursor, t.known_ids, load_more=t.load_more)
        except SearchError as e:
            logger.warning("Fetch for %r failed: %s", t.term, e)
            self.failed.emit(t, FETCH_ERROR_MESSAGE)
            return
        except Exception:
            logger.exception("Unexpected error while fetching %r", t.term)
            self.failed.emit(t, FETCH_ERROR_MESSAGE)
            return

        self.finished_ok.emit(t, result)
