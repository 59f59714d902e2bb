from __future__ import annotations

import logging
from typing import Iterable, Protocol

from core.models import FetchResult, Song

logger = logging.getLogger(__name__)

PAGE_SIZE = 50
MAX_ATTEMPTS = 5


class SongSearchService(Protocol):
    def search(self, term: str, offset: int = 0, limit: int = 50) -> list[Song]: ...


class SearchFetcher:
    """
    Paginated search over a service that repeats items across pages.

    A load-more keeps requesting pages (up to ``max_attempts``) until one of
    them contains a track id the caller has not seen yet. A fresh search makes
    a single attempt.
    """

    def __init__(self, client: SongSearchService, page_size: int = PAGE_SIZE, max_attempts: int = MAX_ATTEMPTS):
        self.client = client
        self.page_size = int(page_size)
        self.max_attempts = max(1, int(max_attempts))

    def fetch(
        self,
        term: str,
        cursor: int = 0,
        known_ids: Iterable[int] = (),
        load_more: bool = False,
    ) -> FetchResult:
        # Copy: the caller's id set is never touched, so a failed call can be retried as is.
        known = frozenset(known_ids)
        limit = self.max_attempts if load_more else 1

        current = int(cursor)
        attempts = 0
        new_items: list[Song] = []
        upstream_exhausted = False

        while not new_items and attempts < limit:
            attempts += 1
            page = self.client.search(term, current, self.page_size)

            if not page:
                upstream_exhausted = True
                break

            page_ids: set[int] = set()
            for s in page:
                if s.track_id in known or s.track_id in page_ids:
                    continue
                page_ids.add(s.track_id)
                new_items.append(s)
            current += self.page_size

        if not new_items:
            logger.info(
                "No new songs for %r after %d attempt(s), cursor %d -> %d",
                term, attempts, cursor, current,
            )

        return FetchResult(
            songs=tuple(new_items),
            next_cursor=current,
            exhausted=upstream_exhausted or not new_items,
            attempts=attempts,
        )
