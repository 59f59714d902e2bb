from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.models import FetchResult, Song

FETCH_ERROR_MESSAGE = "Something went wrong while fetching music."

SLOT_SEARCH = "search"
SLOT_MORE = "more"


def no_results_message(term: str) -> str:
    return f'No songs found for "{term}"'


@dataclass(frozen=True)
class FetchTicket:
    """Parameters of one in-flight fetch, compared against the session when it returns."""
    term: str
    cursor: int
    known_ids: frozenset[int]
    load_more: bool
    generation: int

    @property
    def slot(self) -> str:
        return SLOT_MORE if self.load_more else SLOT_SEARCH


class SearchSession:
    """
    Current term, cursor and accumulated results of the discover list.

    Hands out FetchTickets and applies their results. A second request for a
    busy slot is refused (``None``). A fresh search starts a new generation;
    results carrying an older generation are discarded.
    """

    def __init__(self):
        self.term: str = ""
        self.cursor: int = 0
        self.results: list[Song] = []
        self.error: Optional[str] = None
        self.exhausted: bool = False
        self.generation: int = 0
        self._pending: dict[str, FetchTicket] = {}

    # ------------------ state ------------------
    @property
    def is_loading(self) -> bool:
        return SLOT_SEARCH in self._pending

    @property
    def is_loading_more(self) -> bool:
        return SLOT_MORE in self._pending

    def result_ids(self) -> frozenset[int]:
        return frozenset(s.track_id for s in self.results)

    # ------------------ tickets ------------------
    def begin_search(self, term: str) -> Optional[FetchTicket]:
        term = (term or "").strip()
        if not term or self.is_loading:
            return None

        self.generation += 1
        self.term = term
        self.error = None
        self.exhausted = False
        # an older load-more can no longer land on this list
        self._pending.pop(SLOT_MORE, None)

        ticket = FetchTicket(term=term, cursor=0, known_ids=frozenset(), load_more=False, generation=self.generation)
        self._pending[SLOT_SEARCH] = ticket
        return ticket

    def begin_load_more(self) -> Optional[FetchTicket]:
        if not self.term or self._pending:
            return None

        self.error = None
        ticket = FetchTicket(
            term=self.term,
            cursor=self.cursor,
            known_ids=self.result_ids(),
            load_more=True,
            generation=self.generation,
        )
        self._pending[SLOT_MORE] = ticket
        return ticket

    def _release(self, ticket: FetchTicket) -> bool:
        """Clear the slot if ``ticket`` holds it; True when the ticket is still current."""
        if self._pending.get(ticket.slot) is ticket:
            del self._pending[ticket.slot]
        return ticket.generation == self.generation and ticket.term == self.term

    # ------------------ completion ------------------
    def complete(self, ticket: FetchTicket, result: FetchResult) -> bool:
        """Apply ``result``; returns False when the ticket was stale and nothing changed."""
        if not self._release(ticket):
            return False

        self.cursor = result.next_cursor
        self.exhausted = result.exhausted

        if ticket.load_more:
            have = self.result_ids()
            self.results.extend(s for s in result.songs if s.track_id not in have)
            return True

        self.results = list(result.songs)
        if not self.results:
            self.error = no_results_message(ticket.term)
        return True

    def fail(self, ticket: FetchTicket, message: str = FETCH_ERROR_MESSAGE) -> bool:
        if not self._release(ticket):
            return False
        self.error = message
        return True
