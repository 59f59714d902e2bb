from core.models import FetchResult
from core.search_session import FETCH_ERROR_MESSAGE, SearchSession

from conftest import make_song


def result(ids, next_cursor, exhausted=False):
    return FetchResult(songs=tuple(make_song(i) for i in ids), next_cursor=next_cursor, exhausted=exhausted)


def test_fresh_search_replaces_results():
    session = SearchSession()
    t = session.begin_search("Pop")
    assert session.is_loading
    assert session.complete(t, result([1, 2], 50))
    assert [s.track_id for s in session.results] == [1, 2]
    assert session.cursor == 50
    assert not session.is_loading

    t = session.begin_search("Rock")
    session.complete(t, result([9], 50))
    assert [s.track_id for s in session.results] == [9]
    assert session.term == "Rock"


def test_fresh_search_without_results_reports_no_results():
    session = SearchSession()
    t = session.begin_search("qwertyuiop")
    session.complete(t, result([], 0, exhausted=True))
    assert session.results == []
    assert session.error == 'No songs found for "qwertyuiop"'


def test_load_more_appends_and_carries_known_ids():
    session = SearchSession()
    session.complete(session.begin_search("Pop"), result([1, 2], 50))

    t = session.begin_load_more()
    assert t.cursor == 50
    assert t.known_ids == frozenset({1, 2})
    session.complete(t, result([3], 100))
    assert [s.track_id for s in session.results] == [1, 2, 3]
    assert session.cursor == 100


def test_empty_load_more_is_silent():
    session = SearchSession()
    session.complete(session.begin_search("Pop"), result([1], 50))
    t = session.begin_load_more()
    session.complete(t, result([], 300, exhausted=True))
    assert session.error is None
    assert session.exhausted
    assert len(session.results) == 1


def test_busy_slots_refuse_new_requests():
    session = SearchSession()
    first = session.begin_search("Pop")
    assert session.begin_search("Rock") is None
    assert session.begin_load_more() is None

    session.complete(first, result([1], 50))
    more = session.begin_load_more()
    assert more is not None
    assert session.begin_load_more() is None


def test_blank_term_is_ignored():
    session = SearchSession()
    assert session.begin_search("   ") is None


def test_slow_load_more_does_not_overwrite_newer_search():
    session = SearchSession()
    session.complete(session.begin_search("Pop"), result([1, 2], 50))

    more = session.begin_load_more()
    fresh = session.begin_search("Jazz")
    assert fresh is not None

    session.complete(fresh, result([20, 21], 50))
    assert session.complete(more, result([3, 4], 100)) is False
    assert [s.track_id for s in session.results] == [20, 21]
    assert session.cursor == 50


def test_failure_sets_error_and_frees_slot():
    session = SearchSession()
    t = session.begin_search("Pop")
    assert session.fail(t)
    assert session.error == FETCH_ERROR_MESSAGE
    assert not session.is_loading
    assert session.begin_search("Pop") is not None
