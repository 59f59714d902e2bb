import pytest

from core.itunes_client import SearchError
from core.search_fetcher import SearchFetcher

from conftest import FakeClient, make_song


def page(ids):
    return [make_song(i) for i in ids]


def test_top_100_scenario_duplicates_exhaust_after_five_attempts():
    first = page(range(1, 51))
    client = FakeClient({0: first, 50: first, 100: first, 150: first, 200: first, 250: first})
    fetcher = SearchFetcher(client, page_size=50, max_attempts=5)

    fresh = fetcher.fetch("Top 100", 0)
    assert len(fresh.songs) == 50
    assert fresh.next_cursor == 50
    assert fresh.attempts == 1

    more = fetcher.fetch("Top 100", fresh.next_cursor, [s.track_id for s in fresh.songs], load_more=True)
    assert more.songs == ()
    assert more.attempts == 5
    assert more.next_cursor == 300
    assert more.exhausted
    assert [offset for _, offset, _ in client.calls] == [0, 50, 100, 150, 200, 250]


def test_load_more_skips_duplicate_pages_until_new_items():
    client = FakeClient({
        50: page(range(1, 11)),
        100: page(range(1, 11)),
        150: page([5, 11, 12]),
    })
    fetcher = SearchFetcher(client, page_size=50)

    result = fetcher.fetch("pop", 50, range(1, 11), load_more=True)
    assert [s.track_id for s in result.songs] == [11, 12]
    assert result.next_cursor == 200
    assert result.attempts == 3
    assert not result.exhausted


def test_fresh_search_makes_a_single_attempt():
    client = FakeClient({0: page([1, 2])})
    fetcher = SearchFetcher(client, page_size=50)

    # known ids on a fresh search would only come from a caller bug, but the
    # attempt count must stay at one either way
    result = fetcher.fetch("pop", 0, [1, 2], load_more=False)
    assert result.songs == ()
    assert result.attempts == 1
    assert len(client.calls) == 1


def test_empty_upstream_page_stops_without_advancing():
    client = FakeClient({})
    fetcher = SearchFetcher(client, page_size=50)

    result = fetcher.fetch("zzzz", 100, [1], load_more=True)
    assert result.songs == ()
    assert result.exhausted
    assert result.next_cursor == 100
    assert result.attempts == 1


def test_repeated_load_more_never_re_adds_known_ids():
    client = FakeClient({
        0: page(range(1, 6)),
        5: page([3, 4, 5, 6, 7]),
        10: page([6, 7, 8]),
        15: page([1, 8]),
        20: page([9]),
    })
    fetcher = SearchFetcher(client, page_size=5)

    loaded = list(fetcher.fetch("rock", 0).songs)
    cursor = 5
    while True:
        r = fetcher.fetch("rock", cursor, [s.track_id for s in loaded], load_more=True)
        cursor = r.next_cursor
        if not r.songs:
            break
        loaded.extend(r.songs)

    ids = [s.track_id for s in loaded]
    assert ids == [1, 2, 3, 4, 5, 6, 7, 8, 9]
    assert len(ids) == len(set(ids))


def test_failure_propagates_and_retry_is_safe():
    client = FakeClient({50: page([7, 8])})
    fetcher = SearchFetcher(client, page_size=50)
    known = {1, 2}

    client.fail = True
    with pytest.raises(SearchError):
        fetcher.fetch("jazz", 50, known, load_more=True)
    assert known == {1, 2}

    client.fail = False
    result = fetcher.fetch("jazz", 50, known, load_more=True)
    assert [s.track_id for s in result.songs] == [7, 8]
