import pytest

from core.models import Playlist
from db.database import connect_database, get_config, kv_get, kv_set, set_config
from db.persistence import (
    FAVORITES_KEY,
    PLAYLISTS_KEY,
    RECENT_KEY,
    SEARCH_HISTORY_KEY,
    VOLUME_KEY,
    PersistenceLayer,
)

from conftest import make_song


def test_fresh_database_is_empty(persistence):
    assert persistence.load_favorites() == []
    assert persistence.load_playlists() == []
    assert persistence.load_recent() == []
    assert persistence.load_search_history() == []
    assert persistence.load_volume() == 1.0


def test_collections_survive_a_reload(db, persistence):
    persistence.save_favorites([make_song(1), make_song(2)])
    persistence.save_playlists([Playlist(id="p", name="Mix", songs=(make_song(3),), created_at=5)])

    again = PersistenceLayer(db)
    assert [s.track_id for s in again.load_favorites()] == [1, 2]
    assert again.load_playlists()[0].songs[0].track_id == 3


@pytest.mark.parametrize("key,loader", [
    (FAVORITES_KEY, "load_favorites"),
    (RECENT_KEY, "load_recent"),
    (PLAYLISTS_KEY, "load_playlists"),
    (SEARCH_HISTORY_KEY, "load_search_history"),
])
@pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', "42", '[{"no": "id"}]'])
def test_corrupt_data_loads_as_empty(db, persistence, key, loader, raw):
    kv_set(db, key, raw)
    assert getattr(persistence, loader)() == []


def test_partially_corrupt_list_keeps_good_entries(db, persistence):
    kv_set(db, FAVORITES_KEY, '[{"trackId": 1, "trackName": "ok"}, {"trackName": "no id"}]')
    assert [s.track_id for s in persistence.load_favorites()] == [1]


@pytest.mark.parametrize("raw,expected", [("0.25", 0.25), ("7", 1.0), ("-1", 0.0), ("loud", 1.0)])
def test_volume_is_clamped(db, persistence, raw, expected):
    kv_set(db, VOLUME_KEY, raw)
    assert persistence.load_volume() == expected


def test_clear_search_history_removes_key(db, persistence):
    persistence.save_search_history(["a"])
    persistence.clear_search_history()
    assert kv_get(db, SEARCH_HISTORY_KEY) is None


def test_write_failure_is_logged_not_raised(db, persistence, caplog):
    db.close()
    persistence.save_favorites([make_song(1)])
    assert "Could not save" in caplog.text


def test_config_defaults_and_update():
    conn = connect_database(":memory:")
    config = get_config(conn)
    assert config.page_size == 50
    assert config.max_attempts == 5
    assert config.default_term == "Top 100"

    config.country = "GB"
    set_config(conn, config)
    assert get_config(conn).country == "GB"
    conn.close()
