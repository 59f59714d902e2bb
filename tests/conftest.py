import gc
import random

import pytest
import requests
from PySide6.QtCore import QCoreApplication, QEvent, QObject, Signal

from core.itunes_client import SearchError
from core.models import Song
from core.state import AppState
from db.database import connect_database
from db.persistence import PersistenceLayer
from ui.view_controller import ViewController


def make_song(track_id: int, title: str | None = None, artist: str = "Artist", preview: str | None = None) -> Song:
    return Song(
        track_id=track_id,
        title=title or f"Song {track_id}",
        artist=artist,
        collection="Album",
        artwork_url=f"https://img.example/{track_id}/100x100bb.jpg",
        preview_url=preview if preview is not None else f"https://audio.example/{track_id}.m4a",
        release_date="2020-01-01T00:00:00Z",
        genre="Pop",
    )


class FakeClient:
    """Search service stand-in serving fixed pages keyed by offset."""

    def __init__(self, pages=None):
        self.pages: dict[int, list[Song]] = pages or {}
        self.calls: list[tuple[str, int, int]] = []
        self.fail = False

    def search(self, term, offset=0, limit=50):
        self.calls.append((term, offset, limit))
        if self.fail:
            raise SearchError("API Error: boom")
        return list(self.pages.get(offset, []))


class FakeResponse:
    def __init__(self, payload=None, status_code=200, bad_json=False, chunks=()):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json
        self.chunks = list(chunks)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value")
        return self.payload

    def iter_content(self, chunk_size=1):
        yield from self.chunks


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.urls = []
        self.params = []

    def get(self, url, params=None, **kwargs):
        self.urls.append(url)
        self.params.append(params)
        if self.exc:
            raise self.exc
        return self.response


class FakeDevice(QObject):
    ended = Signal()
    errorOccurred = Signal(str)

    def __init__(self):
        super().__init__()
        self.calls: list[tuple] = []
        self.looping = False
        self.volume = None
        self.muted = False

    def play_url(self, url, meta=None):
        self.calls.append(("play_url", url))

    def play(self):
        self.calls.append(("play",))

    def pause(self):
        self.calls.append(("pause",))

    def set_looping(self, looping):
        self.looping = looping

    def set_volume(self, v):
        self.volume = v

    def set_muted(self, muted):
        self.muted = muted


class HeldRunner:
    """Keeps fetch tickets so tests decide when (and in which order) they finish."""

    def __init__(self):
        self.tickets = []

    def __call__(self, ticket):
        self.tickets.append(ticket)


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
    # Flush deleteLater() requests and drop wrappers while the app still exists.
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
    app.processEvents()
    gc.collect()
    app.shutdown()


@pytest.fixture
def db():
    conn = connect_database(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def persistence(db):
    return PersistenceLayer(db)


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def app_state(db, client):
    state = AppState()
    state.load_session(db, client=client, rng=random.Random(7))
    device = FakeDevice()
    state.player = device
    yield state
    device.deleteLater()
    state.deleteLater()


@pytest.fixture
def runner():
    return HeldRunner()


@pytest.fixture
def controller(app_state, runner):
    vc = ViewController(app_state, fetch_runner=runner)
    yield vc
    vc.sleep_timer.cancel()
    vc.deleteLater()
