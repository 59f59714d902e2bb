import argparse
import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication, QStandardPaths

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.itunes_client import SearchError
from core.state import AppState, Notify
from db.database import initialize_database

logger = logging.getLogger("groovewave")

def debug_print_schema(db) -> None:
    for table in ("kv_store", "config_data"):
        cur = db.execute(f"PRAGMA table_info({table})")
        print(f"\n[{table} table schema]")
        for _cid, name, col_type, _notnull, _default, _pk in cur.fetchall():
            print(f"- {name} ({col_type})")

def get_app_data_dir() -> str:
    base = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    if not base:
        base = os.path.join(Path.home(), ".groovewave")
    os.makedirs(base, exist_ok=True)
    return base

def init_app_state(with_player: bool = False) -> AppState:
    app_state = AppState()

    db = initialize_database(get_app_data_dir())
    if os.getenv("GROOVEWAVE_DEBUG_SCHEMA") == "1":
        debug_print_schema(db)

    app_state.load_session(db)

    if with_player:
        try:
            from player.player import Player
            app_state.player = Player(volume=app_state.persistence.load_volume())
        except Exception as e:
            app_state.player = None
            app_state.queued_notifications.append(
                Notify(message=f"Failed to initialize audio player: {e}", notify_type="error")
            )

    return app_state

def _print_songs(songs) -> None:
    for i, s in enumerate(songs, 1):
        print(f"{i:3d}. {s.artist} — {s.title}  [{s.collection}, {s.release_year}]  #{s.track_id}")

# ------------------ commands ------------------
def cmd_search(app_state: AppState, args) -> int:
    term = " ".join(args.term).strip() or app_state.config.default_term
    app_state.search_history.add(term)
    search = app_state.search

    ticket = search.begin_search(term)
    try:
        search.complete(ticket, app_state.fetcher.fetch(term, ticket.cursor, ticket.known_ids, load_more=False))
        for _ in range(args.more):
            if search.exhausted:
                break
            ticket = search.begin_load_more()
            result = app_state.fetcher.fetch(term, ticket.cursor, ticket.known_ids, load_more=True)
            search.complete(ticket, result)
            logger.info("Load more added %d song(s), offset now %d", len(result.songs), search.cursor)
    except SearchError as e:
        logger.error("Search failed: %s", e)
        print("Something went wrong while fetching music.")
        return 1

    if search.error:
        print(search.error)
        return 0
    _print_songs(search.results)
    print(f"\n{len(search.results)} song(s), next offset {search.cursor}")
    return 0

def cmd_play(app_state: AppState, args) -> int:
    from PySide6.QtCore import QTimer
    from ui.view_controller import ViewController

    if app_state.player is None:
        for n in app_state.queued_notifications:
            print(n.message)
        return 1

    def run_now(ticket):
        try:
            result = app_state.fetcher.fetch(ticket.term, ticket.cursor, ticket.known_ids, load_more=ticket.load_more)
        except SearchError as e:
            logger.error("Search failed: %s", e)
            controller.fetch_failed(ticket)
            return
        controller.fetch_finished(ticket, result)

    controller = ViewController(app_state, fetch_runner=run_now)
    app_state.notification.connect(lambda n: print(f"[{n.notify_type}] {n.message}"))

    if args.favorites:
        controller.open_favorites()
    else:
        controller.search(" ".join(args.term).strip() or app_state.config.default_term)

    songs = controller.active_list()
    if not songs:
        print(app_state.search.error or "Nothing to play.")
        return 0

    if args.shuffle:
        controller.toggle_shuffle()
    if args.sleep:
        controller.set_sleep_timer(args.sleep)

    app = QCoreApplication.instance()
    remaining = {"tracks": max(1, args.count)}

    def on_loaded():
        s = app_state.playback.current
        if s is not None and app_state.playback.playing:
            print(f"Now playing: {s.artist} — {s.title}")

    def on_ended():
        remaining["tracks"] -= 1
        if remaining["tracks"] <= 0:
            QTimer.singleShot(0, app.quit)

    controller.playbackChanged.connect(on_loaded)
    app_state.player.ended.connect(on_ended)
    controller.sleep_timer.expired.connect(app.quit)

    controller.play(songs[0])
    return app.exec()

def cmd_favorites(app_state: AppState, args) -> int:
    _print_songs(app_state.library.favorites)
    return 0

def cmd_playlists(app_state: AppState, args) -> int:
    for pl in app_state.library.playlists:
        print(f"{pl.name} ({len(pl.songs)} songs) id={pl.id}")
    return 0

def cmd_recent(app_state: AppState, args) -> int:
    _print_songs(app_state.recent.songs)
    return 0

def cmd_history(app_state: AppState, args) -> int:
    if args.clear:
        app_state.search_history.clear()
        return 0
    for term in app_state.search_history.terms:
        print(term)
    return 0

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="groovewave", description="Music discovery over the iTunes search service")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="Search songs")
    p.add_argument("term", nargs="*")
    p.add_argument("--more", type=int, default=0, help="Number of load-more pages to fetch")
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("play", help="Play song previews from a search (or favorites)")
    p.add_argument("term", nargs="*")
    p.add_argument("--favorites", action="store_true", help="Play favorites instead of searching")
    p.add_argument("--shuffle", action="store_true")
    p.add_argument("--count", type=int, default=1, help="Stop after this many tracks")
    p.add_argument("--sleep", type=int, default=0, help="Sleep timer in minutes")
    p.set_defaults(func=cmd_play)

    sub.add_parser("favorites", help="List favorite songs").set_defaults(func=cmd_favorites)
    sub.add_parser("playlists", help="List playlists").set_defaults(func=cmd_playlists)
    sub.add_parser("recent", help="List recently played songs").set_defaults(func=cmd_recent)

    p = sub.add_parser("history", help="Show search history")
    p.add_argument("--clear", action="store_true")
    p.set_defaults(func=cmd_history)
    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=os.getenv("GROOVEWAVE_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with_player = args.command == "play"
    if with_player:
        # audio output needs the GUI flavour of the application object
        from PySide6.QtGui import QGuiApplication
        qt_app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])
    else:
        qt_app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    qt_app.setApplicationName("GrooveWave")

    app_state = init_app_state(with_player=with_player)
    return args.func(app_state, args)

if __name__ == "__main__":
    raise SystemExit(main())
