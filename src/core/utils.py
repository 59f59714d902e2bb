import math
import re
import time
import uuid


def song_key(artist: str, title: str) -> str:
    """
    Composite (artist, title) key used to spot the same recording published
    under different track ids. Case-insensitive, surrounding whitespace ignored.
    """
    return f"{(artist or '').lower().strip()}-{(title or '').lower().strip()}"


def new_playlist_id() -> str:
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def format_time(seconds: float) -> str:
    if seconds is None or math.isnan(seconds):
        return "0:00"
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def share_text(title: str, artist: str) -> str:
    return f'Check out "{title}" by {artist} on GrooveWave!'


def preview_file_name(title: str, artist: str) -> str:
    # Drop characters that are not allowed in file names on common platforms.
    name = f"{title} - {artist}.m4a"
    return re.sub(r'[\\/:*?"<>|]', "_", name)
