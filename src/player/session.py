# src/player/session.py
from __future__ import annotations

import random
from typing import Optional, Sequence

from core.models import RepeatMode, Song
from library.history import RecentlyPlayed


class PlaybackSession:
    """
    What is audible: the current song, the playing flag, shuffle and repeat.

    Navigation always takes the active list (discover results, favorites or one
    playlist) as an argument; the session never remembers which list that was.
    Every transition returns the song that should now be loaded, or None when
    nothing changed.
    """

    def __init__(self, recent: RecentlyPlayed, rng: Optional[random.Random] = None):
        self.recent = recent
        self.rng = rng or random.Random()

        self.current: Optional[Song] = None
        self.playing: bool = False
        self.shuffle: bool = False
        self.repeat: RepeatMode = RepeatMode.OFF

    @property
    def is_idle(self) -> bool:
        return self.current is None

    def is_current(self, song: Song) -> bool:
        return self.current is not None and self.current.track_id == song.track_id

    # ------------------ play / pause ------------------
    def play(self, song: Song) -> Optional[Song]:
        """Start ``song``; if it is already current, toggle pause instead (returns None)."""
        if self.is_current(song):
            self.playing = not self.playing
            return None

        self._load(song)
        return song

    def toggle_playing(self) -> None:
        if self.current is not None:
            self.playing = not self.playing

    def pause(self) -> None:
        if self.current is not None:
            self.playing = False

    def _load(self, song: Song) -> None:
        self.current = song
        self.playing = True
        self.recent.push(song)

    # ------------------ navigation ------------------
    def next(self, active_list: Sequence[Song]) -> Optional[Song]:
        return self._step(active_list, +1)

    def previous(self, active_list: Sequence[Song]) -> Optional[Song]:
        return self._step(active_list, -1)

    def on_track_ended(self, active_list: Sequence[Song]) -> Optional[Song]:
        # repeat-one loops in the device itself
        if self.repeat is RepeatMode.ONE:
            return None
        return self.next(active_list)

    def _step(self, active_list: Sequence[Song], direction: int) -> Optional[Song]:
        if self.current is None or not active_list:
            return None

        if self.shuffle:
            # Uniform over the whole list, the current song included.
            target = self.rng.choice(list(active_list))
        else:
            index = next(
                (i for i, s in enumerate(active_list) if s.track_id == self.current.track_id),
                -1,
            )
            if index == -1:
                return None
            target = active_list[(index + direction) % len(active_list)]

        self._load(target)
        return target

    # ------------------ modes ------------------
    def toggle_shuffle(self) -> bool:
        self.shuffle = not self.shuffle
        return self.shuffle

    def cycle_repeat(self) -> RepeatMode:
        self.repeat = self.repeat.cycled()
        return self.repeat
