# src/player/player.py
from __future__ import annotations

import logging
from enum import Enum, auto

from PySide6.QtCore import QObject, Signal, QUrl
from PySide6.QtMultimedia import QMediaPlayer, QAudioOutput

from core.models import NowPlaying

logger = logging.getLogger(__name__)

LOOP_INFINITE = -1
LOOP_ONCE = 1

class PlayerStatus(Enum):
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()

class Player(QObject):
    """Single audio output streaming song previews through QMediaPlayer."""

    statusChanged = Signal(object)      # PlayerStatus
    positionChanged = Signal(int)       # ms
    durationChanged = Signal(int)       # ms
    trackChanged = Signal(object)       # NowPlaying | None
    errorOccurred = Signal(str)
    ended = Signal()

    def __init__(self, volume: float = 1.0):
        super().__init__()

        self.status = PlayerStatus.STOPPED
        self.track: NowPlaying | None = None

        self.audio = QAudioOutput()
        self.media = QMediaPlayer()
        self.media.setAudioOutput(self.audio)

        # 0.0 - 1.0
        self._volume_0_to_1: float = 1.0
        self._muted = False
        self.set_volume(volume)

        self.media.positionChanged.connect(self.positionChanged.emit)
        self.media.durationChanged.connect(self.durationChanged.emit)
        self.media.playbackStateChanged.connect(self._on_state_changed)
        self.media.mediaStatusChanged.connect(self._on_media_status)
        self.media.errorOccurred.connect(self._on_error)

    # ----------------------------
    # Qt handlers
    # ----------------------------

    def _on_state_changed(self, state: QMediaPlayer.PlaybackState) -> None:
        if state == QMediaPlayer.PlaybackState.PlayingState:
            self._set_status(PlayerStatus.PLAYING)
        elif state == QMediaPlayer.PlaybackState.PausedState:
            self._set_status(PlayerStatus.PAUSED)
        else:
            self._set_status(PlayerStatus.STOPPED)

    def _on_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self._set_status(PlayerStatus.STOPPED)
            self.ended.emit()

    def _on_error(self, error, error_string: str) -> None:
        # The session keeps its playing flag; nothing is audible until the next track.
        track_id = self.track.track_id if self.track else None
        logger.warning("Playback failed for track %s: %s", track_id, error_string)
        self.errorOccurred.emit(error_string or str(error))

    def _set_status(self, new_status: PlayerStatus) -> None:
        if self.status != new_status:
            self.status = new_status
            self.statusChanged.emit(self.status)

    # ----------------------------
    # Public API
    # ----------------------------

    def play_url(self, url: str, meta: NowPlaying | None = None) -> None:
        self.track = meta
        self.trackChanged.emit(self.track)

        self.media.setSource(QUrl(url))
        self.media.play()

    def play(self) -> None:
        self.media.play()

    def pause(self) -> None:
        self.media.pause()

    def stop(self) -> None:
        self.media.stop()

    def seek_ms(self, ms: int) -> None:
        self.media.setPosition(max(0, int(ms)))

    def set_looping(self, looping: bool) -> None:
        self.media.setLoops(LOOP_INFINITE if looping else LOOP_ONCE)

    def set_volume(self, volume_0_to_1: float) -> None:
        v = min(1.0, max(0.0, float(volume_0_to_1)))
        self._volume_0_to_1 = v
        self.audio.setVolume(0.0 if self._muted else v)

    def volume(self) -> float:
        return self._volume_0_to_1

    def set_muted(self, muted: bool) -> None:
        self._muted = bool(muted)
        self.audio.setVolume(0.0 if self._muted else self._volume_0_to_1)

    def is_muted(self) -> bool:
        return self._muted

    # convenient getters for UI
    def position_ms(self) -> int:
        return int(self.media.position())

    def duration_ms(self) -> int:
        return int(self.media.duration())
