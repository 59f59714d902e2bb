# src/player/sleep_timer.py
from __future__ import annotations

from PySide6.QtCore import QObject, QTimer, Signal

class SleepTimer(QObject):
    """Counts down once a second and emits ``expired`` when it reaches zero."""

    remainingChanged = Signal(object)   # seconds left | None
    expired = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.remaining_s: int | None = None

        self._timer = QTimer(self)
        self._timer.setInterval(1000)
        self._timer.timeout.connect(self.tick)

    @property
    def active(self) -> bool:
        return self.remaining_s is not None

    def set_minutes(self, minutes: int | None) -> None:
        """Arm the timer for ``minutes``; None or 0 cancels it."""
        if not minutes:
            self.cancel()
            return
        self.remaining_s = int(minutes) * 60
        self.remainingChanged.emit(self.remaining_s)
        self._timer.start()

    def cancel(self) -> None:
        self._timer.stop()
        if self.remaining_s is not None:
            self.remaining_s = None
            self.remainingChanged.emit(None)

    def tick(self) -> None:
        if self.remaining_s is None:
            return
        self.remaining_s -= 1
        if self.remaining_s > 0:
            self.remainingChanged.emit(self.remaining_s)
            return
        self._timer.stop()
        self.remaining_s = None
        self.remainingChanged.emit(None)
        self.expired.emit()
