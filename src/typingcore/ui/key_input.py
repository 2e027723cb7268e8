"""Qt glue that feeds key events into a typing session."""

from __future__ import annotations

from typing import Optional
import logging

from PyQt6.QtCore import QElapsedTimer, QObject, Qt, pyqtSignal
from PyQt6.QtGui import QKeyEvent

from ..config import Config
from ..core.clock import Clock
from ..core.stats import StatsSnapshot, StatsTracker
from ..core.typing_engine import SessionPhase, TypingSession

logger = logging.getLogger(__name__)

_TEXT_KEYS = {
    Qt.Key.Key_Return: "\n",
    Qt.Key.Key_Enter: "\n",
    Qt.Key.Key_Tab: "\t",
}


class QtClock:
    """Clock backed by Qt's ``QElapsedTimer``, started on construction."""

    def __init__(self):
        self._timer = QElapsedTimer()
        self._timer.start()

    def now_ms(self) -> int:
        """Milliseconds since the timer was started."""
        return int(self._timer.elapsed())

    def restart(self) -> None:
        """Start counting from zero again."""
        self._timer.restart()


class KeyInputController(QObject):
    """Translates key presses into session calls and reports the results."""

    # Signals
    character_processed = pyqtSignal(object)  # CharacterResult
    backspace_processed = pyqtSignal(object)  # BackspaceResult
    stats_updated = pyqtSignal(object)        # StatsSnapshot
    milestone_reached = pyqtSignal(object)    # Milestone
    session_completed = pyqtSignal(object)    # final StatsSnapshot
    overflow = pyqtSignal()

    def __init__(
        self,
        config: Optional[Config] = None,
        clock: Optional[Clock] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.config = config or Config()
        self.clock = clock or QtClock()
        self.session = TypingSession(policy=self.config.match)
        self.stats = StatsTracker(self.config.milestones, self.milestone_reached.emit)
        self._last_key_ms: Optional[int] = None

    def load_text(self, text: str) -> None:
        """Start a new exercise."""
        self.session.load_text(text)
        self.stats.reset()
        self._last_key_ms = None
        self.stats_updated.emit(self.snapshot())

    def reset(self) -> None:
        """Restart the exercise according to the configured reset mode."""
        if self.config.behavior.reset_mode == "word":
            self.reset_word()
            return
        self.session.reset()
        self.stats.reset()
        self._last_key_ms = None
        self.stats_updated.emit(self.snapshot())

    def reset_word(self) -> int:
        """Retype the current word."""
        undone = self.session.reset_current_word()
        if undone:
            self.stats_updated.emit(self.snapshot())
        return undone

    def snapshot(self) -> StatsSnapshot:
        """Get statistics for the current exercise."""
        return self.stats.compute_snapshot(self.session, self.clock.now_ms())

    def handle_key_event(self, event: QKeyEvent) -> bool:
        """Process a key press. Returns True when the key was consumed."""
        key = event.key()
        text = event.text()

        if key == Qt.Key.Key_Backspace:
            return self.submit_backspace()
        if key in _TEXT_KEYS:
            return self.submit_text(_TEXT_KEYS[key])
        if len(text) == 1 and text.isprintable():
            return self.submit_text(text)
        # Ignore other keys
        return False

    def submit_text(self, char: str) -> bool:
        now_ms = self.clock.now_ms()
        self._restart_if_idle(now_ms)

        result = self.session.submit_character(char, now_ms)
        self._last_key_ms = now_ms
        self.character_processed.emit(result)

        if result.overflow:
            self.overflow.emit()
            return True
        if result.ignored:
            return False

        snapshot = self.stats.update(self.session, now_ms)
        self.stats_updated.emit(snapshot)
        if result.is_complete:
            self.session_completed.emit(snapshot)
        return True

    def submit_backspace(self) -> bool:
        now_ms = self.clock.now_ms()
        result = self.session.submit_backspace(now_ms)
        self._last_key_ms = now_ms
        self.backspace_processed.emit(result)
        if result.applied:
            self.stats_updated.emit(self.snapshot())
        return result.applied

    def _restart_if_idle(self, now_ms: int) -> None:
        timeout = self.config.behavior.idle_timeout_ms
        if timeout <= 0 or self._last_key_ms is None:
            return
        if self.session.phase is not SessionPhase.IN_PROGRESS:
            return
        if now_ms - self._last_key_ms > timeout:
            logger.debug("Idle for %d ms, restarting exercise", now_ms - self._last_key_ms)
            self.session.reset()
            self.stats.reset()
