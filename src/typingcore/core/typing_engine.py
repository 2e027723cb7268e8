"""Core typing engine: the character-matching state machine."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
import logging

from ..config import MatchPolicy

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    """Lifecycle of a typing session."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class CharacterStatus(Enum):
    """State of a character in the target text."""
    UNTYPED = "untyped"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    CURRENT = "current"  # Only reported by get_characters()


class IgnoreReason(Enum):
    """Why a keystroke was not applied."""
    OVERFLOW = "overflow"            # Nothing left to type
    INVALID_INPUT = "invalid_input"  # Not a single character


@dataclass(frozen=True)
class CharacterEvent:
    """One accepted forward keystroke."""
    typed_char: str
    expected_char: str
    is_correct: bool
    position: int
    timestamp_ms: int


@dataclass(frozen=True)
class CursorState:
    """Cursor position and running counters."""
    index: int = 0
    mistakes_count: int = 0
    correct_count: int = 0


@dataclass(frozen=True)
class CharacterResult:
    """Result of a forward keystroke."""
    position: int
    is_correct: bool
    ignored: bool = False
    reason: Optional[IgnoreReason] = None
    phase: SessionPhase = SessionPhase.NOT_STARTED

    @property
    def overflow(self) -> bool:
        """Check if the keystroke came after the end of the text."""
        return self.reason is IgnoreReason.OVERFLOW

    @property
    def is_complete(self) -> bool:
        """Check if this keystroke left the session completed."""
        return self.phase is SessionPhase.COMPLETED


@dataclass(frozen=True)
class BackspaceResult:
    """Result of a backspace."""
    applied: bool
    new_position: int


@dataclass
class CharacterInfo:
    """Information about a single character, for display."""
    char: str
    status: CharacterStatus
    position: int


class TypingSession:
    """Tracks what has been typed against a target text.

    Every accepted keystroke advances the cursor, whether it matched or not.
    Backspace undoes the most recent keystroke. The session performs no I/O
    and never reads a clock: timestamps are supplied by the caller.
    """

    def __init__(self, target_text: str = "", policy: Optional[MatchPolicy] = None):
        self.policy = policy or MatchPolicy()
        self._target_text = ""
        self._events: List[CharacterEvent] = []
        self._correct_count = 0
        self._mistakes_count = 0
        self._corrections_count = 0
        self._phase = SessionPhase.NOT_STARTED
        self._started_at_ms: Optional[int] = None
        self._completed_at_ms: Optional[int] = None
        self.load_text(target_text)

    # -- state changes -------------------------------------------------

    def load_text(self, text: str) -> None:
        """Set new target text and reset state."""
        self._target_text = "".join(text)
        self._events = []
        self._correct_count = 0
        self._mistakes_count = 0
        self._corrections_count = 0
        self._phase = SessionPhase.NOT_STARTED
        self._started_at_ms = None
        self._completed_at_ms = None

        if not self._target_text:
            # Nothing to type, so the session is finished before it starts
            self._phase = SessionPhase.COMPLETED
            logger.debug("Loaded empty text, session completed immediately")
        else:
            logger.debug("Loaded text of %d characters", len(self._target_text))

    def reset(self) -> None:
        """Restart the exercise with the same text."""
        self.load_text(self._target_text)

    def submit_character(self, typed: str, now_ms: int) -> CharacterResult:
        """Compare a typed character with the next expected one and advance."""
        position = self.index

        if position >= len(self._target_text):
            logger.debug("Overflow: keystroke %r after end of text", typed)
            return self._ignored(IgnoreReason.OVERFLOW)

        if not isinstance(typed, str) or len(typed) != 1:
            return self._ignored(IgnoreReason.INVALID_INPUT)

        if self._phase is SessionPhase.NOT_STARTED:
            self._phase = SessionPhase.IN_PROGRESS
            self._started_at_ms = now_ms
            logger.debug("Session started at %d ms", now_ms)

        expected = self._target_text[position]
        is_correct = self.policy.matches(typed, expected)

        self._events.append(CharacterEvent(
            typed_char=typed,
            expected_char=expected,
            is_correct=is_correct,
            position=position,
            timestamp_ms=now_ms,
        ))
        if is_correct:
            self._correct_count += 1
        else:
            self._mistakes_count += 1

        if self.index == len(self._target_text):
            self._phase = SessionPhase.COMPLETED
            self._completed_at_ms = now_ms
            logger.debug(
                "Session completed at %d ms (%d correct, %d mistakes)",
                now_ms, self._correct_count, self._mistakes_count
            )

        return CharacterResult(position=position, is_correct=is_correct, phase=self._phase)

    def submit_backspace(self, now_ms: int) -> BackspaceResult:
        """Undo the most recent keystroke."""
        if not self._events or not self.policy.allow_backspace:
            return BackspaceResult(applied=False, new_position=self.index)

        self._undo_last()
        self._corrections_count += 1
        return BackspaceResult(applied=True, new_position=self.index)

    def reset_current_word(self) -> int:
        """Undo keystrokes back to the start of the word being typed.

        When the last typed character is whitespace, only that trailing
        whitespace is undone, since the word before it is finished. Returns
        the number of undone keystrokes. This is an explicit reset, so it
        works even when the policy disallows backspace.
        """
        if not self._events:
            return 0

        # Walk back over characters of the same kind as the last typed one
        word_start = self.index - 1
        in_whitespace = self._target_text[word_start].isspace()
        while word_start > 0 and self._target_text[word_start - 1].isspace() == in_whitespace:
            word_start -= 1

        undone = 0
        while self.index > word_start:
            self._undo_last()
            undone += 1
        return undone

    def _undo_last(self) -> None:
        """Remove the last event and roll back the counter it touched."""
        event = self._events.pop()
        if event.is_correct:
            self._correct_count -= 1
        else:
            self._mistakes_count -= 1

        if self._phase is SessionPhase.COMPLETED:
            self._phase = SessionPhase.IN_PROGRESS
            self._completed_at_ms = None

    def _ignored(self, reason: IgnoreReason) -> CharacterResult:
        """Create a result for a keystroke that changed nothing."""
        return CharacterResult(
            position=self.index,
            is_correct=False,
            ignored=True,
            reason=reason,
            phase=self._phase,
        )

    # -- read accessors ------------------------------------------------

    @property
    def target_text(self) -> str:
        """The text being typed."""
        return self._target_text

    @property
    def phase(self) -> SessionPhase:
        """Current lifecycle phase."""
        return self._phase

    @property
    def index(self) -> int:
        """Cursor position; one past the last typed character."""
        return len(self._events)

    @property
    def correct_count(self) -> int:
        """Keystrokes in the log that matched."""
        return self._correct_count

    @property
    def mistakes_count(self) -> int:
        """Keystrokes in the log that did not match."""
        return self._mistakes_count

    @property
    def corrections_count(self) -> int:
        """Applied backspaces since the text was loaded."""
        return self._corrections_count

    @property
    def cursor(self) -> CursorState:
        """Cursor position and counters as one value."""
        return CursorState(
            index=self.index,
            mistakes_count=self._mistakes_count,
            correct_count=self._correct_count,
        )

    @property
    def input_log(self) -> Tuple[CharacterEvent, ...]:
        """Accepted keystrokes, oldest first."""
        return tuple(self._events)

    @property
    def started_at_ms(self) -> Optional[int]:
        """Timestamp of the first keystroke, or None."""
        return self._started_at_ms

    @property
    def completed_at_ms(self) -> Optional[int]:
        """Timestamp of the keystroke that finished the text, or None."""
        return self._completed_at_ms

    @property
    def is_complete(self) -> bool:
        """Check if every character has been typed."""
        return self._phase is SessionPhase.COMPLETED

    @property
    def typed_text(self) -> str:
        """Characters typed so far."""
        return "".join(event.typed_char for event in self._events)

    def get_character_status(self, position: int) -> CharacterStatus:
        """Classify a position of the target text for rendering."""
        if position < 0 or position >= len(self._target_text):
            raise IndexError(f"position {position} outside text of length {len(self._target_text)}")

        if position >= self.index:
            return CharacterStatus.UNTYPED
        if self._events[position].is_correct:
            return CharacterStatus.CORRECT
        return CharacterStatus.INCORRECT

    def get_characters(self) -> List[CharacterInfo]:
        """Get every target character with its status, cursor marked CURRENT."""
        characters = []
        for i, char in enumerate(self._target_text):
            if i == self.index:
                status = CharacterStatus.CURRENT
            else:
                status = self.get_character_status(i)
            characters.append(CharacterInfo(char=char, status=status, position=i))
        return characters

    def get_progress_percentage(self) -> float:
        """Get progress as percentage (0.0 to 1.0)."""
        if not self._target_text:
            return 1.0
        return self.index / len(self._target_text)

    def get_mistake_positions(self) -> List[int]:
        """Get positions currently holding a mistyped character."""
        return [event.position for event in self._events if not event.is_correct]

    def get_weak_keys(self) -> Counter:
        """Count mistakes per expected character (case-folded)."""
        weak_keys: Counter = Counter()
        for event in self._events:
            if not event.is_correct:
                weak_keys[event.expected_char.lower()] += 1
        return weak_keys
