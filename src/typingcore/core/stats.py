"""Statistics for typing practice sessions."""

from __future__ import annotations

from typing import AbstractSet, Any, Callable, Dict, List, Optional, Set
from dataclasses import dataclass, asdict
import logging

from ..config import MilestoneConfig
from .typing_engine import SessionPhase, TypingSession

logger = logging.getLogger(__name__)

CHARS_PER_WORD = 5.0


@dataclass(frozen=True)
class StatsSnapshot:
    """Performance figures at one moment of a session."""
    wpm: float = 0.0
    accuracy: float = 100.0
    elapsed_seconds: float = 0.0
    mistakes: int = 0
    corrections_count: int = 0
    correct: int = 0
    raw_wpm: float = 0.0
    progress: float = 0.0

    @property
    def forward_keystrokes(self) -> int:
        return self.correct + self.mistakes

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Milestone:
    """A threshold crossed during a session, e.g. ``wpm:30``."""
    key: str
    kind: str
    threshold: float


def _milestone_key(kind: str, threshold: float) -> str:
    return f"{kind}:{threshold:g}"


def _words_per_minute(characters: int, elapsed_seconds: float) -> float:
    minutes = elapsed_seconds / 60.0
    if minutes <= 0:
        return 0.0
    return (characters / CHARS_PER_WORD) / minutes


def elapsed_seconds_for(session: TypingSession, now_ms: int) -> float:
    """Seconds between the first keystroke and completion (or ``now_ms``)."""
    if session.phase is SessionPhase.NOT_STARTED or session.started_at_ms is None:
        return 0.0

    if session.phase is SessionPhase.COMPLETED and session.completed_at_ms is not None:
        end_ms = session.completed_at_ms
    else:
        end_ms = now_ms

    # A clock running backwards counts as no time passed
    return max(0, end_ms - session.started_at_ms) / 1000.0


def compute_snapshot(session: TypingSession, now_ms: int) -> StatsSnapshot:
    """Derive a StatsSnapshot from the session state at ``now_ms``."""
    cursor = session.cursor
    elapsed = elapsed_seconds_for(session, now_ms)

    submitted = cursor.correct_count + cursor.mistakes_count
    if submitted == 0:
        accuracy = 100.0
    else:
        accuracy = cursor.correct_count / submitted * 100.0

    return StatsSnapshot(
        wpm=_words_per_minute(cursor.correct_count, elapsed),
        accuracy=accuracy,
        elapsed_seconds=elapsed,
        mistakes=cursor.mistakes_count,
        corrections_count=session.corrections_count,
        correct=cursor.correct_count,
        raw_wpm=_words_per_minute(cursor.index, elapsed),
        progress=session.get_progress_percentage(),
    )


def detect_milestones(
    snapshot: StatsSnapshot,
    reached: AbstractSet[str],
    config: Optional[MilestoneConfig] = None,
) -> List[Milestone]:
    """Get milestones the snapshot crosses that are not in ``reached``."""
    config = config or MilestoneConfig()
    if snapshot.forward_keystrokes < config.min_characters or snapshot.forward_keystrokes == 0:
        return []

    crossed = []
    for threshold in config.wpm_thresholds:
        if snapshot.wpm >= threshold:
            crossed.append(Milestone(_milestone_key("wpm", threshold), "wpm", threshold))
    for threshold in config.accuracy_thresholds:
        if snapshot.accuracy >= threshold:
            crossed.append(Milestone(_milestone_key("accuracy", threshold), "accuracy", threshold))

    return [milestone for milestone in crossed if milestone.key not in reached]


def format_elapsed(seconds: float) -> str:
    """Format elapsed seconds as MM:SS."""
    seconds = max(0.0, seconds)
    minutes = int(seconds // 60)
    seconds = int(seconds % 60)
    return f"{minutes:02d}:{seconds:02d}"


def format_snapshot(snapshot: StatsSnapshot) -> str:
    """Get formatted statistics string."""
    parts = [
        f"Time: {format_elapsed(snapshot.elapsed_seconds)}",
        f"Errors: {snapshot.mistakes}",
    ]
    if snapshot.corrections_count > 0:
        parts.append(f"Corrections: {snapshot.corrections_count}")
    parts.append(f"WPM: {snapshot.wpm:.1f}")
    parts.append(f"Accuracy: {snapshot.accuracy:.1f}%")
    return ", ".join(parts)


def calculate_score(snapshot: StatsSnapshot, wpm_target: float = 40.0) -> int:
    """Calculate overall performance score (0-100)."""
    # Base score from accuracy (70% weight)
    accuracy_score = snapshot.accuracy / 100.0 * 70.0

    # Speed bonus (30% weight), wpm_target WPM = full speed score
    if wpm_target > 0:
        speed_score = min(30.0, (snapshot.wpm / wpm_target) * 30.0)
    else:
        speed_score = 30.0

    return max(0, min(100, int(accuracy_score + speed_score)))


class StatsTracker:
    """Derives live metrics from a TypingSession and announces milestones.

    The tracker never mutates the session. Its only state is the set of
    milestones already announced, so reset it whenever the session is reset.
    """

    def __init__(
        self,
        config: Optional[MilestoneConfig] = None,
        milestone_callback: Optional[Callable[[Milestone], None]] = None,
    ):
        self.config = config or MilestoneConfig()
        self.milestone_callback = milestone_callback
        self._reached: Set[str] = set()

    @property
    def reached_milestones(self) -> frozenset:
        return frozenset(self._reached)

    def compute_snapshot(self, session: TypingSession, now_ms: int) -> StatsSnapshot:
        """Get current statistics for ``session``."""
        return compute_snapshot(session, now_ms)

    def check_milestones(self, snapshot: StatsSnapshot) -> List[Milestone]:
        """Record and return milestones newly crossed by ``snapshot``."""
        new_milestones = detect_milestones(snapshot, self._reached, self.config)
        for milestone in new_milestones:
            self._reached.add(milestone.key)
            logger.debug("Milestone reached: %s", milestone.key)
            self._notify_milestone(milestone)
        return new_milestones

    def update(self, session: TypingSession, now_ms: int) -> StatsSnapshot:
        """Compute a snapshot and check it for milestones."""
        snapshot = self.compute_snapshot(session, now_ms)
        self.check_milestones(snapshot)
        return snapshot

    def summary(self, session: TypingSession, now_ms: int) -> Dict[str, Any]:
        """Get complete session summary as dictionary."""
        snapshot = self.compute_snapshot(session, now_ms)
        summary = snapshot.to_dict()
        summary.update({
            "character_count": len(session.target_text),
            "score": calculate_score(snapshot),
            "milestones": sorted(self._reached),
            "is_complete": session.is_complete,
        })
        return summary

    def reset(self) -> None:
        """Forget announced milestones."""
        self._reached.clear()

    def _notify_milestone(self, milestone: Milestone) -> None:
        if self.milestone_callback:
            try:
                self.milestone_callback(milestone)
            except Exception:
                logger.exception("Error in milestone callback for %s", milestone.key)
