"""Typing-practice core: keystroke matching and live statistics."""

from __future__ import annotations

from .config import BehaviorConfig, Config, MatchPolicy, MilestoneConfig
from .core.clock import Clock, ManualClock, MonotonicClock
from .core.stats import (
    Milestone,
    StatsSnapshot,
    StatsTracker,
    calculate_score,
    compute_snapshot,
    detect_milestones,
    format_elapsed,
    format_snapshot,
)
from .core.typing_engine import (
    BackspaceResult,
    CharacterEvent,
    CharacterInfo,
    CharacterResult,
    CharacterStatus,
    CursorState,
    IgnoreReason,
    SessionPhase,
    TypingSession,
)

__version__ = "1.0.0"

__all__ = [
    'BehaviorConfig',
    'Config',
    'MatchPolicy',
    'MilestoneConfig',
    'Clock',
    'ManualClock',
    'MonotonicClock',
    'Milestone',
    'StatsSnapshot',
    'StatsTracker',
    'calculate_score',
    'compute_snapshot',
    'detect_milestones',
    'format_elapsed',
    'format_snapshot',
    'BackspaceResult',
    'CharacterEvent',
    'CharacterInfo',
    'CharacterResult',
    'CharacterStatus',
    'CursorState',
    'IgnoreReason',
    'SessionPhase',
    'TypingSession',
]
