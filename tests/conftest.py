"""Shared fixtures for the typingcore test suite."""

from __future__ import annotations

import os

# pytest-qt needs a platform plugin even though no window is shown
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from typingcore import MatchPolicy, StatsTracker, TypingSession
from typingcore.core.clock import ManualClock


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def session() -> TypingSession:
    return TypingSession("cat")


@pytest.fixture
def lenient_policy() -> MatchPolicy:
    return MatchPolicy(case_sensitive=False, ignore_whitespace_errors=True)


@pytest.fixture
def tracker() -> StatsTracker:
    return StatsTracker()


@pytest.fixture
def type_text():
    """Submit text one character at a time; returns the last timestamp."""
    def _type(session: TypingSession, text: str, start_ms: int = 0, step_ms: int = 100) -> int:
        now_ms = start_ms
        for i, char in enumerate(text):
            now_ms = start_ms + i * step_ms
            session.submit_character(char, now_ms)
        return now_ms
    return _type
