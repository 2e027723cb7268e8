"""Tests for snapshot computation and milestone detection."""

from __future__ import annotations

import pytest

from typingcore import (
    MilestoneConfig,
    StatsSnapshot,
    StatsTracker,
    TypingSession,
    calculate_score,
    compute_snapshot,
    detect_milestones,
    format_elapsed,
    format_snapshot,
)


def test_snapshot_before_start(session, tracker):
    snapshot = tracker.compute_snapshot(session, 5000)
    assert snapshot.elapsed_seconds == 0.0
    assert snapshot.wpm == 0.0
    assert snapshot.accuracy == 100.0
    assert snapshot.mistakes == 0


def test_cat_scenario_final_snapshot(session, tracker):
    session.submit_character("c", 0)
    session.submit_character("x", 100)
    session.submit_character("t", 200)

    snapshot = tracker.compute_snapshot(session, 200)
    assert snapshot.correct == 2
    assert snapshot.mistakes == 1
    assert snapshot.accuracy == pytest.approx(66.67, abs=0.01)
    assert snapshot.elapsed_seconds == pytest.approx(0.2)
    assert snapshot.progress == 1.0


def test_wpm_formula():
    session = TypingSession("a" * 60)
    for _ in range(59):
        session.submit_character("a", 0)
    session.submit_character("a", 60000)

    snapshot = compute_snapshot(session, 60000)
    assert snapshot.correct == 60
    assert snapshot.wpm == pytest.approx(12.0)
    assert snapshot.raw_wpm == pytest.approx(12.0)
    assert snapshot.accuracy == 100.0


def test_elapsed_freezes_at_completion():
    session = TypingSession("ab")
    session.submit_character("a", 1000)
    session.submit_character("b", 3000)
    assert compute_snapshot(session, 90000).elapsed_seconds == 2.0


def test_elapsed_uses_now_while_in_progress():
    session = TypingSession("abc")
    session.submit_character("a", 1000)
    assert compute_snapshot(session, 4000).elapsed_seconds == 3.0


def test_clock_running_backwards_is_clamped():
    session = TypingSession("abc")
    session.submit_character("a", 5000)
    snapshot = compute_snapshot(session, 1000)
    assert snapshot.elapsed_seconds == 0.0
    assert snapshot.wpm == 0.0


def test_all_mistakes():
    session = TypingSession("abcde")
    for i, char in enumerate("vwxyz"):
        session.submit_character(char, i * 1000)

    snapshot = compute_snapshot(session, 5000)
    assert snapshot.accuracy == 0.0
    assert snapshot.wpm == 0.0
    assert snapshot.raw_wpm > 0.0


def test_corrections_are_reported():
    session = TypingSession("abc")
    session.submit_character("x", 0)
    session.submit_backspace(10)
    session.submit_character("a", 20)

    snapshot = compute_snapshot(session, 20)
    assert snapshot.corrections_count == 1
    assert snapshot.mistakes == 0
    assert snapshot.accuracy == 100.0


def test_bounds_over_mixed_input():
    session = TypingSession("the quick brown fox")
    typed = "thr quixk brown fix"
    for i, char in enumerate(typed):
        session.submit_character(char, i * 150)
        snapshot = compute_snapshot(session, i * 150)
        assert 0.0 <= snapshot.accuracy <= 100.0
        assert snapshot.wpm >= 0.0


class TestMilestones:

    def _snapshot(self, wpm=0.0, accuracy=100.0, correct=20, mistakes=0):
        return StatsSnapshot(wpm=wpm, accuracy=accuracy, correct=correct, mistakes=mistakes)

    def test_detects_crossed_thresholds(self):
        milestones = detect_milestones(self._snapshot(wpm=25.0, accuracy=96.0), set())
        keys = [milestone.key for milestone in milestones]
        assert keys == ["wpm:10", "wpm:20", "accuracy:90", "accuracy:95"]

    def test_skips_already_reached(self):
        reached = {"wpm:10", "accuracy:90"}
        milestones = detect_milestones(self._snapshot(wpm=25.0, accuracy=96.0), reached)
        assert [milestone.key for milestone in milestones] == ["wpm:20", "accuracy:95"]

    def test_waits_for_min_characters(self):
        snapshot = self._snapshot(wpm=100.0, correct=3)
        assert detect_milestones(snapshot, set()) == []
        assert detect_milestones(snapshot, set(), MilestoneConfig(min_characters=3))

    def test_nothing_without_keystrokes(self):
        snapshot = self._snapshot(correct=0)
        assert detect_milestones(snapshot, set(), MilestoneConfig(min_characters=0)) == []

    def test_tracker_announces_once(self):
        announced = []
        tracker = StatsTracker(milestone_callback=announced.append)
        snapshot = self._snapshot(wpm=31.0, accuracy=80.0)

        first = tracker.check_milestones(snapshot)
        second = tracker.check_milestones(snapshot)

        assert [milestone.key for milestone in first] == ["wpm:10", "wpm:20", "wpm:30"]
        assert second == []
        assert announced == first
        assert tracker.reached_milestones == {"wpm:10", "wpm:20", "wpm:30"}

    def test_tracker_reset_allows_announcing_again(self):
        tracker = StatsTracker()
        snapshot = self._snapshot(wpm=15.0, accuracy=50.0)
        tracker.check_milestones(snapshot)
        tracker.reset()
        assert [milestone.key for milestone in tracker.check_milestones(snapshot)] == ["wpm:10"]

    def test_failing_callback_does_not_break_tracker(self):
        def explode(milestone):
            raise RuntimeError("boom")

        tracker = StatsTracker(milestone_callback=explode)
        milestones = tracker.check_milestones(self._snapshot(wpm=12.0, accuracy=0.0))
        assert [milestone.key for milestone in milestones] == ["wpm:10"]
        assert "wpm:10" in tracker.reached_milestones

    def test_update_checks_live_session(self):
        session = TypingSession("a" * 20)
        tracker = StatsTracker(MilestoneConfig(wpm_thresholds=(), min_characters=10))
        for i in range(10):
            session.submit_character("a", i * 100)

        tracker.update(session, 900)
        assert "accuracy:99" in tracker.reached_milestones


def test_summary(session, tracker):
    session.submit_character("c", 0)
    session.submit_character("a", 30000)
    session.submit_character("t", 60000)

    summary = tracker.summary(session, 60000)
    assert summary["character_count"] == 3
    assert summary["is_complete"] is True
    assert summary["accuracy"] == 100.0
    assert 0 <= summary["score"] <= 100
    assert summary["milestones"] == []


def test_format_elapsed():
    assert format_elapsed(0) == "00:00"
    assert format_elapsed(75.9) == "01:15"
    assert format_elapsed(-3) == "00:00"


def test_format_snapshot():
    snapshot = StatsSnapshot(wpm=42.3, accuracy=97.5, elapsed_seconds=61, mistakes=2)
    assert format_snapshot(snapshot) == "Time: 01:01, Errors: 2, WPM: 42.3, Accuracy: 97.5%"

    snapshot = StatsSnapshot(corrections_count=3)
    assert "Corrections: 3" in format_snapshot(snapshot)


@pytest.mark.parametrize("wpm, accuracy, expected", [
    (0.0, 100.0, 70),
    (40.0, 100.0, 100),
    (80.0, 100.0, 100),
    (20.0, 50.0, 50),
    (0.0, 0.0, 0),
])
def test_calculate_score(wpm, accuracy, expected):
    assert calculate_score(StatsSnapshot(wpm=wpm, accuracy=accuracy)) == expected
