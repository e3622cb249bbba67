"""Tests for rolecheck.checker.tracker: per-traversal visit deduplication."""

from __future__ import annotations

from rolecheck.checker.tracker import VisitationTracker


class TestVisitationTracker:
    """Tests for VisitationTracker.should_process()."""

    def test_first_visit_is_processed(self) -> None:
        tracker = VisitationTracker()
        assert tracker.should_process("Stack/Role")

    def test_repeat_visits_are_skipped(self) -> None:
        tracker = VisitationTracker()
        tracker.should_process("Stack/Role")
        assert not tracker.should_process("Stack/Role")
        assert not tracker.should_process("Stack/Role")

    def test_distinct_paths_are_independent(self) -> None:
        tracker = VisitationTracker()
        assert tracker.should_process("Stack/Role")
        assert tracker.should_process("Stack/Role/DefaultPolicy")
        assert tracker.should_process("Other/Role")
        assert len(tracker) == 3

    def test_membership(self) -> None:
        tracker = VisitationTracker()
        assert "Stack/Role" not in tracker
        tracker.should_process("Stack/Role")
        assert "Stack/Role" in tracker

    def test_instances_do_not_share_state(self) -> None:
        first = VisitationTracker()
        second = VisitationTracker()
        first.should_process("Stack/Role")
        assert second.should_process("Stack/Role")
        assert len(second) == 1
