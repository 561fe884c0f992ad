"""Tests for status mapping and fallback risk scoring."""
from datetime import datetime, timedelta

import pytest

from deptracker.core.dependency_rules import (
    calculate_fallback_risk_score,
    clamp_risk_score,
    days_until,
    is_dependency_link,
    map_status,
    risk_level_label,
)

NOW = datetime(2024, 6, 10, 12, 0, 0)


class TestMapStatus:
    """Tracker status names map onto the four dependency statuses."""

    @pytest.mark.parametrize("tracker_status,expected", [
        ("Done", "completed"),
        ("Completed", "completed"),
        ("RESOLVED", "completed"),
        ("Blocked", "blocked"),
        ("Blocker raised", "blocked"),
        ("At Risk", "at-risk"),
        ("Impediment", "at-risk"),
        ("In Progress", "in-progress"),
        ("To Do", "in-progress"),
        ("", "in-progress"),
        (None, "in-progress"),
    ])
    def test_mapping(self, tracker_status, expected):
        assert map_status(tracker_status) == expected

    def test_completed_takes_precedence_over_blocked(self):
        assert map_status("Done - was blocked") == "completed"

    def test_blocked_takes_precedence_over_risk(self):
        assert map_status("Blocked (risk)") == "blocked"


class TestIsDependencyLink:
    def test_allow_listed_types(self):
        assert is_dependency_link("blocks")
        assert is_dependency_link("depends on")
        assert is_dependency_link("is blocked by")

    def test_case_and_whitespace_are_ignored(self):
        assert is_dependency_link("Blocks")
        assert is_dependency_link("  Depends On ")

    def test_other_types_rejected(self):
        assert not is_dependency_link("relates to")
        assert not is_dependency_link("duplicates")
        assert not is_dependency_link("")
        assert not is_dependency_link(None)


class TestFallbackRiskScore:
    """Deterministic additive formula used when the scorer is unavailable."""

    def test_base_score(self):
        assert calculate_fallback_risk_score("In Progress", None, False, now=NOW) == 50

    def test_blocked_target(self):
        assert calculate_fallback_risk_score("Blocked", None, False, now=NOW) == 80

    def test_due_soon(self):
        due = NOW + timedelta(days=3)
        assert calculate_fallback_risk_score("In Progress", due, False, now=NOW) == 60

    def test_due_in_seven_days_is_not_soon(self):
        due = NOW + timedelta(days=7)
        assert calculate_fallback_risk_score("In Progress", due, False, now=NOW) == 50

    def test_overdue(self):
        due = NOW - timedelta(days=5)
        assert calculate_fallback_risk_score("In Progress", due, False, now=NOW) == 70

    def test_cross_art(self):
        assert calculate_fallback_risk_score("To Do", None, True, now=NOW) == 65

    def test_overdue_blocked_cross_art_clamps_to_100(self):
        due = NOW - timedelta(days=5)
        scores = {
            calculate_fallback_risk_score("Blocked", due, True, now=NOW)
            for _ in range(5)
        }
        assert scores == {100}

    def test_due_later_today_counts_as_due_soon(self):
        due = NOW + timedelta(hours=2)
        assert days_until(due, NOW) == 1
        assert calculate_fallback_risk_score(None, due, False, now=NOW) == 60


class TestHelpers:
    def test_clamp(self):
        assert clamp_risk_score(115) == 100
        assert clamp_risk_score(-3) == 0
        assert clamp_risk_score(42.4) == 42

    def test_days_until_rounds_up(self):
        assert days_until(NOW + timedelta(days=2, hours=1), NOW) == 3
        assert days_until(NOW - timedelta(days=5), NOW) == -5

    @pytest.mark.parametrize("score,label", [
        (85, "High Risk"),
        (71, "High Risk"),
        (70, "Medium"),
        (41, "Medium"),
        (40, "Low Risk"),
        (0, "Low Risk"),
        (None, "Low Risk"),
    ])
    def test_risk_level_label(self, score, label):
        assert risk_level_label(score) == label
