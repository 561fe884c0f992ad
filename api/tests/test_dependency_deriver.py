"""Tests for deriving dependencies from issue links."""
import logging
from datetime import datetime

from deptracker.services.dependency_deriver import derive_dependency
from deptracker.services.tracker_issue import TrackerIssue


def _issue(key, **kwargs):
    defaults = {"summary": f"{key} summary", "status": "In Progress"}
    defaults.update(kwargs)
    return TrackerIssue(key=key, **defaults)


class TestDeriveDependency:

    def test_relates_to_yields_nothing(self):
        source, target = _issue("ENG-1"), _issue("ENG-2")
        assert derive_dependency(source, target, "relates to", 50) is None

    def test_blocks_yields_dependency(self):
        source = _issue(
            "ENG-1", summary="Login service", team="Identity Team", art="Platform",
            description="Needs token API", due_date=datetime(2024, 7, 1), status="Blocked")
        target = _issue("ENG-2", summary="Token API", team="Mobile Team", art="Mobile",
                        due_date=datetime(2024, 9, 1))

        data = derive_dependency(source, target, "blocks", 77)

        assert data.title == "Login service → Token API"
        assert data.source_team == "Identity Team"
        assert data.source_art == "Platform"
        assert data.target_team == "Mobile Team"
        assert data.target_art == "Mobile"
        assert data.due_date == datetime(2024, 7, 1)
        assert data.status == "blocked"
        assert data.risk_score == 77
        assert data.jira_id == "ENG-1"
        assert data.description == "Dependency between ENG-1 and ENG-2: Needs token API"
        assert data.is_cross_art is True

    def test_link_type_match_ignores_case(self):
        data = derive_dependency(_issue("ENG-1"), _issue("ENG-2"), "Is Blocked By", 10)
        assert data is not None

    def test_missing_fields_use_placeholders(self):
        data = derive_dependency(_issue("ENG-1"), _issue("ENG-2"), "depends on", 50)

        assert data.source_team == "Unknown Team"
        assert data.target_team == "Unknown Team"
        assert data.source_art == "Unknown ART"
        assert data.target_art == "Unknown ART"
        assert data.is_cross_art is False
        assert data.description.endswith(": No description")
        assert data.due_date is None

    def test_one_missing_art_is_cross_art(self):
        data = derive_dependency(_issue("ENG-1", art="Platform"), _issue("ENG-2"), "blocks", 50)
        assert data.target_art == "Unknown ART"
        assert data.is_cross_art is True

    def test_same_art_is_not_cross_art(self):
        data = derive_dependency(
            _issue("ENG-1", art="Platform"), _issue("ENG-2", art="Platform"), "blocks", 50)
        assert data.is_cross_art is False

    def test_long_title_is_truncated(self, caplog):
        with caplog.at_level(logging.WARNING, logger="deptracker.services.dependency_deriver"):
            data = derive_dependency(
                _issue("ENG-1", summary="x" * 400), _issue("ENG-2", summary="y" * 400), "blocks", 50)
        assert len(data.title) == 500
        assert "Truncating dependency title for ENG-1 -> ENG-2" in caplog.text
