"""Pytest fixtures for API and ingestion testing."""
import os

# Keep the application engine off the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from deptracker.main import app
from deptracker.core.config import settings
from deptracker.core.database import get_db
from deptracker.core.deps import get_collaborator_bridge, get_tracker
from deptracker.core.time import utc_now
from deptracker.models.base import Base
from deptracker.models.dependency import Dependency, DependencyIssueLink
from deptracker.services.broadcast import broadcaster
from deptracker.services.collaborator_bridge import CollaboratorBridge
from deptracker.services.ingestion_stats import ingestion_stats
from deptracker.services.jira_client import JiraAPIError, JiraNotFoundError
from deptracker.services.tracker_issue import TrackerIssue

# In-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEAM_FIELD = settings.JIRA_TEAM_FIELD
ART_FIELD = settings.JIRA_ART_FIELD


def override_get_db():
    """Override database dependency for testing."""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


def jira_issue(
    key: str,
    summary: str = "",
    status: str = "In Progress",
    team: Optional[str] = None,
    art: Optional[str] = None,
    due_in_days: Optional[int] = None,
    description: Optional[str] = None,
    issue_type: str = "Story",
    links: Sequence[Tuple[str, str]] = ()
) -> dict:
    """Raw Jira issue resource; links are (type name, outward issue key) pairs."""
    due_date = None
    if due_in_days is not None:
        due_date = (utc_now() + timedelta(days=due_in_days)).isoformat() + "Z"
    return {
        "key": key,
        "fields": {
            "summary": summary or f"Summary of {key}",
            "description": description,
            "issuetype": {"name": issue_type},
            "status": {"name": status},
            "duedate": due_date,
            TEAM_FIELD: team,
            ART_FIELD: art,
            "issuelinks": [
                {"type": {"name": link_type}, "outwardIssue": {"key": target}}
                for link_type, target in links
            ],
        },
    }


class FakeTracker:
    """In-memory issue tracker with failure injection."""

    def __init__(self, issues: Iterable[dict] = ()):
        self.issues: Dict[str, dict] = {}
        self.failing: set = set()
        self.search_error: Optional[Exception] = None
        self.fetched: List[str] = []
        self.add(*issues)

    def add(self, *issues: dict) -> None:
        for raw in issues:
            self.issues[raw["key"]] = raw

    def get_myself(self) -> dict:
        return {"accountId": "fake", "displayName": "Fake User"}

    def get_projects(self) -> List[dict]:
        return [{"id": "1", "key": "ENG", "name": "Engineering"}]

    def get_issue(self, issue_key: str) -> TrackerIssue:
        self.fetched.append(issue_key)
        if issue_key in self.failing:
            raise JiraAPIError(f"Jira API Error (500): {issue_key}", status_code=500)
        raw = self.issues.get(issue_key)
        if raw is None:
            raise JiraNotFoundError(f"Jira resource not found: {issue_key}", status_code=404)
        return TrackerIssue.from_jira(raw, TEAM_FIELD, ART_FIELD)

    def search_issues(self, jql: str, page_size: Optional[int] = None):
        if self.search_error is not None:
            raise self.search_error
        for raw in list(self.issues.values()):
            if raw["fields"]["issuelinks"]:
                yield TrackerIssue.from_jira(raw, TEAM_FIELD, ART_FIELD)


@pytest.fixture(autouse=True)
def reset_ingestion_state():
    """Counters and broadcast history are process-wide."""
    ingestion_stats.reset()
    broadcaster.recent.clear()
    yield
    ingestion_stats.reset()
    broadcaster.recent.clear()


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_tracker():
    return FakeTracker()


@pytest.fixture
def no_collaborators():
    """Bridge with no commands configured, so every call falls back."""
    return CollaboratorBridge(timeout=1)


@pytest.fixture(scope="function")
def client(db_session, fake_tracker, no_collaborators):
    """Test client with database and tracker overrides.

    Note: db_session already created tables, so we don't need to create them again.
    """
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tracker] = lambda: fake_tracker
    app.dependency_overrides[get_collaborator_bridge] = lambda: no_collaborators

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def published():
    """Messages published on the broadcast hub during the test."""
    messages: List[dict] = []
    broadcaster.subscribe(messages.append)
    yield messages
    broadcaster.unsubscribe(messages.append)


def make_dependency(db, **overrides) -> Dependency:
    data = {
        "title": "Checkout API → Payments",
        "source_team": "Checkout Team",
        "source_art": "E-Commerce ART",
        "target_team": "Payments Team",
        "target_art": "Platform ART",
        "status": "in-progress",
        "risk_score": 40,
        "jira_id": "ENG-1",
        "description": "Dependency between ENG-1 and ENG-2: No description",
        "is_cross_art": True,
    }
    data.update(overrides)
    dependency = Dependency(**data)
    db.add(dependency)
    db.commit()
    db.refresh(dependency)
    return dependency


def link_dependency(db, dependency: Dependency, source_key: str, target_key: str,
                    link_type: str = "blocks") -> None:
    db.add(DependencyIssueLink(
        dependency_id=dependency.id,
        source_issue_key=source_key,
        target_issue_key=target_key,
        link_type=link_type,
    ))
    db.commit()


@pytest.fixture
def sample_dependency(db_session):
    """A cross-ART dependency derived from ENG-1 blocks ENG-2."""
    dependency = make_dependency(db_session)
    link_dependency(db_session, dependency, "ENG-1", "ENG-2")
    return dependency
