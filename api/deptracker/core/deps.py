"""Shared FastAPI dependencies."""
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from deptracker.core.config import settings
from deptracker.core.database import get_db
from deptracker.models.jira_config import JiraIntegrationConfig
from deptracker.services.broadcast import BroadcastHub, broadcaster
from deptracker.services.collaborator_bridge import CollaboratorBridge
from deptracker.services.demo_tracker import DemoTracker
from deptracker.services.jira_client import (
    JiraClient,
    JiraConfigurationError,
    connection_from_config,
    connection_from_settings,
)
from deptracker.services.risk_scoring import RiskScorer
from deptracker.services.tracker_issue import IssueTracker
from deptracker.services.webhook_reconciler import WebhookReconciler


class UnconfiguredTracker:
    """Stands in when no tracker connection exists; every call fails."""

    def _fail(self, *args, **kwargs):
        raise JiraConfigurationError("Jira configuration is not set")

    get_myself = _fail
    get_projects = _fail
    get_issue = _fail
    search_issues = _fail


@lru_cache
def get_demo_tracker() -> DemoTracker:
    return DemoTracker()


def get_tracker(db: Session = Depends(get_db)) -> IssueTracker:
    """Stored integration config first, then environment settings."""
    if settings.JIRA_DEMO_MODE:
        return get_demo_tracker()

    config = db.query(JiraIntegrationConfig).first()
    if config is not None:
        connection = connection_from_config(config)
        if connection.is_configured:
            return JiraClient(connection)

    connection = connection_from_settings()
    if connection.is_configured:
        return JiraClient(connection)
    return UnconfiguredTracker()


def get_collaborator_bridge() -> CollaboratorBridge:
    return CollaboratorBridge.from_settings()


def get_broadcaster() -> BroadcastHub:
    return broadcaster


def get_risk_scorer(
    bridge: CollaboratorBridge = Depends(get_collaborator_bridge)
) -> RiskScorer:
    return RiskScorer(bridge)


def get_reconciler(
    db: Session = Depends(get_db),
    tracker: IssueTracker = Depends(get_tracker),
    scorer: RiskScorer = Depends(get_risk_scorer),
    hub: BroadcastHub = Depends(get_broadcaster)
) -> WebhookReconciler:
    return WebhookReconciler(db, tracker, scorer, hub)
