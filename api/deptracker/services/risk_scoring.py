"""Risk scoring for derived dependencies.

Delegates to the external scorer and degrades to the deterministic formula
in deptracker.core.dependency_rules on any collaborator failure.
"""
import logging
from datetime import datetime
from typing import Optional

from deptracker.core.dependency_rules import UNKNOWN_ART, calculate_fallback_risk_score
from deptracker.services.collaborator_bridge import CollaboratorBridge, CollaboratorError
from deptracker.services.ingestion_stats import COLLABORATOR_FALLBACK, IngestionStats, ingestion_stats
from deptracker.services.tracker_issue import TrackerIssue

logger = logging.getLogger(__name__)


def crosses_art(source: TrackerIssue, target: TrackerIssue) -> bool:
    """Compare ART labels after substituting the unknown-ART sentinel."""
    return (source.art or UNKNOWN_ART) != (target.art or UNKNOWN_ART)


def build_risk_payload(source: TrackerIssue, target: TrackerIssue) -> dict:
    """Normalized input document for the external scorer."""
    return {
        "sourceStatus": source.status,
        "targetStatus": target.status,
        "dueDate": source.due_date.date().isoformat() if source.due_date else None,
        "isCrossArt": crosses_art(source, target),
        "issueType": source.issue_type,
    }


class RiskScorer:
    """Scores (source, target) issue pairs."""

    def __init__(self, bridge: CollaboratorBridge, stats: Optional[IngestionStats] = None):
        self.bridge = bridge
        self.stats = stats or ingestion_stats

    def score(self, source: TrackerIssue, target: TrackerIssue, now: Optional[datetime] = None) -> int:
        payload = build_risk_payload(source, target)
        try:
            return self.bridge.calculate_risk(payload)
        except CollaboratorError as exc:
            if self.bridge.risk_command:
                logger.warning("Risk scorer failed for %s -> %s, using fallback: %s",
                               source.key, target.key, exc)
            self.stats.record_failure(COLLABORATOR_FALLBACK)
            return calculate_fallback_risk_score(
                target_status=target.status,
                due_date=source.due_date,
                is_cross_art=payload["isCrossArt"],
                now=now,
            )
