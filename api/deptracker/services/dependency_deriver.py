"""Derive dependency rows from issue links.

Bulk import and both creating webhook handlers go through derive_dependency,
so the three paths produce identical rows.
"""
import logging
from typing import Optional

from deptracker.core.dependency_rules import (
    UNKNOWN_ART,
    UNKNOWN_TEAM,
    is_dependency_link,
    map_status,
)
from deptracker.schemas.dependency import DependencyCreate
from deptracker.services.tracker_issue import TrackerIssue

logger = logging.getLogger(__name__)

# Matches the String(500) title column
TITLE_MAX_LENGTH = 500


def dependency_title(source: TrackerIssue, target: TrackerIssue) -> str:
    title = f"{source.summary} → {target.summary}"
    if len(title) > TITLE_MAX_LENGTH:
        logger.warning("Truncating dependency title for %s -> %s from %d characters",
                       source.key, target.key, len(title))
    return title[:TITLE_MAX_LENGTH]


def derive_dependency(
    source: TrackerIssue,
    target: TrackerIssue,
    link_type: Optional[str],
    risk_score: int
) -> Optional[DependencyCreate]:
    """
    Build the dependency implied by a link from source to target.

    Args:
        source: Issue that owns the link (the dependent side)
        target: Linked issue
        link_type: Link type name as reported by the tracker
        risk_score: Precomputed score for the pair

    Returns:
        DependencyCreate, or None when the link type is not dependency-bearing
    """
    if not is_dependency_link(link_type):
        return None

    source_art = source.art or UNKNOWN_ART
    target_art = target.art or UNKNOWN_ART
    return DependencyCreate(
        title=dependency_title(source, target),
        source_team=source.team or UNKNOWN_TEAM,
        source_art=source_art,
        target_team=target.team or UNKNOWN_TEAM,
        target_art=target_art,
        due_date=source.due_date,
        status=map_status(source.status),
        risk_score=risk_score,
        jira_id=source.key,
        description=(
            f"Dependency between {source.key} and {target.key}: "
            f"{source.description or 'No description'}"
        ),
        is_cross_art=source_art != target_art,
    )
