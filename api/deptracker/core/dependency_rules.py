"""Rules for turning issue-tracker data into dependency attributes.

Implements:
- Issue status -> dependency status mapping
- Dependency-bearing link type allow-list
- Deterministic fallback risk score
- Risk level labels for cross-ART reporting
"""
import math
from datetime import datetime, timedelta
from typing import Optional

from deptracker.core.time import utc_now


STATUS_IN_PROGRESS = "in-progress"
STATUS_AT_RISK = "at-risk"
STATUS_BLOCKED = "blocked"
STATUS_COMPLETED = "completed"

DEPENDENCY_STATUSES = (
    STATUS_IN_PROGRESS,
    STATUS_AT_RISK,
    STATUS_BLOCKED,
    STATUS_COMPLETED,
)

# Evaluated in order, first match wins
STATUS_KEYWORDS = (
    (("done", "complete", "resolved"), STATUS_COMPLETED),
    (("block",), STATUS_BLOCKED),
    (("risk", "impediment"), STATUS_AT_RISK),
)

DEPENDENCY_LINK_TYPES = frozenset({"blocks", "depends on", "is blocked by"})

UNKNOWN_TEAM = "Unknown Team"
UNKNOWN_ART = "Unknown ART"

# Fallback risk weights
BASE_RISK_SCORE = 50
BLOCKED_TARGET_WEIGHT = 30
OVERDUE_WEIGHT = 20
DUE_SOON_WEIGHT = 10
DUE_SOON_DAYS = 7
CROSS_ART_WEIGHT = 15
MIN_RISK_SCORE = 0
MAX_RISK_SCORE = 100

# Cross-ART risk labels
HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40


def map_status(tracker_status: Optional[str]) -> str:
    """
    Map an issue-tracker status name to a dependency status.

    Case-insensitive substring match, evaluated in precedence order:
    completed, blocked, at-risk; anything else is in-progress.
    """
    lowered = (tracker_status or "").lower()
    for keywords, status in STATUS_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return status
    return STATUS_IN_PROGRESS


def is_dependency_link(link_type: Optional[str]) -> bool:
    """Return True when a link type name is on the dependency allow-list."""
    if not link_type:
        return False
    return link_type.strip().lower() in DEPENDENCY_LINK_TYPES


def clamp_risk_score(score: float) -> int:
    return int(min(MAX_RISK_SCORE, max(MIN_RISK_SCORE, round(score))))


def days_until(due_date: datetime, now: Optional[datetime] = None) -> int:
    """Whole days left until due_date, rounded up (negative when overdue)."""
    now = now or utc_now()
    return math.ceil((due_date - now) / timedelta(days=1))


def calculate_fallback_risk_score(
    target_status: Optional[str],
    due_date: Optional[datetime],
    is_cross_art: bool,
    now: Optional[datetime] = None
) -> int:
    """
    Deterministic additive risk score used when the external scorer fails.

    Args:
        target_status: Status name of the target (depended-upon) issue
        due_date: Due date of the source issue, naive UTC
        is_cross_art: Whether source and target belong to different ARTs
        now: Evaluation time, defaults to the current UTC time

    Returns:
        Integer score clamped to [0, 100]
    """
    score = BASE_RISK_SCORE

    if target_status and "block" in target_status.lower():
        score += BLOCKED_TARGET_WEIGHT

    if due_date is not None:
        days_left = days_until(due_date, now)
        if days_left < 0:
            score += OVERDUE_WEIGHT
        elif days_left < DUE_SOON_DAYS:
            score += DUE_SOON_WEIGHT

    if is_cross_art:
        score += CROSS_ART_WEIGHT

    return clamp_risk_score(score)


def risk_level_label(risk_score: Optional[int]) -> str:
    """Map a risk score to the label shown for cross-ART dependencies."""
    score = risk_score or 0
    if score > HIGH_RISK_THRESHOLD:
        return "High Risk"
    if score > MEDIUM_RISK_THRESHOLD:
        return "Medium"
    return "Low Risk"
