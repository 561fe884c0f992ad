"""Qualitative risk analysis and optimization scenarios.

Both come from external collaborators when available; the defaults here are
served otherwise.
"""
import logging
from datetime import datetime
from typing import List, Optional

from deptracker.core.dependency_rules import DUE_SOON_DAYS, STATUS_AT_RISK, STATUS_BLOCKED, days_until
from deptracker.models.dependency import Dependency
from deptracker.services.collaborator_bridge import CollaboratorBridge, CollaboratorError

logger = logging.getLogger(__name__)

MIN_RECOMMENDATIONS = 3

DEFAULT_SCENARIOS = [
    {
        "id": 1,
        "name": "Minimize Critical Path",
        "description": "Optimizes work sequence to reduce the critical path length by identifying and eliminating bottlenecks",
        "risk_reduction": 35,
        "timeline_reduction": 28,
        "complexity_score": 65,
    },
    {
        "id": 2,
        "name": "Team Load Balancing",
        "description": "Redistributes dependencies to balance workload across teams and reduce overallocation",
        "risk_reduction": 25,
        "timeline_reduction": 15,
        "complexity_score": 40,
    },
    {
        "id": 3,
        "name": "Dependency Cycle Breaking",
        "description": "Identifies and resolves circular dependencies by suggesting parallel development opportunities",
        "risk_reduction": 45,
        "timeline_reduction": 20,
        "complexity_score": 70,
    },
]


def default_risk_analysis(dependency: Dependency, now: Optional[datetime] = None) -> dict:
    """
    Rule-based factors and recommendations for a dependency.

    Returns:
        dict with risk_factors and recommendations (at least three)
    """
    risk_factors: List[str] = []
    recommendations: List[str] = []

    if dependency.is_cross_art:
        risk_factors.append("Dependency spans multiple ARTs, increasing coordination complexity")

    if dependency.status == STATUS_BLOCKED:
        risk_factors.append("Dependency is currently blocked")
        recommendations.append("Escalate to program management for assistance with blockers")
    elif dependency.status == STATUS_AT_RISK:
        risk_factors.append("Dependency is flagged as at-risk")

    if dependency.due_date:
        days_left = days_until(dependency.due_date, now)
        if days_left < 0:
            risk_factors.append(f"Dependency is {abs(days_left)} days overdue")
            recommendations.append("Consider adjusting timeline or adding resources to recover schedule")
        elif days_left < DUE_SOON_DAYS:
            risk_factors.append(f"Dependency is due in {days_left} days")
            recommendations.append("Increase daily monitoring and communication")

    if not risk_factors:
        risk_factors.append("Dependency involves critical team interaction")
        risk_factors.append("Historical patterns show similar dependencies often face challenges")

    if not recommendations:
        recommendations.append("Schedule regular sync meetings between teams to improve coordination")
        recommendations.append("Break dependency into smaller, more manageable pieces")
        recommendations.append("Consider pair programming to accelerate resolution")

    if len(recommendations) < MIN_RECOMMENDATIONS:
        recommendations.append("Document key decisions and assumptions to improve visibility")
        recommendations.append("Establish clear acceptance criteria for the dependency")

    return {"risk_factors": risk_factors, "recommendations": recommendations}


def analysis_payload(dependency: Dependency) -> dict:
    return {
        "id": dependency.id,
        "title": dependency.title,
        "sourceTeam": dependency.source_team,
        "sourceArt": dependency.source_art,
        "targetTeam": dependency.target_team,
        "targetArt": dependency.target_art,
        "dueDate": dependency.due_date.isoformat() if dependency.due_date else None,
        "status": dependency.status,
        "riskScore": dependency.risk_score,
        "isCrossArt": dependency.is_cross_art,
    }


def analyze_dependency(bridge: CollaboratorBridge, dependency: Dependency) -> dict:
    try:
        return bridge.analyze_risk(analysis_payload(dependency))
    except CollaboratorError as exc:
        if bridge.analyzer_command:
            logger.warning("Risk analyzer failed for dependency %s, using defaults: %s",
                           dependency.id, exc)
        return default_risk_analysis(dependency)


def optimization_scenarios(bridge: CollaboratorBridge) -> List[dict]:
    try:
        return bridge.generate_scenarios()
    except CollaboratorError as exc:
        if bridge.scenario_command:
            logger.warning("Scenario generator failed, using defaults: %s", exc)
        return [dict(s) for s in DEFAULT_SCENARIOS]
