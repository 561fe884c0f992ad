"""Dashboard metrics routes."""
import math
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from deptracker.core.database import get_db
from deptracker.core.dependency_rules import STATUS_AT_RISK, STATUS_BLOCKED, STATUS_COMPLETED
from deptracker.models.dependency import Dependency
from deptracker.schemas.dependency import DependencyMetrics

router = APIRouter()


@router.get("", response_model=DependencyMetrics)
def get_metrics(db: Session = Depends(get_db)):
    """
    Summary counts for the dashboard.

    The optimization score is 100 minus the average risk score, floored.
    """
    counts = dict(
        db.query(Dependency.status, func.count(Dependency.id))
        .group_by(Dependency.status)
        .all()
    )
    total = sum(counts.values())
    cross_art = db.query(func.count(Dependency.id)).filter(
        Dependency.is_cross_art.is_(True)
    ).scalar() or 0
    risk_sum = db.query(func.coalesce(func.sum(Dependency.risk_score), 0)).scalar() or 0

    average_risk = risk_sum / max(1, total)
    return DependencyMetrics(
        total_dependencies=total,
        at_risk_dependencies=counts.get(STATUS_AT_RISK, 0),
        blocked_dependencies=counts.get(STATUS_BLOCKED, 0),
        completed_dependencies=counts.get(STATUS_COMPLETED, 0),
        cross_art_dependencies=cross_art,
        average_risk_score=round(average_risk, 1),
        optimization_score=math.floor(max(0, 100 - average_risk)),
    )
