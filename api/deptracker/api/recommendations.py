"""Optimization recommendation routes."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from deptracker.core.database import get_db
from deptracker.core.deps import get_broadcaster
from deptracker.models.recommendation import OptimizationRecommendation
from deptracker.schemas.dependency import DependencyResponse
from deptracker.schemas.recommendation import (
    ApplyRecommendationResponse,
    RecommendationCreate,
    RecommendationResponse,
)
from deptracker.services.broadcast import ACTION_UPDATED, BroadcastHub, dependency_message, recommendation_message
from deptracker.services.dependency_store import DependencyStore

router = APIRouter()


@router.get("/", response_model=List[RecommendationResponse])
def list_recommendations(db: Session = Depends(get_db)):
    """List recommendations that have not been applied yet."""
    return db.query(OptimizationRecommendation).filter(
        OptimizationRecommendation.is_applied.is_(False)
    ).order_by(OptimizationRecommendation.id).all()


@router.post("/", response_model=RecommendationResponse, status_code=status.HTTP_201_CREATED)
def create_recommendation(
    recommendation_data: RecommendationCreate,
    db: Session = Depends(get_db)
):
    """Create a recommendation."""
    if recommendation_data.dependency_id is not None:
        if not DependencyStore(db).get(recommendation_data.dependency_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Dependency not found"
            )

    recommendation = OptimizationRecommendation(**recommendation_data.model_dump())
    db.add(recommendation)
    db.commit()
    db.refresh(recommendation)
    return recommendation


@router.post("/{recommendation_id}/apply", response_model=ApplyRecommendationResponse)
def apply_recommendation(
    recommendation_id: int,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_broadcaster)
):
    """Mark a recommendation applied and lower its dependency's risk score."""
    recommendation = db.query(OptimizationRecommendation).filter(
        OptimizationRecommendation.id == recommendation_id
    ).first()
    if not recommendation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recommendation not found"
        )

    recommendation.is_applied = True
    dependency = None
    if recommendation.dependency_id is not None:
        dependency = DependencyStore(db).get(recommendation.dependency_id)
        if dependency is not None:
            dependency.risk_score = max(0, dependency.risk_score - recommendation.risk_reduction)

    db.commit()
    db.refresh(recommendation)
    if dependency is not None:
        db.refresh(dependency)
        hub.publish(dependency_message(ACTION_UPDATED, dependency))
    hub.publish(recommendation_message(recommendation))

    return ApplyRecommendationResponse(
        success=True,
        message="Recommendation applied successfully",
        recommendation=RecommendationResponse.model_validate(recommendation),
        dependency=DependencyResponse.model_validate(dependency) if dependency else None,
    )
