"""Optimization recommendation schemas."""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from deptracker.schemas.dependency import DependencyResponse


class RecommendationBase(BaseModel):
    dependency_id: Optional[int] = None
    type: str
    title: str
    description: str
    severity: Literal["low", "medium", "high"] = "medium"
    risk_reduction: int = Field(0, ge=0, le=100)
    implementation_complexity: Literal["low", "medium", "high"] = "medium"


class RecommendationCreate(RecommendationBase):
    pass


class RecommendationResponse(RecommendationBase):
    id: int
    is_applied: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ApplyRecommendationResponse(BaseModel):
    success: bool
    message: str
    recommendation: RecommendationResponse
    dependency: Optional[DependencyResponse] = None
