"""Dependency schemas."""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

DependencyStatus = Literal["in-progress", "at-risk", "blocked", "completed"]


class DependencyBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    source_team: str = Field(..., min_length=1)
    source_art: str = Field(..., min_length=1)
    target_team: str = Field(..., min_length=1)
    target_art: str = Field(..., min_length=1)
    due_date: Optional[datetime] = None
    status: DependencyStatus = "in-progress"
    risk_score: int = Field(0, ge=0, le=100)
    jira_id: Optional[str] = None
    description: Optional[str] = None
    is_cross_art: bool = False


class DependencyCreate(DependencyBase):
    pass


class DependencyUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    source_team: Optional[str] = None
    source_art: Optional[str] = None
    target_team: Optional[str] = None
    target_art: Optional[str] = None
    due_date: Optional[datetime] = None
    status: Optional[DependencyStatus] = None
    risk_score: Optional[int] = Field(None, ge=0, le=100)
    jira_id: Optional[str] = None
    description: Optional[str] = None
    is_cross_art: Optional[bool] = None


class DependencyResponse(DependencyBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CrossArtDependencyResponse(BaseModel):
    """Condensed view of a dependency spanning two ARTs."""
    id: int
    title: str
    source_art: str
    target_art: str
    risk_level: Literal["Low Risk", "Medium", "High Risk"]
    status: DependencyStatus


# ============================================================================
# Network graph
# ============================================================================

class NetworkNode(BaseModel):
    id: str
    name: str
    group: int
    type: Literal["team", "epic"]
    status: Optional[DependencyStatus] = None


class NetworkLink(BaseModel):
    source: str
    target: str
    value: int = 1
    risk_score: Optional[int] = None


class DependencyNetwork(BaseModel):
    nodes: List[NetworkNode]
    links: List[NetworkLink]


# ============================================================================
# Analysis
# ============================================================================

class RiskAnalysisResponse(BaseModel):
    risk_factors: List[str]
    recommendations: List[str]


class OptimizationScenario(BaseModel):
    id: int
    name: str
    description: str
    risk_reduction: int
    timeline_reduction: int
    complexity_score: int


class DependencyMetrics(BaseModel):
    """Dashboard summary figures."""
    total_dependencies: int
    at_risk_dependencies: int
    blocked_dependencies: int
    completed_dependencies: int
    cross_art_dependencies: int
    average_risk_score: float
    optimization_score: int
