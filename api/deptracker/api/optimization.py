"""Optimization scenario routes."""
from typing import List
from fastapi import APIRouter, Depends
from deptracker.core.deps import get_collaborator_bridge
from deptracker.schemas.dependency import OptimizationScenario
from deptracker.services.collaborator_bridge import CollaboratorBridge
from deptracker.services.risk_analysis import optimization_scenarios

router = APIRouter()


@router.get("/scenarios", response_model=List[OptimizationScenario])
def list_scenarios(bridge: CollaboratorBridge = Depends(get_collaborator_bridge)):
    """Candidate restructurings with their estimated effect."""
    return optimization_scenarios(bridge)
