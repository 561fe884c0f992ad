"""Dependency routes."""
from typing import Dict, List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from deptracker.core.database import get_db
from deptracker.core.dependency_rules import risk_level_label
from deptracker.core.deps import get_broadcaster, get_collaborator_bridge
from deptracker.models.dependency import Dependency
from deptracker.schemas.dependency import (
    CrossArtDependencyResponse,
    DependencyCreate,
    DependencyNetwork,
    DependencyResponse,
    DependencyUpdate,
    NetworkLink,
    NetworkNode,
    RiskAnalysisResponse,
)
from deptracker.services.broadcast import ACTION_CREATED, ACTION_UPDATED, BroadcastHub, dependency_message
from deptracker.services.collaborator_bridge import CollaboratorBridge
from deptracker.services.dependency_store import DependencyStore
from deptracker.services.risk_analysis import analyze_dependency

router = APIRouter()

TEAM_GROUP = 1
EPIC_GROUP = 2


def _get_dependency_or_404(store: DependencyStore, dependency_id: int) -> Dependency:
    dependency = store.get(dependency_id)
    if not dependency:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Dependency not found"
        )
    return dependency


@router.get("/", response_model=List[DependencyResponse])
def list_dependencies(db: Session = Depends(get_db)):
    """List all dependencies."""
    return DependencyStore(db).list()


@router.post("/", response_model=DependencyResponse, status_code=status.HTTP_201_CREATED)
def create_dependency(
    dependency_data: DependencyCreate,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_broadcaster)
):
    """Create a dependency manually."""
    dependency = DependencyStore(db).create(dependency_data)
    db.commit()
    db.refresh(dependency)
    hub.publish(dependency_message(ACTION_CREATED, dependency))
    return dependency


@router.get("/critical", response_model=List[DependencyResponse])
def list_critical_dependencies(db: Session = Depends(get_db)):
    """Blocked or at-risk dependencies, highest risk first."""
    return DependencyStore(db).critical()


@router.get("/cross-art", response_model=List[CrossArtDependencyResponse])
def list_cross_art_dependencies(db: Session = Depends(get_db)):
    """Dependencies that span two ARTs, with a risk level label."""
    return [
        CrossArtDependencyResponse(
            id=dep.id,
            title=dep.title,
            source_art=dep.source_art,
            target_art=dep.target_art,
            risk_level=risk_level_label(dep.risk_score),
            status=dep.status,
        )
        for dep in DependencyStore(db).cross_art()
    ]


@router.get("/network", response_model=DependencyNetwork)
def get_dependency_network(db: Session = Depends(get_db)):
    """
    Graph of teams and the dependencies between them.

    Each dependency is an epic node linked from its source team and to its
    target team.
    """
    dependencies = DependencyStore(db).list()

    team_ids: Dict[str, str] = {}
    nodes: List[NetworkNode] = []
    for dep in dependencies:
        for team in (dep.source_team, dep.target_team):
            if team not in team_ids:
                team_ids[team] = f"team{len(team_ids) + 1}"
                nodes.append(NetworkNode(
                    id=team_ids[team], name=team, group=TEAM_GROUP, type="team"))

    links: List[NetworkLink] = []
    for dep in dependencies:
        epic_id = f"epic{dep.id}"
        nodes.append(NetworkNode(
            id=epic_id, name=dep.title, group=EPIC_GROUP, type="epic", status=dep.status))
        links.append(NetworkLink(
            source=team_ids[dep.source_team], target=epic_id, risk_score=dep.risk_score))
        links.append(NetworkLink(
            source=epic_id, target=team_ids[dep.target_team], risk_score=dep.risk_score))

    return DependencyNetwork(nodes=nodes, links=links)


@router.get("/{dependency_id}", response_model=DependencyResponse)
def get_dependency(dependency_id: int, db: Session = Depends(get_db)):
    """Get a specific dependency."""
    return _get_dependency_or_404(DependencyStore(db), dependency_id)


@router.patch("/{dependency_id}", response_model=DependencyResponse)
def update_dependency(
    dependency_id: int,
    dependency_data: DependencyUpdate,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_broadcaster)
):
    """Update a dependency."""
    store = DependencyStore(db)
    dependency = _get_dependency_or_404(store, dependency_id)
    store.update(dependency, dependency_data)
    db.commit()
    db.refresh(dependency)
    hub.publish(dependency_message(ACTION_UPDATED, dependency))
    return dependency


@router.delete("/{dependency_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_dependency(dependency_id: int, db: Session = Depends(get_db)):
    """Delete a dependency."""
    store = DependencyStore(db)
    dependency = _get_dependency_or_404(store, dependency_id)
    store.delete(dependency)
    db.commit()
    return None


@router.get("/{dependency_id}/risk-analysis", response_model=RiskAnalysisResponse)
def get_risk_analysis(
    dependency_id: int,
    db: Session = Depends(get_db),
    bridge: CollaboratorBridge = Depends(get_collaborator_bridge)
):
    """Risk factors and mitigation suggestions for one dependency."""
    dependency = _get_dependency_or_404(DependencyStore(db), dependency_id)
    return analyze_dependency(bridge, dependency)
