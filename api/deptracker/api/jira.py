"""Issue-tracker data routes."""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from deptracker.core.database import get_db
from deptracker.core.deps import get_broadcaster, get_risk_scorer, get_tracker
from deptracker.schemas.jira_config import ImportResultResponse, JiraProjectResponse
from deptracker.services.broadcast import ACTION_IMPORTED, BroadcastHub, dependency_message
from deptracker.services.dependency_import import DependencyImporter
from deptracker.services.jira_client import JiraAPIError, JiraConfigurationError
from deptracker.services.risk_scoring import RiskScorer
from deptracker.services.tracker_issue import IssueTracker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/projects", response_model=List[JiraProjectResponse])
def list_projects(tracker: IssueTracker = Depends(get_tracker)):
    """Projects visible to the configured tracker account."""
    try:
        return tracker.get_projects()
    except JiraConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc)
        )
    except JiraAPIError as exc:
        logger.error("Error fetching Jira projects: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Error fetching Jira projects"
        )


@router.post("/import/dependencies", response_model=ImportResultResponse)
def import_dependencies(
    db: Session = Depends(get_db),
    tracker: IssueTracker = Depends(get_tracker),
    scorer: RiskScorer = Depends(get_risk_scorer),
    hub: BroadcastHub = Depends(get_broadcaster)
):
    """Import one dependency per qualifying link of every linked issue."""
    result = DependencyImporter(tracker, scorer).run(db)
    body = ImportResultResponse(
        success=result.success,
        count=result.count,
        skipped=result.skipped,
        message=result.message,
    )
    if not result.success:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())

    hub.publish(dependency_message(ACTION_IMPORTED, count=result.count))
    return body
