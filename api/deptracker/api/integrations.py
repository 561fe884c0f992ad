"""Issue-tracker integration settings routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from deptracker.core.database import get_db
from deptracker.core.config import settings
from deptracker.models.jira_config import JiraIntegrationConfig
from deptracker.schemas.jira_config import (
    MASKED_TOKEN,
    ConnectionTestRequest,
    ConnectionTestResponse,
    JiraConfigResponse,
    JiraConfigSave,
)
from deptracker.services.jira_client import JiraConnection, check_connection

logger = logging.getLogger(__name__)

router = APIRouter()


def _mask(value: Optional[str]) -> str:
    return MASKED_TOKEN if value else ""


def _masked_response(config: JiraIntegrationConfig) -> JiraConfigResponse:
    return JiraConfigResponse(
        id=config.id,
        jira_url=config.jira_url,
        jira_email=config.jira_email,
        jira_align_url=config.jira_align_url,
        use_oauth=config.use_oauth,
        webhook_enabled=config.webhook_enabled,
        webhook_url=config.webhook_url,
        jira_token=_mask(config.jira_token),
        jira_align_token=_mask(config.jira_align_token),
        oauth_token=_mask(config.oauth_token),
        created_at=config.created_at,
        updated_at=config.updated_at,
    )


@router.get("/jira", response_model=Optional[JiraConfigResponse])
def get_jira_config(db: Session = Depends(get_db)):
    """Stored connection settings with secrets masked, or null."""
    config = db.query(JiraIntegrationConfig).first()
    if not config:
        return None
    return _masked_response(config)


@router.post("/jira", response_model=JiraConfigResponse)
def save_jira_config(
    config_data: JiraConfigSave,
    response: Response,
    db: Session = Depends(get_db)
):
    """Create or replace the single stored configuration."""
    config = db.query(JiraIntegrationConfig).first()
    if config is None:
        config = JiraIntegrationConfig(**config_data.model_dump())
        db.add(config)
        response.status_code = status.HTTP_201_CREATED
    else:
        for field, value in config_data.model_dump().items():
            setattr(config, field, value)

    db.commit()
    db.refresh(config)
    logger.info("Saved Jira integration config for %s", config.jira_url)
    return _masked_response(config)


@router.post("/jira/test", response_model=ConnectionTestResponse)
def check_jira_config(request: ConnectionTestRequest):
    """Try the given credentials without storing them."""
    connection = JiraConnection(
        base_url=request.jira_url.rstrip("/"),
        email=request.jira_email,
        api_token=request.jira_token,
        use_oauth=request.use_oauth,
        oauth_token=request.oauth_token or "",
        team_field=settings.JIRA_TEAM_FIELD,
        art_field=settings.JIRA_ART_FIELD,
        timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS,
    )
    success, message = check_connection(
        connection, request.jira_align_url, request.jira_align_token)
    if not success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": message},
        )
    return ConnectionTestResponse(success=True, message=message)
