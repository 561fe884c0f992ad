"""Issue-tracker integration schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

MASKED_TOKEN = "•••••••••••"


class JiraConfigBase(BaseModel):
    jira_url: str = Field(..., min_length=1)
    jira_email: str = Field(..., min_length=1)
    jira_align_url: Optional[str] = None
    use_oauth: bool = False
    webhook_enabled: bool = False
    webhook_url: Optional[str] = None


class JiraConfigSave(JiraConfigBase):
    jira_token: str = Field(..., min_length=1)
    jira_align_token: Optional[str] = None
    oauth_token: Optional[str] = None


class JiraConfigResponse(JiraConfigBase):
    """Stored configuration with secrets masked."""
    id: int
    jira_token: str
    jira_align_token: str
    oauth_token: str
    created_at: datetime
    updated_at: datetime


class ConnectionTestRequest(BaseModel):
    jira_url: str
    jira_email: str = ""
    jira_token: str = ""
    use_oauth: bool = False
    oauth_token: Optional[str] = None
    jira_align_url: Optional[str] = None
    jira_align_token: Optional[str] = None


class ConnectionTestResponse(BaseModel):
    success: bool
    message: str


class JiraProjectResponse(BaseModel):
    id: str
    key: str
    name: str


class ImportResultResponse(BaseModel):
    success: bool
    count: int
    skipped: int = 0
    message: str
