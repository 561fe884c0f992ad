"""Inbound issue-tracker webhook payloads.

Field names follow the tracker's camelCase JSON; Python attributes are
snake_case.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class IssueRef(BaseModel):
    key: str = Field(..., min_length=1)


class LinkTypeRef(BaseModel):
    name: str = Field(..., min_length=1)


class IssueLinkRef(BaseModel):
    source_issue_key: str = Field(..., min_length=1, alias="sourceIssueKey")
    target_issue_key: str = Field(..., min_length=1, alias="targetIssueKey")
    type: LinkTypeRef

    class Config:
        populate_by_name = True


class IssueEventPayload(BaseModel):
    webhook_event: Optional[str] = Field(None, alias="webhookEvent")
    issue: IssueRef

    class Config:
        populate_by_name = True


class IssueLinkEventPayload(BaseModel):
    webhook_event: Optional[str] = Field(None, alias="webhookEvent")
    issue_link: IssueLinkRef = Field(..., alias="issueLink")

    class Config:
        populate_by_name = True


class JiraWebhookEnvelope(BaseModel):
    """Any webhook delivery, dispatched on webhookEvent."""
    webhook_event: str = Field(..., alias="webhookEvent")
    issue: Optional[IssueRef] = None
    issue_link: Optional[IssueLinkRef] = Field(None, alias="issueLink")

    class Config:
        populate_by_name = True


class ReconcileResultResponse(BaseModel):
    event: str
    status: Literal["processed", "ignored", "failed"]
    dependency_ids: List[int] = []
    message: str = ""


class IngestionStatsResponse(BaseModel):
    events: dict[str, int]
    failures: dict[str, int]
