"""Issue-tracker webhook routes.

The generic endpoint dispatches on webhookEvent; the per-event endpoints
accept the same payloads without requiring it.
"""
from fastapi import APIRouter, Depends
from deptracker.core.deps import get_reconciler
from deptracker.schemas.webhook import (
    IngestionStatsResponse,
    IssueEventPayload,
    IssueLinkEventPayload,
    JiraWebhookEnvelope,
    ReconcileResultResponse,
)
from deptracker.services.ingestion_stats import ingestion_stats
from deptracker.services.webhook_reconciler import ReconcileResult, WebhookReconciler

router = APIRouter()


def _response(result: ReconcileResult) -> ReconcileResultResponse:
    return ReconcileResultResponse(
        event=result.event,
        status=result.status,
        dependency_ids=result.dependency_ids,
        message=result.message,
    )


@router.post("/jira", response_model=ReconcileResultResponse)
def receive_jira_event(
    payload: JiraWebhookEnvelope,
    reconciler: WebhookReconciler = Depends(get_reconciler)
):
    """Dispatch any supported webhook delivery."""
    link = payload.issue_link
    return _response(reconciler.dispatch(
        payload.webhook_event,
        issue_key=payload.issue.key if payload.issue else None,
        source_issue_key=link.source_issue_key if link else None,
        target_issue_key=link.target_issue_key if link else None,
        link_type=link.type.name if link else None,
    ))


@router.post("/issue-updated", response_model=ReconcileResultResponse)
def issue_updated(
    payload: IssueEventPayload,
    reconciler: WebhookReconciler = Depends(get_reconciler)
):
    return _response(reconciler.issue_updated(payload.issue.key))


@router.post("/issue-created", response_model=ReconcileResultResponse)
def issue_created(
    payload: IssueEventPayload,
    reconciler: WebhookReconciler = Depends(get_reconciler)
):
    return _response(reconciler.issue_created(payload.issue.key))


@router.post("/issue-deleted", response_model=ReconcileResultResponse)
def issue_deleted(
    payload: IssueEventPayload,
    reconciler: WebhookReconciler = Depends(get_reconciler)
):
    return _response(reconciler.issue_deleted(payload.issue.key))


@router.post("/link-created", response_model=ReconcileResultResponse)
def link_created(
    payload: IssueLinkEventPayload,
    reconciler: WebhookReconciler = Depends(get_reconciler)
):
    link = payload.issue_link
    return _response(reconciler.link_created(
        link.source_issue_key, link.target_issue_key, link.type.name))


@router.post("/link-deleted", response_model=ReconcileResultResponse)
def link_deleted(
    payload: IssueLinkEventPayload,
    reconciler: WebhookReconciler = Depends(get_reconciler)
):
    link = payload.issue_link
    return _response(reconciler.link_deleted(link.source_issue_key, link.target_issue_key))


@router.get("/stats", response_model=IngestionStatsResponse)
def get_ingestion_stats():
    """Counts of handled events by outcome and of failures by kind."""
    return ingestion_stats.snapshot()
