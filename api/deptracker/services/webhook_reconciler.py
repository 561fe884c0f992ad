"""Apply issue-tracker webhook events to the dependency store.

Every handler finishes its remote fetches and risk computations before it
writes, then commits once. A failed fetch leaves the store untouched; an
unknown issue is ignored. Deliveries for the same issue key are serialized.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from deptracker.core.dependency_rules import STATUS_COMPLETED, is_dependency_link, map_status
from deptracker.core.locks import KeyedLock
from deptracker.models.dependency import Dependency
from deptracker.schemas.dependency import DependencyCreate
from deptracker.services.broadcast import ACTION_CREATED, ACTION_UPDATED, BroadcastHub, dependency_message
from deptracker.services.dependency_deriver import derive_dependency
from deptracker.services.dependency_store import DependencyStore
from deptracker.services.ingestion_stats import (
    FETCH_FAILED,
    INVALID_EVENT,
    NOT_FOUND,
    PERSISTENCE_FAILED,
    IngestionStats,
    ingestion_stats,
)
from deptracker.services.jira_client import JiraAPIError, JiraNotFoundError
from deptracker.services.risk_scoring import RiskScorer
from deptracker.services.tracker_issue import IssueTracker, TrackerIssue, TrackerIssueLink

logger = logging.getLogger(__name__)

ISSUE_UPDATED = "jira:issue_updated"
ISSUE_CREATED = "jira:issue_created"
ISSUE_DELETED = "jira:issue_deleted"
LINK_CREATED = "issuelink_created"
LINK_DELETED = "issuelink_deleted"

LINK_EVENTS = (LINK_CREATED, LINK_DELETED)

PROCESSED = "processed"
IGNORED = "ignored"
FAILED = "failed"

issue_locks = KeyedLock()


@dataclass
class ReconcileResult:
    event: str
    status: str
    dependency_ids: List[int] = field(default_factory=list)
    message: str = ""


class _FetchFailed(Exception):
    """A remote read for the event failed; carries the result to return."""

    def __init__(self, result: ReconcileResult):
        super().__init__(result.message)
        self.result = result


class WebhookReconciler:
    """Handles one webhook delivery against one database session."""

    def __init__(
        self,
        db: Session,
        tracker: IssueTracker,
        scorer: RiskScorer,
        broadcaster: BroadcastHub,
        locks: Optional[KeyedLock] = None,
        stats: Optional[IngestionStats] = None
    ):
        self.db = db
        self.store = DependencyStore(db)
        self.tracker = tracker
        self.scorer = scorer
        self.broadcaster = broadcaster
        self.locks = locks or issue_locks
        self.stats = stats or ingestion_stats

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        event: str,
        issue_key: Optional[str] = None,
        source_issue_key: Optional[str] = None,
        target_issue_key: Optional[str] = None,
        link_type: Optional[str] = None
    ) -> ReconcileResult:
        """Route an event by its webhookEvent name."""
        issue_handlers: Dict[str, Callable[[str], ReconcileResult]] = {
            ISSUE_UPDATED: self.issue_updated,
            ISSUE_CREATED: self.issue_created,
            ISSUE_DELETED: self.issue_deleted,
        }
        if event in issue_handlers:
            if not issue_key:
                return self._invalid(event, "Event is missing issue.key")
            return issue_handlers[event](issue_key)

        if event in LINK_EVENTS:
            if not source_issue_key or not target_issue_key:
                return self._invalid(event, "Event is missing issueLink keys")
            if event == LINK_CREATED:
                return self.link_created(source_issue_key, target_issue_key, link_type or "")
            return self.link_deleted(source_issue_key, target_issue_key)

        logger.info("Ignoring unsupported webhook event %r", event)
        return self._finish(ReconcileResult(
            event=event, status=IGNORED, message=f"Unsupported event: {event}"))

    # ------------------------------------------------------------------
    # Issue events
    # ------------------------------------------------------------------

    def issue_updated(self, issue_key: str) -> ReconcileResult:
        """Refresh status, risk and description of dependencies sourced from the issue."""
        with self.locks.hold(issue_key):
            dependencies = self.store.list_by_jira_id(issue_key)
            if not dependencies:
                return self._finish(ReconcileResult(
                    event=ISSUE_UPDATED, status=IGNORED,
                    message=f"No dependencies track {issue_key}"))

            try:
                issue = self._fetch(ISSUE_UPDATED, issue_key)
                risk_score = None
                if issue.links:
                    # Only the first link is re-scored
                    linked = self._fetch_linked(ISSUE_UPDATED, issue.links[0])
                    risk_score = self.scorer.score(issue, linked)
            except _FetchFailed as exc:
                return self._finish(exc.result)

            status = map_status(issue.status)
            description = f"Updated from Jira webhook: {issue.description or 'No description'}"

            def apply() -> List[Dependency]:
                for dependency in dependencies:
                    dependency.status = status
                    if risk_score is not None:
                        dependency.risk_score = risk_score
                    dependency.description = description
                return dependencies

            return self._commit(ISSUE_UPDATED, apply, ACTION_UPDATED)

    def issue_created(self, issue_key: str) -> ReconcileResult:
        """Create one dependency per qualifying outward link of a new issue."""
        with self.locks.hold(issue_key):
            try:
                issue = self._fetch(ISSUE_CREATED, issue_key)
                derived: List[Tuple[DependencyCreate, str, str]] = []
                for link in issue.outward_links:
                    if not is_dependency_link(link.type_name):
                        continue
                    target = self._fetch_linked(ISSUE_CREATED, link)
                    data = derive_dependency(
                        issue, target, link.type_name, self.scorer.score(issue, target))
                    if data is not None:
                        derived.append((data, target.key, link.type_name))
            except _FetchFailed as exc:
                return self._finish(exc.result)

            if not derived:
                return self._finish(ReconcileResult(
                    event=ISSUE_CREATED, status=IGNORED,
                    message=f"{issue_key} has no dependency links"))

            return self._create_all(ISSUE_CREATED, issue_key, derived)

    def issue_deleted(self, issue_key: str) -> ReconcileResult:
        """Soft-close dependencies sourced from a deleted issue."""
        with self.locks.hold(issue_key):
            dependencies = self.store.list_by_jira_id(issue_key)
            if not dependencies:
                return self._finish(ReconcileResult(
                    event=ISSUE_DELETED, status=IGNORED,
                    message=f"No dependencies track {issue_key}"))
            return self._close(
                ISSUE_DELETED, dependencies, f"Issue {issue_key} was deleted in Jira")

    # ------------------------------------------------------------------
    # Link events
    # ------------------------------------------------------------------

    def link_created(self, source_issue_key: str, target_issue_key: str,
                     link_type: str) -> ReconcileResult:
        if not is_dependency_link(link_type):
            return self._finish(ReconcileResult(
                event=LINK_CREATED, status=IGNORED,
                message=f"Link type {link_type!r} does not carry a dependency"))

        with self.locks.hold(source_issue_key):
            try:
                source = self._fetch(LINK_CREATED, source_issue_key)
                target = self._fetch(LINK_CREATED, target_issue_key)
            except _FetchFailed as exc:
                return self._finish(exc.result)

            data = derive_dependency(
                source, target, link_type, self.scorer.score(source, target))
            return self._create_all(
                LINK_CREATED, source_issue_key, [(data, target.key, link_type)])

    def link_deleted(self, source_issue_key: str, target_issue_key: str) -> ReconcileResult:
        with self.locks.hold(source_issue_key):
            dependencies = self.store.list_by_link(source_issue_key, target_issue_key)
            if not dependencies:
                return self._finish(ReconcileResult(
                    event=LINK_DELETED, status=IGNORED,
                    message=f"No dependencies derived from {source_issue_key} -> {target_issue_key}"))
            return self._close(LINK_DELETED, dependencies, None)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch(self, event: str, issue_key: str) -> TrackerIssue:
        try:
            return self.tracker.get_issue(issue_key)
        except JiraNotFoundError:
            logger.info("%s: issue %s not found in tracker", event, issue_key)
            self.stats.record_failure(NOT_FOUND)
            raise _FetchFailed(ReconcileResult(
                event=event, status=IGNORED, message=f"Issue {issue_key} not found"))
        except JiraAPIError as exc:
            logger.error("%s: failed to fetch %s: %s", event, issue_key, exc, exc_info=True)
            self.stats.record_failure(FETCH_FAILED)
            raise _FetchFailed(ReconcileResult(
                event=event, status=FAILED, message=f"Failed to fetch {issue_key}: {exc}"))

    def _fetch_linked(self, event: str, link: TrackerIssueLink) -> TrackerIssue:
        return link.complete_issue or self._fetch(event, link.issue_key)

    def _create_all(
        self,
        event: str,
        source_issue_key: str,
        derived: List[Tuple[DependencyCreate, str, str]]
    ) -> ReconcileResult:
        created: List[Dependency] = []

        def apply() -> List[Dependency]:
            for data, target_key, link_type in derived:
                dependency, was_created = self.store.create_derived(
                    data, source_issue_key, target_key, link_type)
                if was_created:
                    created.append(dependency)
            return created

        return self._commit(event, apply, ACTION_CREATED)

    def _close(self, event: str, dependencies: List[Dependency],
               description: Optional[str]) -> ReconcileResult:
        def apply() -> List[Dependency]:
            changed = []
            for dependency in dependencies:
                if dependency.status == STATUS_COMPLETED and (
                        description is None or dependency.description == description):
                    continue
                dependency.status = STATUS_COMPLETED
                if description is not None:
                    dependency.description = description
                changed.append(dependency)
            return changed

        return self._commit(event, apply, ACTION_UPDATED)

    def _commit(self, event: str, apply: Callable[[], List[Dependency]],
                action: str) -> ReconcileResult:
        """Run the event's writes in one transaction, then broadcast them."""
        try:
            changed = apply()
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("%s: failed to persist changes: %s", event, exc)
            self.stats.record_failure(PERSISTENCE_FAILED)
            return self._finish(ReconcileResult(
                event=event, status=FAILED, message="Failed to save dependency changes"))

        for dependency in changed:
            self.db.refresh(dependency)
            self.broadcaster.publish(dependency_message(action, dependency))

        ids = [dependency.id for dependency in changed]
        logger.info("%s: %s %d dependencies %s", event, action, len(ids), ids)
        return self._finish(ReconcileResult(
            event=event, status=PROCESSED, dependency_ids=ids,
            message=f"Dependencies {action}: {len(ids)}"))

    def _invalid(self, event: str, message: str) -> ReconcileResult:
        self.stats.record_failure(INVALID_EVENT)
        return self._finish(ReconcileResult(event=event, status=IGNORED, message=message))

    def _finish(self, result: ReconcileResult) -> ReconcileResult:
        self.stats.record_event(result.event, result.status)
        return result
