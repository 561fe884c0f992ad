"""Bulk import of dependencies from every linked issue in the tracker."""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from deptracker.core.dependency_rules import is_dependency_link
from deptracker.schemas.dependency import DependencyCreate
from deptracker.services.dependency_deriver import derive_dependency
from deptracker.services.dependency_store import DependencyStore
from deptracker.services.ingestion_stats import FETCH_FAILED, PERSISTENCE_FAILED, IngestionStats, ingestion_stats
from deptracker.services.jira_client import JiraAPIError
from deptracker.services.risk_scoring import RiskScorer
from deptracker.services.tracker_issue import IssueTracker, TrackerIssueLink, resolve_linked_issue

logger = logging.getLogger(__name__)

LINKED_ISSUES_JQL = "issuelinks IS NOT EMPTY"


@dataclass
class ImportResult:
    success: bool
    count: int = 0
    skipped: int = 0
    message: str = ""


# (derived row, source key, target key, link type)
DerivedRow = Tuple[DependencyCreate, str, str, str]


class DependencyImporter:
    """Crawls linked issues and stores one dependency per qualifying link."""

    def __init__(
        self,
        tracker: IssueTracker,
        scorer: RiskScorer,
        stats: Optional[IngestionStats] = None,
        page_size: Optional[int] = None
    ):
        self.tracker = tracker
        self.scorer = scorer
        self.stats = stats or ingestion_stats
        self.page_size = page_size

    def collect(self) -> Tuple[List[DerivedRow], int]:
        """
        Fetch and derive without touching the database.

        Returns:
            (derived rows, number of issues scanned)

        Raises:
            JiraAPIError: if the issue search itself fails
        """
        rows: List[DerivedRow] = []
        scanned = 0
        for issue in self.tracker.search_issues(LINKED_ISSUES_JQL, self.page_size):
            scanned += 1
            for link in issue.outward_links:
                if not is_dependency_link(link.type_name):
                    continue
                target = self._resolve(link)
                if target is None:
                    continue
                data = derive_dependency(
                    issue, target, link.type_name, self.scorer.score(issue, target))
                if data is not None:
                    rows.append((data, issue.key, target.key, link.type_name))
        return rows, scanned

    def _resolve(self, link: TrackerIssueLink):
        try:
            return resolve_linked_issue(self.tracker, link)
        except JiraAPIError as exc:
            logger.warning("Skipping link to %s: %s", link.issue_key, exc)
            self.stats.record_failure(FETCH_FAILED)
            return None

    def run(self, db: Session) -> ImportResult:
        try:
            rows, scanned = self.collect()
        except JiraAPIError as exc:
            logger.error("Dependency import aborted: %s", exc)
            self.stats.record_failure(FETCH_FAILED)
            return ImportResult(success=False, message=f"Failed to fetch issues: {exc}")

        if scanned == 0:
            return ImportResult(success=False, message="No issues found with dependencies")

        store = DependencyStore(db)
        created = skipped = 0
        try:
            for data, source_key, target_key, link_type in rows:
                _, was_created = store.create_derived(data, source_key, target_key, link_type)
                if was_created:
                    created += 1
                else:
                    skipped += 1
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Dependency import failed to persist: %s", exc)
            self.stats.record_failure(PERSISTENCE_FAILED)
            return ImportResult(success=False, message="Error saving imported dependencies")

        logger.info("Imported %d dependencies from %d issues (%d already present)",
                    created, scanned, skipped)
        return ImportResult(
            success=True,
            count=created,
            skipped=skipped,
            message=f"Imported {created} dependencies",
        )
