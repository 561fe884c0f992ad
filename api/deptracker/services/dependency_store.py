"""Persistence operations for dependencies."""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from deptracker.core.dependency_rules import STATUS_AT_RISK, STATUS_BLOCKED, STATUS_COMPLETED
from deptracker.models.dependency import Dependency, DependencyIssueLink
from deptracker.schemas.dependency import DependencyCreate, DependencyUpdate

logger = logging.getLogger(__name__)


class DependencyStore:
    """Repository over one database session.

    Methods flush but do not commit unless noted; callers own the
    transaction so a multi-row event commits once.
    """

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Dependency]:
        return self.db.query(Dependency).order_by(Dependency.id).all()

    def get(self, dependency_id: int) -> Optional[Dependency]:
        return self.db.query(Dependency).filter(Dependency.id == dependency_id).first()

    def list_by_jira_id(self, jira_id: str) -> List[Dependency]:
        return self.db.query(Dependency).filter(
            Dependency.jira_id == jira_id
        ).order_by(Dependency.id).all()

    def list_by_link(self, source_issue_key: str, target_issue_key: str) -> List[Dependency]:
        """Dependencies recorded as derived from exactly this issue pair."""
        return self.db.query(Dependency).join(
            DependencyIssueLink, DependencyIssueLink.dependency_id == Dependency.id
        ).filter(
            DependencyIssueLink.source_issue_key == source_issue_key,
            DependencyIssueLink.target_issue_key == target_issue_key,
        ).order_by(Dependency.id).all()

    def find_by_idempotency_key(self, jira_id: Optional[str], title: str) -> Optional[Dependency]:
        if not jira_id:
            return None
        return self.db.query(Dependency).filter(
            Dependency.jira_id == jira_id,
            Dependency.title == title,
        ).first()

    def create(
        self,
        data: DependencyCreate,
        source_issue_key: Optional[str] = None,
        target_issue_key: Optional[str] = None,
        link_type: Optional[str] = None
    ) -> Dependency:
        dependency = Dependency(**data.model_dump())
        if source_issue_key and target_issue_key:
            dependency.issue_links.append(DependencyIssueLink(
                source_issue_key=source_issue_key,
                target_issue_key=target_issue_key,
                link_type=link_type or "",
            ))
        self.db.add(dependency)
        self.db.flush()
        return dependency

    def create_derived(
        self,
        data: DependencyCreate,
        source_issue_key: str,
        target_issue_key: str,
        link_type: str
    ) -> Tuple[Dependency, bool]:
        """
        Persist a derived dependency unless one with the same key exists.

        A completed row whose link has come back open is reopened with the
        freshly derived fields instead of being skipped.

        Returns:
            (dependency, created) - created is False for a skipped existing row
        """
        existing = self.find_by_idempotency_key(data.jira_id, data.title)
        if existing is not None and existing.status == STATUS_COMPLETED and data.status != STATUS_COMPLETED:
            return self._reopen(existing, data, source_issue_key, target_issue_key, link_type), True
        if existing is not None:
            logger.debug("Dependency %s already exists for %s, skipping",
                         existing.id, data.jira_id)
            return existing, False
        return self.create(data, source_issue_key, target_issue_key, link_type), True

    def _reopen(
        self,
        dependency: Dependency,
        data: DependencyCreate,
        source_issue_key: str,
        target_issue_key: str,
        link_type: str
    ) -> Dependency:
        for field, value in data.model_dump().items():
            setattr(dependency, field, value)
        if not any(link.source_issue_key == source_issue_key
                   and link.target_issue_key == target_issue_key
                   for link in dependency.issue_links):
            dependency.issue_links.append(DependencyIssueLink(
                source_issue_key=source_issue_key,
                target_issue_key=target_issue_key,
                link_type=link_type or "",
            ))
        self.db.flush()
        logger.info("Reopened dependency %s for %s -> %s",
                    dependency.id, source_issue_key, target_issue_key)
        return dependency

    def update(self, dependency: Dependency, data: DependencyUpdate) -> Dependency:
        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(dependency, field, value)
        self.db.flush()
        return dependency

    def delete(self, dependency: Dependency) -> None:
        self.db.delete(dependency)
        self.db.flush()

    def critical(self) -> List[Dependency]:
        """Blocked or at-risk dependencies, highest risk first."""
        return self.db.query(Dependency).filter(
            Dependency.status.in_([STATUS_BLOCKED, STATUS_AT_RISK])
        ).order_by(Dependency.risk_score.desc(), Dependency.id).all()

    def cross_art(self) -> List[Dependency]:
        return self.db.query(Dependency).filter(
            Dependency.is_cross_art.is_(True)
        ).order_by(Dependency.id).all()
