"""Dependency model - cross-team / cross-ART work relationships."""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import String, Integer, Text, DateTime, Boolean, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from deptracker.models.base import Base
from deptracker.core.time import utc_now


class Dependency(Base):
    """Dependency derived from an issue link or entered manually."""
    __tablename__ = "dependencies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    source_team: Mapped[str] = mapped_column(String(255), nullable=False)
    source_art: Mapped[str] = mapped_column(String(255), nullable=False)
    target_team: Mapped[str] = mapped_column(String(255), nullable=False)
    target_art: Mapped[str] = mapped_column(String(255), nullable=False)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="in-progress")
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Key of the originating issue; join key for webhook updates
    jira_id: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_cross_art: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('in-progress', 'at-risk', 'blocked', 'completed')",
            name="ck_dependency_status"),
        CheckConstraint(
            "risk_score >= 0 AND risk_score <= 100",
            name="ck_dependency_risk_score_range"),
    )

    issue_links: Mapped[List["DependencyIssueLink"]] = relationship(
        "DependencyIssueLink", back_populates="dependency", cascade="all, delete-orphan")


class DependencyIssueLink(Base):
    """Issue pair a dependency was derived from.

    Lets link-deleted events find their dependencies by exact key match.
    """
    __tablename__ = "dependency_issue_links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    dependency_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dependencies.id", ondelete="CASCADE"), nullable=False, index=True)
    source_issue_key: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True)
    target_issue_key: Mapped[str] = mapped_column(String(100), nullable=False)
    link_type: Mapped[str] = mapped_column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "dependency_id", "source_issue_key", "target_issue_key",
            name="uq_dependency_issue_link"),
    )

    dependency: Mapped["Dependency"] = relationship(
        "Dependency", back_populates="issue_links")
