"""Stored issue-tracker integration settings."""
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Text, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from deptracker.models.base import Base
from deptracker.core.time import utc_now


class JiraIntegrationConfig(Base):
    """Single-row Jira / Jira Align connection settings."""
    __tablename__ = "jira_integration_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    jira_url: Mapped[str] = mapped_column(String(500), nullable=False)
    jira_email: Mapped[str] = mapped_column(String(255), nullable=False)
    jira_token: Mapped[str] = mapped_column(Text, nullable=False)
    jira_align_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    jira_align_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    use_oauth: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    oauth_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    webhook_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    webhook_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False)
