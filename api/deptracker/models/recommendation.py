"""Optimization recommendation model."""
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from deptracker.models.base import Base
from deptracker.core.time import utc_now


class OptimizationRecommendation(Base):
    """Suggested action that lowers the risk of a dependency when applied."""
    __tablename__ = "optimization_recommendations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    dependency_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("dependencies.id", ondelete="SET NULL"), nullable=True, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)  # e.g., cycle, team-pairing
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(
        String(10), nullable=False, default="medium")
    risk_reduction: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0)
    implementation_complexity: Mapped[str] = mapped_column(
        String(10), nullable=False, default="medium")
    is_applied: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False)

    dependency = relationship("Dependency")
