"""Models package."""
from deptracker.models.base import Base
from deptracker.models.dependency import Dependency, DependencyIssueLink
from deptracker.models.recommendation import OptimizationRecommendation
from deptracker.models.jira_config import JiraIntegrationConfig

__all__ = [
    "Base",
    "Dependency",
    "DependencyIssueLink",
    "OptimizationRecommendation",
    "JiraIntegrationConfig",
]
