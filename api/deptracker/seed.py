"""Seed sample dependencies and recommendations.

Run with `python -m deptracker.seed`, or set SEED_SAMPLE_DATA=true to seed at
application start-up.
"""
from datetime import datetime

from sqlalchemy.orm import Session

from deptracker.core.database import SessionLocal, engine
from deptracker.models import Base, Dependency, OptimizationRecommendation

SAMPLE_DEPENDENCIES = [
    {
        "title": "Authentication API Updates",
        "source_team": "Security Team",
        "source_art": "Security ART",
        "target_team": "Mobile Team",
        "target_art": "Customer ART",
        "due_date": datetime(2023, 6, 15),
        "status": "blocked",
        "risk_score": 85,
        "jira_id": "JIRA-2345",
        "description": "Mobile application requires updated authentication API to support new biometric authentication features",
        "is_cross_art": True,
    },
    {
        "title": "Database Schema Migration",
        "source_team": "Data Team",
        "source_art": "Platform ART",
        "target_team": "Checkout Team",
        "target_art": "E-Commerce ART",
        "due_date": datetime(2023, 6, 22),
        "status": "at-risk",
        "risk_score": 72,
        "jira_id": "JIRA-1892",
        "description": "Database schema changes needed for new product catalog features",
        "is_cross_art": True,
    },
    {
        "title": "User Profile API",
        "source_team": "Backend Team",
        "source_art": "Platform ART",
        "target_team": "Frontend Team",
        "target_art": "Customer ART",
        "due_date": datetime(2023, 6, 30),
        "status": "in-progress",
        "risk_score": 45,
        "jira_id": "JIRA-2103",
        "description": "New user profile API needed for account management features",
        "is_cross_art": True,
    },
]

# Keyed by the position of the dependency in SAMPLE_DEPENDENCIES
SAMPLE_RECOMMENDATIONS = [
    (0, {
        "type": "cycle",
        "title": "Dependency Cycle Detected",
        "description": 'Epic "Payment Gateway Integration" has a circular dependency with "User Authentication Flow".',
        "severity": "high",
        "risk_reduction": 30,
        "implementation_complexity": "medium",
    }),
    (1, {
        "type": "team-pairing",
        "title": "Team Pairing Opportunity",
        "description": "Team Alpha and Team Omega have 5 interdependent tasks. Consider joint session.",
        "severity": "medium",
        "risk_reduction": 20,
        "implementation_complexity": "low",
    }),
    (2, {
        "type": "critical-path",
        "title": "Critical Path Risk",
        "description": '3 high-risk dependencies on the critical path for "Customer Portal" release.',
        "severity": "high",
        "risk_reduction": 40,
        "implementation_complexity": "high",
    }),
]


def seed_sample_data(db: Session) -> int:
    """Insert the sample rows into an empty store. Returns the number of dependencies added."""
    if db.query(Dependency).first():
        print("✓ Dependencies already exist, skipping sample data")
        return 0

    dependencies = [Dependency(**data) for data in SAMPLE_DEPENDENCIES]
    db.add_all(dependencies)
    db.flush()

    for index, data in SAMPLE_RECOMMENDATIONS:
        db.add(OptimizationRecommendation(dependency_id=dependencies[index].id, **data))

    db.commit()
    print(f"✓ Seeded {len(dependencies)} dependencies and {len(SAMPLE_RECOMMENDATIONS)} recommendations")
    return len(dependencies)


def seed_database():
    """Create tables and seed sample data."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        print("Starting database seeding...")
        seed_sample_data(db)
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
