"""Tests for sample data seeding."""
from deptracker.models.dependency import Dependency
from deptracker.models.recommendation import OptimizationRecommendation
from deptracker.seed import seed_sample_data


class TestSeedSampleData:

    def test_seeds_empty_store(self, db_session):
        assert seed_sample_data(db_session) == 3
        assert db_session.query(Dependency).count() == 3
        recommendations = db_session.query(OptimizationRecommendation).all()
        assert [r.type for r in recommendations] == ["cycle", "team-pairing", "critical-path"]
        assert all(r.dependency_id is not None for r in recommendations)

    def test_skips_populated_store(self, db_session):
        seed_sample_data(db_session)
        assert seed_sample_data(db_session) == 0
        assert db_session.query(Dependency).count() == 3
