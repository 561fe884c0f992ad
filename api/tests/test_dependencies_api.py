"""Dependency API tests."""
from datetime import timedelta

from deptracker.core.time import utc_now

from conftest import make_dependency

NEW_DEPENDENCY = {
    "title": "Search API → Catalog",
    "source_team": "Search Team",
    "source_art": "Platform ART",
    "target_team": "Catalog Team",
    "target_art": "E-Commerce ART",
    "due_date": "2024-07-01T00:00:00",
    "status": "at-risk",
    "risk_score": 55,
    "jira_id": "ENG-42",
    "is_cross_art": True,
}


class TestListDependencies:

    def test_list_empty(self, client):
        response = client.get("/dependencies/")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_with_data(self, client, sample_dependency):
        response = client.get("/dependencies/")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["title"] == "Checkout API → Payments"
        assert data[0]["jira_id"] == "ENG-1"


class TestCreateDependency:

    def test_create_success(self, client, published):
        response = client.post("/dependencies/", json=NEW_DEPENDENCY)
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Search API → Catalog"
        assert data["due_date"] == "2024-07-01T00:00:00"
        assert "id" in data
        assert "created_at" in data
        assert published[-1]["data"]["action"] == "created"
        assert published[-1]["data"]["dependency"]["id"] == data["id"]

    def test_create_defaults(self, client):
        payload = {k: NEW_DEPENDENCY[k] for k in
                   ("title", "source_team", "source_art", "target_team", "target_art")}
        response = client.post("/dependencies/", json=payload)
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "in-progress"
        assert data["risk_score"] == 0
        assert data["is_cross_art"] is False

    def test_create_rejects_bad_status(self, client):
        response = client.post("/dependencies/", json={**NEW_DEPENDENCY, "status": "stalled"})
        assert response.status_code == 422

    def test_create_rejects_out_of_range_risk(self, client):
        response = client.post("/dependencies/", json={**NEW_DEPENDENCY, "risk_score": 150})
        assert response.status_code == 422

    def test_create_requires_title(self, client):
        payload = dict(NEW_DEPENDENCY)
        del payload["title"]
        assert client.post("/dependencies/", json=payload).status_code == 422


class TestGetUpdateDelete:

    def test_get(self, client, sample_dependency):
        response = client.get(f"/dependencies/{sample_dependency.id}")
        assert response.status_code == 200
        assert response.json()["id"] == sample_dependency.id

    def test_get_not_found(self, client):
        response = client.get("/dependencies/9999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Dependency not found"

    def test_patch(self, client, sample_dependency, published):
        response = client.patch(
            f"/dependencies/{sample_dependency.id}", json={"status": "blocked", "risk_score": 90})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "blocked"
        assert data["risk_score"] == 90
        assert data["title"] == sample_dependency.title
        assert published[-1]["data"]["action"] == "updated"

    def test_patch_not_found(self, client):
        assert client.patch("/dependencies/9999", json={"status": "blocked"}).status_code == 404

    def test_patch_rejects_invalid(self, client, sample_dependency):
        response = client.patch(f"/dependencies/{sample_dependency.id}", json={"risk_score": -1})
        assert response.status_code == 422

    def test_delete(self, client, sample_dependency):
        response = client.delete(f"/dependencies/{sample_dependency.id}")
        assert response.status_code == 204
        assert client.get(f"/dependencies/{sample_dependency.id}").status_code == 404

    def test_delete_not_found(self, client):
        assert client.delete("/dependencies/9999").status_code == 404


class TestCriticalDependencies:

    def test_blocked_and_at_risk_sorted_by_risk(self, client, db_session):
        make_dependency(db_session, title="low", status="at-risk", risk_score=40)
        make_dependency(db_session, title="high", status="blocked", risk_score=90)
        make_dependency(db_session, title="done", status="completed", risk_score=99)
        make_dependency(db_session, title="ok", status="in-progress", risk_score=95)

        response = client.get("/dependencies/critical")

        assert response.status_code == 200
        assert [d["title"] for d in response.json()] == ["high", "low"]


class TestCrossArtDependencies:

    def test_risk_level_labels(self, client, db_session):
        make_dependency(db_session, title="a", risk_score=85)
        make_dependency(db_session, title="b", risk_score=70)
        make_dependency(db_session, title="c", risk_score=20)
        make_dependency(db_session, title="local", is_cross_art=False, risk_score=90)

        response = client.get("/dependencies/cross-art")

        assert response.status_code == 200
        data = response.json()
        assert [(d["title"], d["risk_level"]) for d in data] == [
            ("a", "High Risk"), ("b", "Medium"), ("c", "Low Risk")]
        assert set(data[0]) == {"id", "title", "source_art", "target_art", "risk_level", "status"}


class TestDependencyNetwork:

    def test_team_and_epic_nodes(self, client, db_session):
        first = make_dependency(db_session, source_team="A", target_team="B")
        second = make_dependency(db_session, title="second", source_team="B", target_team="C")

        response = client.get("/dependencies/network")

        assert response.status_code == 200
        data = response.json()
        teams = {n["name"]: n["id"] for n in data["nodes"] if n["type"] == "team"}
        assert set(teams) == {"A", "B", "C"}
        assert all(n["group"] == 1 for n in data["nodes"] if n["type"] == "team")
        epics = [n for n in data["nodes"] if n["type"] == "epic"]
        assert [e["id"] for e in epics] == [f"epic{first.id}", f"epic{second.id}"]
        assert all(e["group"] == 2 for e in epics)

        pairs = {(l["source"], l["target"]) for l in data["links"]}
        assert pairs == {
            (teams["A"], f"epic{first.id}"), (f"epic{first.id}", teams["B"]),
            (teams["B"], f"epic{second.id}"), (f"epic{second.id}", teams["C"]),
        }

    def test_empty_network(self, client):
        assert client.get("/dependencies/network").json() == {"nodes": [], "links": []}


class TestRiskAnalysis:

    def test_default_analysis(self, client, db_session):
        dependency = make_dependency(
            db_session, status="blocked", due_date=utc_now() - timedelta(days=3))

        response = client.get(f"/dependencies/{dependency.id}/risk-analysis")

        assert response.status_code == 200
        data = response.json()
        assert "Dependency is currently blocked" in data["risk_factors"]
        assert "Dependency spans multiple ARTs, increasing coordination complexity" in data["risk_factors"]
        assert len(data["recommendations"]) >= 3

    def test_not_found(self, client):
        assert client.get("/dependencies/9999/risk-analysis").status_code == 404
