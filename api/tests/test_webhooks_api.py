"""Webhook API tests."""
from deptracker.models.dependency import Dependency

from conftest import jira_issue, link_dependency, make_dependency


class TestGenericWebhook:

    def test_issue_deleted(self, client, db_session, published):
        dependency = make_dependency(db_session, jira_id="ENG-1")

        response = client.post("/webhooks/jira", json={
            "webhookEvent": "jira:issue_deleted", "issue": {"key": "ENG-1"}})

        assert response.status_code == 200
        assert response.json() == {
            "event": "jira:issue_deleted",
            "status": "processed",
            "dependency_ids": [dependency.id],
            "message": "Dependencies updated: 1",
        }
        db_session.refresh(dependency)
        assert dependency.status == "completed"
        assert published[-1]["data"]["action"] == "updated"

    def test_link_created(self, client, fake_tracker, db_session):
        fake_tracker.add(jira_issue("ENG-1"), jira_issue("ENG-2"))

        response = client.post("/webhooks/jira", json={
            "webhookEvent": "issuelink_created",
            "issueLink": {"sourceIssueKey": "ENG-1", "targetIssueKey": "ENG-2",
                          "type": {"name": "blocks"}},
        })

        assert response.json()["status"] == "processed"
        assert db_session.query(Dependency).count() == 1

    def test_missing_event_name(self, client):
        response = client.post("/webhooks/jira", json={"issue": {"key": "ENG-1"}})
        assert response.status_code == 422

    def test_unsupported_event(self, client):
        response = client.post("/webhooks/jira", json={
            "webhookEvent": "comment_created", "issue": {"key": "ENG-1"}})
        assert response.status_code == 200
        assert response.json()["status"] == "ignored"


class TestEventEndpoints:

    def test_issue_updated(self, client, fake_tracker, db_session):
        dependency = make_dependency(db_session, jira_id="ENG-1")
        fake_tracker.add(jira_issue("ENG-1", status="At Risk"))

        response = client.post("/webhooks/issue-updated", json={"issue": {"key": "ENG-1"}})

        assert response.json()["status"] == "processed"
        db_session.refresh(dependency)
        assert dependency.status == "at-risk"

    def test_issue_created(self, client, fake_tracker):
        fake_tracker.add(jira_issue("ENG-1", links=[("blocks", "ENG-2")]), jira_issue("ENG-2"))
        response = client.post("/webhooks/issue-created", json={"issue": {"key": "ENG-1"}})
        assert len(response.json()["dependency_ids"]) == 1

    def test_issue_deleted(self, client, db_session):
        make_dependency(db_session, jira_id="ENG-1")
        response = client.post("/webhooks/issue-deleted", json={"issue": {"key": "ENG-1"}})
        assert response.json()["status"] == "processed"

    def test_link_created_fetch_failure(self, client, fake_tracker, db_session):
        fake_tracker.add(jira_issue("ENG-1"))
        fake_tracker.failing.add("ENG-2")

        response = client.post("/webhooks/link-created", json={"issueLink": {
            "sourceIssueKey": "ENG-1", "targetIssueKey": "ENG-2", "type": {"name": "blocks"}}})

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        assert db_session.query(Dependency).count() == 0

    def test_link_deleted(self, client, db_session):
        dependency = make_dependency(db_session, jira_id="ENG-1")
        link_dependency(db_session, dependency, "ENG-1", "ENG-2")

        response = client.post("/webhooks/link-deleted", json={"issueLink": {
            "sourceIssueKey": "ENG-1", "targetIssueKey": "ENG-2", "type": {"name": "blocks"}}})

        assert response.json()["dependency_ids"] == [dependency.id]

    def test_malformed_payload(self, client):
        response = client.post("/webhooks/issue-updated", json={"issue": {}})
        assert response.status_code == 422


class TestIngestionStats:

    def test_counts_outcomes_and_failures(self, client, fake_tracker):
        fake_tracker.failing.add("ENG-2")
        fake_tracker.add(jira_issue("ENG-1"))
        client.post("/webhooks/link-created", json={"issueLink": {
            "sourceIssueKey": "ENG-1", "targetIssueKey": "ENG-2", "type": {"name": "blocks"}}})
        client.post("/webhooks/issue-deleted", json={"issue": {"key": "ENG-404"}})

        data = client.get("/webhooks/stats").json()

        assert data["events"] == {
            "issuelink_created:failed": 1,
            "jira:issue_deleted:ignored": 1,
        }
        assert data["failures"] == {"fetch_failed": 1}


class TestRoot:

    def test_root(self, client):
        assert client.get("/").json() == {"message": "Cross-ART Dependency Tracker API"}
