"""Synthetic issue tracker for environments without live credentials.

Exposes the same read interface as JiraClient, so the importer and webhook
reconciler run unchanged against generated teams, ARTs and linked issues.
Enabled only through JIRA_DEMO_MODE.
"""
import random
from datetime import timedelta
from typing import Dict, Iterator, List, Optional

from deptracker.core.time import utc_now
from deptracker.services.jira_client import JiraNotFoundError
from deptracker.services.tracker_issue import TrackerIssue

DEMO_PROJECT_KEY = "DEMO"
TEAM_FIELD = "customfield_team"
ART_FIELD = "customfield_art"

DEMO_ARTS = {
    "Platform ART": ["Data Team", "Backend Team", "Infrastructure Team"],
    "Customer ART": ["Mobile Team", "Frontend Team"],
    "E-Commerce ART": ["Checkout Team", "Catalog Team"],
    "Security ART": ["Security Team", "Identity Team"],
}

DEMO_STATUSES = ["To Do", "In Progress", "In Progress", "Blocked", "At Risk", "Done"]
DEMO_LINK_TYPES = ["blocks", "blocks", "depends on", "relates to"]
DEMO_SUMMARIES = [
    "Authentication API updates",
    "Database schema migration",
    "User profile API",
    "Payment gateway integration",
    "Search indexing pipeline",
    "Checkout flow redesign",
    "Audit logging service",
    "Mobile push notifications",
    "Catalog import job",
    "Session token rotation",
    "Order history endpoint",
    "Feature flag rollout",
]


class DemoTracker:
    """Deterministic in-process stand-in for the issue tracker."""

    def __init__(self, issue_count: int = 12, seed: int = 42):
        self._rng = random.Random(seed)
        self._raw: Dict[str, dict] = {}
        self._generate(issue_count)

    def _generate(self, issue_count: int) -> None:
        now = utc_now()
        teams = [(art, team) for art, names in DEMO_ARTS.items() for team in names]
        for number in range(1, issue_count + 1):
            art, team = self._rng.choice(teams)
            due = now + timedelta(days=self._rng.randint(-10, 30))
            key = f"{DEMO_PROJECT_KEY}-{number}"
            self._raw[key] = {
                "key": key,
                "fields": {
                    "summary": DEMO_SUMMARIES[(number - 1) % len(DEMO_SUMMARIES)],
                    "description": f"Synthetic work item {key} owned by {team}",
                    "issuetype": {"name": self._rng.choice(["Epic", "Feature", "Story"])},
                    "status": {"name": self._rng.choice(DEMO_STATUSES)},
                    "duedate": due.date().isoformat(),
                    TEAM_FIELD: team,
                    ART_FIELD: art,
                    "issuelinks": [],
                },
            }

        keys = list(self._raw)
        for source_key in keys:
            if self._rng.random() < 0.4:
                continue
            target_key = self._rng.choice([k for k in keys if k != source_key])
            self._link(source_key, target_key, self._rng.choice(DEMO_LINK_TYPES))

    def _link(self, source_key: str, target_key: str, link_type: str) -> None:
        source, target = self._raw[source_key], self._raw[target_key]
        source["fields"]["issuelinks"].append({
            "type": {"name": link_type},
            "outwardIssue": self._summary_copy(target),
        })
        target["fields"]["issuelinks"].append({
            "type": {"name": link_type},
            "inwardIssue": self._summary_copy(source),
        })

    @staticmethod
    def _summary_copy(raw: dict) -> dict:
        # Linked issues come back without custom fields, as from the real API
        fields = raw["fields"]
        return {
            "key": raw["key"],
            "fields": {
                "summary": fields["summary"],
                "status": fields["status"],
                "issuetype": fields["issuetype"],
            },
        }

    def _parse(self, raw: dict) -> TrackerIssue:
        return TrackerIssue.from_jira(raw, TEAM_FIELD, ART_FIELD)

    @property
    def issue_keys(self) -> List[str]:
        return list(self._raw)

    def get_myself(self) -> dict:
        return {"accountId": "demo", "displayName": "Demo User"}

    def get_projects(self) -> List[dict]:
        return [{"id": "10000", "key": DEMO_PROJECT_KEY, "name": "Demo Program"}]

    def get_issue(self, issue_key: str) -> TrackerIssue:
        raw = self._raw.get(issue_key)
        if raw is None:
            raise JiraNotFoundError(f"Jira resource not found: {issue_key}", status_code=404)
        return self._parse(raw)

    def search_issues(self, jql: str, page_size: Optional[int] = None) -> Iterator[TrackerIssue]:
        """Every generated issue that has links; the JQL text is not interpreted."""
        for raw in self._raw.values():
            if raw["fields"]["issuelinks"]:
                yield self._parse(raw)
