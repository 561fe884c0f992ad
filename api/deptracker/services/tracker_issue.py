"""Read-only mirror of issue-tracker issues and their links."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator, List, Optional, Protocol

from dateutil import parser as date_parser

OUTWARD = "outward"
INWARD = "inward"


def parse_due_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a tracker date ("2024-06-15" or ISO timestamp) to naive UTC."""
    if not value:
        return None
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def extract_text(value: Any) -> Optional[str]:
    """Flatten a description that may be plain text or a rich-text document."""
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        if value.get("type") == "text":
            return value.get("text") or None
        parts = [extract_text(child) for child in value.get("content", [])]
        text = " ".join(part for part in parts if part)
        return text or None
    if isinstance(value, list):
        text = " ".join(part for part in (extract_text(v) for v in value) if part)
        return text or None
    return str(value)


@dataclass
class TrackerIssueLink:
    type_name: str
    direction: str
    issue_key: str
    # Present when the tracker embedded the linked issue in the response
    issue: Optional["TrackerIssue"] = None

    @property
    def complete_issue(self) -> Optional["TrackerIssue"]:
        """The embedded issue, if it carries the team and ART fields."""
        if self.issue is not None and self.issue.has_custom_fields:
            return self.issue
        return None


@dataclass
class TrackerIssue:
    key: str
    summary: str = ""
    description: Optional[str] = None
    issue_type: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[datetime] = None
    team: Optional[str] = None
    art: Optional[str] = None
    links: List[TrackerIssueLink] = field(default_factory=list)
    # False for partial copies embedded in another issue's link list
    has_custom_fields: bool = True

    @property
    def outward_links(self) -> List[TrackerIssueLink]:
        return [link for link in self.links if link.direction == OUTWARD]

    @classmethod
    def from_jira(cls, data: dict, team_field: str, art_field: str) -> "TrackerIssue":
        """Build an issue from a Jira REST issue resource."""
        fields = data.get("fields") or {}
        links = []
        for raw_link in fields.get("issuelinks") or []:
            link = _parse_link(raw_link, team_field, art_field)
            if link is not None:
                links.append(link)

        return cls(
            key=data["key"],
            summary=fields.get("summary") or "",
            description=extract_text(fields.get("description")),
            issue_type=(fields.get("issuetype") or {}).get("name"),
            status=(fields.get("status") or {}).get("name"),
            due_date=parse_due_date(fields.get("duedate")),
            team=_custom_value(fields.get(team_field)),
            art=_custom_value(fields.get(art_field)),
            links=links,
            has_custom_fields=team_field in fields or art_field in fields,
        )


def _custom_value(value: Any) -> Optional[str]:
    """Custom fields come back as strings or option objects."""
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("value") or value.get("name")
    if isinstance(value, list):
        value = value[0] if value else None
        return _custom_value(value)
    return str(value) if value else None


def _parse_link(raw_link: dict, team_field: str, art_field: str) -> Optional[TrackerIssueLink]:
    type_name = (raw_link.get("type") or {}).get("name", "")
    if raw_link.get("outwardIssue"):
        direction, linked = OUTWARD, raw_link["outwardIssue"]
    elif raw_link.get("inwardIssue"):
        direction, linked = INWARD, raw_link["inwardIssue"]
    else:
        return None

    embedded = None
    if linked.get("fields"):
        embedded = TrackerIssue.from_jira(linked, team_field, art_field)
    return TrackerIssueLink(
        type_name=type_name,
        direction=direction,
        issue_key=linked["key"],
        issue=embedded,
    )


class IssueTracker(Protocol):
    """Read interface shared by JiraClient and DemoTracker."""

    def get_myself(self) -> dict: ...

    def get_projects(self) -> List[dict]: ...

    def get_issue(self, issue_key: str) -> TrackerIssue: ...

    def search_issues(self, jql: str, page_size: Optional[int] = None) -> Iterator[TrackerIssue]: ...


def resolve_linked_issue(tracker: IssueTracker, link: TrackerIssueLink) -> TrackerIssue:
    """Use the embedded copy when it is complete, otherwise fetch the issue."""
    return link.complete_issue or tracker.get_issue(link.issue_key)
