"""Jira and Jira Align REST clients.

Every client is built from an explicit connection value; there is no shared
"current" connection. Callers pick the connection (stored integration config,
environment settings, or a connection under test) and pass it in.
"""
import base64
import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

import requests

from deptracker.core.config import settings
from deptracker.services.tracker_issue import TrackerIssue

logger = logging.getLogger(__name__)

ISSUE_FIELDS = [
    "summary",
    "description",
    "issuetype",
    "status",
    "duedate",
    "issuelinks",
]


class JiraAPIError(Exception):
    """Issue tracker call failed (network, auth, or unexpected response)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JiraNotFoundError(JiraAPIError):
    """Requested issue or resource does not exist."""


class JiraConfigurationError(JiraAPIError):
    """No usable connection settings."""


@dataclass(frozen=True)
class JiraConnection:
    """Connection settings for one Jira site."""
    base_url: str
    email: str = ""
    api_token: str = ""
    use_oauth: bool = False
    oauth_token: str = ""
    team_field: str = "customfield_10010"
    art_field: str = "customfield_10011"
    timeout: float = 10.0

    @property
    def is_configured(self) -> bool:
        if not self.base_url:
            return False
        if self.use_oauth:
            return bool(self.oauth_token)
        return bool(self.email and self.api_token)

    def auth_header(self) -> str:
        if self.use_oauth:
            return f"Bearer {self.oauth_token}"
        credentials = f"{self.email}:{self.api_token}".encode("utf-8")
        return "Basic " + base64.b64encode(credentials).decode("ascii")


def connection_from_settings() -> JiraConnection:
    """Connection taken from environment settings."""
    return JiraConnection(
        base_url=settings.JIRA_BASE_URL.rstrip("/"),
        email=settings.JIRA_EMAIL,
        api_token=settings.JIRA_API_TOKEN,
        use_oauth=settings.JIRA_USE_OAUTH,
        oauth_token=settings.JIRA_OAUTH_TOKEN,
        team_field=settings.JIRA_TEAM_FIELD,
        art_field=settings.JIRA_ART_FIELD,
        timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS,
    )


def connection_from_config(config: Any) -> JiraConnection:
    """Connection taken from a stored JiraIntegrationConfig row (or schema)."""
    return JiraConnection(
        base_url=(config.jira_url or "").rstrip("/"),
        email=config.jira_email or "",
        api_token=config.jira_token or "",
        use_oauth=bool(config.use_oauth),
        oauth_token=config.oauth_token or "",
        team_field=settings.JIRA_TEAM_FIELD,
        art_field=settings.JIRA_ART_FIELD,
        timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS,
    )


def _send(session: requests.Session, method: str, url: str, headers: dict,
          timeout: float, body: Optional[dict] = None, service: str = "Jira") -> Any:
    """Issue one request and decode the JSON body."""
    try:
        response = session.request(
            method, url, headers=headers, json=body, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("%s request %s %s failed: %s", service, method, url, exc)
        raise JiraAPIError(f"{service} request failed: {exc}") from exc

    if response.status_code == 404:
        raise JiraNotFoundError(
            f"{service} resource not found: {url}", status_code=404)
    if not response.ok:
        raise JiraAPIError(
            f"{service} API Error ({response.status_code}): {response.text}",
            status_code=response.status_code)
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise JiraAPIError(f"{service} returned invalid JSON from {url}") from exc


class JiraClient:
    """Issue tracker REST client bound to one connection."""

    def __init__(self, connection: JiraConnection, session: Optional[requests.Session] = None):
        if not connection.is_configured:
            raise JiraConfigurationError("Jira configuration is not set")
        self.connection = connection
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, body: Optional[dict] = None) -> Any:
        headers = {
            "Authorization": self.connection.auth_header(),
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        return _send(self.session, method, f"{self.connection.base_url}{path}",
                     headers, self.connection.timeout, body)

    @property
    def issue_fields(self) -> List[str]:
        return ISSUE_FIELDS + [self.connection.team_field, self.connection.art_field]

    def get_myself(self) -> dict:
        return self._request("GET", "/rest/api/3/myself")

    def get_projects(self) -> List[dict]:
        projects = self._request("GET", "/rest/api/3/project") or []
        return [
            {"id": str(p["id"]), "key": p["key"], "name": p["name"]}
            for p in projects
        ]

    def get_issue(self, issue_key: str) -> TrackerIssue:
        fields = ",".join(self.issue_fields)
        data = self._request("GET", f"/rest/api/3/issue/{issue_key}?fields={fields}")
        return TrackerIssue.from_jira(
            data, self.connection.team_field, self.connection.art_field)

    def search_issues(self, jql: str, page_size: Optional[int] = None) -> Iterator[TrackerIssue]:
        """
        Yield every issue matching a JQL query.

        Pages through results with startAt until the reported total is
        reached or the tracker returns an empty page.
        """
        page_size = page_size or settings.JIRA_SEARCH_PAGE_SIZE
        start_at = 0
        while True:
            page = self._request("POST", "/rest/api/3/search", {
                "jql": jql,
                "startAt": start_at,
                "maxResults": page_size,
                "fields": self.issue_fields,
            }) or {}
            issues = page.get("issues")
            if not isinstance(issues, list):
                raise JiraAPIError("Search response did not contain an issue list")

            for raw in issues:
                yield TrackerIssue.from_jira(
                    raw, self.connection.team_field, self.connection.art_field)

            start_at += len(issues)
            total = page.get("total")
            if not issues or page.get("isLast") or (total is not None and start_at >= total):
                break


class JiraAlignClient:
    """Jira Align REST client (bearer token)."""

    def __init__(self, base_url: str, token: str, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        if not base_url or not token:
            raise JiraConfigurationError("Jira Align configuration is not set")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout or settings.EXTERNAL_CALL_TIMEOUT_SECONDS

    def list_teams(self) -> Any:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        return _send(self.session, "GET", f"{self.base_url}/api/team/list",
                     headers, self.timeout, service="Jira Align")


def check_connection(
    connection: JiraConnection,
    align_url: Optional[str] = None,
    align_token: Optional[str] = None,
    session: Optional[requests.Session] = None
) -> Tuple[bool, str]:
    """
    Check that the given credentials work without storing them.

    Returns:
        (success, message)
    """
    try:
        JiraClient(connection, session=session).get_myself()
    except JiraAPIError as exc:
        return False, f"Connection failed: {exc}"

    if align_url and align_token:
        try:
            JiraAlignClient(align_url, align_token, session=session,
                            timeout=connection.timeout).list_teams()
        except JiraAPIError as exc:
            return False, f"Jira connection successful, but Jira Align connection failed: {exc}"

    return True, "Successfully connected to Jira API"
