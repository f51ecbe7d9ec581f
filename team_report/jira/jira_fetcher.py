"""Fetch recently updated issues from the JIRA REST API"""

import logging

import requests

from team_report.config import REQUEST_TIMEOUT, ReportConfig
from team_report.errors import UpstreamRequestError
from team_report.models import format_local_time

logger = logging.getLogger(__name__)

ISSUE_FIELDS = ["summary", "status", "updated", "assignee"]


class JiraClient:
    """JIRA REST API client with Basic Auth"""

    def __init__(self, domain: str, email: str, api_token: str, session: requests.Session = None,
                 timeout: float = REQUEST_TIMEOUT):
        """
        Initialize JIRA client

        Args:
            domain: JIRA host (e.g., your-domain.atlassian.net) or full URL
            email: JIRA account email
            api_token: JIRA API token
            session: Optional requests session
            timeout: Request timeout in seconds
        """
        if "://" not in domain:
            domain = f"https://{domain}"
        self.base_url = domain.rstrip("/")
        self.auth = (email, api_token)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Accept": "application/json"
        }

    def get(self, endpoint: str, params: dict = None) -> dict:
        """
        Make a GET request to JIRA API

        Args:
            endpoint: API endpoint (e.g., /rest/api/3/search/jql)
            params: Query parameters

        Returns:
            JSON response as dictionary

        Raises:
            UpstreamRequestError: non-success status, transport failure or a body that is not JSON
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.get(
                url,
                auth=self.auth,
                headers=self.headers,
                params=params,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise UpstreamRequestError(url, None, str(e)) from e

        if not response.ok:
            raise UpstreamRequestError(url, response.status_code, response.text)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamRequestError(url, response.status_code, response.text) from e

    def search_issues(self, jql: str, max_results: int = 100, fields: list = None,
                      next_page_token: str = None) -> dict:
        """
        Search for issues using JQL (/search/jql with nextPageToken pagination)

        Args:
            jql: JQL query string
            max_results: Maximum results per page
            fields: List of fields to return
            next_page_token: Token for fetching next page (None for first page)

        Returns:
            Search results with issues and pagination info
        """
        params = {
            "jql": jql,
            "maxResults": max_results
        }

        if next_page_token:
            params["nextPageToken"] = next_page_token
        if fields:
            params["fields"] = ",".join(fields)

        return self.get("/rest/api/3/search/jql", params)

    def get_issue(self, issue_key: str) -> dict:
        return self.get(f"/rest/api/3/issue/{issue_key}")


class JiraFetcher:
    """Fetches the issues of one project updated inside the report window"""

    def __init__(self, client: JiraClient, project_key: str):
        self.client = client
        self.project_key = project_key

    def build_jql(self, since) -> str:
        return f'project = {self.project_key} AND updated >= "{since}" ORDER BY updated DESC'

    def fetch_updated_issues(self, since, max_results: int = 100) -> list:
        """
        Fetch all issues updated on or after `since`

        Upstream errors are logged; the issues fetched so far are returned.

        Returns:
            List of simplified issue dictionaries, most recently updated first
        """
        issues = []
        next_page_token = None
        jql = self.build_jql(since)

        while True:
            try:
                result = self.client.search_issues(
                    jql=jql,
                    max_results=max_results,
                    fields=ISSUE_FIELDS,
                    next_page_token=next_page_token
                )
            except UpstreamRequestError as e:
                logger.error("Error fetching issues for %s: %s", self.project_key, e)
                break

            batch = result.get("issues", [])
            if not batch:
                break

            issues.extend(transform_issue(issue) for issue in batch)

            next_page_token = result.get("nextPageToken")
            if not next_page_token:
                break

        return issues


def transform_issue(issue: dict) -> dict:
    """Simplify a raw JIRA issue"""
    fields = issue.get("fields", {})
    assignee = fields.get("assignee") or {}
    return {
        "key": issue.get("key"),
        "summary": fields.get("summary") or "",
        "status": (fields.get("status") or {}).get("name"),
        "assignee": assignee.get("displayName"),
        "updated": format_local_time(fields.get("updated") or "")
    }


def fetch_team_issues(client: JiraClient, config: ReportConfig, since) -> dict:
    """
    Fetch updated issues for every configured team

    Returns:
        Dictionary mapping project key to list of issues, in team order
    """
    since = str(since)
    all_issues = {}

    for team_id in config.team_ids:
        project_key = config.jira_project_key(team_id)
        print(f"Fetching {project_key} issues updated since {since}...")
        fetcher = JiraFetcher(client, project_key)
        all_issues[project_key] = fetcher.fetch_updated_issues(since)
        print(f"  Found {len(all_issues[project_key])} issues")

    return all_issues
