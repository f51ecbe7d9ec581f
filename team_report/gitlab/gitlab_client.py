"""GitLab REST API v4 client"""

import logging
from urllib.parse import quote

import requests

from team_report.config import REQUEST_TIMEOUT
from team_report.errors import UpstreamRequestError

logger = logging.getLogger(__name__)


class GitLabClient:
    """Simple GitLab REST client with Bearer auth"""

    def __init__(self, domain: str, token: str, session: requests.Session = None,
                 timeout: float = REQUEST_TIMEOUT):
        """
        Initialize GitLab client

        Args:
            domain: GitLab host (e.g., gitlab.com)
            token: Personal or project access token
            session: Optional requests session (one is created when omitted)
            timeout: Request timeout in seconds
        """
        self.base_url = f"https://{domain}/api/v4"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json"
        }

    def get(self, endpoint: str, params: dict = None):
        """
        Make a GET request to the GitLab API

        Args:
            endpoint: API endpoint (e.g., /projects/42/repository/branches)
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            UpstreamRequestError: non-success status, transport failure or a body that is not JSON
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.get(url, headers=self.headers, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamRequestError(url, None, str(e)) from e

        if not response.ok:
            raise UpstreamRequestError(url, response.status_code, response.text)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamRequestError(url, response.status_code, response.text) from e

    def get_project_id(self, repo_path: str):
        """
        Resolve a repository path (e.g., /group/project) to its numeric id

        Returns:
            Project id, or None when the project cannot be resolved
        """
        path = repo_path[1:] if repo_path.startswith("/") else repo_path
        try:
            data = self.get(f"/projects/{quote(path, safe='')}")
        except UpstreamRequestError as e:
            logger.error("Error fetching project ID for %s: %s", repo_path, e)
            return None
        return data.get("id")

    def list_branches(self, project_id, params: dict = None) -> list:
        """One page of raw branch objects"""
        return self.get(f"/projects/{project_id}/repository/branches", params)

    def list_commits(self, project_id, params: dict) -> list:
        """One page of the commit listing"""
        return self.get(f"/projects/{project_id}/repository/commits", params)

    def get_commit(self, project_id, commit_id: str) -> dict:
        return self.get(f"/projects/{project_id}/repository/commits/{commit_id}")

    def get_commit_diff(self, project_id, commit_id: str) -> list:
        return self.get(f"/projects/{project_id}/repository/commits/{commit_id}/diff")

    def get_commit_refs(self, project_id, commit_id: str) -> list:
        """Branch refs that contain a commit"""
        return self.get(
            f"/projects/{project_id}/repository/commits/{commit_id}/refs",
            {"type": "branch"}
        )

    def find_users(self, username: str) -> list:
        """User directory lookup by handle"""
        return self.get("/users", {"username": username})
