"""Fetch commits across every branch of a GitLab project"""

import logging
from datetime import date, datetime

from team_report.config import BRANCHES_PER_PAGE, COMMITS_PER_PAGE, FALLBACK_BRANCHES, MERGE_COMMIT_PREFIX
from team_report.errors import PartialDataError, UpstreamRequestError
from team_report.gitlab.gitlab_client import GitLabClient
from team_report.models import Commit, Member, RawCommit

logger = logging.getLogger(__name__)

UNKNOWN_BRANCHES = ["unknown"]


def format_since(value) -> str:
    """Format a window boundary the way the commits endpoint expects it"""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    if isinstance(value, date):
        return f"{value.isoformat()}T00:00:00Z"
    return str(value)


def is_merge_commit(raw_commit: RawCommit) -> bool:
    return raw_commit.title.startswith(MERGE_COMMIT_PREFIX)


def deduplicate(commits: list) -> list:
    """
    Keep one commit per URL, first occurrence wins

    Args:
        commits: Commits in collection order

    Returns:
        Unique commits in first-seen order
    """
    by_url = {}
    for commit in commits:
        if commit.url not in by_url:
            by_url[commit.url] = commit
    return list(by_url.values())


def fetch_commit_branches(client: GitLabClient, project_id, commit_id: str) -> list:
    """
    Names of the branches containing a commit

    Raises:
        PartialDataError: the refs endpoint answered with a non-success status
        UpstreamRequestError: the refs endpoint could not be reached
    """
    try:
        refs = client.get_commit_refs(project_id, commit_id)
    except UpstreamRequestError as e:
        if e.status is None:
            raise
        raise PartialDataError(e.url, e.status, e.body) from e
    return [ref.get("name") for ref in refs if ref.get("name")]


class BranchEnumerator:
    """Lists the branches of a project, falling back to well-known names"""

    def __init__(self, client: GitLabClient, fallback: tuple = FALLBACK_BRANCHES,
                 page_size: int = BRANCHES_PER_PAGE):
        self.client = client
        self.fallback = fallback
        self.page_size = page_size

    def list_branches(self, project_id) -> list:
        """
        List all branch names of a project, page by page

        Stops on an empty or short page. If any page fails the error is
        logged and the fallback branches are returned instead.
        """
        names = []
        page = 1
        while True:
            try:
                branches = self.client.list_branches(project_id, {"page": page, "per_page": self.page_size})
            except UpstreamRequestError as e:
                logger.error("Error fetching branches for project %s: %s", project_id, e)
                return list(self.fallback)

            names.extend(branch["name"] for branch in branches)
            if len(branches) < self.page_size:
                return names
            page += 1


class PageFetcher:
    """Walks the page-numbered commit listing until the server runs out"""

    def __init__(self, client: GitLabClient):
        self.client = client

    def iter_pages(self, project_id, branch: str = None, since=None, page_size: int = COMMITS_PER_PAGE,
                   until=None, all_refs: bool = False):
        """
        Yield pages of raw commit dicts

        Stops when a page is empty (not yielded), when a page is shorter than
        page_size (yielded, then stop), or on an upstream error (nothing more
        is yielded).

        Args:
            project_id: GitLab project id
            branch: Branch to scan (ref_name); None when scanning all refs
            since: Window start (date, datetime or preformatted string)
            page_size: Items per page (per_page)
            until: Optional window end
            all_refs: Ask for commits of every ref (all=true)
        """
        page = 1
        while True:
            params = {"page": page, "per_page": page_size}
            if since is not None:
                params["since"] = format_since(since)
            if until is not None:
                params["until"] = format_since(until)
            if branch is not None:
                params["ref_name"] = branch
            if all_refs:
                params["all"] = "true"

            try:
                commits = self.client.list_commits(project_id, params)
            except UpstreamRequestError as e:
                if e.status is not None:
                    logger.error("API error (%s) listing commits of project %s, branch %s, page %s",
                                 e.status, project_id, branch, page)
                else:
                    logger.error("Error fetching commits for project %s, branch %s: %s",
                                 project_id, branch, e)
                return

            if not commits:
                return

            yield commits

            if len(commits) < page_size:
                return
            page += 1


class CommitCollector:
    """Collects the deduplicated, merge-free commits of a project"""

    def __init__(self, client: GitLabClient, branch_enumerator: BranchEnumerator = None,
                 page_fetcher: PageFetcher = None, page_size: int = COMMITS_PER_PAGE):
        self.client = client
        self.branches = branch_enumerator or BranchEnumerator(client)
        self.pages = page_fetcher or PageFetcher(client)
        self.page_size = page_size

    def collect(self, project_id, since, member: Member = None) -> list:
        """
        Collect commits from every branch of a project

        Branches are scanned one after another in enumeration order, so the
        branch kept for a commit seen on several branches is the first one.

        Args:
            project_id: GitLab project id
            since: Window start
            member: Keep only this member's commits (None keeps everyone)

        Returns:
            List of unique Commit in collection order
        """
        commits = []
        for branch in self.branches.list_branches(project_id):
            for page in self.pages.iter_pages(project_id, branch, since, self.page_size):
                for data in page:
                    raw = RawCommit.from_api(data)
                    if is_merge_commit(raw):
                        continue
                    if member is not None and not member.matches(raw):
                        continue
                    commits.append(Commit.from_raw(raw, branch))
        return deduplicate(commits)

    def collect_by_member(self, project_id, members: tuple, since) -> list:
        """
        Scan the project once and partition its commits by member

        Returns:
            List of (member, commits) pairs in member order
        """
        commits = self.collect(project_id, since)
        return [(member, [c for c in commits if member.owns(c)]) for member in members]

    def collect_fast(self, project_id, since, until=None, resolve_refs: bool = False) -> list:
        """
        Collect commits of all refs with a single listing (all=true)

        Args:
            project_id: GitLab project id
            since: Window start
            until: Optional window end
            resolve_refs: Look up the branches containing each commit

        Returns:
            List of unique Commit in listing order
        """
        commits = []
        for page in self.pages.iter_pages(project_id, None, since, self.page_size,
                                          until=until, all_refs=True):
            try:
                page_commits = self._normalize_page(project_id, page, resolve_refs)
            except UpstreamRequestError as e:
                logger.error("Error resolving branches for project %s: %s", project_id, e)
                break
            commits.extend(page_commits)
        return deduplicate(commits)

    def _normalize_page(self, project_id, page: list, resolve_refs: bool) -> list:
        result = []
        for data in page:
            raw = RawCommit.from_api(data)
            if is_merge_commit(raw):
                continue
            if resolve_refs:
                try:
                    branches = fetch_commit_branches(self.client, project_id, raw.id)
                except PartialDataError as e:
                    logger.warning("Branch refs unavailable for commit %s: %s", raw.id, e)
                    branches = UNKNOWN_BRANCHES
                raw = raw.with_branches(branches)
            result.append(Commit.from_raw(raw))
        return result
