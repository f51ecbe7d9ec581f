"""Centralized configuration for the team report generator"""

import dataclasses
import json
import logging
import os
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

from team_report.errors import ConfigurationError
from team_report.models import Member, Team

logger = logging.getLogger(__name__)


# =============================================================================
# GitLab Configuration
# =============================================================================

GITLAB_DEFAULT_DOMAIN = "gitlab.com"

# Branches tried when the branch listing is unavailable
FALLBACK_BRANCHES = ("main", "master", "develop")

# Commit listing page size
COMMITS_PER_PAGE = 100

# Branch listing page size
BRANCHES_PER_PAGE = 100

# Commits whose title starts with this are merge noise
MERGE_COMMIT_PREFIX = "Merge branch"

# Seconds before an HTTP request is abandoned
REQUEST_TIMEOUT = 30


# =============================================================================
# Team Configuration
# =============================================================================

DEFAULT_TEAM_IDS = ("E201", "E202", "E203", "E204", "E205", "E206", "E207")
DEFAULT_REPO_PREFIX = "S12P31"
DEFAULT_REPO_PATH_PREFIX = "/s12-final/"

# Length of the team report window
DEFAULT_WINDOW_DAYS = 14

AUTHOR_PASSTHROUGH = "passthrough"
AUTHOR_LOOKUP = "lookup"
AUTHOR_RESOLUTION_MODES = (AUTHOR_PASSTHROUGH, AUTHOR_LOOKUP)


# =============================================================================
# JIRA Configuration
# =============================================================================

DEFAULT_JIRA_PROJECT_PREFIX = "S12P31"


# =============================================================================
# Report Output Configuration
# =============================================================================

GIT_REPORT_DIR = Path("daily-git")
GIT_REPORT_FILENAME = "일일보고서용-Git"
TEAM_REPORT_FILENAME = "2주간보고서용-Git"
JIRA_REPORT_DIR = Path("daily-jira")
JIRA_REPORT_FILENAME = "일일보고서용-Jira"
DAILY_REPORT_DIR = Path("daily-report")
DAILY_REPORT_FILENAME = "일일보고서"


@dataclasses.dataclass(frozen=True)
class ReportConfig:
    """Run configuration, loaded once and handed to every component"""

    gitlab_domain: str = GITLAB_DEFAULT_DOMAIN
    gitlab_token: str = ""
    teams: tuple = ()
    team_ids: tuple = DEFAULT_TEAM_IDS
    repositories: tuple = ()
    repo_prefix: str = DEFAULT_REPO_PREFIX
    repo_path_prefix: str = DEFAULT_REPO_PATH_PREFIX
    target_date: Optional[date] = None
    window_days: int = DEFAULT_WINDOW_DAYS
    author_resolution: str = AUTHOR_PASSTHROUGH
    jira_domain: str = ""
    jira_email: str = ""
    jira_api_token: str = ""
    jira_project_prefix: str = DEFAULT_JIRA_PROJECT_PREFIX
    git_report_dir: Path = GIT_REPORT_DIR
    git_report_filename: str = GIT_REPORT_FILENAME
    jira_report_dir: Path = JIRA_REPORT_DIR
    jira_report_filename: str = JIRA_REPORT_FILENAME
    daily_report_dir: Path = DAILY_REPORT_DIR
    daily_report_filename: str = DAILY_REPORT_FILENAME

    @property
    def report_date(self) -> date:
        return self.target_date or date.today()

    @property
    def window_start(self) -> date:
        return self.report_date - timedelta(days=self.window_days)

    def jira_project_key(self, team_id: str) -> str:
        return f"{self.jira_project_prefix}{team_id}"

    def require_gitlab(self) -> None:
        if not self.gitlab_token:
            raise ConfigurationError("GITLAB_TOKEN environment variable not set")

    def require_teams(self) -> None:
        self.require_gitlab()
        if not self.teams:
            raise ConfigurationError("No team configured (TEAM_<ID>_REPO / TEAM_<ID>_MEMBERS)")

    def require_repositories(self) -> None:
        self.require_gitlab()
        if not self.repositories:
            raise ConfigurationError("REPOSITORIES environment variable not set")

    def require_jira(self) -> None:
        if not self.jira_domain or not self.jira_email or not self.jira_api_token:
            raise ConfigurationError(
                "JIRA_DOMAIN, JIRA_EMAIL and JIRA_API_TOKEN environment variables must be set"
            )


def _split_list(value: Optional[str]) -> tuple:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def parse_members(raw: str) -> tuple:
    """
    Parse a JSON member list

    Args:
        raw: JSON array of {"id": ..., "name": ...} objects (a bare string is
            taken as the id)

    Returns:
        Tuple of Member
    """
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("member list must be a JSON array")

    members = []
    for entry in data:
        if isinstance(entry, str):
            members.append(Member(id=entry))
        elif isinstance(entry, dict) and entry.get("id"):
            members.append(Member(id=str(entry["id"]), display_name=str(entry.get("name") or "")))
        else:
            raise ValueError(f"invalid member entry: {entry!r}")
    return tuple(members)


def load_teams(environ: dict, team_ids: tuple) -> tuple:
    """Build Team entries from TEAM_<ID>_REPO / TEAM_<ID>_MEMBERS pairs"""
    teams = []
    for team_id in team_ids:
        repo = environ.get(f"TEAM_{team_id}_REPO")
        raw_members = environ.get(f"TEAM_{team_id}_MEMBERS")
        if not repo or not raw_members:
            continue
        try:
            members = parse_members(raw_members)
        except ValueError as e:
            logger.error("Failed to parse members for team %s: %s", team_id, e)
            continue
        if not members:
            continue
        teams.append(Team(id=team_id, repository_path=repo, members=members))
    return tuple(teams)


def _parse_date(value: Optional[str], name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ConfigurationError(f"{name} must be formatted as YYYY-MM-DD, got {value!r}")


def _parse_int(value: Optional[str], name: str, default: int) -> int:
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if parsed < 0:
        raise ConfigurationError(f"{name} must not be negative")
    return parsed


def load_config(environ: dict = None) -> ReportConfig:
    """
    Load the run configuration from environment variables

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        ReportConfig
    """
    if environ is None:
        environ = os.environ

    team_ids = _split_list(environ.get("TEAM_IDS")) or DEFAULT_TEAM_IDS
    teams = load_teams(environ, team_ids)
    repositories = _split_list(environ.get("REPOSITORIES")) or tuple(t.repository_path for t in teams)

    author_resolution = (environ.get("AUTHOR_RESOLUTION") or AUTHOR_PASSTHROUGH).strip().lower()
    if author_resolution not in AUTHOR_RESOLUTION_MODES:
        raise ConfigurationError(
            f"AUTHOR_RESOLUTION must be one of {', '.join(AUTHOR_RESOLUTION_MODES)}"
        )

    return ReportConfig(
        gitlab_domain=environ.get("GITLAB_DOMAIN") or GITLAB_DEFAULT_DOMAIN,
        gitlab_token=environ.get("GITLAB_TOKEN") or "",
        teams=teams,
        team_ids=team_ids,
        repositories=repositories,
        repo_prefix=environ.get("REPO_PREFIX", DEFAULT_REPO_PREFIX),
        repo_path_prefix=environ.get("REPO_PATH_PREFIX", DEFAULT_REPO_PATH_PREFIX),
        target_date=_parse_date(environ.get("TARGET_DATE"), "TARGET_DATE"),
        window_days=_parse_int(environ.get("WINDOW_DAYS"), "WINDOW_DAYS", DEFAULT_WINDOW_DAYS),
        author_resolution=author_resolution,
        jira_domain=environ.get("JIRA_DOMAIN") or "",
        jira_email=environ.get("JIRA_EMAIL") or "",
        jira_api_token=environ.get("JIRA_API_TOKEN") or "",
        jira_project_prefix=environ.get("JIRA_PROJECT_PREFIX", DEFAULT_JIRA_PROJECT_PREFIX),
        git_report_dir=Path(environ.get("GIT_REPORT_DIR") or GIT_REPORT_DIR),
        git_report_filename=environ.get("GIT_REPORT_FILENAME") or GIT_REPORT_FILENAME,
        jira_report_dir=Path(environ.get("JIRA_REPORT_DIR") or JIRA_REPORT_DIR),
        jira_report_filename=environ.get("JIRA_REPORT_FILENAME") or JIRA_REPORT_FILENAME,
        daily_report_dir=Path(environ.get("DAILY_REPORT_DIR") or DAILY_REPORT_DIR),
        daily_report_filename=environ.get("DAILY_REPORT_FILENAME") or DAILY_REPORT_FILENAME,
    )
