"""JIRA data fetching and processing"""

from .jira_fetcher import JiraClient, JiraFetcher, fetch_team_issues
from .jira_processor import build_issue_report, format_issue_details
