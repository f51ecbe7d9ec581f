"""Team activity report generator (GitLab commits + Jira issues)"""

__version__ = "0.1.0"
