"""GitLab data fetching and processing"""

from .gitlab_client import GitLabClient
from .commit_fetcher import BranchEnumerator, PageFetcher, CommitCollector, deduplicate
from .commit_processor import CommitProcessor
from .commit_info import fetch_commit_info, format_commit_info
