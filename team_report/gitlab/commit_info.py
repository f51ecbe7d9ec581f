"""Detailed information about a single commit"""

import logging
import re

from team_report.errors import UpstreamRequestError
from team_report.gitlab.commit_fetcher import fetch_commit_branches
from team_report.gitlab.gitlab_client import GitLabClient
from team_report.models import format_local_time

logger = logging.getLogger(__name__)

ADDED_LINE = re.compile(r"^\+[^+]", re.MULTILINE)
REMOVED_LINE = re.compile(r"^-[^-]", re.MULTILINE)


def fetch_commit_info(client: GitLabClient, repo_path: str, commit_id: str) -> dict:
    """
    Fetch basic info, diff and containing branches of a commit

    Diff and branch failures are absorbed (empty diff, no branches); a failure
    to resolve the project or the commit itself is raised.

    Returns:
        Dictionary with "basic", "diff" and "branches" keys
    """
    project_id = client.get_project_id(repo_path)
    if project_id is None:
        raise UpstreamRequestError(repo_path, None, "project not found")

    basic = client.get_commit(project_id, commit_id)

    try:
        diff = client.get_commit_diff(project_id, commit_id)
    except UpstreamRequestError as e:
        logger.error("Commit diff unavailable for %s: %s", commit_id, e)
        diff = []

    try:
        branches = fetch_commit_branches(client, project_id, commit_id)
    except UpstreamRequestError as e:
        logger.error("Branch info unavailable for %s: %s", commit_id, e)
        branches = []

    return {
        "basic": basic,
        "diff": diff,
        "branches": branches
    }


def count_changed_lines(diff_text: str) -> tuple:
    """(added, removed) line counts of a unified diff hunk"""
    if not diff_text:
        return 0, 0
    return len(ADDED_LINE.findall(diff_text)), len(REMOVED_LINE.findall(diff_text))


def describe_file_change(file_diff: dict) -> str:
    if file_diff.get("deleted_file"):
        return "삭제됨"
    if file_diff.get("new_file"):
        return "추가됨"
    return "수정됨"


def format_commit_info(info: dict) -> str:
    """Human readable summary of fetch_commit_info output"""
    basic = info.get("basic", {})
    lines = [
        "========== 커밋 기본 정보 ==========",
        f"커밋 ID: {basic.get('id')}",
        f"단축 ID: {basic.get('short_id')}",
        f"제목: {basic.get('title')}",
        f"메시지: {basic.get('message')}",
        f"작성자: {basic.get('author_name')} <{basic.get('author_email')}>",
        f"작성일: {format_local_time(basic.get('created_at') or '')}",
        f"커밋 URL: {basic.get('web_url')}",
        f"상태: {basic.get('status')}",
        "",
        "========== 브랜치 정보 ==========",
    ]

    branches = info.get("branches", [])
    if branches:
        lines.append(f"이 커밋이 포함된 브랜치: {', '.join(branches)}")
    else:
        lines.append("브랜치 정보가 없습니다.")

    lines.append("")
    lines.append("========== 변경된 파일 목록 ==========")
    diff = info.get("diff", [])
    if diff:
        for index, file_diff in enumerate(diff, start=1):
            added, removed = count_changed_lines(file_diff.get("diff", ""))
            lines.append(f"[{index}] {file_diff.get('new_path')} ({describe_file_change(file_diff)})")
            lines.append(f"   변경: +{added} 줄, -{removed} 줄")
    else:
        lines.append("변경된 파일이 없습니다.")

    return "\n".join(lines)
