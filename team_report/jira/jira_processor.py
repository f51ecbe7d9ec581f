"""Render JIRA issues as markdown"""

from team_report.models import format_local_time


def build_issue_report(issues_by_project: dict, window_start, window_end=None) -> str:
    """
    Render the issue report, one `## <project key>` section per project

    Projects without issues are left out.

    Args:
        issues_by_project: Dictionary mapping project key to simplified issues
        window_start: First day of the window
        window_end: Optional last day of the window

    Returns:
        Markdown text
    """
    if window_end is None or window_end == window_start:
        output = f"# {window_start} Jira 이슈 내역\n\n"
    else:
        output = f"# {window_start} ~ {window_end} Jira 이슈 내역\n\n"

    for project_key, issues in issues_by_project.items():
        if not issues:
            continue
        output += f"## {project_key}\n"
        for issue in issues:
            output += f"- {issue['summary']}\n"
        output += "\n"

    return output


def format_issue_details(issue: dict) -> str:
    """Main fields of a raw JIRA issue, one per line"""
    fields = issue.get("fields", {})
    assignee = fields.get("assignee") or {}
    lines = [
        "주요 필드 정보:",
        f"이슈 키: {issue.get('key')}",
        f"제목: {fields.get('summary')}",
        f"상태: {(fields.get('status') or {}).get('name')}",
        f"담당자: {assignee.get('displayName') or '미배정'}",
        f"생성일: {format_local_time(fields.get('created') or '')}",
        f"수정일: {format_local_time(fields.get('updated') or '')}",
    ]
    return "\n".join(lines)
