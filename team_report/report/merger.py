"""Merge the Git and Jira reports into one per-team document"""

import re
from typing import Optional

from team_report.models import ReportSection
from team_report.report.markdown_builder import DEVELOPER_COMMITS_TITLE

# A section runs from its `## ` heading line to the next `## ` line or the end
SECTION_END = r"(?=^## |\Z)"

# Bodies this short are leftovers such as a dangling "- ["
MIN_SECTION_BODY = 2

ISSUES_HEADING = "### Jira 완료된 이슈"
COMMITS_HEADING = "### Git 커밋 내역"


def team_marker(text: str) -> str:
    """
    Regex matching `text` as a whole identifier

    The match must end before a non-alphanumeric character (so `E20` never
    matches `E201`) and start at a non-alphanumeric character or at a
    letter/digit transition (so `E201` still matches `S12P31E201`).
    """
    lead = r"(?:(?<![0-9A-Za-z])|(?<=[0-9])(?=[A-Za-z])|(?<=[A-Za-z])(?=[0-9]))"
    return lead + re.escape(text) + r"(?![0-9A-Za-z])"


def extract_section(document: str, marker: str) -> Optional[ReportSection]:
    """
    First section whose `## ` heading line matches the marker regex

    Args:
        document: Markdown text
        marker: Regex searched for in the heading line

    Returns:
        ReportSection, or None when no heading matches
    """
    pattern = re.compile(rf"^## [^\n]*{marker}[^\n]*(?:\n.*?)?{SECTION_END}", re.MULTILINE | re.DOTALL)
    match = pattern.search(document)
    if not match:
        return None

    heading, _, body = match.group(0).partition("\n")
    return ReportSection(heading=heading, body=body)


class CrossSourceMerger:
    """Stitches matching team sections of the two reports together"""

    def __init__(self, repo_path_prefix: str = "", repo_prefix: str = ""):
        self.repo_path_prefix = repo_path_prefix
        self.repo_prefix = repo_prefix

    def git_marker(self, team_id: str) -> str:
        return f"{self.repo_path_prefix}{self.repo_prefix}{team_id}"

    def merge(self, git_document: str, issue_document: str, team_ids: list) -> str:
        """
        Merge two report documents

        Args:
            git_document: Git report markdown
            issue_document: Jira report markdown
            team_ids: Teams in output order

        Returns:
            Combined markdown text
        """
        summary = extract_section(git_document, re.escape(DEVELOPER_COMMITS_TITLE))
        issue_sections = {}
        git_sections = {}
        for team_id in team_ids:
            issue_sections[team_id] = extract_section(issue_document, team_marker(team_id))
            git_sections[team_id] = extract_section(git_document, team_marker(self.git_marker(team_id)))

        return self.merge_sections(team_ids, issue_sections, git_sections, summary)

    def merge_sections(self, team_ids: list, issue_sections: dict, git_sections: dict,
                       summary: ReportSection = None) -> str:
        """
        Merge already extracted sections

        Args:
            team_ids: Teams in output order
            issue_sections: team id -> Jira ReportSection (or None)
            git_sections: team id -> Git ReportSection (or None)
            summary: Developer commit count section, placed first

        Returns:
            Combined markdown text
        """
        combined = ""
        if summary is not None:
            combined += summary.text.strip() + "\n\n"

        for team_id in team_ids:
            issue_section = issue_sections.get(team_id)
            git_section = git_sections.get(team_id)
            if issue_section is None and git_section is None:
                continue

            combined += f"\n## {team_id}팀\n\n"

            if issue_section is not None:
                combined += f"{ISSUES_HEADING}\n{issue_section.body.strip()}\n\n"

            if git_section is not None:
                body = git_section.body.strip()
                if len(body) > MIN_SECTION_BODY:
                    combined += f"{COMMITS_HEADING}\n{body}\n\n"

        return combined.strip()
