"""Render commit reports as markdown"""

from team_report.models import ReportSection, TeamSummary

DEVELOPER_COMMITS_TITLE = "팀별 개발자 커밋 수"
DEVELOPER_COMMITS_HEADING = f"## {DEVELOPER_COMMITS_TITLE}"


def report_title(window_start, window_end=None) -> str:
    """Top-level heading; a single day when no end is given"""
    if window_end is None:
        return f"# {window_start} 커밋 내역\n\n"
    return f"# {window_start} ~ {window_end} 커밋 내역\n\n"


class TeamReportBuilder:
    """Renders one team's per-member commit report"""

    def render_section(self, summary: TeamSummary) -> ReportSection:
        """The `## <repository>` section of the team report"""
        body = "\n### 팀원별 커밋 수 요약\n\n"
        body += f"- 팀 전체 커밋 수: {summary.total_commit_count}개\n"
        body += "- 팀원별 커밋 수:\n"
        for report in summary.member_reports:
            body += f"  - {report.display_name} ({report.member.id}): {report.count}개\n"
        body += "\n"

        body += "### 상세 커밋 내역\n\n"
        for report in summary.member_reports:
            if report.count == 0:
                continue
            body += f"#### {report.display_name} ({report.member.id}) - {report.count}개\n"
            for commit in report.commits:
                body += f"- {commit.title}\n"
            body += "\n"

        return ReportSection(heading=f"## {summary.team.repository_path}", body=body)

    def build(self, summary: TeamSummary, window_start, window_end) -> str:
        """
        Render the full team report

        Args:
            summary: Team summary (member reports already ordered)
            window_start: First day of the window
            window_end: Last day of the window

        Returns:
            Markdown text
        """
        return report_title(window_start, window_end) + self.render_section(summary).text


class DailyReportBuilder:
    """Renders the per-author commit report over several repositories"""

    def render_summary_section(self, repo_groups: list) -> ReportSection:
        """The developer commit count section, one `###` block per repository"""
        body = ""
        for repo, by_author in repo_groups:
            body += f"### {repo}\n"
            counts = sorted(((author, len(commits)) for author, commits in by_author.items()),
                            key=lambda item: item[0])
            body += "\n".join(f"- {author}: {count}개 커밋" for author, count in counts)
            body += "\n\n"
        return ReportSection(heading=DEVELOPER_COMMITS_HEADING, body=body)

    def render_repository_section(self, repo: str, by_author: dict) -> ReportSection:
        body = ""
        for author, commits in by_author.items():
            body += f"### {author} ({len(commits)}개 커밋)\n"
            for commit in commits:
                body += f"- {commit.title}\n"
            body += "\n"
        return ReportSection(heading=f"## {repo}", body=body)

    def build(self, repo_groups: list, window_start, window_end=None) -> str:
        """
        Render the daily report

        Args:
            repo_groups: (repository path, {author: commits}) pairs for the
                repositories that have commits, in configured order
            window_start: Report day (or window start)
            window_end: Optional window end

        Returns:
            Markdown text
        """
        output = report_title(window_start, window_end)
        output += self.render_summary_section(repo_groups).text
        for repo, by_author in repo_groups:
            output += self.render_repository_section(repo, by_author).text
        return output


class WindowReportBuilder:
    """Renders the per-author commit listing of every repository over the report window"""

    def render_repository_section(self, repo: str, by_author: dict) -> ReportSection:
        body = "\n"
        for author, commits in by_author.items():
            body += f"### {author}\n"
            for commit in commits:
                body += f"- {commit.title} ({commit.created_at})\n"
            body += "\n"
        return ReportSection(heading=f"## {repo}", body=body)

    def build(self, repo_groups: list, window_start, window_end) -> str:
        """
        Render the window report

        Args:
            repo_groups: (repository path, {author: commits}) pairs for the
                repositories that have commits, in configured order
            window_start: First day of the window
            window_end: Last day of the window

        Returns:
            Markdown text
        """
        output = report_title(window_start, window_end)
        for repo, by_author in repo_groups:
            output += self.render_repository_section(repo, by_author).text
        return output
