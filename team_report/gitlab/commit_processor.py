"""Aggregate collected commits into per-member and per-author groups"""

from team_report.models import MemberReport, Team, TeamSummary
from team_report.user_mapping import AuthorResolver


class CommitProcessor:
    """Groups commits for report rendering"""

    def __init__(self, resolver: AuthorResolver = None):
        self.resolver = resolver or AuthorResolver()

    def member_display_name(self, member) -> str:
        """Configured display name, else the resolved handle"""
        if member.display_name:
            return member.display_name
        return self.resolver.resolve(member.handle) or member.id

    def build_team_summary(self, team: Team, member_commits: list) -> TeamSummary:
        """
        Build the team summary from per-member commit lists

        Args:
            team: Team being reported
            member_commits: (member, commits) pairs in configured member order

        Returns:
            TeamSummary with member reports sorted by descending count; ties
            keep the configured order
        """
        reports = [
            MemberReport(
                member=member,
                display_name=self.member_display_name(member),
                count=len(commits),
                commits=tuple(commits)
            )
            for member, commits in member_commits
        ]
        reports.sort(key=lambda r: r.count, reverse=True)

        return TeamSummary(
            team=team,
            total_commit_count=sum(r.count for r in reports),
            member_reports=tuple(reports)
        )

    def group_by_author(self, commits: list) -> dict:
        """
        Group commits by resolved author name

        Returns:
            Dictionary mapping author to list of commits, in first-seen author order
        """
        by_author = {}
        for commit in commits:
            author = self.resolver.resolve(commit.author)
            by_author.setdefault(author, []).append(commit)
        return by_author
