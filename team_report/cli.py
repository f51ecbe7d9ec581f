"""Command line entry point for the report stages"""

import argparse
import json
import logging
import sys
from datetime import datetime, time
from pathlib import Path

from dotenv import load_dotenv

from team_report.config import ReportConfig, load_config
from team_report.errors import ConfigurationError, UpstreamRequestError
from team_report.exporter import ReportExporter
from team_report.gitlab import CommitCollector, CommitProcessor, GitLabClient, fetch_commit_info, format_commit_info
from team_report.jira import JiraClient, build_issue_report, fetch_team_issues, format_issue_details
from team_report.report import CrossSourceMerger, DailyReportBuilder, TeamReportBuilder, WindowReportBuilder
from team_report.user_mapping import AuthorResolver, DisplayNameCache

logger = logging.getLogger(__name__)


def build_gitlab_client(config: ReportConfig) -> GitLabClient:
    config.require_gitlab()
    return GitLabClient(config.gitlab_domain, config.gitlab_token)


def build_jira_client(config: ReportConfig) -> JiraClient:
    config.require_jira()
    return JiraClient(config.jira_domain, config.jira_email, config.jira_api_token)


def build_resolver(config: ReportConfig, client: GitLabClient) -> AuthorResolver:
    """One resolver (and display name cache) per run"""
    return AuthorResolver(client, config.author_resolution, DisplayNameCache())


def run_team_commits(config: ReportConfig, client: GitLabClient, resolver: AuthorResolver) -> list:
    """
    Write the per-member commit report of every configured team

    Returns:
        List of written report paths
    """
    collector = CommitCollector(client)
    processor = CommitProcessor(resolver)
    builder = TeamReportBuilder()
    exporter = ReportExporter(config)
    since = config.window_start
    today = config.report_date

    written = []
    for team in config.teams:
        print(f"\n팀 {team.repository_path} 커밋 내역 수집 중...")
        project_id = client.get_project_id(team.repository_path)
        if project_id is None:
            member_commits = [(member, []) for member in team.members]
        else:
            member_commits = collector.collect_by_member(project_id, team.members, since)

        for member, commits in member_commits:
            print(f"- {member.label} ({member.id}): {len(commits)}개")

        summary = processor.build_team_summary(team, member_commits)
        report = builder.build(summary, since, today)
        written.append(exporter.write(exporter.team_report_path(team, today), report, append=True))

    return written


def run_daily_commits(config: ReportConfig, client: GitLabClient, resolver: AuthorResolver) -> Path:
    """Write the per-author commit report of the report day"""
    collector = CommitCollector(client)
    processor = CommitProcessor(resolver)
    exporter = ReportExporter(config)
    day = config.report_date
    start = datetime.combine(day, time.min)
    end = datetime.combine(day, time(23, 59, 59))

    print(f"보고서 날짜: {day}")
    repo_groups = []
    for repo in config.repositories:
        project_id = client.get_project_id(repo)
        if project_id is None:
            continue

        commits = collector.collect_fast(project_id, start, end, resolve_refs=True)
        print(f"{repo}: Merge 커밋 제외 {len(commits)}개")
        if commits:
            repo_groups.append((repo, processor.group_by_author(commits)))

    report = DailyReportBuilder().build(repo_groups, day)
    return exporter.write(exporter.git_report_path(day), report)


def run_window_commits(config: ReportConfig, client: GitLabClient, resolver: AuthorResolver) -> Path:
    """Write the per-author commit listing of every repository over the report window"""
    collector = CommitCollector(client)
    processor = CommitProcessor(resolver)
    exporter = ReportExporter(config)
    since = config.window_start
    today = config.report_date

    print(f"보고서 기간: {since} ~ {today}")
    repo_groups = []
    for repo in config.repositories:
        project_id = client.get_project_id(repo)
        if project_id is None:
            continue

        commits = collector.collect_fast(project_id, since)
        print(f"{repo}: Merge 커밋 제외 {len(commits)}개")
        if commits:
            repo_groups.append((repo, processor.group_by_author(commits)))

    report = WindowReportBuilder().build(repo_groups, since, today)
    return exporter.write(exporter.window_report_path(today), report)


def run_jira_issues(config: ReportConfig, client: JiraClient, since=None) -> Path:
    """Write the issue report for issues updated since `since` (default: report day)"""
    exporter = ReportExporter(config)
    day = config.report_date
    since = since or day

    issues = fetch_team_issues(client, config, since.isoformat())
    report = build_issue_report(issues, since, day)
    return exporter.write(exporter.jira_report_path(day), report)


def run_combine(config: ReportConfig) -> Path:
    """Merge the report day's Git and Jira reports into the daily report"""
    exporter = ReportExporter(config)
    day = config.report_date

    git_document = exporter.read(exporter.git_report_path(day))
    issue_document = exporter.read(exporter.jira_report_path(day))

    merger = CrossSourceMerger(config.repo_path_prefix, config.repo_prefix)
    combined = merger.merge(git_document, issue_document, list(config.team_ids))
    return exporter.write(exporter.daily_report_path(day), combined)


def run_commit_info(config: ReportConfig, client: GitLabClient, repo_path: str, commit_id: str,
                    output_dir: Path) -> int:
    try:
        info = fetch_commit_info(client, repo_path, commit_id)
    except UpstreamRequestError as e:
        logger.error("커밋 정보 조회 중 오류: %s", e)
        return 1

    print(format_commit_info(info))
    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / f"commit-detail-{commit_id}.json"
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(info, f, indent=2, ensure_ascii=False)
    print(f"\n상세 정보가 {output_file} 파일로 저장되었습니다.")
    return 0


def run_issue_details(client: JiraClient, issue_key: str, output_dir: Path) -> int:
    try:
        issue = client.get_issue(issue_key)
    except UpstreamRequestError as e:
        logger.error("에러 발생: %s", e)
        return 1

    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / f"issue-{issue_key}.json"
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(issue, f, indent=2, ensure_ascii=False)
    print(f"이슈 정보가 {output_file} 파일에 저장되었습니다.\n")
    print(format_issue_details(issue))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="team-report", description="Team GitLab/JIRA activity reports")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("team-commits", help="Per-member commit report of every team over the report window")
    sub.add_parser("daily-commits", help="Per-author commit report of the report day")
    sub.add_parser("window-commits", help="Per-author commit listing of every repository over the report window")
    jira = sub.add_parser("jira-issues", help="Report of JIRA issues updated on the report day")
    jira.add_argument("--window", action="store_true", help="Use the whole report window instead of one day")
    sub.add_parser("combine", help="Merge the day's Git and JIRA reports")
    sub.add_parser("daily", help="Run daily-commits, jira-issues and combine")

    info = sub.add_parser("commit-info", help="Show details of one commit")
    info.add_argument("repo", help="Repository path (e.g., /group/project)")
    info.add_argument("commit", help="Commit SHA")
    info.add_argument("--output-dir", type=Path, default=Path("."), help="Where to save the JSON details")

    issue = sub.add_parser("issue-details", help="Show details of one JIRA issue")
    issue.add_argument("key", help="Issue key (e.g., S12P31E201-58)")
    issue.add_argument("--output-dir", type=Path, default=Path("."), help="Where to save the JSON details")
    return parser


def main(argv: list = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s"
    )
    load_dotenv()

    try:
        config = load_config()

        if args.command == "team-commits":
            config.require_teams()
            client = build_gitlab_client(config)
            run_team_commits(config, client, build_resolver(config, client))
        elif args.command == "daily-commits":
            config.require_repositories()
            client = build_gitlab_client(config)
            run_daily_commits(config, client, build_resolver(config, client))
        elif args.command == "window-commits":
            config.require_repositories()
            client = build_gitlab_client(config)
            run_window_commits(config, client, build_resolver(config, client))
        elif args.command == "jira-issues":
            since = config.window_start if args.window else None
            run_jira_issues(config, build_jira_client(config), since)
        elif args.command == "combine":
            run_combine(config)
        elif args.command == "daily":
            config.require_repositories()
            config.require_jira()
            client = build_gitlab_client(config)
            run_daily_commits(config, client, build_resolver(config, client))
            run_jira_issues(config, build_jira_client(config))
            run_combine(config)
        elif args.command == "commit-info":
            return run_commit_info(config, build_gitlab_client(config), args.repo, args.commit, args.output_dir)
        elif args.command == "issue-details":
            return run_issue_details(build_jira_client(config), args.key, args.output_dir)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
