"""Write and read report files"""

import logging
from pathlib import Path

from team_report.config import TEAM_REPORT_FILENAME, ReportConfig
from team_report.models import Team

logger = logging.getLogger(__name__)


class ReportExporter:
    """Places report files according to the run configuration"""

    def __init__(self, config: ReportConfig):
        self.config = config

    def team_report_path(self, team: Team, day) -> Path:
        return self.config.git_report_dir / f"{TEAM_REPORT_FILENAME}-{team.name}-{day}.md"

    def window_report_path(self, day) -> Path:
        return self.config.git_report_dir / f"{TEAM_REPORT_FILENAME}-{day}.md"

    def git_report_path(self, day) -> Path:
        return self.config.git_report_dir / f"{self.config.git_report_filename}-{day}.md"

    def jira_report_path(self, day) -> Path:
        return self.config.jira_report_dir / f"{self.config.jira_report_filename}-{day}.md"

    def daily_report_path(self, day) -> Path:
        return self.config.daily_report_dir / f"{self.config.daily_report_filename}-{day}.md"

    def write(self, path: Path, content: str, append: bool = False) -> Path:
        """
        Write a report as UTF-8

        Args:
            path: Target file; parent directories are created
            content: Markdown text
            append: Append to an existing file instead of replacing it

        Returns:
            The written path
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a" if append else "w", encoding="utf-8") as f:
            f.write(content)
        print(f"결과가 {path}에 저장되었습니다.")
        return path

    def read(self, path: Path) -> str:
        """Report text, or an empty document when the file is missing"""
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("Report not found: %s", path)
            return ""
