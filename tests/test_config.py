"""Tests for environment configuration loading"""

import json
import unittest
from datetime import date
from pathlib import Path

from team_report.config import load_config, parse_members
from team_report.errors import ConfigurationError
from team_report.models import Member
from team_report.report.merger import CrossSourceMerger


def team_env(**extra) -> dict:
    environ = {
        "GITLAB_TOKEN": "glpat-test",
        "TEAM_IDS": "E201,E202",
        "TEAM_E201_REPO": "/s12-final/S12P31E201",
        "TEAM_E201_MEMBERS": json.dumps([{"id": "@hong", "name": "홍길동"}, {"id": "kim"}]),
    }
    environ.update(extra)
    return environ


class TestLoadConfig(unittest.TestCase):

    def test_defaults(self):
        config = load_config({})
        self.assertEqual(config.gitlab_domain, "gitlab.com")
        self.assertEqual(config.team_ids, ("E201", "E202", "E203", "E204", "E205", "E206", "E207"))
        self.assertEqual(config.teams, ())
        self.assertEqual(config.author_resolution, "passthrough")
        self.assertEqual(config.window_days, 14)
        self.assertEqual(config.git_report_dir, Path("daily-git"))

    def test_teams_from_environment(self):
        config = load_config(team_env())

        self.assertEqual(len(config.teams), 1)
        team = config.teams[0]
        self.assertEqual(team.id, "E201")
        self.assertEqual(team.members, (Member("@hong", "홍길동"), Member("kim", "")))
        self.assertEqual(config.repositories, ("/s12-final/S12P31E201",))

    def test_invalid_members_skip_team(self):
        environ = team_env(TEAM_E202_REPO="/s12-final/S12P31E202", TEAM_E202_MEMBERS="not json")
        with self.assertLogs("team_report.config", level="ERROR"):
            config = load_config(environ)
        self.assertEqual([t.id for t in config.teams], ["E201"])

    def test_explicit_repositories(self):
        config = load_config(team_env(REPOSITORIES="/a/b, /c/d ,"))
        self.assertEqual(config.repositories, ("/a/b", "/c/d"))

    def test_target_date_drives_window(self):
        config = load_config({"TARGET_DATE": "2025-05-15", "WINDOW_DAYS": "7"})
        self.assertEqual(config.report_date, date(2025, 5, 15))
        self.assertEqual(config.window_start, date(2025, 5, 8))

    def test_invalid_target_date(self):
        with self.assertRaises(ConfigurationError):
            load_config({"TARGET_DATE": "15/05/2025"})

    def test_invalid_author_resolution(self):
        with self.assertRaises(ConfigurationError):
            load_config({"AUTHOR_RESOLUTION": "magic"})

    def test_repository_prefixes_and_project_key(self):
        config = load_config({"REPO_PATH_PREFIX": "/grp/", "REPO_PREFIX": "", "JIRA_PROJECT_PREFIX": "S12P11"})
        merger = CrossSourceMerger(config.repo_path_prefix, config.repo_prefix)
        self.assertEqual(merger.git_marker("E201"), "/grp/E201")
        self.assertEqual(config.jira_project_key("E101"), "S12P11E101")

    def test_required_settings(self):
        config = load_config({})
        with self.assertRaises(ConfigurationError):
            config.require_gitlab()
        with self.assertRaises(ConfigurationError):
            config.require_jira()
        with self.assertRaises(ConfigurationError):
            load_config({"GITLAB_TOKEN": "x"}).require_teams()
        load_config(team_env()).require_teams()


class TestParseMembers(unittest.TestCase):

    def test_bare_strings_are_ids(self):
        self.assertEqual(parse_members('["@a", {"id": "b", "name": "Bee"}]'), (Member("@a"), Member("b", "Bee")))

    def test_rejects_non_list(self):
        with self.assertRaises(ValueError):
            parse_members('{"id": "a"}')

    def test_rejects_entry_without_id(self):
        with self.assertRaises(ValueError):
            parse_members('[{"name": "nobody"}]')


if __name__ == "__main__":
    unittest.main()
