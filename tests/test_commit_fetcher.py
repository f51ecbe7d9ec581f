"""Tests for branch enumeration, pagination and commit collection"""

import unittest
from datetime import date, datetime

from fake_clients import FakeGitLabClient, http_error, make_commit, transport_error
from team_report.gitlab.commit_fetcher import (
    BranchEnumerator,
    CommitCollector,
    PageFetcher,
    deduplicate,
    format_since,
)
from team_report.models import Member

SINCE = date(2025, 5, 1)


class TestBranchEnumerator(unittest.TestCase):

    def test_lists_branch_names(self):
        client = FakeGitLabClient(branches=["develop", "main", "feature/login"])
        self.assertEqual(BranchEnumerator(client).list_branches(1), ["develop", "main", "feature/login"])

    def test_falls_back_on_upstream_error(self):
        client = FakeGitLabClient(branches=http_error(403))
        with self.assertLogs("team_report.gitlab.commit_fetcher", level="ERROR"):
            branches = BranchEnumerator(client).list_branches(1)
        self.assertEqual(branches, ["main", "master", "develop"])

    def test_walks_every_branch_page(self):
        names = [f"feature/{i}" for i in range(25)]
        client = FakeGitLabClient(branches=names)

        branches = BranchEnumerator(client, page_size=10).list_branches(1)

        self.assertEqual(branches, names)
        pages = [params for kind, params in client.calls if kind == "branches"]
        self.assertEqual([p["page"] for p in pages], [1, 2, 3])
        self.assertTrue(all(p["per_page"] == 10 for p in pages))

    def test_full_last_page_ends_on_empty_page(self):
        client = FakeGitLabClient(branches=["a", "b", "c", "d"])

        self.assertEqual(BranchEnumerator(client, page_size=2).list_branches(1), ["a", "b", "c", "d"])
        self.assertEqual(sum(1 for kind, _ in client.calls if kind == "branches"), 3)

    def test_failed_later_page_falls_back(self):
        client = FakeGitLabClient(branches=["a", "b", "c"], branch_errors={2: http_error(500)})
        with self.assertLogs("team_report.gitlab.commit_fetcher", level="ERROR"):
            branches = BranchEnumerator(client, page_size=2).list_branches(1)
        self.assertEqual(branches, ["main", "master", "develop"])

    def test_commits_on_later_branch_pages_are_collected(self):
        names = [f"b{i}" for i in range(120)]
        client = FakeGitLabClient(branches=names, pages={"b110": [[make_commit("late")]]})

        commits = CommitCollector(client).collect(1, SINCE)

        self.assertEqual([c.branch for c in commits], ["b110"])

    def test_falls_back_on_transport_error(self):
        client = FakeGitLabClient(branches=transport_error())
        with self.assertLogs("team_report.gitlab.commit_fetcher", level="ERROR"):
            branches = BranchEnumerator(client).list_branches(1)
        self.assertEqual(branches, ["main", "master", "develop"])


class TestPageFetcher(unittest.TestCase):

    def test_stops_after_short_page(self):
        pages = [
            [make_commit("a1"), make_commit("a2")],
            [make_commit("b1"), make_commit("b2")],
            [make_commit("c1")],
            [make_commit("never")],
        ]
        client = FakeGitLabClient(pages={"main": pages})

        result = list(PageFetcher(client).iter_pages(1, "main", SINCE, page_size=2))

        self.assertEqual(len(result), 3)
        self.assertEqual([c["id"] for c in result[2]], ["c1"])
        self.assertEqual([p["page"] for p in client.commit_calls()], [1, 2, 3])

    def test_empty_page_is_not_emitted(self):
        pages = [[make_commit("a1"), make_commit("a2")], []]
        client = FakeGitLabClient(pages={"main": pages})

        result = list(PageFetcher(client).iter_pages(1, "main", SINCE, page_size=2))

        self.assertEqual(len(result), 1)
        self.assertEqual(len(client.commit_calls()), 2)

    def test_upstream_error_discards_page_and_stops(self):
        pages = [[make_commit("a1"), make_commit("a2")], http_error(502), [make_commit("c1")]]
        client = FakeGitLabClient(pages={"main": pages})

        with self.assertLogs("team_report.gitlab.commit_fetcher", level="ERROR") as logs:
            result = list(PageFetcher(client).iter_pages(1, "main", SINCE, page_size=2))

        self.assertEqual(len(result), 1)
        self.assertEqual(len(client.commit_calls()), 2)
        self.assertIn("502", logs.output[0])

    def test_request_parameters(self):
        client = FakeGitLabClient(pages={"release/1.0": [[make_commit("a1")]]})

        list(PageFetcher(client).iter_pages(1, "release/1.0", SINCE, page_size=100))

        self.assertEqual(client.commit_calls()[0], {
            "page": 1,
            "per_page": 100,
            "since": "2025-05-01T00:00:00Z",
            "ref_name": "release/1.0",
        })

    def test_all_refs_parameters(self):
        client = FakeGitLabClient(pages={None: [[make_commit("a1")]]})
        until = datetime(2025, 5, 1, 23, 59, 59)

        list(PageFetcher(client).iter_pages(1, None, SINCE, page_size=100, until=until, all_refs=True))

        params = client.commit_calls()[0]
        self.assertEqual(params["all"], "true")
        self.assertEqual(params["until"], "2025-05-01T23:59:59Z")
        self.assertNotIn("ref_name", params)


class TestCommitCollector(unittest.TestCase):

    def test_duplicates_across_branches_kept_once_with_first_branch(self):
        shared = make_commit("s1", title="shared fix")
        client = FakeGitLabClient(
            branches=["develop", "main"],
            pages={
                "develop": [[shared, make_commit("d1")]],
                "main": [[make_commit("m1"), shared]],
            }
        )

        commits = CommitCollector(client).collect(1, SINCE)

        self.assertEqual([c.title for c in commits], ["shared fix", "work", "work"])
        urls = [c.url for c in commits]
        self.assertEqual(len(urls), len(set(urls)))
        self.assertEqual(commits[0].branch, "develop")
        self.assertEqual(commits[2].branch, "main")

    def test_merge_commits_are_excluded(self):
        client = FakeGitLabClient(pages={"main": [[
            make_commit("m1", title="Merge branch 'feature' into 'main'"),
            make_commit("m2", title="merge branch lowercase stays"),
            make_commit("m3", title="Fix: Merge branch handling"),
        ]]})

        commits = CommitCollector(client).collect(1, SINCE)

        self.assertEqual([c.title for c in commits],
                         ["merge branch lowercase stays", "Fix: Merge branch handling"])

    def test_member_filter_matches_email_or_name(self):
        member = Member(id="@kim", display_name="김철수")
        client = FakeGitLabClient(pages={"main": [[
            make_commit("e1", author_name="someone", author_email="kim@ssafy.com"),
            make_commit("n1", author_name="김철수", author_email="other@ssafy.com"),
            make_commit("x1", author_name="Lee", author_email="lee@ssafy.com"),
        ]]})

        commits = CommitCollector(client).collect(1, SINCE, member=member)

        self.assertEqual([c.url.rsplit("/", 1)[-1] for c in commits], ["e1", "n1"])

    def test_branches_scanned_in_order(self):
        client = FakeGitLabClient(branches=["b", "a"], pages={"a": [[make_commit("a1")]], "b": [[make_commit("b1")]]})

        CommitCollector(client).collect(1, SINCE)

        self.assertEqual([p["ref_name"] for p in client.commit_calls()], ["b", "a"])

    def test_collect_by_member_scans_once(self):
        alice = Member(id="alice", display_name="Alice")
        bob = Member(id="bob", display_name="Bob")
        client = FakeGitLabClient(
            branches=["main", "develop"],
            pages={
                "main": [[make_commit("a1"), make_commit("b1", author_name="Bob", author_email="bob@x.io")]],
                "develop": [[make_commit("a1")]],
            }
        )

        result = CommitCollector(client).collect_by_member(1, (alice, bob), SINCE)

        self.assertEqual([m.id for m, _ in result], ["alice", "bob"])
        self.assertEqual(len(result[0][1]), 1)
        self.assertEqual(len(result[1][1]), 1)
        self.assertEqual(len(client.commit_calls()), 2)

    def test_failed_branch_listing_still_collects_fallback_branches(self):
        client = FakeGitLabClient(branches=http_error(404), pages={"master": [[make_commit("m1")]]})

        with self.assertLogs("team_report.gitlab.commit_fetcher", level="ERROR"):
            commits = CommitCollector(client).collect(1, SINCE)

        self.assertEqual(len(commits), 1)
        self.assertEqual(commits[0].branch, "master")

    def test_collect_fast_resolves_refs_with_placeholder(self):
        client = FakeGitLabClient(
            pages={None: [[make_commit("a1"), make_commit("a2"), make_commit("mg", title="Merge branch 'x'")]]},
            refs={"a1": ["main", "develop"], "a2": http_error(404)},
        )

        with self.assertLogs("team_report.gitlab.commit_fetcher", level="WARNING"):
            commits = CommitCollector(client).collect_fast(1, SINCE, resolve_refs=True)

        self.assertEqual(len(commits), 2)
        self.assertEqual(commits[0].branches, ("main", "develop"))
        self.assertEqual(commits[0].branch, "main")
        self.assertEqual(commits[1].branches, ("unknown",))
        self.assertNotIn(("refs", "mg"), client.calls)

    def test_collect_fast_transport_failure_drops_page(self):
        client = FakeGitLabClient(
            pages={None: [[make_commit("a1")]]},
            refs={"a1": transport_error()},
        )

        with self.assertLogs("team_report.gitlab.commit_fetcher", level="ERROR"):
            commits = CommitCollector(client).collect_fast(1, SINCE, resolve_refs=True)

        self.assertEqual(commits, [])

    def test_collect_fast_without_refs(self):
        client = FakeGitLabClient(pages={None: [[make_commit("a1")]]})

        commits = CommitCollector(client).collect_fast(1, SINCE)

        self.assertIsNone(commits[0].branch)
        self.assertFalse(any(kind == "refs" for kind, _ in client.calls))


class TestHelpers(unittest.TestCase):

    def test_deduplicate_keeps_first(self):
        client = FakeGitLabClient(branches=["x", "y"], pages={"x": [[make_commit("a")]], "y": [[make_commit("a")]]})
        commits = CommitCollector(client).collect(1, SINCE)
        self.assertEqual(deduplicate(commits + commits), commits)

    def test_format_since(self):
        self.assertEqual(format_since(date(2025, 1, 2)), "2025-01-02T00:00:00Z")
        self.assertEqual(format_since(datetime(2025, 1, 2, 3, 4, 5)), "2025-01-02T03:04:05Z")
        self.assertEqual(format_since("2025-01-02T00:00:00Z"), "2025-01-02T00:00:00Z")


if __name__ == "__main__":
    unittest.main()
