"""Value types passed between the collection, rendering and merge stages"""

import dataclasses
from datetime import datetime
from typing import Optional

MEMBER_MARKER = "@"


def format_local_time(timestamp: str) -> str:
    """Render an API ISO-8601 timestamp in the local timezone"""
    if not timestamp:
        return ""
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M:%S")


@dataclasses.dataclass(frozen=True)
class Member:
    id: str
    display_name: str = ""

    @property
    def handle(self) -> str:
        """Member id without the leading marker"""
        return self.id.lstrip(MEMBER_MARKER)

    @property
    def label(self) -> str:
        return self.display_name or self.id

    def matches_identity(self, author_name: str, author_email: str) -> bool:
        """
        An author is this member when the local part of the email equals the
        handle, or the author name equals the display name.
        """
        email_local = author_email.split("@")[0] if author_email else ""
        if email_local and email_local == self.handle:
            return True
        return bool(self.display_name) and author_name == self.display_name

    def matches(self, raw_commit: "RawCommit") -> bool:
        return self.matches_identity(raw_commit.author_name, raw_commit.author_email)

    def owns(self, commit: "Commit") -> bool:
        return self.matches_identity(commit.author, commit.author_email)


@dataclasses.dataclass(frozen=True)
class Team:
    id: str
    repository_path: str
    members: tuple = ()

    @property
    def name(self) -> str:
        """Last path segment of the repository"""
        return self.repository_path.rstrip("/").split("/")[-1]


@dataclasses.dataclass(frozen=True)
class RawCommit:
    id: str
    title: str
    author_name: str
    author_email: str
    created_at: str
    web_url: str
    branches: tuple = ()

    @classmethod
    def from_api(cls, data: dict) -> "RawCommit":
        return cls(
            id=data.get("id", ""),
            title=data.get("title") or "",
            author_name=data.get("author_name") or "",
            author_email=data.get("author_email") or "",
            created_at=data.get("created_at") or "",
            web_url=data.get("web_url") or "",
        )

    def with_branches(self, branches: list) -> "RawCommit":
        return dataclasses.replace(self, branches=tuple(branches))


@dataclasses.dataclass(frozen=True)
class Commit:
    title: str
    author: str
    author_email: str
    created_at: str
    url: str
    branch: Optional[str] = None
    branches: tuple = ()

    @classmethod
    def from_raw(cls, raw: RawCommit, branch: Optional[str] = None) -> "Commit":
        if branch is None and raw.branches:
            branch = raw.branches[0]
        return cls(
            title=raw.title,
            author=raw.author_name,
            author_email=raw.author_email,
            created_at=format_local_time(raw.created_at),
            url=raw.web_url,
            branch=branch,
            branches=raw.branches,
        )


@dataclasses.dataclass(frozen=True)
class MemberReport:
    member: Member
    display_name: str
    count: int
    commits: tuple = ()


@dataclasses.dataclass(frozen=True)
class TeamSummary:
    team: Team
    total_commit_count: int
    member_reports: tuple = ()


@dataclasses.dataclass(frozen=True)
class ReportSection:
    heading: str
    body: str

    @property
    def text(self) -> str:
        return f"{self.heading}\n{self.body}"
