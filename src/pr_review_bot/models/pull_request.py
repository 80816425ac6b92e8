"""Data models for GitHub pull requests, reviews and review comments."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

# https://github.com/<owner>/<repo>/pull/<number>
PR_URL_PATTERN = re.compile(
    r"https?://github\.com/(?P<repo>[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+)/pull/(?P<number>\d+)"
)


def pr_key(repo: str, number: int | str) -> str:
    """Return the ``owner/repo#number`` key used for all PR dedup sets."""
    return f"{repo}#{number}"


@dataclass(frozen=True)
class PullRequestRef:
    """A pull request identified by repository and number."""

    repo: str
    number: int

    @property
    def key(self) -> str:
        return pr_key(self.repo, self.number)

    @classmethod
    def from_url(cls, url: str) -> PullRequestRef | None:
        """Parse a GitHub PR URL; None if the text does not contain one."""
        match = PR_URL_PATTERN.search(url)
        if not match:
            return None
        return cls(repo=match.group("repo"), number=int(match.group("number")))


@dataclass(frozen=True)
class GitHubUser:
    """The author of a PR, review or comment."""

    login: str
    type: str = "User"  # "User", "Bot" or "Organization"

    @property
    def is_bot(self) -> bool:
        return self.type != "User" or self.login.endswith("[bot]")


@dataclass(frozen=True)
class PullRequest:
    """A pull request.

    ``additions`` and ``deletions`` are only populated from the detail
    endpoint; list endpoints leave them at zero.
    """

    repo: str
    number: int
    title: str
    url: str
    author: GitHubUser | None
    updated_at: datetime
    merged_at: datetime | None = None
    additions: int = 0
    deletions: int = 0

    @property
    def key(self) -> str:
        return pr_key(self.repo, self.number)

    @property
    def changed_lines(self) -> int:
        return self.additions + self.deletions


class ReviewState(Enum):
    """State of a submitted review."""

    APPROVED = "APPROVED"
    COMMENTED = "COMMENTED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    DISMISSED = "DISMISSED"
    PENDING = "PENDING"


@dataclass(frozen=True)
class Review:
    """A review submitted on a pull request."""

    user: GitHubUser | None
    state: ReviewState
    submitted_at: datetime | None = None


@dataclass(frozen=True)
class ReviewComment:
    """An inline review comment on a pull request diff."""

    user: GitHubUser | None
    body: str
    pull_number: int
    created_at: datetime
