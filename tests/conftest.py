"""Shared test fixtures for the PR review bot."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pr_review_bot.models.message import ChatMessage
from pr_review_bot.models.pull_request import (
    GitHubUser,
    PullRequest,
    Review,
    ReviewComment,
    ReviewState,
)
from pr_review_bot.models.reaction import ReactionMap

NOW = datetime(2024, 10, 18, 9, 0, tzinfo=UTC)
SINCE = NOW - timedelta(days=7)


@pytest.fixture
def now() -> datetime:
    """Return a fixed end of the awards window."""
    return NOW


@pytest.fixture
def since() -> datetime:
    """Return the start of the awards window."""
    return SINCE


@pytest.fixture
def reaction_map() -> ReactionMap:
    """Return the default event -> reaction table."""
    return ReactionMap()


def _make_message(
    ts: str,
    text: str,
    reactions: set[str] | None = None,
    channel_id: str = "C0123",
) -> ChatMessage:
    """Build a ChatMessage as the Slack adapter would."""
    return ChatMessage(
        channel_id=channel_id,
        message_id=ts,
        user_id="U0BOT",
        text=text,
        timestamp=datetime.fromtimestamp(float(ts), tz=UTC),
        reactions=frozenset(reactions or ()),
    )


def _make_pull(
    number: int,
    repo: str = "org/repo",
    author: str = "dave",
    merged_at: datetime | None = None,
    updated_at: datetime | None = None,
    additions: int = 0,
    deletions: int = 0,
    title: str = "Add feature",
) -> PullRequest:
    """Build a PullRequest."""
    return PullRequest(
        repo=repo,
        number=number,
        title=title,
        url=f"https://github.com/{repo}/pull/{number}",
        author=GitHubUser(author),
        updated_at=updated_at or merged_at or NOW,
        merged_at=merged_at,
        additions=additions,
        deletions=deletions,
    )


def _make_review(login: str, state: ReviewState, user_type: str = "User") -> Review:
    """Build a Review."""
    return Review(user=GitHubUser(login, type=user_type), state=state, submitted_at=NOW)


def _make_comment(
    login: str,
    body: str,
    pull_number: int = 1,
    created_at: datetime | None = None,
    user_type: str = "User",
) -> ReviewComment:
    """Build a ReviewComment."""
    return ReviewComment(
        user=GitHubUser(login, type=user_type),
        body=body,
        pull_number=pull_number,
        created_at=created_at or NOW - timedelta(days=1),
    )


@pytest.fixture
def make_message():
    """Return the ChatMessage factory."""
    return _make_message


@pytest.fixture
def make_pull():
    """Return the PullRequest factory."""
    return _make_pull


@pytest.fixture
def make_review():
    """Return the Review factory."""
    return _make_review


@pytest.fixture
def make_comment():
    """Return the ReviewComment factory."""
    return _make_comment


@pytest.fixture
def malicious_repo_names() -> list[str]:
    """Return a list of malicious repository names for testing."""
    return [
        "owner/repo; rm -rf /",
        "owner/repo$(whoami)",
        "owner/repo`id`",
        "../../../etc/passwd",
        "owner/repo\nmalicious",
        "owner/repo|cat /etc/passwd",
        "owner/repo&& echo pwned",
        "owner/repo\x00null",
    ]


@pytest.fixture
def valid_repo_names() -> list[str]:
    """Return a list of valid repository names for testing."""
    return [
        "owner/repo",
        "my-org/my-project",
        "user123/repo_name",
        "Org.Name/Repo.Name",
        "a/b",
    ]
