"""GitHub VCS adapter using the gh CLI.

This module implements the VCSProvider protocol for GitHub on top of the
SafeGHCli wrapper. Every request is a single ``gh api`` call; list endpoints
are paged 100 items at a time up to a configured page cap.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog

from ...config.schema import GitHubConfig
from ...models.pull_request import GitHubUser, PullRequest, Review, ReviewComment, ReviewState
from ...utils.safe_subprocess import GHCliError, SafeGHCli
from ...utils.security import SecurityError

if TYPE_CHECKING:
    from ...interfaces.vcs import PageCallback

log = structlog.get_logger()

PER_PAGE = 100


class GitHubAdapterError(Exception):
    """Base exception for GitHub adapter errors."""


class FetchError(GitHubAdapterError):
    """Raised when fetching data from GitHub fails."""


def parse_timestamp(timestamp_str: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp from the GitHub API.

    Args:
        timestamp_str: Timestamp such as "2024-01-15T10:00:00Z", or None.

    Returns:
        Timezone-aware datetime, or None if the value is missing or invalid.
    """
    if not timestamp_str:
        return None

    try:
        # GitHub uses ISO 8601 format with Z suffix
        if timestamp_str.endswith("Z"):
            timestamp_str = timestamp_str[:-1] + "+00:00"
        parsed = datetime.fromisoformat(timestamp_str)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format a datetime the way GitHub's ``since`` parameters expect."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class GitHubAdapter:
    """GitHub VCS adapter implementing the VCSProvider protocol.

    Example:
        config = GitHubConfig(token="ghp_...", repos=["owner/repo"])
        adapter = GitHubAdapter(config)

        pulls = await adapter.list_closed_pulls("owner/repo")
        detail = await adapter.get_pull("owner/repo", pulls[0].number)
    """

    def __init__(self, config: GitHubConfig) -> None:
        """Initialize the GitHub adapter.

        Args:
            config: GitHub-specific configuration.
        """
        self._config = config
        self._gh = SafeGHCli(
            gh_path=config.gh_path,
            token=config.token,
            default_timeout=config.command_timeout,
        )

    def _parse_user(self, data: dict[str, Any] | None) -> GitHubUser | None:
        """Parse a user object; None for deleted ("ghost") accounts."""
        if not data or not data.get("login"):
            return None
        return GitHubUser(login=data["login"], type=data.get("type") or "User")

    def _parse_pull(self, repo: str, data: dict[str, Any]) -> PullRequest:
        """Parse a pull request object from the list or detail endpoint."""
        updated_at = parse_timestamp(data.get("updated_at")) or datetime.now(timezone.utc)
        return PullRequest(
            repo=repo,
            number=int(data.get("number", 0)),
            title=data.get("title") or "",
            url=data.get("html_url") or "",
            author=self._parse_user(data.get("user")),
            updated_at=updated_at,
            merged_at=parse_timestamp(data.get("merged_at")),
            additions=int(data.get("additions") or 0),
            deletions=int(data.get("deletions") or 0),
        )

    def _parse_review(self, data: dict[str, Any]) -> Review | None:
        """Parse a review object; None for states this bot does not know."""
        try:
            state = ReviewState(str(data.get("state", "")).upper())
        except ValueError:
            log.debug("unknown_review_state", state=data.get("state"))
            return None
        return Review(
            user=self._parse_user(data.get("user")),
            state=state,
            submitted_at=parse_timestamp(data.get("submitted_at")),
        )

    def _parse_comment(self, data: dict[str, Any]) -> ReviewComment | None:
        """Parse a review comment; None if its pull request cannot be determined."""
        pull_url = data.get("pull_request_url") or ""
        number = pull_url.rstrip("/").rsplit("/", 1)[-1]
        if not number.isdigit():
            return None
        created_at = parse_timestamp(data.get("created_at"))
        if created_at is None:
            return None
        return ReviewComment(
            user=self._parse_user(data.get("user")),
            body=data.get("body") or "",
            pull_number=int(number),
            created_at=created_at,
        )

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Run one GET request and decode its JSON body.

        Raises:
            FetchError: If the request fails or returns invalid JSON.
        """
        try:
            result = await self._gh.api(path, params)
            return result.json()
        except (GHCliError, SecurityError) as e:
            log.error("github_request_failed", path=path, error=str(e))
            raise FetchError(f"GitHub request failed for {path}: {e}") from e
        except ValueError as e:
            log.error("github_invalid_json", path=path, error=str(e))
            raise FetchError(f"Invalid JSON from {path}: {e}") from e

    async def _get_paginated(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        should_continue: Callable[[list[dict[str, Any]]], bool] | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch pages of a list endpoint until a short page or the page cap.

        Args:
            path: API path.
            params: Query parameters (``per_page``/``page`` are managed here).
            should_continue: Called with each raw page; returning False stops
                after that page.

        Returns:
            Items from every fetched page.

        Raises:
            FetchError: If any page fails.
        """
        results: list[dict[str, Any]] = []
        max_pages = self._config.max_pages

        for page in range(1, max_pages + 1):
            page_params = {**(params or {}), "per_page": PER_PAGE, "page": page}
            data = await self._get(path, page_params)
            if not isinstance(data, list):
                raise FetchError(f"Expected a list from {path}, got {type(data).__name__}")

            results.extend(data)
            log.debug("page_fetched", path=path, page=page, count=len(data))

            if len(data) < PER_PAGE:
                break
            if should_continue is not None and not should_continue(data):
                log.debug("pagination_stopped_early", path=path, page=page)
                break
        else:
            log.warning(
                "pagination_cap_reached",
                path=path,
                max_pages=max_pages,
                message="Some data may be missing",
            )

        return results

    async def list_closed_pulls(
        self,
        repo: str,
        should_continue: PageCallback | None = None,
    ) -> list[PullRequest]:
        """List closed pull requests, most recently updated first.

        Args:
            repo: Repository identifier (e.g., "owner/repo").
            should_continue: Called with each parsed page; returning False
                stops pagination after that page.

        Returns:
            Pull requests without line counts.

        Raises:
            FetchError: If a page cannot be fetched.
            SecurityError: If the repository name is invalid.
        """
        self._gh.validate_repo(repo)

        def page_callback(page: list[dict[str, Any]]) -> bool:
            if should_continue is None:
                return True
            return should_continue([self._parse_pull(repo, item) for item in page])

        items = await self._get_paginated(
            f"/repos/{repo}/pulls",
            {"state": "closed", "sort": "updated", "direction": "desc"},
            should_continue=page_callback,
        )
        return [self._parse_pull(repo, item) for item in items]

    async def get_pull(self, repo: str, number: int) -> PullRequest:
        """Fetch one pull request including additions and deletions.

        Args:
            repo: Repository identifier (e.g., "owner/repo").
            number: Pull request number.

        Returns:
            The pull request detail.

        Raises:
            FetchError: If the pull request cannot be fetched.
            SecurityError: If the repository name is invalid.
        """
        self._gh.validate_repo(repo)
        data = await self._get(f"/repos/{repo}/pulls/{number}")
        return self._parse_pull(repo, data)

    async def list_reviews(self, repo: str, number: int) -> list[Review]:
        """List every review submitted on a pull request.

        Raises:
            FetchError: If the reviews cannot be fetched.
            SecurityError: If the repository name is invalid.
        """
        self._gh.validate_repo(repo)
        items = await self._get_paginated(f"/repos/{repo}/pulls/{number}/reviews")
        return [review for item in items if (review := self._parse_review(item)) is not None]

    async def list_review_comments(
        self,
        repo: str,
        since: datetime,
    ) -> list[ReviewComment]:
        """List review comments updated since a point in time, newest first.

        Raises:
            FetchError: If the comments cannot be fetched.
            SecurityError: If the repository name is invalid.
        """
        self._gh.validate_repo(repo)
        items = await self._get_paginated(
            f"/repos/{repo}/pulls/comments",
            {"since": format_timestamp(since), "sort": "created", "direction": "desc"},
        )
        return [comment for item in items if (comment := self._parse_comment(item)) is not None]
