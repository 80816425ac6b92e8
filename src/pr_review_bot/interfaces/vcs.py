"""Abstract interface for version control system integrations."""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from ..models.pull_request import PullRequest, Review, ReviewComment

# Receives each fetched page; returning False stops pagination
PageCallback = Callable[[list[PullRequest]], bool]


class VCSProvider(Protocol):
    """Abstract interface for version control system integrations.

    All methods take repositories as "owner/repo".
    """

    async def list_closed_pulls(
        self,
        repo: str,
        should_continue: PageCallback | None = None,
    ) -> list[PullRequest]:
        """
        List closed pull requests, most recently updated first.

        Args:
            repo: Repository identifier
            should_continue: Called with every page; pagination stops after
                the first page for which it returns False

        Returns:
            Pull requests from every fetched page (line counts not populated)

        Raises:
            FetchError: If a page cannot be fetched
        """
        ...

    async def get_pull(self, repo: str, number: int) -> PullRequest:
        """
        Fetch the full detail of one pull request, including line counts.

        Raises:
            FetchError: If the pull request cannot be fetched
        """
        ...

    async def list_reviews(self, repo: str, number: int) -> list[Review]:
        """
        List every review submitted on a pull request.

        Raises:
            FetchError: If the reviews cannot be fetched
        """
        ...

    async def list_review_comments(
        self,
        repo: str,
        since: datetime,
    ) -> list[ReviewComment]:
        """
        List review comments of a repository updated since a point in time.

        Raises:
            FetchError: If the comments cannot be fetched
        """
        ...
