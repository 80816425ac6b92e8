"""Per-repository review activity scanner.

Credit rules:
- A reviewer is credited with a merged PR when they left at least one
  APPROVED review, or at least two COMMENTED reviews, on it. A single
  drive-by comment review does not count.
- Bots and the PR author never get review credit.
- Review comments with two words or fewer ("LGTM", "nit", emoji) are not counted.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

import structlog

from pr_review_bot.models.pull_request import PullRequest, Review, ReviewComment, ReviewState, pr_key
from pr_review_bot.models.stats import RepoScanResult, get_or_create_stats

if TYPE_CHECKING:
    from pr_review_bot.interfaces.vcs import VCSProvider

log = structlog.get_logger()

MIN_APPROVALS = 1
MIN_COMMENT_REVIEWS = 2
MIN_COMMENT_WORDS = 3


def qualifying_reviewers(pull: PullRequest, reviews: Iterable[Review]) -> list[str]:
    """Return the reviewers who earn credit for a PR, sorted by login.

    Args:
        pull: The pull request (its author is excluded).
        reviews: Every review submitted on it.
    """
    author = pull.author.login if pull.author else None
    approvals: defaultdict[str, int] = defaultdict(int)
    comment_reviews: defaultdict[str, int] = defaultdict(int)

    for review in reviews:
        if review.user is None or review.user.is_bot:
            continue
        if review.user.login == author:
            continue
        if review.state == ReviewState.APPROVED:
            approvals[review.user.login] += 1
        elif review.state == ReviewState.COMMENTED:
            comment_reviews[review.user.login] += 1

    reviewers = set(approvals) | set(comment_reviews)
    return sorted(
        login
        for login in reviewers
        if approvals[login] >= MIN_APPROVALS or comment_reviews[login] >= MIN_COMMENT_REVIEWS
    )


def is_substantive_comment(comment: ReviewComment) -> bool:
    """Return True if a review comment counts towards comment stats."""
    if comment.user is None or comment.user.is_bot:
        return False
    return len(comment.body.split()) >= MIN_COMMENT_WORDS


def is_merged_in_window(pull: PullRequest, since: datetime) -> bool:
    return pull.merged_at is not None and pull.merged_at >= since


class ActivityScanner:
    """Builds a RepoScanResult for one repository and window.

    Fetches are sequential. Any fetch failure propagates; the caller decides
    how to isolate it.

    Example:
        scanner = ActivityScanner(vcs)
        result = await scanner.scan("owner/repo", since)
    """

    def __init__(self, vcs: VCSProvider) -> None:
        self._vcs = vcs

    async def scan(self, repo: str, since: datetime) -> RepoScanResult:
        """Scan one repository for review activity since ``since``.

        Args:
            repo: Repository identifier (e.g., "owner/repo").
            since: Window start (timezone-aware).

        Returns:
            Reviewer stats plus merged PR and comment totals for the window.
        """
        log.info("scanning_repository", repo=repo, since=since.isoformat())
        result = RepoScanResult(repo=repo)

        merged = await self._merged_pulls(repo, since)
        result.merged_count = len(merged)
        log.info("merged_pulls_found", repo=repo, count=len(merged))

        for pull in merged:
            await self._credit_reviews(result, pull)

        comments = await self._vcs.list_review_comments(repo, since)
        for comment in comments:
            if comment.user is None or comment.created_at < since:
                continue
            if not is_substantive_comment(comment):
                continue
            stats = get_or_create_stats(result.reviewers, comment.user.login)
            stats.comment_count += 1
            stats.comment_prs.add(pr_key(repo, comment.pull_number))
            result.comment_count += 1

        log.info(
            "repository_scanned",
            repo=repo,
            reviewers=len(result.reviewers),
            comments=result.comment_count,
        )
        return result

    async def _merged_pulls(self, repo: str, since: datetime) -> list[PullRequest]:
        """List PRs merged in the window.

        Listing is newest-updated first, so paging stops after a page whose
        PRs were all last updated before the window.
        """

        def page_in_window(page: list[PullRequest]) -> bool:
            return any(pull.updated_at >= since for pull in page)

        closed = await self._vcs.list_closed_pulls(repo, should_continue=page_in_window)
        return [pull for pull in closed if is_merged_in_window(pull, since)]

    async def _credit_reviews(self, result: RepoScanResult, pull: PullRequest) -> None:
        """Credit a merged PR to its qualifying reviewers."""
        # The list endpoint carries no line counts
        detail = await self._vcs.get_pull(pull.repo, pull.number)
        reviews = await self._vcs.list_reviews(pull.repo, pull.number)

        key = pull.key
        for login in qualifying_reviewers(detail, reviews):
            stats = get_or_create_stats(result.reviewers, login)
            stats.prs_reviewed.add(key)
            if key not in stats.lines_prs:
                stats.lines_prs.add(key)
                stats.lines_reviewed += detail.changed_lines

        log.debug("pull_scanned", pr=key, reviews=len(reviews), lines=detail.changed_lines)
