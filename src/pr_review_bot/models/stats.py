"""Data models for review-activity statistics."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ReviewerStats:
    """Review activity of one reviewer over one window.

    Every PR set holds ``owner/repo#number`` keys, so repeated scans of the
    same PR and merges across repositories never double count.
    """

    prs_reviewed: set[str] = field(default_factory=set)
    comment_count: int = 0
    comment_prs: set[str] = field(default_factory=set)
    lines_reviewed: int = 0
    lines_prs: set[str] = field(default_factory=set)

    @property
    def reviewed_count(self) -> int:
        return len(self.prs_reviewed)

    @property
    def comment_pr_count(self) -> int:
        return len(self.comment_prs)

    @property
    def lines_pr_count(self) -> int:
        return len(self.lines_prs)


def get_or_create_stats(stats: dict[str, ReviewerStats], username: str) -> ReviewerStats:
    """Return the stats entry of a user, creating an empty one if needed."""
    entry = stats.get(username)
    if entry is None:
        entry = ReviewerStats()
        stats[username] = entry
    return entry


@dataclass
class RepoScanResult:
    """Activity found in one repository over one window."""

    repo: str
    reviewers: dict[str, ReviewerStats] = field(default_factory=dict)
    merged_count: int = 0
    comment_count: int = 0

    @property
    def repos(self) -> tuple[str, ...]:
        return (self.repo,)


@dataclass
class GlobalStats:
    """Activity merged across every successfully scanned repository."""

    reviewers: dict[str, ReviewerStats] = field(default_factory=dict)
    merged_count: int = 0
    comment_count: int = 0
    repos: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.reviewers
