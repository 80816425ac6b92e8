"""Cross-repository merge and ranking of reviewer stats."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Protocol

from pr_review_bot.models.stats import GlobalStats, ReviewerStats, get_or_create_stats

Metric = Callable[[ReviewerStats], int]


class StatsSource(Protocol):
    """Anything carrying reviewer stats and window totals."""

    reviewers: dict[str, ReviewerStats]
    merged_count: int
    comment_count: int

    @property
    def repos(self) -> tuple[str, ...]: ...


def merge_stats(results: Iterable[StatsSource]) -> GlobalStats:
    """Fold per-repository results (or earlier merges) into one GlobalStats.

    PR sets are unioned. Comment counts, line counts and window totals are
    summed: comments are already counted once each at scan time, and PR keys
    carry their ``owner/repo`` prefix, so different repositories never
    overlap. Inputs are not modified.
    """
    merged = GlobalStats()
    repos: list[str] = []

    for result in results:
        merged.merged_count += result.merged_count
        merged.comment_count += result.comment_count
        repos.extend(repo for repo in result.repos if repo not in repos)

        for username, stats in result.reviewers.items():
            total = get_or_create_stats(merged.reviewers, username)
            total.prs_reviewed |= stats.prs_reviewed
            total.comment_count += stats.comment_count
            total.comment_prs |= stats.comment_prs
            total.lines_reviewed += stats.lines_reviewed
            total.lines_prs |= stats.lines_prs

    merged.repos = tuple(sorted(repos))
    return merged


def rank(
    stats: Mapping[str, ReviewerStats],
    metric: Metric,
    tiebreak: Metric,
) -> list[tuple[str, ReviewerStats]]:
    """Order reviewers by ``metric`` desc, then ``tiebreak`` desc, then username.

    Reviewers whose metric is zero or negative are left out.
    """
    entries = [(username, s) for username, s in stats.items() if metric(s) > 0]
    entries.sort(key=lambda entry: (-metric(entry[1]), -tiebreak(entry[1]), entry[0]))
    return entries


def pick_winner(
    stats: Mapping[str, ReviewerStats],
    metric: Metric,
    tiebreak: Metric,
) -> tuple[str, ReviewerStats] | None:
    """Return the top-ranked reviewer, or None if nobody scored."""
    ranked = rank(stats, metric, tiebreak)
    return ranked[0] if ranked else None


# Award metrics: (metric, tiebreak)
def prs_reviewed(s: ReviewerStats) -> int:
    return s.reviewed_count


def comments(s: ReviewerStats) -> int:
    return s.comment_count


def comment_prs(s: ReviewerStats) -> int:
    return s.comment_pr_count


def lines_reviewed(s: ReviewerStats) -> int:
    return s.lines_reviewed


def lines_prs(s: ReviewerStats) -> int:
    return s.lines_pr_count
