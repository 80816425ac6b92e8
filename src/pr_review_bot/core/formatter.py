"""Slack message formatting for the weekly review awards.

Award contract:
- Top reviewers: most PRs reviewed (tiebreak: comment count), top N
- Heavy Lifter: most lines reviewed (tiebreak: PRs contributing lines)
- Most Comments: most review comments (tiebreak: PRs commented on)
- Team stats: PRs merged and review comments in the window
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

import structlog

from pr_review_bot.models.stats import GlobalStats, ReviewerStats
from pr_review_bot.core.leaderboard import (
    Metric,
    comment_prs,
    comments,
    lines_prs,
    lines_reviewed,
    pick_winner,
    prs_reviewed,
    rank,
)

log = structlog.get_logger()

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
PLACE_EMOJI = (":first_place_medal:", ":second_place_medal:", ":third_place_medal:")
AWARDS_TITLE = "Weekly PR Review Awards"


def format_number(n: int) -> str:
    """Format an integer with thousands separators (1234 -> "1,234")."""
    return f"{n:,}"


def format_date_range(since: datetime, until: datetime) -> str:
    """Format a window as "Oct 11–18", or "Sep 28 – Oct 5" across months."""
    since_month = MONTHS[since.month - 1]
    until_month = MONTHS[until.month - 1]
    if since_month == until_month:
        return f"{since_month} {since.day}–{until.day}"
    return f"{since_month} {since.day} – {until_month} {until.day}"


def plural(count: int, noun: str) -> str:
    """Return "1 PR", "2 PRs", "1,234 lines"."""
    return f"{format_number(count)} {noun}" if count == 1 else f"{format_number(count)} {noun}s"


def failure_footer(failed_repos: list[str]) -> str:
    """Warning appended to the message when some repositories could not be scanned."""
    return f"_:warning: Could not scan: {', '.join(failed_repos)}_"


class AwardsFormatter:
    """Renders GlobalStats as the weekly awards message.

    Args:
        user_mentions: GitHub login -> Slack member id. Logins missing from
            the table, or mapped to an empty id, render as plain "@login".
        top_reviewers: How many reviewers the top-reviewers list shows.
    """

    def __init__(self, user_mentions: Mapping[str, str] | None = None, top_reviewers: int = 3) -> None:
        self._user_mentions = dict(user_mentions or {})
        self._top_reviewers = top_reviewers

    def mention(self, username: str) -> str:
        """Render a GitHub login as a Slack mention when a mapping exists."""
        slack_id = self._user_mentions.get(username)
        if slack_id:
            return f"<@{slack_id}>"
        log.warning("no_slack_mapping", github_user=username)
        return f"@{username}"

    def format_awards(self, stats: GlobalStats, since: datetime, until: datetime) -> str:
        """Build the awards message for a window."""
        date_range = format_date_range(since, until)
        reviewers = stats.reviewers

        top_reviewers = rank(reviewers, prs_reviewed, comments)[: self._top_reviewers]
        heavy_lifter = pick_winner(reviewers, lines_reviewed, lines_prs)
        top_commenter = pick_winner(reviewers, comments, comment_prs)

        if not top_reviewers and heavy_lifter is None and top_commenter is None:
            return (
                f":desert_island: *{AWARDS_TITLE} — Week of {date_range}*\n\n"
                "It was a quiet week — no PR reviews to report. Enjoy the downtime!"
            )

        lines = [f":trophy: *{AWARDS_TITLE} — Week of {date_range}*", ""]

        if top_reviewers:
            lines.append(":star: *Top Reviewers:*")
            for place, (username, s) in enumerate(top_reviewers):
                medal = PLACE_EMOJI[place] if place < len(PLACE_EMOJI) else f"{place + 1}."
                lines.append(f"    {medal} {self.mention(username)} ({self._prs(s.reviewed_count)} reviewed)")

        if heavy_lifter is not None:
            username, s = heavy_lifter
            lines.append(
                f":weight_lifter: *Heavy Lifter:* {self.mention(username)} "
                f"({plural(s.lines_reviewed, 'line')} reviewed across {self._prs(s.lines_pr_count)})"
            )

        if top_commenter is not None:
            username, s = top_commenter
            lines.append(
                f":speech_balloon: *Most Comments:* {self.mention(username)} "
                f"({plural(s.comment_count, 'comment')} across {self._prs(s.comment_pr_count)})"
            )

        lines.append("")
        lines.append(self._team_stats(stats))
        return "\n".join(lines)

    def format_preview(self, stats: GlobalStats, since: datetime, until: datetime) -> str:
        """Build the full plain-text leaderboard printed by the preview command."""
        lines = [f"=== PR Review Leaderboard: Week of {format_date_range(since, until)} ===", ""]

        sections: list[tuple[str, Metric, Metric, str]] = [
            ("Top Reviewers (PRs reviewed)", prs_reviewed, comments, "reviewed"),
            ("Heavy Lifter (lines reviewed)", lines_reviewed, lines_prs, "lines"),
            ("Most Comments (review comments)", comments, comment_prs, "comments"),
        ]
        for title, metric, tiebreak, kind in sections:
            lines.append(f"  {title}:")
            ranked = rank(stats.reviewers, metric, tiebreak)
            if not ranked:
                lines.append("    (no activity)")
            for place, (username, s) in enumerate(ranked):
                marker = ">>>" if place == 0 else "   "
                lines.append(f"    {marker} {place + 1}. @{username}: {self._describe(s, kind)}")
            lines.append("")

        lines.append(f"  {self._team_stats(stats)}")
        return "\n".join(lines)

    def _describe(self, s: ReviewerStats, kind: str) -> str:
        if kind == "lines":
            return f"{plural(s.lines_reviewed, 'line')} across {self._prs(s.lines_pr_count)}"
        if kind == "comments":
            return f"{plural(s.comment_count, 'comment')} across {self._prs(s.comment_pr_count)}"
        return f"{self._prs(s.reviewed_count)} reviewed"

    @staticmethod
    def _prs(count: int) -> str:
        return plural(count, "PR")

    @staticmethod
    def _team_stats(stats: GlobalStats) -> str:
        return (
            f":bar_chart: *Team Stats:* {format_number(stats.merged_count)} PRs merged, "
            f"{format_number(stats.comment_count)} review comments"
        )
