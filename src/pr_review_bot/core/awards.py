"""Weekly awards pipeline: scan every repository, merge, rank, publish."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from pr_review_bot.models.stats import GlobalStats
from pr_review_bot.utils.async_helpers import MissingCredentialError, ScanFailedError, gather_settled
from pr_review_bot.core.formatter import AwardsFormatter, failure_footer
from pr_review_bot.core.leaderboard import merge_stats
from pr_review_bot.core.scanner import ActivityScanner

if TYPE_CHECKING:
    from pr_review_bot.config.schema import BotConfig
    from pr_review_bot.interfaces.chat import ChatProvider
    from pr_review_bot.interfaces.vcs import VCSProvider

log = structlog.get_logger()


@dataclass
class AwardsReport:
    """Merged stats for one window plus the repositories that could not be scanned."""

    stats: GlobalStats
    since: datetime
    until: datetime
    failed_repos: list[str] = field(default_factory=list)


class AwardsRunner:
    """Runs the awards pipeline for the configured repositories.

    Example:
        runner = AwardsRunner(config, GitHubAdapter(config.github), SlackAdapter(config.slack))
        text = await runner.run(dry_run=True)
    """

    def __init__(
        self,
        config: BotConfig,
        vcs: VCSProvider,
        chat: ChatProvider | None = None,
    ) -> None:
        self._config = config
        self._vcs = vcs
        self._chat = chat
        self._scanner = ActivityScanner(vcs)
        self._formatter = AwardsFormatter(
            config.awards.user_mentions,
            top_reviewers=config.awards.top_reviewers,
        )

    @property
    def formatter(self) -> AwardsFormatter:
        return self._formatter

    def window(self, now: datetime | None = None) -> tuple[datetime, datetime]:
        """Return the (since, until) window ending at ``now``."""
        until = now or datetime.now(UTC)
        return until - timedelta(days=self._config.awards.window_days), until

    async def collect(self, now: datetime | None = None) -> AwardsReport:
        """Scan every configured repository concurrently and merge the results.

        A failing repository is reported in ``failed_repos`` and does not
        affect the others.

        Raises:
            ScanFailedError: If there are no repositories or every scan failed.
        """
        since, until = self.window(now)
        repos = list(self._config.github.repos)
        if not repos:
            raise ScanFailedError("No repositories configured")

        log.info("awards_scan_started", repos=repos, since=since.isoformat())
        settled = await gather_settled(
            repos,
            [self._scanner.scan(repo, since) for repo in repos],
        )

        if not settled.succeeded:
            raise ScanFailedError(f"Could not scan any repository: {', '.join(settled.failed_keys)}")

        stats = merge_stats(settled.values)
        log.info(
            "awards_scan_completed",
            scanned=list(stats.repos),
            failed=settled.failed_keys,
            reviewers=len(stats.reviewers),
        )
        return AwardsReport(stats=stats, since=since, until=until, failed_repos=settled.failed_keys)

    def render(self, report: AwardsReport) -> str:
        """Format a report as the Slack message, with the failure footer if needed."""
        text = self._formatter.format_awards(report.stats, report.since, report.until)
        if report.failed_repos:
            text = f"{text}\n\n{failure_footer(report.failed_repos)}"
        return text

    async def run(self, now: datetime | None = None, dry_run: bool = False) -> str:
        """Collect, format and post the awards message.

        Args:
            now: End of the window (defaults to the current time).
            dry_run: Return the message without posting it.

        Returns:
            The message text.

        Raises:
            ScanFailedError: If every repository scan failed.
            MissingCredentialError: If posting is required but Slack is not configured.
            SendError: If posting fails.
        """
        report = await self.collect(now)
        text = self.render(report)

        if dry_run:
            log.info("dry_run_awards_not_posted")
            return text

        channel_id = self._config.awards_channel_id
        if self._chat is None or channel_id is None:
            raise MissingCredentialError("Slack bot token and channel are required to post awards")

        message_id = await self._chat.post_message(channel_id, text)
        log.info("awards_posted", channel_id=channel_id, message_id=message_id)
        return text
