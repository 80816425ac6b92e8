"""Entry point for the PR review bot.

Commands:
- react: mirror a batch of PR events onto the PR's Slack announcement
- awards: scan the configured repositories and post the weekly awards
- preview: print the full leaderboards and the awards message without posting

Each command is a single short-lived run, typically started by a GitHub
Actions workflow. Exit code 0 on success (including "nothing to do"),
1 on missing credentials or fatal failures.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from pr_review_bot._version import __version__

if TYPE_CHECKING:
    from pr_review_bot.config.schema import BotConfig

log = structlog.get_logger()


def setup_logging(debug: bool = False, log_format: str = "console") -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
    """
    from pr_review_bot.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.INFO
    configure_logging(level=level, log_format=LogFormat(log_format.lower()))


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() == "true"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="pr-review-bot",
        description="PR review bot - Slack reactions for PR events and weekly review awards",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: read plain environment variables)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    react = subparsers.add_parser("react", help="Update the reactions on a PR announcement")
    react.add_argument(
        "--events",
        default=os.environ.get("EVENT_TYPE", ""),
        help="Comma-separated event types (default: $EVENT_TYPE)",
    )
    react.add_argument(
        "--pr-url",
        default=os.environ.get("PR_URL", ""),
        help="PR URL used to find the announcement (default: $PR_URL)",
    )
    react.add_argument(
        "--channel",
        default=None,
        help="Channel holding the announcements (default: slack.channel_id)",
    )
    react.add_argument(
        "--dry-run",
        action="store_true",
        default=_env_flag("DRY_RUN"),
        help="Log the planned reaction changes without applying them",
    )

    awards = subparsers.add_parser("awards", help="Post the weekly review awards")
    awards.add_argument(
        "--dry-run",
        action="store_true",
        default=_env_flag("DRY_RUN"),
        help="Print the message instead of posting it (default: $DRY_RUN == 'true')",
    )
    awards.add_argument(
        "--days",
        type=int,
        default=None,
        help="Window length in days (default: awards.window_days)",
    )

    preview = subparsers.add_parser("preview", help="Print the full leaderboards without posting")
    preview.add_argument(
        "--days",
        type=int,
        default=None,
        help="Window length in days (default: awards.window_days)",
    )

    return parser.parse_args(argv)


async def run_react(args: argparse.Namespace, config: BotConfig) -> int:
    """Run the reaction reconciler for one PR notification."""
    from pr_review_bot.adapters.chat.slack import SlackAdapter
    from pr_review_bot.adapters.vcs.github import GitHubAdapter
    from pr_review_bot.core.reconciler import ReactionReconciler
    from pr_review_bot.utils.async_helpers import MissingCredentialError
    from pr_review_bot.utils.logging import bind_context
    from pr_review_bot.utils.safe_subprocess import GHCliError

    channel_id = args.channel or config.slack.channel_id
    if not config.slack.bot_token or not channel_id:
        raise MissingCredentialError("SLACK_BOT_TOKEN and SLACK_CHANNEL_ID are required")
    if not args.events or not args.pr_url:
        log.error("missing_react_arguments", events=args.events, pr_url=args.pr_url)
        return 1

    bind_context(pr_url=args.pr_url)

    # Only the optional title link needs GitHub
    vcs = None
    if config.github.token:
        try:
            vcs = GitHubAdapter(config.github)
        except GHCliError as e:
            log.warning("title_link_disabled", error=str(e))

    reconciler = ReactionReconciler(
        SlackAdapter(config.slack),
        config.slack,
        channel_id,
        vcs=vcs,
        dry_run=args.dry_run,
    )
    result = await reconciler.handle(args.events, args.pr_url)
    log.info("react_completed", result=result.value)
    return 0


async def run_awards(args: argparse.Namespace, config: BotConfig, preview: bool = False) -> int:
    """Run the awards pipeline, or print the preview."""
    from pr_review_bot.adapters.chat.slack import SlackAdapter
    from pr_review_bot.adapters.vcs.github import GitHubAdapter
    from pr_review_bot.core.awards import AwardsRunner
    from pr_review_bot.utils.async_helpers import MissingCredentialError

    if not config.github.token:
        raise MissingCredentialError("GITHUB_TOKEN is required")
    if args.days is not None:
        config.awards.window_days = args.days

    dry_run = preview or args.dry_run
    chat = None
    if not dry_run:
        if not config.slack.bot_token or not config.awards_channel_id:
            raise MissingCredentialError("SLACK_BOT_TOKEN and SLACK_CHANNEL_ID are required")
        chat = SlackAdapter(config.slack)

    runner = AwardsRunner(config, GitHubAdapter(config.github), chat)

    if preview:
        report = await runner.collect()
        print(runner.formatter.format_preview(report.stats, report.since, report.until))
        print()
        print("=== Slack message preview ===")
        print(runner.render(report))
        return 0

    text = await runner.run(dry_run=dry_run)
    if dry_run:
        print(text)
    return 0


async def run_command(args: argparse.Namespace) -> int:
    """Load configuration and dispatch the requested command.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    from pr_review_bot.adapters.chat.slack import SlackAdapterError
    from pr_review_bot.config.loader import load_config
    from pr_review_bot.utils.async_helpers import MissingCredentialError, ScanFailedError
    from pr_review_bot.utils.logging import configure_logging
    from pr_review_bot.utils.safe_subprocess import GHCliError

    log.info("starting_pr_review_bot", version=__version__, command=args.command)

    try:
        config = load_config(args.config)

        # Config file settings win over the CLI defaults, --debug wins over both
        if args.config is not None:
            configure_logging(
                level="DEBUG" if args.debug else config.logging.level,
                log_format=config.logging.format,
            )

        if args.command == "react":
            return await run_react(args, config)
        return await run_awards(args, config, preview=args.command == "preview")

    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(args.config), error=str(e))
        return 1
    except MissingCredentialError as e:
        log.error("missing_credentials", error=str(e))
        return 1
    except ScanFailedError as e:
        log.error("all_scans_failed", error=str(e))
        return 1
    except SlackAdapterError as e:
        log.error("slack_request_failed", error=str(e))
        return 1
    except GHCliError as e:
        log.error("gh_cli_failed", error=str(e))
        return 1
    except ValueError as e:
        log.error("configuration_invalid", error=str(e))
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_format=args.format)

    try:
        return asyncio.run(run_command(args))
    except KeyboardInterrupt:
        log.info("interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
