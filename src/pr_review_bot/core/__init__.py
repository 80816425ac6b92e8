"""Core business logic components.

This module exports the two pipelines and their building blocks:
- ReactionReconciler: mirrors PR events onto the PR's Slack announcement
- AwardsRunner: scans repositories and publishes the weekly review awards
- ActivityScanner: per-repository review activity scan
- AwardsFormatter: renders merged stats as a Slack message
"""

from pr_review_bot.core.awards import AwardsReport, AwardsRunner
from pr_review_bot.core.formatter import AwardsFormatter, format_date_range
from pr_review_bot.core.leaderboard import merge_stats, pick_winner, rank
from pr_review_bot.core.message_locator import find_message
from pr_review_bot.core.reactions import apply_plan, plan_reactions, resolve_event
from pr_review_bot.core.reconciler import ReactionReconciler
from pr_review_bot.core.scanner import ActivityScanner, qualifying_reviewers

__all__ = [
    "ActivityScanner",
    "AwardsFormatter",
    "AwardsReport",
    "AwardsRunner",
    "ReactionReconciler",
    "apply_plan",
    "find_message",
    "format_date_range",
    "merge_stats",
    "pick_winner",
    "plan_reactions",
    "qualifying_reviewers",
    "rank",
    "resolve_event",
]
