"""Reaction reconciler: mirrors PR lifecycle events onto the PR's announcement.

One run handles one notification from CI:

1. Locate the announcement in the channel by the PR URL
2. Plan reaction changes for the batch of events against its reactions
3. Apply the plan (skipped in dry-run mode)
4. For configured events, turn the bare PR link into "title (#number)"
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from pr_review_bot.adapters.chat.slack import SendError
from pr_review_bot.adapters.vcs.github import GitHubAdapterError
from pr_review_bot.models.message import ReconcileResult
from pr_review_bot.models.pull_request import PullRequestRef
from pr_review_bot.utils.security import SecurityError
from pr_review_bot.core.message_locator import find_message
from pr_review_bot.core.reactions import apply_plan, plan_reactions, split_event_tokens

if TYPE_CHECKING:
    from pr_review_bot.config.schema import SlackConfig
    from pr_review_bot.interfaces.chat import ChatProvider
    from pr_review_bot.interfaces.vcs import VCSProvider
    from pr_review_bot.models.message import ChatMessage
    from pr_review_bot.models.reaction import ReactionPlan

log = structlog.get_logger()


def escape_mrkdwn(text: str) -> str:
    """Escape the characters Slack treats as control characters."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def link_pr_title(text: str, url: str, title: str, number: int) -> str:
    """Replace Slack's bare ``<url>`` link with ``<url|title (#number)>``.

    Text that already labels the link, or does not contain it, is returned
    unchanged.
    """
    bare = f"<{url}>"
    if f"<{url}|" in text or bare not in text:
        return text
    label = escape_mrkdwn(f"{title} (#{number})").replace("|", "/")
    return text.replace(bare, f"<{url}|{label}>", 1)


class ReactionReconciler:
    """Runs the reaction pipeline for one PR notification.

    Example:
        reconciler = ReactionReconciler(chat, config.slack, "C0123", vcs=vcs)
        result = await reconciler.handle("ci_pass,merged", pr_url)
    """

    def __init__(
        self,
        chat: ChatProvider,
        config: SlackConfig,
        channel_id: str,
        vcs: VCSProvider | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the reconciler.

        Args:
            chat: Chat provider holding the announcements.
            config: Slack configuration (reaction map, history limit, link events).
            channel_id: Channel the announcements are posted in.
            vcs: VCS provider used to fetch PR titles; title links are
                skipped without one.
            dry_run: Log the plan instead of applying it.
        """
        self._chat = chat
        self._config = config
        self._channel_id = channel_id
        self._vcs = vcs
        self._dry_run = dry_run
        self._reaction_map = config.reaction_map()

    async def handle(
        self,
        events: str | Iterable[str],
        pr_reference: str,
    ) -> ReconcileResult:
        """Reconcile the announcement of ``pr_reference`` with a batch of events.

        Args:
            events: Comma-separated event types, or an iterable of them.
            pr_reference: Text identifying the announcement, typically the PR URL.

        Returns:
            What the run did.

        Raises:
            ReactionError: If adding a reaction fails.
        """
        tokens = split_event_tokens(events)
        log.info("reconcile_started", events=tokens, pr_reference=pr_reference)

        message = await find_message(
            self._chat,
            self._channel_id,
            pr_reference,
            limit=self._config.history_limit,
        )
        if message is None:
            log.info("reconcile_skipped_no_message", pr_reference=pr_reference)
            return ReconcileResult.MESSAGE_NOT_FOUND

        plan = plan_reactions(message.reactions, tokens, self._reaction_map)
        log.info(
            "reaction_plan",
            message_id=message.message_id,
            applied=[event.value for event in plan.applied],
            suppressed=[event.value for event in plan.suppressed],
            unknown=list(plan.unknown),
            actions=[f"{action.kind.value}:{action.symbol}" for action in plan.actions],
        )

        if not plan.applied and not plan.suppressed:
            return ReconcileResult.NO_KNOWN_EVENTS

        if self._dry_run:
            log.info("dry_run_reactions_not_applied", final=sorted(plan.final))
            return ReconcileResult.DRY_RUN

        await apply_plan(self._chat, self._channel_id, message.message_id, plan)
        await self._maybe_link_title(message, plan, pr_reference)

        if plan.is_noop:
            return ReconcileResult.UNCHANGED
        return ReconcileResult.UPDATED

    async def _maybe_link_title(
        self,
        message: ChatMessage,
        plan: ReactionPlan,
        pr_reference: str,
    ) -> None:
        """Label the PR link with its title if an applied event asks for it.

        Best-effort: failures are logged, never raised.
        """
        if self._vcs is None or not set(plan.applied) & set(self._config.link_title_events):
            return

        ref = PullRequestRef.from_url(pr_reference)
        if ref is None:
            log.debug("title_link_skipped_not_a_pr_url", pr_reference=pr_reference)
            return

        try:
            pull = await self._vcs.get_pull(ref.repo, ref.number)
            new_text = link_pr_title(message.text, pr_reference, pull.title, pull.number)
            if new_text == message.text:
                return
            await self._chat.update_message(self._channel_id, message.message_id, new_text)
        except (GitHubAdapterError, SendError, SecurityError) as e:
            log.warning("title_link_failed", pr_reference=pr_reference, error=str(e))
