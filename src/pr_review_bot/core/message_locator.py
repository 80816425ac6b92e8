"""Find the chat message that announced a pull request."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pr_review_bot.adapters.chat.slack import SlackAdapterError

if TYPE_CHECKING:
    from pr_review_bot.interfaces.chat import ChatProvider
    from pr_review_bot.models.message import ChatMessage

log = structlog.get_logger()

DEFAULT_HISTORY_LIMIT = 100


def select_oldest_match(messages: list[ChatMessage], reference: str) -> ChatMessage | None:
    """Return the oldest message whose text contains ``reference``.

    ``messages`` is in Slack's newest-first order, so the oldest match is the
    last one seen. Later matches are usually replies or re-shares of the
    original announcement.
    """
    found: ChatMessage | None = None
    for message in messages:
        if reference in message.text:
            found = message
    return found


async def find_message(
    chat: ChatProvider,
    channel_id: str,
    reference: str,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> ChatMessage | None:
    """Locate the announcement of a PR in the channel's recent history.

    Only the newest ``limit`` messages are searched; an announcement older
    than that is reported as not found.

    Args:
        chat: Chat provider.
        channel_id: Channel to search.
        reference: Literal text to match, typically the PR URL.
        limit: Number of recent messages to search.

    Returns:
        The matching message, or None if there is none or the history could
        not be read.
    """
    log.info("searching_for_message", channel_id=channel_id, reference=reference)

    try:
        messages = await chat.fetch_history(channel_id, limit=limit)
    except SlackAdapterError as e:
        log.error("message_search_failed", channel_id=channel_id, error=str(e))
        return None

    message = select_oldest_match(messages, reference)
    if message is None:
        log.info("message_not_found", channel_id=channel_id, searched=len(messages))
        return None

    log.info(
        "message_found",
        channel_id=channel_id,
        message_id=message.message_id,
        reactions=sorted(message.reactions),
    )
    return message
