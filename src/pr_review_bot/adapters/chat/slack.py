"""Slack chat adapter using the slack-sdk async Web API client.

This module implements the ChatProvider protocol for Slack. The bot never
listens for events; every call is a single Web API request:
- conversations.history to find the PR announcement
- reactions.add / reactions.remove to mirror PR state
- chat.postMessage / chat.update for awards and PR title links
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import aiohttp
import structlog
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from ...config.schema import SlackConfig
from ...models.message import ChatMessage

log = structlog.get_logger()


class SlackAdapterError(Exception):
    """Base exception for Slack adapter errors."""


class HistoryError(SlackAdapterError):
    """Raised when reading channel history fails."""


class SendError(SlackAdapterError):
    """Raised when posting or updating a message fails."""


class ReactionError(SlackAdapterError):
    """Raised when adding/removing a reaction fails."""


class SlackAdapter:
    """Slack chat adapter implementing the ChatProvider protocol.

    Example:
        config = SlackConfig(bot_token="xoxb-...", channel_id="C0123")
        adapter = SlackAdapter(config)

        messages = await adapter.fetch_history("C0123")
        await adapter.add_reaction("C0123", messages[0].message_id, "git-merged")
    """

    def __init__(self, config: SlackConfig) -> None:
        """Initialize the Slack adapter.

        Args:
            config: Slack-specific configuration.

        Raises:
            SlackAdapterError: If no bot token is configured.
        """
        if not config.bot_token:
            raise SlackAdapterError("Slack bot token is not configured")

        self._config = config
        self._client = AsyncWebClient(token=config.bot_token)

    def _parse_message(self, channel_id: str, data: dict[str, Any]) -> ChatMessage:
        """Parse a conversations.history entry into a ChatMessage.

        Args:
            channel_id: Channel the message was read from.
            data: Raw message payload.

        Returns:
            ChatMessage with its current reaction names.
        """
        message_id = data.get("ts", "")

        try:
            timestamp = datetime.fromtimestamp(float(message_id))
        except (ValueError, TypeError):
            timestamp = datetime.now()

        reactions = frozenset(
            reaction["name"] for reaction in data.get("reactions", []) if reaction.get("name")
        )

        return ChatMessage(
            channel_id=channel_id,
            message_id=message_id,
            user_id=data.get("user") or data.get("bot_id") or "",
            text=data.get("text") or "",
            timestamp=timestamp,
            reactions=reactions,
            raw_event=data,
        )

    async def fetch_history(
        self,
        channel_id: str,
        limit: int = 100,
    ) -> list[ChatMessage]:
        """Fetch the most recent messages of a channel, newest first.

        Only the first page is read; older messages are out of reach.

        Args:
            channel_id: Channel to read.
            limit: Maximum number of messages (Slack caps a page at 1000).

        Returns:
            Messages in the order Slack returns them (newest first).

        Raises:
            HistoryError: If the request fails.
        """
        try:
            result = await self._client.conversations_history(
                channel=channel_id,
                limit=limit,
            )
        except (SlackClientError, aiohttp.ClientError, TimeoutError) as e:
            log.error("fetch_history_failed", channel_id=channel_id, error=str(e))
            raise HistoryError(f"Failed to read channel history: {e}") from e

        messages: list[dict[str, Any]] = result.get("messages") or []
        log.debug("history_fetched", channel_id=channel_id, count=len(messages))

        return [self._parse_message(channel_id, message) for message in messages]

    async def add_reaction(
        self,
        channel_id: str,
        message_id: str,
        reaction: str,
    ) -> None:
        """Add a reaction/emoji to a message.

        Args:
            channel_id: Channel containing the message.
            message_id: Target message identifier (ts).
            reaction: Reaction name (without colons, e.g., "git-merged").

        Raises:
            ReactionError: If adding reaction fails.
        """
        try:
            await self._client.reactions_add(
                channel=channel_id,
                timestamp=message_id,
                name=reaction,
            )
            log.info(
                "reaction_added",
                channel_id=channel_id,
                message_id=message_id,
                reaction=reaction,
            )

        except SlackApiError as e:
            if e.response.get("error") == "already_reacted":
                log.info("reaction_already_present", reaction=reaction)
                return

            log.error(
                "add_reaction_failed",
                channel_id=channel_id,
                message_id=message_id,
                reaction=reaction,
                error=str(e),
            )
            raise ReactionError(f"Failed to add reaction: {e}") from e
        except (SlackClientError, aiohttp.ClientError, TimeoutError) as e:
            log.error("reaction_request_failed", reaction=reaction, error=str(e))
            raise ReactionError(f"Failed to add reaction: {e}") from e

    async def remove_reaction(
        self,
        channel_id: str,
        message_id: str,
        reaction: str,
    ) -> None:
        """Remove a previously added reaction.

        Args:
            channel_id: Channel containing the message.
            message_id: Target message identifier (ts).
            reaction: Reaction name (without colons, e.g., "hourglass_flowing_sand").

        Raises:
            ReactionError: If removing reaction fails.
        """
        try:
            await self._client.reactions_remove(
                channel=channel_id,
                timestamp=message_id,
                name=reaction,
            )
            log.info(
                "reaction_removed",
                channel_id=channel_id,
                message_id=message_id,
                reaction=reaction,
            )

        except SlackApiError as e:
            # The bot can only remove its own reactions; anything else is "absent"
            if e.response.get("error") == "no_reaction":
                log.info("reaction_already_absent", reaction=reaction)
                return

            log.error(
                "remove_reaction_failed",
                channel_id=channel_id,
                message_id=message_id,
                reaction=reaction,
                error=str(e),
            )
            raise ReactionError(f"Failed to remove reaction: {e}") from e
        except (SlackClientError, aiohttp.ClientError, TimeoutError) as e:
            log.error("reaction_request_failed", reaction=reaction, error=str(e))
            raise ReactionError(f"Failed to remove reaction: {e}") from e

    async def post_message(self, channel_id: str, text: str) -> str:
        """Post a message to a channel.

        Args:
            channel_id: Target channel identifier.
            text: Message text (Slack mrkdwn).

        Returns:
            Message ID (ts) of the posted message.

        Raises:
            SendError: If message delivery fails.
        """
        try:
            result = await self._client.chat_postMessage(channel=channel_id, text=text)
        except (SlackClientError, aiohttp.ClientError, TimeoutError) as e:
            log.error("post_message_failed", channel_id=channel_id, error=str(e))
            raise SendError(f"Failed to send message: {e}") from e

        message_ts = result.get("ts", "")
        log.info("message_posted", channel_id=channel_id, message_ts=message_ts)
        return message_ts

    async def update_message(self, channel_id: str, message_id: str, text: str) -> None:
        """Replace the text of an existing message.

        Args:
            channel_id: Channel containing the message.
            message_id: Target message identifier (ts).
            text: New message text.

        Raises:
            SendError: If the update fails.
        """
        try:
            await self._client.chat_update(channel=channel_id, ts=message_id, text=text)
        except (SlackClientError, aiohttp.ClientError, TimeoutError) as e:
            log.error(
                "update_message_failed",
                channel_id=channel_id,
                message_id=message_id,
                error=str(e),
            )
            raise SendError(f"Failed to update message: {e}") from e

        log.info("message_updated", channel_id=channel_id, message_id=message_id)
