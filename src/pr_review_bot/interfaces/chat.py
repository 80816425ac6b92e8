"""Abstract interface for chat platform integrations."""

from typing import Protocol

from ..models.message import ChatMessage


class ChatProvider(Protocol):
    """Abstract interface for chat platform integrations.

    This protocol defines the contract that chat adapters must implement.
    Reaction names are given without colons (e.g. "git-merged").
    """

    async def fetch_history(
        self,
        channel_id: str,
        limit: int = 100,
    ) -> list[ChatMessage]:
        """
        Fetch the most recent messages of a channel, newest first.

        Args:
            channel_id: Channel to read
            limit: Maximum number of messages to return

        Returns:
            Messages in reverse-chronological order, with their reactions

        Raises:
            HistoryError: If the history cannot be read
        """
        ...

    async def add_reaction(
        self,
        channel_id: str,
        message_id: str,
        reaction: str,
    ) -> None:
        """
        Add a reaction to a message. Already present is not an error.

        Raises:
            ReactionError: If adding the reaction fails
        """
        ...

    async def remove_reaction(
        self,
        channel_id: str,
        message_id: str,
        reaction: str,
    ) -> None:
        """
        Remove a reaction from a message. Already absent is not an error.

        Raises:
            ReactionError: If removing the reaction fails
        """
        ...

    async def post_message(self, channel_id: str, text: str) -> str:
        """
        Post a message to a channel.

        Returns:
            Message ID of the posted message

        Raises:
            SendError: If message delivery fails
        """
        ...

    async def update_message(self, channel_id: str, message_id: str, text: str) -> None:
        """
        Replace the text of an existing message.

        Raises:
            SendError: If the update fails
        """
        ...
