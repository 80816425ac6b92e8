"""Data models for chat messages."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class ChatMessage:
    """A message read from a chat channel's history."""

    channel_id: str
    message_id: str  # Slack ts; also the message's position in the channel
    user_id: str
    text: str
    timestamp: datetime
    reactions: frozenset[str] = frozenset()

    # Platform-specific metadata
    raw_event: dict[str, Any] = field(default_factory=dict, compare=False)


class ReconcileResult(Enum):
    """Outcome of a reaction reconciliation run."""

    MESSAGE_NOT_FOUND = "message_not_found"
    NO_KNOWN_EVENTS = "no_known_events"
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    DRY_RUN = "dry_run"
