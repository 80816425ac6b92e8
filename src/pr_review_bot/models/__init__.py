"""Data models and transfer objects."""

from .message import ChatMessage, ReconcileResult
from .pull_request import (
    GitHubUser,
    PullRequest,
    PullRequestRef,
    Review,
    ReviewComment,
    ReviewState,
    pr_key,
)
from .reaction import (
    ActionKind,
    Category,
    EventType,
    ReactionAction,
    ReactionMap,
    ReactionPlan,
    ReactionSpec,
)
from .stats import GlobalStats, RepoScanResult, ReviewerStats

__all__ = [
    # Message models
    "ChatMessage",
    "ReconcileResult",
    # Reaction models
    "ActionKind",
    "Category",
    "EventType",
    "ReactionAction",
    "ReactionMap",
    "ReactionPlan",
    "ReactionSpec",
    # Pull request models
    "GitHubUser",
    "PullRequest",
    "PullRequestRef",
    "Review",
    "ReviewComment",
    "ReviewState",
    "pr_key",
    # Stats models
    "GlobalStats",
    "RepoScanResult",
    "ReviewerStats",
]
