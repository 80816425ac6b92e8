"""Concrete implementations of provider interfaces."""

from .chat.slack import SlackAdapter
from .vcs.github import GitHubAdapter

__all__ = [
    "GitHubAdapter",
    "SlackAdapter",
]
