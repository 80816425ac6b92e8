"""Protocol definitions for pluggable adapters."""

from .chat import ChatProvider
from .vcs import VCSProvider

__all__ = ["ChatProvider", "VCSProvider"]
