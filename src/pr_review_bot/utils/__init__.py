"""Utility functions and helpers.

This module provides various utilities for the PR review bot:
- security: Secret redaction, input validation
- safe_subprocess: Safe gh CLI execution
- async_helpers: Bot exceptions and settled fan-out of independent tasks
- logging: Structured logging with secret sanitization
"""

from pr_review_bot.utils.async_helpers import (
    BotError,
    MissingCredentialError,
    ScanFailedError,
    gather_settled,
)
from pr_review_bot.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from pr_review_bot.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
)

__all__ = [
    "BotError",
    "LogFormat",
    "LogLevel",
    "MissingCredentialError",
    "RedactionError",
    "ScanFailedError",
    "SecretRedactor",
    "SecurityError",
    "bind_context",
    "clear_context",
    "configure_logging",
    "gather_settled",
    "get_logger",
    "unbind_context",
]
