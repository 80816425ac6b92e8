"""Async utilities and the bot-level exception hierarchy.

This module provides:
- Custom exceptions shared by both pipelines
- ``gather_settled`` to fan out independent tasks and collect every outcome
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

import structlog

log = structlog.get_logger()

K = TypeVar("K")
T = TypeVar("T")


# =============================================================================
# Custom Exceptions
# =============================================================================


class BotError(Exception):
    """Base exception for all bot errors."""


class MissingCredentialError(BotError):
    """A credential required by the requested operation is not configured."""


class ScanFailedError(BotError):
    """Every repository scan failed, so there is nothing to report."""


# =============================================================================
# Fan-out / join
# =============================================================================


@dataclass
class SettledResults(Generic[K, T]):
    """Outcome of ``gather_settled``: successes and failures, input order kept."""

    succeeded: list[tuple[K, T]] = field(default_factory=list)
    failed: list[tuple[K, BaseException]] = field(default_factory=list)

    @property
    def values(self) -> list[T]:
        """Return the successful results."""
        return [value for _, value in self.succeeded]

    @property
    def failed_keys(self) -> list[K]:
        """Return the keys of the tasks that failed."""
        return [key for key, _ in self.failed]


async def gather_settled(
    keys: Sequence[K],
    awaitables: Sequence[Awaitable[T]],
) -> SettledResults[K, T]:
    """Run awaitables concurrently and wait for all of them.

    Unlike a plain ``asyncio.gather`` the first failure does not short-circuit
    the join; every task runs to completion and the outcomes are partitioned.

    Args:
        keys: Label for each awaitable (e.g. the repository it scans).
        awaitables: Awaitables to run, aligned with ``keys``.

    Returns:
        SettledResults holding (key, value) successes and (key, error) failures.

    Raises:
        ValueError: If ``keys`` and ``awaitables`` differ in length.
    """
    if len(keys) != len(awaitables):
        raise ValueError("keys and awaitables must have the same length")

    outcomes = await asyncio.gather(*awaitables, return_exceptions=True)

    settled: SettledResults[K, T] = SettledResults()
    for key, outcome in zip(keys, outcomes, strict=True):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            log.error(
                "task_failed",
                key=str(key),
                exception_type=type(outcome).__name__,
                error=str(outcome),
            )
            settled.failed.append((key, outcome))
        else:
            settled.succeeded.append((key, outcome))

    return settled
