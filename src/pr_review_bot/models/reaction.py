"""Data models for PR events and the reactions that mirror them."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class EventType(Enum):
    """A pull-request lifecycle event reported by the CI workflow."""

    REVIEW_COMMENTED = "review_commented"
    REVIEW_APPROVED = "review_approved"
    REVIEW_APPROVED_WITH_COMMENTS = "review_approved_with_comments"
    CI_RUNNING = "ci_running"
    CI_PASS = "ci_pass"
    CI_FAIL = "ci_fail"
    MERGED = "merged"

    @classmethod
    def parse(cls, token: str) -> EventType | None:
        """Parse an event token, returning None for unknown tokens."""
        try:
            return cls(token.strip().lower())
        except ValueError:
            return None


class Category(Enum):
    """Mutually-exclusive reaction groups; a message shows one symbol per group."""

    APPROVAL = "approval"
    CI = "ci"
    MERGE = "merge"


EVENT_CATEGORIES: Mapping[EventType, Category] = MappingProxyType(
    {
        EventType.REVIEW_COMMENTED: Category.APPROVAL,
        EventType.REVIEW_APPROVED: Category.APPROVAL,
        EventType.REVIEW_APPROVED_WITH_COMMENTS: Category.APPROVAL,
        EventType.CI_RUNNING: Category.CI,
        EventType.CI_PASS: Category.CI,
        EventType.CI_FAIL: Category.CI,
        EventType.MERGED: Category.MERGE,
    }
)

TERMINAL_CI_EVENTS = frozenset({EventType.CI_PASS, EventType.CI_FAIL})

DEFAULT_SYMBOLS: Mapping[EventType, str] = MappingProxyType(
    {
        EventType.REVIEW_COMMENTED: "speech_balloon",
        EventType.REVIEW_APPROVED: "git-approved",
        EventType.REVIEW_APPROVED_WITH_COMMENTS: "approved-with-comments",
        EventType.CI_RUNNING: "hourglass_flowing_sand",
        EventType.CI_PASS: "white_check_mark",
        EventType.CI_FAIL: "x",
        EventType.MERGED: "git-merged",
    }
)


@dataclass(frozen=True)
class ReactionSpec:
    """The reaction an event resolves to."""

    event: EventType
    symbol: str  # Slack reaction name, without colons
    category: Category


@dataclass(frozen=True)
class ReactionMap:
    """Immutable event -> reaction symbol table.

    Every event has exactly one symbol and no two events share one, so a
    symbol observed on a message identifies its event unambiguously.
    """

    symbols: Mapping[EventType, str] = field(default_factory=lambda: DEFAULT_SYMBOLS)

    def __post_init__(self) -> None:
        merged = dict(DEFAULT_SYMBOLS)
        merged.update(self.symbols)
        if len(set(merged.values())) != len(merged):
            raise ValueError("Reaction symbols must be unique per event")
        object.__setattr__(self, "symbols", MappingProxyType(merged))

    @classmethod
    def from_names(cls, overrides: Mapping[str, str]) -> ReactionMap:
        """Build a map from ``{"event_name": "symbol"}`` overrides.

        Raises:
            ValueError: If an event name is unknown or symbols collide.
        """
        symbols: dict[EventType, str] = {}
        for name, symbol in overrides.items():
            event = EventType.parse(name)
            if event is None:
                raise ValueError(f"Unknown event type in reaction map: {name}")
            symbols[event] = symbol.strip(":")
        return cls(symbols)

    def spec_for(self, event: EventType) -> ReactionSpec:
        """Return the reaction spec of an event."""
        return ReactionSpec(event=event, symbol=self.symbols[event], category=EVENT_CATEGORIES[event])

    def symbol_for(self, event: EventType) -> str:
        """Return the symbol of an event."""
        return self.symbols[event]

    def symbols_in(self, category: Category) -> frozenset[str]:
        """Return every symbol that belongs to a category."""
        return frozenset(
            symbol for event, symbol in self.symbols.items() if EVENT_CATEGORIES[event] == category
        )

    def terminal_ci_symbols(self) -> frozenset[str]:
        """Return the symbols of finished CI states."""
        return frozenset(self.symbols[event] for event in TERMINAL_CI_EVENTS)


class ActionKind(Enum):
    """A reaction mutation."""

    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class ReactionAction:
    """One reaction mutation to apply to the target message."""

    kind: ActionKind
    symbol: str


@dataclass(frozen=True)
class ReactionPlan:
    """Result of planning a batch of events against a reaction set.

    ``actions`` is the ordered list of mutations that turns ``initial`` into
    ``final``.
    """

    initial: frozenset[str]
    final: frozenset[str]
    actions: tuple[ReactionAction, ...] = ()
    applied: tuple[EventType, ...] = ()
    suppressed: tuple[EventType, ...] = ()
    unknown: tuple[str, ...] = ()

    @property
    def is_noop(self) -> bool:
        """Return True if there is nothing to apply."""
        return not self.actions
