"""Event resolution and reaction planning.

A PR announcement shows at most one reaction per category (approval, CI,
merge). ``plan_reactions`` folds an ordered batch of events over the
message's current reactions and returns the mutations to make; it performs no
I/O. ``apply_plan`` then executes those mutations against the chat provider.

Guards applied per event, in this order:

1. CI events are ignored once the PR shows the merged reaction. Post-merge
   CI runs on the main branch must not change the PR's badge.
2. ``ci_running`` is ignored while a finished CI state (pass/fail) is shown.
   Parallel jobs complete out of order, so a late "running" must not
   overwrite a recorded result.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from pr_review_bot.adapters.chat.slack import ReactionError
from pr_review_bot.models.reaction import (
    ActionKind,
    Category,
    EventType,
    ReactionAction,
    ReactionMap,
    ReactionPlan,
    ReactionSpec,
)

if TYPE_CHECKING:
    from pr_review_bot.interfaces.chat import ChatProvider

log = structlog.get_logger()


def split_event_tokens(raw: str | Iterable[str]) -> list[str]:
    """Split a comma-separated event list, dropping blanks and keeping order.

    Example:
        split_event_tokens("ci_pass, merged") == ["ci_pass", "merged"]
    """
    chunks = [raw] if isinstance(raw, str) else list(raw)
    return [token.strip() for chunk in chunks for token in chunk.split(",") if token.strip()]


def resolve_event(token: str, reaction_map: ReactionMap) -> ReactionSpec | None:
    """Resolve an event token to its reaction, or None if the event is unknown."""
    event = EventType.parse(token)
    if event is None:
        return None
    return reaction_map.spec_for(event)


def apply_event(
    working: frozenset[str],
    spec: ReactionSpec,
    reaction_map: ReactionMap,
) -> tuple[frozenset[str], tuple[ReactionAction, ...]] | None:
    """Apply one event to a reaction set.

    Args:
        working: Reactions currently on the message.
        spec: Resolved event.
        reaction_map: Event -> symbol table.

    Returns:
        ``(new_set, actions)``, or None if a guard suppresses the event.
    """
    if spec.category == Category.CI:
        if reaction_map.symbol_for(EventType.MERGED) in working:
            return None
        if spec.event == EventType.CI_RUNNING and working & reaction_map.terminal_ci_symbols():
            return None

    actions: list[ReactionAction] = []
    for symbol in sorted(reaction_map.symbols_in(spec.category) & working):
        if symbol != spec.symbol:
            actions.append(ReactionAction(ActionKind.REMOVE, symbol))

    if spec.symbol not in working:
        actions.append(ReactionAction(ActionKind.ADD, spec.symbol))

    removed = {action.symbol for action in actions if action.kind == ActionKind.REMOVE}
    return (working - removed) | {spec.symbol}, tuple(actions)


def plan_reactions(
    current: Iterable[str],
    tokens: str | Iterable[str],
    reaction_map: ReactionMap,
) -> ReactionPlan:
    """Plan the reaction mutations for a batch of events.

    Events are applied in order, each against the set produced by the ones
    before it, so a ``merged`` earlier in the batch locks out later CI events.

    Args:
        current: Reactions observed on the message at the start of the run.
        tokens: Comma-separated event types, or an iterable of them, in the
            order they should be applied.
        reaction_map: Event -> symbol table.

    Returns:
        ReactionPlan with the final set and the ordered actions.
    """
    initial = frozenset(current)
    working = initial
    actions: list[ReactionAction] = []
    applied: list[EventType] = []
    suppressed: list[EventType] = []
    unknown: list[str] = []

    for token in split_event_tokens(tokens):
        spec = resolve_event(token, reaction_map)
        if spec is None:
            log.warning("unknown_event_type", event_type=token)
            unknown.append(token)
            continue

        step = apply_event(working, spec, reaction_map)
        if step is None:
            log.info(
                "event_suppressed",
                event_type=spec.event.value,
                reactions=sorted(working),
            )
            suppressed.append(spec.event)
            continue

        working, step_actions = step
        actions.extend(step_actions)
        applied.append(spec.event)

    return ReactionPlan(
        initial=initial,
        final=working,
        actions=tuple(actions),
        applied=tuple(applied),
        suppressed=tuple(suppressed),
        unknown=tuple(unknown),
    )


async def apply_plan(
    chat: ChatProvider,
    channel_id: str,
    message_id: str,
    plan: ReactionPlan,
) -> None:
    """Execute a plan's actions in order.

    Removals are best-effort: failures are logged and skipped. A failed
    addition propagates.

    Raises:
        ReactionError: If adding a reaction fails.
    """
    for action in plan.actions:
        if action.kind == ActionKind.REMOVE:
            try:
                await chat.remove_reaction(channel_id, message_id, action.symbol)
            except ReactionError as e:
                log.warning("reaction_removal_skipped", reaction=action.symbol, error=str(e))
        else:
            await chat.add_reaction(channel_id, message_id, action.symbol)
