"""
Logger plugin: writes every mutation (and optionally every action) to logging.

Usage:
    store = Store(definition, plugins=[create_logger()])
"""

import copy
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..subscriptions import ActionRecord, MutationRecord

if TYPE_CHECKING:
    from ..store import Store


def _identity(value: Any) -> Any:
    return value


def _always(*_: Any) -> bool:
    return True


def create_logger(
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
    filter: Callable[[MutationRecord, Any, Any], bool] = _always,
    transformer: Callable[[Any], Any] = _identity,
    mutation_transformer: Callable[[MutationRecord], Any] = _identity,
    action_filter: Callable[[ActionRecord, Any], bool] = _always,
    action_transformer: Callable[[ActionRecord], Any] = _identity,
    log_mutations: bool = True,
    log_actions: bool = True,
) -> Callable[["Store"], None]:
    """
    Build a plugin that logs state transitions.

    Args:
        logger: Target logger (default: "statetree.plugins.logger")
        level: Level for every record
        filter: (mutation, prev_state, next_state) -> log this mutation?
        transformer: Applied to state snapshots before logging
        mutation_transformer: Applied to the mutation record before logging
        action_filter: (action, state) -> log this action?
        action_transformer: Applied to the action record before logging
        log_mutations: Log mutations at all
        log_actions: Log actions at all

    Returns:
        Plugin callable
    """
    log = logger or logging.getLogger(__name__)

    def plugin(store: "Store") -> None:
        prev_state = copy.deepcopy(store.state)

        if log_mutations:

            def on_mutation(mutation: MutationRecord, state: Any) -> None:
                nonlocal prev_state
                next_state = copy.deepcopy(state)
                if filter(mutation, prev_state, next_state):
                    log.log(
                        level,
                        "mutation %s",
                        mutation.type,
                        extra={
                            "mutation": mutation_transformer(mutation),
                            "prev_state": transformer(prev_state),
                            "next_state": transformer(next_state),
                        },
                    )
                prev_state = next_state

            store.subscribe(on_mutation)

        if log_actions:

            def on_action(action: ActionRecord, state: Any) -> None:
                if action_filter(action, state):
                    log.log(
                        level,
                        "action %s",
                        action.type,
                        extra={"action": action_transformer(action)},
                    )

            store.subscribe_action(on_action)

    return plugin
