"""
Subscription bus: ordered, cancelable subscriber lists.

Subscribers are deduplicated by the identity of the object the caller
passed. Unsubscribe closures locate their entry by identity at call time,
so they stay correct however the list has changed since.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Union

from .core.handlers import Handler

Unsubscribe = Callable[[], None]

ACTION_PHASES = ("before", "after", "error")


@dataclass(frozen=True)
class MutationRecord:
    """
    Committed mutation as seen by subscribers.

    Fields:
        type: Qualified mutation type
        payload: Payload passed to commit (None if omitted)
    """
    type: str
    payload: Any = None


@dataclass(frozen=True)
class ActionRecord:
    """
    Dispatched action as seen by subscribers.

    Fields:
        type: Qualified action type
        payload: Payload passed to dispatch (None if omitted)
    """
    type: str
    payload: Any = None


@dataclass(frozen=True, eq=False)
class Subscriber:
    """
    Normalized subscriber entry.

    source is what the caller passed to subscribe(); phases maps a phase
    name to its callback. Mutation subscribers use the "mutation" phase.
    """
    source: Any
    phases: Mapping[str, Handler]

    def get(self, phase: str) -> Optional[Handler]:
        return self.phases.get(phase)


def normalize_mutation_subscriber(fn: Callable[..., Any]) -> Subscriber:
    return Subscriber(source=fn, phases={"mutation": Handler.direct(fn)})


def normalize_action_subscriber(
    fn: Union[Callable[..., Any], Mapping[str, Callable[..., Any]]]
) -> Subscriber:
    """A bare callback subscribes to the "before" phase."""
    if callable(fn):
        return Subscriber(source=fn, phases={"before": Handler.direct(fn)})
    phases = {
        phase: Handler.direct(fn[phase])
        for phase in ACTION_PHASES
        if fn.get(phase) is not None
    }
    return Subscriber(source=fn, phases=phases)


def generic_subscribe(
    subscriber: Subscriber, subs: List[Subscriber], prepend: bool = False
) -> Unsubscribe:
    """
    Add subscriber to subs unless its source is already present.

    Returns:
        Idempotent function removing the subscriber
    """
    source = subscriber.source
    if not any(s.source is source for s in subs):
        if prepend:
            subs.insert(0, subscriber)
        else:
            subs.append(subscriber)

    def unsubscribe() -> None:
        for i, s in enumerate(subs):
            if s.source is source:
                del subs[i]
                return

    return unsubscribe
