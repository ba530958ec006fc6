"""
Devtool bridge.

A devtool is any object with emit(event, *args) and on(event, callback).
The bridge announces the store, forwards every mutation and action, and
lets the tool drive time travel through replace_state().

Events emitted:
    statetree:init          (store)
    statetree:mutation      (mutation, state)
    statetree:action        (action, state)
    statetree:error         (error)  -- rejected action
Events handled:
    statetree:travel-to-state  (state)
"""

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Callable, DefaultDict, List, Optional

if TYPE_CHECKING:
    from ..store import Store

logger = logging.getLogger(__name__)

_global_hook: Optional[Any] = None


class DevtoolHook:
    """
    Minimal in-process event hub implementing the devtool hook protocol.

    Records every emitted event in .events for inspection.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, List[Callable[..., Any]]] = defaultdict(list)
        self.events: List[tuple] = []

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        self._listeners[event].append(callback)

    def emit(self, event: str, *args: Any) -> None:
        self.events.append((event,) + args)
        for callback in list(self._listeners.get(event, ())):
            callback(*args)


def install_global_hook(hook: Optional[Any]) -> None:
    """Set (or clear with None) the hook used by stores created with devtools=True."""
    global _global_hook
    _global_hook = hook


def get_global_hook() -> Optional[Any]:
    return _global_hook


def resolve_devtool_hook(devtools: Any) -> Optional[Any]:
    """
    Map the store's devtools argument to a hook.

    None/False disable the bridge; True uses the global hook if one is
    installed; any other object is used as the hook itself.
    """
    if devtools is None or devtools is False:
        return None
    if devtools is True:
        return _global_hook
    return devtools


def devtool_plugin(store: "Store", hook: Any) -> None:
    store._devtool_hook = hook
    hook.emit("statetree:init", store)

    hook.on("statetree:travel-to-state", lambda target_state: store.replace_state(target_state))

    store.subscribe(
        lambda mutation, state: hook.emit("statetree:mutation", mutation, state),
        prepend=True,
    )
    store.subscribe_action(
        lambda action, state: hook.emit("statetree:action", action, state),
        prepend=True,
    )
    logger.debug("Devtool hook attached to %s", store.store_id)
