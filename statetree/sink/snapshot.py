"""
SnapshotSink: polling implementation of ReactiveSink.

State is kept as plain dicts. Nothing is intercepted at write time;
instead every notify() re-reads each watcher's selector and compares it
to the last seen value. Deep watchers compare canonical fingerprints, so
in-place edits anywhere below the selected value are seen.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..core.canonical import state_fingerprint
from ..core.errors import InvariantError
from .base import ReactiveSink, Unwatch, WatchCallback

logger = logging.getLogger(__name__)

_CONTAINERS = (dict, list, set)


@dataclass(eq=False)
class _Watcher:
    selector: Callable[[], Any]
    callback: WatchCallback
    deep: bool
    sync: bool
    value: Any = None
    fingerprint: Optional[str] = None
    active: bool = field(default=True)

    def prime(self) -> None:
        self.value = self.selector()
        if self.deep:
            self.fingerprint = state_fingerprint(self.value)

    def poll(self) -> bool:
        """Re-read the selector; return True (and record it) if it changed."""
        value = self.selector()
        old = self.value

        if self.deep:
            fingerprint = state_fingerprint(value)
            changed = value is not old or fingerprint != self.fingerprint
            self.fingerprint = fingerprint
        elif value is old:
            changed = False
        elif isinstance(value, _CONTAINERS) or isinstance(old, _CONTAINERS):
            changed = True
        else:
            changed = value != old

        self.value = value
        return changed


class SnapshotSink(ReactiveSink):
    """
    Default sink.

    Usage:
        sink = SnapshotSink({"count": 0})
        sink.define_computed("double", lambda: sink.state["count"] * 2)
        unwatch = sink.watch(lambda: sink.state["count"], on_change)
        sink.state["count"] += 1
        sink.notify()
    """

    def __init__(self, state: Optional[Dict[str, Any]] = None) -> None:
        self._state: Dict[str, Any] = state if state is not None else {}
        self._computed: Dict[str, Callable[[], Any]] = {}
        self._cache: Dict[str, Any] = {}
        self._watchers: List[_Watcher] = []
        self.revision = 0

    @property
    def state(self) -> Dict[str, Any]:
        return self._state

    @state.setter
    def state(self, value: Dict[str, Any]) -> None:
        self._state = value
        self._cache.clear()

    def define_computed(self, key: str, fn: Callable[[], Any]) -> None:
        self._computed[key] = fn
        self._cache.pop(key, None)

    def computed(self, key: str) -> Any:
        if key in self._cache:
            return self._cache[key]
        fn = self._computed[key]
        value = fn()
        self._cache[key] = value
        return value

    def watch(
        self,
        selector: Callable[[], Any],
        callback: WatchCallback,
        deep: bool = False,
        sync: bool = False,
        immediate: bool = False,
    ) -> Unwatch:
        watcher = _Watcher(selector=selector, callback=callback, deep=deep, sync=sync)
        watcher.prime()
        self._watchers.append(watcher)
        if immediate:
            callback(watcher.value, None)

        def unwatch() -> None:
            watcher.active = False
            if watcher in self._watchers:
                self._watchers.remove(watcher)

        return unwatch

    def set(self, obj: Dict[str, Any], key: str, value: Any) -> None:
        obj[key] = value

    def delete(self, obj: Dict[str, Any], key: str) -> None:
        obj.pop(key, None)

    def notify(self, sync: Optional[bool] = None) -> None:
        self.revision += 1
        self._cache.clear()
        for watcher in list(self._watchers):
            if not watcher.active:
                continue
            if sync is not None and watcher.sync != sync:
                continue
            old = watcher.value
            try:
                changed = watcher.poll()
            except Exception:
                logger.exception("Watcher selector failed; keeping last value")
                continue
            if changed:
                try:
                    watcher.callback(watcher.value, old)
                except InvariantError:
                    raise
                except Exception:
                    logger.exception("Watcher callback failed")

    def teardown(self) -> None:
        for watcher in self._watchers:
            watcher.active = False
        self._watchers.clear()
        self._computed.clear()
        self._cache.clear()
        logger.debug("Sink torn down at revision %d", self.revision)
