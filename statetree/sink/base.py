"""
ReactiveSink abstract interface.

The store does not observe state itself. It hands the root state to a
sink, which owns change detection, cached derived values and watchers.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

Unwatch = Callable[[], None]
WatchCallback = Callable[[Any, Any], None]


class ReactiveSink(ABC):
    """
    Observation backend for one installation generation of a store.

    All implementations must guarantee:
    - computed(key) is lazy and cached until the next notify()
    - watchers registered with sync=True run during notify(sync=True)
    - set()/delete() changes are picked up by the next notify()
    - a raising watcher callback is logged and skipped, except for
      InvariantError (strict mode), which propagates out of notify()
    """

    @property
    @abstractmethod
    def state(self) -> Dict[str, Any]:
        """Current root state object."""
        ...

    @state.setter
    @abstractmethod
    def state(self, value: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def define_computed(self, key: str, fn: Callable[[], Any]) -> None:
        """Register a lazily recomputed, cached derived value."""
        ...

    @abstractmethod
    def computed(self, key: str) -> Any:
        """
        Read a derived value.

        Raises:
            KeyError: If key was never defined
        """
        ...

    @abstractmethod
    def watch(
        self,
        selector: Callable[[], Any],
        callback: WatchCallback,
        deep: bool = False,
        sync: bool = False,
        immediate: bool = False,
    ) -> Unwatch:
        """
        Call callback(new, old) whenever selector() changes.

        Returns:
            Function that removes the watcher
        """
        ...

    @abstractmethod
    def set(self, obj: Dict[str, Any], key: str, value: Any) -> None:
        ...

    @abstractmethod
    def delete(self, obj: Dict[str, Any], key: str) -> None:
        ...

    @abstractmethod
    def notify(self, sync: Optional[bool] = None) -> None:
        """
        Signal that state may have changed.

        Args:
            sync: True runs only sync watchers, False only deferred ones,
                None runs all of them
        """
        ...

    def teardown(self) -> None:
        """
        Release watchers and cached values when the sink is replaced.

        Implementations may override. Default does nothing.
        """
        return None
