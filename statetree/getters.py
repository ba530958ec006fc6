"""
Read-only getter views.

GetterMap is the store-wide map keyed by qualified type. LocalGetters is
the per-namespace view a namespaced module sees: same values, prefix
stripped. Neither copies values; every read goes through the sink.
"""

from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional, Sequence, Tuple

from .sink.base import ReactiveSink

if TYPE_CHECKING:
    from .store import Store


class GetterMap(Mapping[str, Any]):
    """Qualified getter type -> lazily computed value."""

    def __init__(self, sink: Optional[ReactiveSink], keys: Sequence[str]) -> None:
        self._sink = sink
        self._keys: Tuple[str, ...] = tuple(keys)

    def __getitem__(self, key: str) -> Any:
        if self._sink is None or key not in self._keys:
            raise KeyError(key)
        return self._sink.computed(key)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"GetterMap({list(self._keys)!r})"


class LocalGetters(Mapping[str, Any]):
    """Getters of one namespace, addressed by their local names."""

    def __init__(self, store: "Store", namespace: str, local_keys: Sequence[str]) -> None:
        self._store = store
        self.namespace = namespace
        self._keys: Tuple[str, ...] = tuple(local_keys)

    def __getitem__(self, key: str) -> Any:
        if key not in self._keys:
            raise KeyError(key)
        return self._store.getters[self.namespace + key]

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"LocalGetters({self.namespace!r}, {list(self._keys)!r})"


def make_local_getters(store: "Store", namespace: str) -> LocalGetters:
    """
    Return the cached local getter view for namespace.

    Built once per namespace per installation generation by scanning the
    global getter keys for the prefix.
    """
    cache = store._make_local_getters_cache
    if namespace not in cache:
        split = len(namespace)
        local_keys = [
            key[split:] for key in store.getters if key[:split] == namespace
        ]
        cache[namespace] = LocalGetters(store, namespace, local_keys)
    return cache[namespace]
