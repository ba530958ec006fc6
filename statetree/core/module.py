"""
Module: one node of the module tree.

A node owns its state slot and its children. It holds the resolved
handler tables of its raw definition; the raw mapping itself is kept for
introspection and never mutated.
"""

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, Mapping, Optional, Tuple

from .handlers import Handler, resolve_table

if TYPE_CHECKING:
    from ..installer import LocalContext


RawModule = Mapping[str, Any]


def initial_state(raw: RawModule) -> Dict[str, Any]:
    """Build a fresh state object from the raw "state" value or initializer."""
    raw_state = raw.get("state")
    if callable(raw_state):
        raw_state = raw_state()
    return raw_state if raw_state is not None else {}


class Module:
    """
    Module tree node.

    Attributes:
        raw: Raw definition this node was created from
        runtime: True if registered after construction (may be unregistered)
        state: Local state object, created once
        context: LocalContext assigned by the installer
    """

    def __init__(self, raw: RawModule, runtime: bool) -> None:
        self.raw = raw
        self.runtime = runtime
        self.state = initial_state(raw)
        self.context: Optional["LocalContext"] = None
        self._children: Dict[str, "Module"] = {}
        self._namespaced = bool(raw.get("namespaced", False))
        self._mutations = resolve_table(raw.get("mutations"))
        self._actions = resolve_table(raw.get("actions"))
        self._getters = resolve_table(raw.get("getters"))

    @property
    def namespaced(self) -> bool:
        return self._namespaced

    def get_child(self, key: str) -> Optional["Module"]:
        return self._children.get(key)

    def add_child(self, key: str, module: "Module") -> None:
        self._children[key] = module

    def remove_child(self, key: str) -> None:
        self._children.pop(key, None)

    def has_child(self, key: str) -> bool:
        return key in self._children

    def children(self) -> Iterator[Tuple[str, "Module"]]:
        return iter(list(self._children.items()))

    def for_each_mutation(self, fn: Callable[[Handler, str], None]) -> None:
        for key, handler in self._mutations.items():
            fn(handler, key)

    def for_each_action(self, fn: Callable[[Handler, str], None]) -> None:
        for key, handler in self._actions.items():
            fn(handler, key)

    def for_each_getter(self, fn: Callable[[Handler, str], None]) -> None:
        for key, handler in self._getters.items():
            fn(handler, key)

    def for_each_child(self, fn: Callable[["Module", str], None]) -> None:
        for key, child in self.children():
            fn(child, key)

    @property
    def mutation_keys(self) -> Tuple[str, ...]:
        return tuple(self._mutations)

    @property
    def action_keys(self) -> Tuple[str, ...]:
        return tuple(self._actions)

    @property
    def getter_keys(self) -> Tuple[str, ...]:
        return tuple(self._getters)

    def update(self, raw: RawModule) -> None:
        """
        Hot-replace handler tables from a new raw definition.

        namespaced is always taken from the new definition; mutations,
        actions and getters only when present. State is never touched.
        """
        self._namespaced = bool(raw.get("namespaced", False))
        if raw.get("actions") is not None:
            self._actions = resolve_table(raw["actions"])
        if raw.get("mutations") is not None:
            self._mutations = resolve_table(raw["mutations"])
        if raw.get("getters") is not None:
            self._getters = resolve_table(raw["getters"])
