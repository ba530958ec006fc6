"""
Namespaced accessor helpers.

Each helper turns a list or mapping of names into a dict of callables
that take the store as their first argument:

    getters = map_getters("cart/", ["total"])
    getters["total"](store)

    actions = map_actions("cart", {"buy": "checkout"})
    actions["buy"](store, payload)
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .core.errors import UnknownTypeError, report
from .core.module import Module

if TYPE_CHECKING:
    from .store import Store

logger = logging.getLogger(__name__)

NameMap = Union[Sequence[str], Mapping[str, Any]]
Mapped = Dict[str, Callable[..., Any]]


def _is_valid_map(value: Any) -> bool:
    return isinstance(value, (list, tuple, Mapping))


def normalize_map(value: Any) -> List[Tuple[str, Any]]:
    """
    [a, b] -> [(a, a), (b, b)]; {k: v} -> [(k, v)]; anything else -> [].
    """
    if not _is_valid_map(value):
        return []
    if isinstance(value, Mapping):
        return list(value.items())
    return [(key, key) for key in value]


def _normalize_namespace(
    fn: Callable[[str, Any], Mapped]
) -> Callable[..., Mapped]:
    def helper(namespace: Any, names: Optional[NameMap] = None) -> Mapped:
        if not isinstance(namespace, str):
            names = namespace
            namespace = ""
        elif namespace and not namespace.endswith("/"):
            namespace += "/"
        return fn(namespace, names)

    helper.__name__ = fn.__name__
    helper.__doc__ = fn.__doc__
    return helper


def get_module_by_namespace(store: "Store", helper: str, namespace: str) -> Optional[Module]:
    module = store._modules_namespace_map.get(namespace)
    if module is None:
        report(
            logger,
            UnknownTypeError(f"module namespace not found in {helper}(): {namespace}"),
        )
    return module


def _check_map(helper: str, names: Any) -> None:
    if not _is_valid_map(names):
        logger.error("[statetree] %s: mapper parameter must be either a list or a mapping", helper)


@_normalize_namespace
def map_state(namespace: str, states: Any) -> Mapped:
    """Map local names to state values (a key, or fn(state, getters))."""
    _check_map("map_state", states)
    res: Mapped = {}
    for key, val in normalize_map(states):

        def mapped_state(store: "Store", val: Any = val) -> Any:
            state = store.state
            getters: Any = store.getters
            if namespace:
                module = get_module_by_namespace(store, "map_state", namespace)
                if module is None or module.context is None:
                    return None
                state = module.context.state
                getters = module.context.getters
            if callable(val):
                return val(state, getters)
            return state.get(val)

        res[key] = mapped_state
    return res


@_normalize_namespace
def map_getters(namespace: str, getters: Any) -> Mapped:
    """Map local names to (namespaced) getter values."""
    _check_map("map_getters", getters)
    res: Mapped = {}
    for key, val in normalize_map(getters):
        qualified = namespace + val

        def mapped_getter(store: "Store", qualified: str = qualified) -> Any:
            if namespace and get_module_by_namespace(store, "map_getters", namespace) is None:
                return None
            if qualified not in store.getters:
                report(logger, UnknownTypeError(f"unknown getter: {qualified}"))
                return None
            return store.getters[qualified]

        res[key] = mapped_getter
    return res


@_normalize_namespace
def map_mutations(namespace: str, mutations: Any) -> Mapped:
    """Map local names to commits (a type, or fn(commit, *args))."""
    _check_map("map_mutations", mutations)
    res: Mapped = {}
    for key, val in normalize_map(mutations):

        def mapped_mutation(store: "Store", *args: Any, val: Any = val) -> Any:
            commit = store.commit
            if namespace:
                module = get_module_by_namespace(store, "map_mutations", namespace)
                if module is None or module.context is None:
                    return None
                commit = module.context.commit
            if callable(val):
                return val(commit, *args)
            return commit(val, *args)

        res[key] = mapped_mutation
    return res


@_normalize_namespace
def map_actions(namespace: str, actions: Any) -> Mapped:
    """Map local names to dispatches (a type, or fn(dispatch, *args))."""
    _check_map("map_actions", actions)
    res: Mapped = {}
    for key, val in normalize_map(actions):

        def mapped_action(store: "Store", *args: Any, val: Any = val) -> Any:
            dispatch = store.dispatch
            if namespace:
                module = get_module_by_namespace(store, "map_actions", namespace)
                if module is None or module.context is None:
                    return None
                dispatch = module.context.dispatch
            if callable(val):
                return val(dispatch, *args)
            return dispatch(val, *args)

        res[key] = mapped_action
    return res


def create_namespaced_helpers(namespace: str) -> Dict[str, Callable[..., Mapped]]:
    """Bind every helper to namespace."""
    return {
        "map_state": lambda names: map_state(namespace, names),
        "map_getters": lambda names: map_getters(namespace, names),
        "map_mutations": lambda names: map_mutations(namespace, names),
        "map_actions": lambda names: map_actions(namespace, names),
    }
