"""
Installer: projects the module tree into the store's global tables.

install_module() is a single top-down pass. For each node it nests the
node's state under its parent's state, records namespaced nodes, builds
the node's LocalContext and registers wrapped mutations, actions and
getters under their qualified types. Children are visited last, so their
state always lands in an already attached parent slot.
"""

import asyncio
import functools
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from .core.errors import (
    DuplicateGetterError,
    DuplicateNamespaceError,
    StrictModeViolation,
    UnknownTypeError,
    assert_that,
    report,
)
from .core.handlers import Handler
from .core.module import Module
from .core.tasks import to_future
from .getters import GetterMap, make_local_getters
from .sink.base import ReactiveSink

if TYPE_CHECKING:
    from .store import Store


def get_nested_state(state: Dict[str, Any], path: Sequence[str]) -> Any:
    for key in path:
        state = state[key]
    return state


def unify_object_style(
    type_: Any, payload: Any = None, options: Any = None
) -> Tuple[str, Any, Any]:
    """
    Normalize commit/dispatch arguments.

    commit({"type": "inc", "n": 1}) is treated as commit("inc", {"type": "inc", "n": 1}).
    """
    if isinstance(type_, Mapping) and type_.get("type"):
        options = payload
        payload = type_
        type_ = type_["type"]

    assert_that(
        isinstance(type_, str),
        f"expects string as the type, but found {type(type_).__name__}.",
    )
    return type_, payload, options


def _wants_root(options: Any, root: bool) -> bool:
    return root or bool(isinstance(options, Mapping) and options.get("root"))


class LocalContext:
    """
    A module's namespace-bound view of the store.

    Unnamespaced modules share the store's dispatch, commit and getters.
    state is always resolved by path from the current root state, since
    the root may be replaced between reads.
    """

    def __init__(self, store: "Store", namespace: str, path: Sequence[str]) -> None:
        self._store = store
        self.namespace = namespace
        self.path: Tuple[str, ...] = tuple(path)

        self.dispatch: Callable[..., Any]
        self.commit: Callable[..., Any]
        if namespace:
            self.dispatch = self._local_dispatch
            self.commit = self._local_commit
        else:
            self.dispatch = store.dispatch
            self.commit = store.commit

    @property
    def state(self) -> Any:
        return get_nested_state(self._store.state, self.path)

    @property
    def getters(self) -> Mapping[str, Any]:
        if not self.namespace:
            return self._store.getters
        return make_local_getters(self._store, self.namespace)

    def _local_dispatch(
        self, type_: Any, payload: Any = None, options: Any = None, *, root: bool = False
    ) -> Optional["asyncio.Future[Any]"]:
        local_type, payload, options = unify_object_style(type_, payload, options)
        qualified = local_type
        if not _wants_root(options, root):
            qualified = self.namespace + local_type
            if qualified not in self._store._actions:
                report(
                    self._store._logger,
                    UnknownTypeError(
                        f"unknown local action type: {local_type}, global type: {qualified}"
                    ),
                )
                return None
        return self._store.dispatch(qualified, payload)

    def _local_commit(
        self, type_: Any, payload: Any = None, options: Any = None, *, root: bool = False
    ) -> None:
        local_type, payload, options = unify_object_style(type_, payload, options)
        qualified = local_type
        if not _wants_root(options, root):
            qualified = self.namespace + local_type
            if qualified not in self._store._mutations:
                report(
                    self._store._logger,
                    UnknownTypeError(
                        f"unknown local mutation type: {local_type}, global type: {qualified}"
                    ),
                )
                return
        self._store.commit(qualified, payload, options)


@dataclass(frozen=True)
class ActionContext:
    """
    First argument of every action handler.

    Fields:
        dispatch: Namespace-bound dispatch
        commit: Namespace-bound commit
        getters: Local getters
        state: Local state
        root_getters: Store-wide getters
        root_state: Root state
    """
    dispatch: Callable[..., Any]
    commit: Callable[..., Any]
    getters: Mapping[str, Any]
    state: Any
    root_getters: Mapping[str, Any]
    root_state: Any


def register_mutation(store: "Store", type_: str, handler: Handler, local: LocalContext) -> None:
    entry = store._mutations.setdefault(type_, [])

    def wrapped_mutation_handler(payload: Any = None) -> None:
        handler(local.state, payload)

    entry.append(wrapped_mutation_handler)


async def _forward_error(hook: Any, fut: "asyncio.Future[Any]") -> Any:
    try:
        return await fut
    except Exception as err:
        hook.emit("statetree:error", err)
        raise


def register_action(store: "Store", type_: str, handler: Handler, local: LocalContext) -> None:
    entry = store._actions.setdefault(type_, [])

    def make_context() -> ActionContext:
        return ActionContext(
            dispatch=local.dispatch,
            commit=local.commit,
            getters=local.getters,
            state=local.state,
            root_getters=store.getters,
            root_state=store.state,
        )

    def wrapped_action_handler(payload: Any = None) -> "asyncio.Future[Any]":
        fut = to_future(lambda: handler(make_context(), payload))
        hook = store._devtool_hook
        if hook is None:
            return fut
        return asyncio.ensure_future(_forward_error(hook, fut))

    entry.append(wrapped_action_handler)


def register_getter(store: "Store", type_: str, getter: Handler, local: LocalContext) -> None:
    if type_ in store._wrapped_getters:
        report(store._logger, DuplicateGetterError(f"duplicate getter key: {type_}"))
        return

    def wrapped_getter(store: "Store") -> Any:
        return getter(local.state, local.getters, store.state, store.getters)

    store._wrapped_getters[type_] = wrapped_getter


def install_module(
    store: "Store",
    root_state: Dict[str, Any],
    path: Sequence[str],
    module: Module,
    hot: bool = False,
    preserve_state: bool = False,
) -> None:
    """
    Install module (and its subtree) into the store.

    Args:
        store: Target store
        root_state: Root state object the subtree's state nests into
        path: Path of module
        module: Node to install
        hot: Skip state nesting entirely (re-install over existing state)
        preserve_state: Keep a slot that already exists in the parent state
    """
    path = list(path)
    is_root = not path
    namespace = store._modules.get_namespace(path)

    if not is_root and not hot:
        parent_state = get_nested_state(root_state, path[:-1])
        module_name = path[-1]
        if not (preserve_state and module_name in parent_state):
            with store._commit_scope():
                if module_name in parent_state:
                    store._logger.warning(
                        '[statetree] state field "%s" was overridden by a module '
                        'with the same name at "%s"',
                        module_name,
                        ".".join(path),
                    )
                store._set_state(parent_state, module_name, module.state)

    if module.namespaced:
        if namespace in store._modules_namespace_map:
            report(
                store._logger,
                DuplicateNamespaceError(
                    f"duplicate namespace {namespace} for the namespaced module {'/'.join(path)}"
                ),
            )
        store._modules_namespace_map[namespace] = module

    local = module.context = LocalContext(store, namespace, path)

    module.for_each_mutation(
        lambda mutation, key: register_mutation(store, namespace + key, mutation, local)
    )

    module.for_each_action(
        lambda action, key: register_action(
            store, key if action.root else namespace + key, action, local
        )
    )

    module.for_each_getter(
        lambda getter, key: register_getter(store, namespace + key, getter, local)
    )

    module.for_each_child(
        lambda child, key: install_module(
            store, root_state, path + [key], child, hot=hot, preserve_state=preserve_state
        )
    )


def reset_store(store: "Store", hot: bool = False) -> None:
    """Clear every global table and re-install the whole tree over current state."""
    store._actions = {}
    store._mutations = {}
    store._wrapped_getters = {}
    store._modules_namespace_map = {}
    state = store.state
    install_module(store, state, [], store._modules.root, hot=True)
    reset_store_sink(store, state, hot=hot)


def reset_store_sink(store: "Store", state: Dict[str, Any], hot: bool = False) -> None:
    """
    Replace the store's sink with a fresh one over state.

    Getters are re-defined as computed values on the new sink and the
    local getter cache starts a new generation. The old sink is torn down.
    """
    old_sink = store._sink

    store._make_local_getters_cache = {}
    store._generation += 1

    sink = store._sink_factory(state)
    assert_that(
        isinstance(sink, ReactiveSink),
        f"sink_factory must return a ReactiveSink, got {type(sink).__name__}.",
    )
    for key, fn in store._wrapped_getters.items():
        sink.define_computed(key, functools.partial(fn, store))

    store._getters = GetterMap(sink, list(store._wrapped_getters))
    store._sink = sink

    if store.strict:
        enable_strict_mode(store)

    if old_sink is not None:
        old_sink.teardown()
        if hot:
            # re-run watchers so those reading getters see the new definitions
            with store._commit_scope():
                pass

    store._logger.debug(
        "Installed generation %d with %d getters",
        store._generation,
        len(store._wrapped_getters),
    )


def enable_strict_mode(store: "Store") -> None:
    sink = store._sink

    def assert_committing(new: Any, old: Any) -> None:
        if not store._committing:
            raise StrictModeViolation(
                "[statetree] do not mutate store state outside mutation handlers."
            )

    sink.watch(lambda: sink.state, assert_committing, deep=True, sync=True)

