"""
Store: public surface of the state tree.

Construction builds the ModuleCollection from the root definition, runs
the installer once, builds the sink, then applies plugins. Mutations run
synchronously inside a committing scope; actions run on the running
asyncio loop and settle after their subscribers have been notified.
"""

import asyncio
from contextlib import contextmanager
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

from .config import StoreSettings
from .core.collection import ModuleCollection
from .core.errors import SubscriberError, UnknownTypeError, assert_that, report
from .core.handlers import Handler
from .core.module import Module, RawModule
from .core.tasks import settle_all
from .getters import GetterMap
from .installer import (
    get_nested_state,
    install_module,
    reset_store,
    reset_store_sink,
    unify_object_style,
)
from .logging_config import get_logger
from .plugins.devtool import devtool_plugin, resolve_devtool_hook
from .sink.base import ReactiveSink, Unwatch
from .sink.snapshot import SnapshotSink
from .subscriptions import (
    ActionRecord,
    MutationRecord,
    Subscriber,
    Unsubscribe,
    generic_subscribe,
    normalize_action_subscriber,
    normalize_mutation_subscriber,
)

Plugin = Callable[["Store"], None]
SinkFactory = Callable[[Optional[Dict[str, Any]]], ReactiveSink]
ModulePath = Union[str, Sequence[str]]


def _normalize_path(path: ModulePath) -> List[str]:
    if isinstance(path, str):
        return [path]
    assert_that(
        isinstance(path, (list, tuple)),
        "module path must be a string or a list.",
    )
    return list(path)


class Store:
    """
    Hierarchical, namespaced state container.

    Usage:
        store = Store({
            "state": {"count": 0},
            "mutations": {"inc": lambda state, n: state.update(count=state["count"] + n)},
            "getters": {"double": lambda state: state["count"] * 2},
        })
        store.commit("inc", 2)
        store.getters["double"]  # 4
    """

    def __init__(
        self,
        definition: Optional[RawModule] = None,
        *,
        plugins: Iterable[Plugin] = (),
        strict: Optional[bool] = None,
        devtools: Any = None,
        production: Optional[bool] = None,
        settings: Optional[StoreSettings] = None,
        sink_factory: SinkFactory = SnapshotSink,
    ) -> None:
        assert_that(callable(sink_factory), "sink_factory must be callable.")
        base = settings if settings is not None else StoreSettings.from_env()
        resolved = base.override(
            strict=strict,
            production=production,
            devtools=devtools if isinstance(devtools, bool) else None,
        )

        self.strict = resolved.strict
        self.production = resolved.production
        self.store_id = f"store-{id(self):x}"
        self._logger = get_logger(__name__, store_id=self.store_id)

        self._committing = False
        self._actions: Dict[str, List[Callable[[Any], "asyncio.Future[Any]"]]] = {}
        self._action_subscribers: List[Subscriber] = []
        self._mutations: Dict[str, List[Callable[[Any], None]]] = {}
        self._wrapped_getters: Dict[str, Callable[["Store"], Any]] = {}
        self._modules = ModuleCollection(definition or {}, validate=not self.production)
        self._modules_namespace_map: Dict[str, Module] = {}
        self._subscribers: List[Subscriber] = []
        self._make_local_getters_cache: Dict[str, Any] = {}
        self._generation = 0
        self._devtool_hook: Any = None

        self._sink_factory = sink_factory
        self._sink: Optional[ReactiveSink] = None
        self._watcher_sink = sink_factory({})
        self._getters = GetterMap(None, ())

        state = self._modules.root.state
        install_module(self, state, [], self._modules.root)
        reset_store_sink(self, state)

        for plugin in plugins:
            plugin(self)

        hook = resolve_devtool_hook(devtools if devtools is not None else resolved.devtools)
        if hook is not None:
            devtool_plugin(self, hook)

    @property
    def state(self) -> Dict[str, Any]:
        if self._sink is None:
            return self._modules.root.state
        return self._sink.state

    @state.setter
    def state(self, value: Any) -> None:
        assert_that(False, "use store.replace_state() to explicit replace store state.")

    @property
    def getters(self) -> GetterMap:
        return self._getters

    def commit(
        self, type_: Any, payload: Any = None, options: Any = None, *, root: bool = False
    ) -> None:
        """
        Run every mutation handler registered for type_, then notify subscribers.

        root is accepted for parity with namespaced local contexts; at the
        store level types are already global.
        """
        type_, payload, options = unify_object_style(type_, payload, options)

        mutation = MutationRecord(type=type_, payload=payload)
        entry = self._mutations.get(type_)
        if not entry:
            report(self._logger, UnknownTypeError(f"unknown mutation type: {type_}"))
            return

        with self._commit_scope():
            for handler in entry:
                handler(payload)

        for sub in list(self._subscribers):
            fn = sub.get("mutation")
            if fn is None:
                continue
            try:
                fn(mutation, self.state)
            except Exception as exc:
                report(
                    self._logger,
                    SubscriberError(f"error in mutation subscriber for {type_}: {exc!r}"),
                    cause=exc,
                )

    def dispatch(
        self, type_: Any, payload: Any = None, options: Any = None, *, root: bool = False
    ) -> Optional["asyncio.Task[Any]"]:
        """
        Run every action handler registered for type_.

        Returns:
            Task resolving to the handler result (a list of results when
            several handlers share the type), or None for an unknown type

        Raises:
            RuntimeError: If called without a running event loop
        """
        type_, payload, _ = unify_object_style(type_, payload)

        action = ActionRecord(type=type_, payload=payload)
        entry = self._actions.get(type_)
        if not entry:
            report(self._logger, UnknownTypeError(f"unknown action type: {type_}"))
            return None

        # fail before any subscriber or handler runs
        asyncio.get_running_loop()
        self._notify_action_subscribers("before", action)

        if len(entry) > 1:
            result = settle_all([handler(payload) for handler in entry])
        else:
            result = entry[0](payload)

        return asyncio.ensure_future(self._settle(action, result))

    async def _settle(self, action: ActionRecord, result: Any) -> Any:
        try:
            res = await result
        except Exception as err:
            self._notify_action_subscribers("error", action, err)
            raise
        self._notify_action_subscribers("after", action)
        return res

    def _notify_action_subscribers(
        self, phase: str, action: ActionRecord, error: Optional[BaseException] = None
    ) -> None:
        for sub in list(self._action_subscribers):
            fn = sub.get(phase)
            if fn is None:
                continue
            try:
                if phase == "error":
                    fn(action, self.state, error)
                else:
                    fn(action, self.state)
            except Exception as exc:
                report(
                    self._logger,
                    SubscriberError(f"error in {phase} action subscribers: {exc!r}"),
                    cause=exc,
                )

    def subscribe(self, fn: Callable[..., Any], prepend: bool = False) -> Unsubscribe:
        return generic_subscribe(normalize_mutation_subscriber(fn), self._subscribers, prepend)

    def subscribe_action(
        self,
        fn: Union[Callable[..., Any], Mapping[str, Callable[..., Any]]],
        prepend: bool = False,
    ) -> Unsubscribe:
        return generic_subscribe(
            normalize_action_subscriber(fn), self._action_subscribers, prepend
        )

    def watch(
        self,
        getter: Callable[..., Any],
        callback: Callable[..., Any],
        deep: bool = False,
        sync: bool = False,
        immediate: bool = False,
    ) -> Unwatch:
        """
        Call callback(new, old) when getter(state, getters) changes.

        Watchers survive re-installs (module registration, hot update).
        """
        assert_that(callable(getter), "store.watch only accepts a function.")
        selector = Handler.direct(getter)
        return self._watcher_sink.watch(
            lambda: selector(self.state, self.getters),
            Handler.direct(callback),
            deep=deep,
            sync=sync,
            immediate=immediate,
        )

    def replace_state(self, state: Dict[str, Any]) -> None:
        with self._commit_scope():
            self._sink.state = state

    def register_module(
        self, path: ModulePath, definition: RawModule, preserve_state: bool = False
    ) -> None:
        """
        Register a module at runtime.

        Args:
            path: Module path (a string is a top-level key)
            definition: Raw module definition
            preserve_state: Keep state already present at the module's slot
        """
        path = _normalize_path(path)
        assert_that(len(path) > 0, "cannot register the root module by using register_module.")

        self._modules.register(path, definition)
        install_module(
            self,
            self.state,
            path,
            self._modules.get(path),
            preserve_state=preserve_state,
        )
        reset_store_sink(self, self.state)
        self._logger.info("Registered module %s", "/".join(path))

    def unregister_module(self, path: ModulePath) -> None:
        """
        Remove a module registered at runtime.

        Modules present at construction stay in place.
        """
        path = _normalize_path(path)
        assert_that(len(path) > 0, "cannot unregister the root module.")

        if not self._modules.unregister(path):
            return

        with self._commit_scope():
            parent_state = get_nested_state(self.state, path[:-1])
            self._sink.delete(parent_state, path[-1])
        reset_store(self)
        self._logger.info("Unregistered module %s", "/".join(path))

    def has_module(self, path: ModulePath) -> bool:
        return self._modules.is_registered(_normalize_path(path))

    def hot_update(self, definition: RawModule) -> None:
        """Swap handlers and getters in place; state is left untouched."""
        if self._modules.update(definition):
            reset_store(self, hot=True)
            self._logger.info("Hot update applied")

    @contextmanager
    def _commit_scope(self) -> Iterator[None]:
        # anything seen here changed outside a commit
        self._notify(sync=True)
        committing = self._committing
        self._committing = True
        try:
            yield
        finally:
            try:
                self._notify(sync=True)
            finally:
                self._committing = committing
        self._notify(sync=False)

    def _notify(self, sync: bool) -> None:
        for sink in (self._sink, self._watcher_sink):
            if sink is not None:
                sink.notify(sync=sync)

    def _set_state(self, obj: Dict[str, Any], key: str, value: Any) -> None:
        if self._sink is None:
            obj[key] = value
        else:
            self._sink.set(obj, key, value)
