"""
Tests for the store surface: commit, dispatch, subscribers, watch,
strict mode and state replacement.
"""

import asyncio
import logging

import pytest

from statetree import (
    ActionRecord,
    InvariantError,
    MutationRecord,
    Store,
    StrictModeViolation,
    ValidationError,
)


def inc(state):
    state["count"] += 1


def add(state, n):
    state["count"] += n


def counter(**options):
    return Store(
        {
            "state": {"count": 0},
            "mutations": {"inc": inc, "add": add},
            "getters": {"double": lambda state: state["count"] * 2},
        },
        **options,
    )


def test_commit_runs_mutation_and_updates_getters():
    """Committed mutations change state and invalidate cached getters."""
    store = counter()

    store.commit("inc")
    store.commit("add", 5)

    assert store.state["count"] == 6
    assert store.getters["double"] == 12


def test_commit_object_style_passes_whole_mapping():
    """Object-style commit hands the whole mapping to the handler."""
    store = Store(
        {
            "state": {"count": 0},
            "mutations": {"add": lambda state, payload: add(state, payload["amount"])},
        }
    )

    store.commit({"type": "add", "amount": 3})

    assert store.state["count"] == 3


def test_commit_requires_string_type():
    """A non-string type is a fatal assertion."""
    store = counter()

    with pytest.raises(InvariantError, match="expects string as the type"):
        store.commit(42)


def test_commit_unknown_type_is_reported(caplog):
    """Unknown mutation types are logged and skip subscribers."""
    store = counter()
    seen = []
    store.subscribe(lambda mutation, state: seen.append(mutation))

    store.commit("nope")

    assert "unknown mutation type: nope" in caplog.text
    assert seen == []
    assert store.state["count"] == 0


def test_commit_runs_every_handler_for_shared_type():
    """Every module registering a type runs on commit."""
    store = Store(
        {
            "state": {"count": 0},
            "mutations": {"inc": inc},
            "modules": {"child": {"state": {"count": 10}, "mutations": {"inc": inc}}},
        }
    )

    store.commit("inc")

    assert store.state["count"] == 1
    assert store.state["child"]["count"] == 11


def test_state_assignment_is_rejected():
    """Root state can only be swapped through replace_state."""
    store = counter()

    with pytest.raises(InvariantError, match="replace_state"):
        store.state = {}


def test_mutation_subscribers_receive_record_and_state():
    """Subscribers see the mutation record and post-commit state."""
    store = counter()
    seen = []
    store.subscribe(lambda mutation, state: seen.append((mutation, state["count"])))

    store.commit("add", 2)

    assert seen == [(MutationRecord(type="add", payload=2), 2)]


def test_subscribers_run_in_order_with_prepend():
    """Subscribers run in registration order; prepend goes first."""
    store = counter()
    order = []
    store.subscribe(lambda m, s: order.append("first"))
    store.subscribe(lambda m, s: order.append("second"))
    store.subscribe(lambda m, s: order.append("prepended"), prepend=True)

    store.commit("inc")

    assert order == ["prepended", "first", "second"]


def test_subscribe_same_callable_twice_is_deduplicated():
    """Subscribing the same callable twice registers it once."""
    store = counter()
    calls = []

    def sub(mutation, state):
        calls.append(mutation.type)

    unsubscribe = store.subscribe(sub)
    store.subscribe(sub)
    store.commit("inc")
    assert calls == ["inc"]

    unsubscribe()
    unsubscribe()
    store.commit("inc")
    assert calls == ["inc"]


def test_unsubscribe_during_notification_does_not_skip_others():
    """Unsubscribing mid-notification does not skip later subscribers."""
    store = counter()
    calls = []

    def first(mutation, state):
        calls.append("first")
        unsubscribe_first()

    unsubscribe_first = store.subscribe(first)
    store.subscribe(lambda m, s: calls.append("second"))

    store.commit("inc")
    store.commit("inc")

    assert calls == ["first", "second", "second"]


def test_failing_subscriber_does_not_stop_others(caplog):
    """A raising subscriber is logged and the rest still run."""
    store = counter()
    calls = []

    def broken(mutation, state):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda m, s: calls.append(m.type))

    store.commit("inc")

    assert calls == ["inc"]
    assert store.state["count"] == 1
    assert "error in mutation subscriber for inc" in caplog.text


def test_dispatch_single_handler_resolves_to_its_result():
    """A single action handler resolves to its own return value."""
    store = Store(
        {
            "state": {"count": 0},
            "mutations": {"inc": inc},
            "actions": {"inc": lambda ctx, payload: (ctx.commit("inc"), "done")[1]},
        }
    )

    async def main():
        return await store.dispatch("inc")

    assert asyncio.run(main()) == "done"
    assert store.state["count"] == 1


def test_dispatch_async_handler_and_action_context():
    """Coroutine handlers get a full action context."""
    seen = {}

    async def load(ctx, payload):
        await asyncio.sleep(0)
        seen["state"] = ctx.state
        seen["root_state"] = ctx.root_state
        seen["double"] = ctx.getters["double"]
        ctx.commit("add", payload)
        return ctx.state["count"]

    store = Store(
        {
            "state": {"count": 1},
            "mutations": {"add": add},
            "actions": {"load": load},
            "getters": {"double": lambda state: state["count"] * 2},
        }
    )

    async def main():
        return await store.dispatch("load", 4)

    assert asyncio.run(main()) == 5
    assert seen["state"] is store.state
    assert seen["root_state"] is store.state
    assert seen["double"] == 2


def test_dispatch_unknown_type_returns_none(caplog):
    """Unknown action types are logged and return None."""
    store = counter()

    assert store.dispatch("nope") is None
    assert "unknown action type: nope" in caplog.text


def test_dispatch_without_running_loop_fails_before_subscribers():
    """Dispatch outside an event loop fails before any subscriber runs."""
    store = Store({"actions": {"go": lambda ctx: None}})
    before = []
    store.subscribe_action(lambda action, state: before.append(action))

    with pytest.raises(RuntimeError):
        store.dispatch("go")

    assert before == []


def test_sync_handler_error_becomes_rejected_task():
    """A sync handler exception rejects the task and reaches error subscribers."""
    def broken(ctx):
        raise ValueError("bad action")

    store = Store({"actions": {"broken": broken}})
    errors = []
    store.subscribe_action({"error": lambda action, state, err: errors.append(err)})

    async def main():
        task = store.dispatch("broken")
        with pytest.raises(ValueError, match="bad action"):
            await task

    asyncio.run(main())

    assert len(errors) == 1
    assert isinstance(errors[0], ValueError)


def test_action_subscriber_phases():
    """before runs at dispatch time, after runs on settlement."""
    async def work(ctx, payload):
        await asyncio.sleep(0)
        return payload * 2

    store = Store({"actions": {"work": work}})
    events = []
    store.subscribe_action(lambda action, state: events.append(("bare", action.type)))
    store.subscribe_action(
        {
            "before": lambda action, state: events.append(("before", action.payload)),
            "after": lambda action, state: events.append(("after", action.payload)),
        }
    )

    async def main():
        task = store.dispatch("work", 21)
        # before-subscribers have run by the time dispatch returns
        assert events == [("bare", "work"), ("before", 21)]
        return await task

    assert asyncio.run(main()) == 42
    assert events == [("bare", "work"), ("before", 21), ("after", 21)]


def test_action_subscriber_dedup_by_passed_object():
    """Action subscribers are deduplicated by the object passed in."""
    store = Store({"actions": {"go": lambda ctx: None}})
    calls = []
    phases = {"after": lambda action, state: calls.append(action)}

    store.subscribe_action(phases)
    store.subscribe_action(phases)

    async def main():
        await store.dispatch("go")

    asyncio.run(main())

    assert calls == [ActionRecord(type="go")]


def test_failing_action_subscriber_is_isolated(caplog):
    """A raising action subscriber does not affect the dispatch."""
    store = Store({"actions": {"go": lambda ctx: "ok"}})
    calls = []

    def broken(action, state):
        raise RuntimeError("subscriber boom")

    store.subscribe_action(broken)
    store.subscribe_action(lambda action, state: calls.append(action.type))

    async def main():
        return await store.dispatch("go")

    assert asyncio.run(main()) == "ok"
    assert calls == ["go"]
    assert "error in before action subscribers" in caplog.text


def test_fan_out_settles_after_slowest_then_raises_first_error():
    """Fan-out waits for every handler before failing."""
    finished = []

    async def fast_fail(ctx):
        raise ValueError("fast")

    async def slow(ctx):
        await asyncio.sleep(0.02)
        finished.append("slow")
        return "slow"

    store = Store(
        {
            "actions": {"go": fast_fail},
            "modules": {"child": {"actions": {"go": slow}}},
        }
    )
    errors = []
    store.subscribe_action({"error": lambda action, state, err: errors.append(str(err))})

    async def main():
        with pytest.raises(ValueError, match="fast"):
            await store.dispatch("go")

    asyncio.run(main())

    assert finished == ["slow"]
    assert errors == ["fast"]


def test_fan_out_success_resolves_to_list_in_registration_order():
    """Fan-out results are listed in registration order."""
    async def late(ctx):
        await asyncio.sleep(0.01)
        return "root"

    store = Store(
        {
            "actions": {"go": late},
            "modules": {"child": {"actions": {"go": lambda ctx: "child"}}},
        }
    )

    async def main():
        return await store.dispatch("go")

    assert asyncio.run(main()) == ["root", "child"]


def test_watch_fires_after_commit():
    """Watchers fire only when the selected value changes."""
    store = counter()
    seen = []
    store.watch(lambda state: state["count"], lambda new, old: seen.append((new, old)))

    store.commit("inc")
    store.commit("add", 0)

    assert seen == [(1, 0)]


def test_watch_can_read_getters():
    """Watch selectors may read getters; unwatch stops callbacks."""
    store = counter()
    seen = []
    unwatch = store.watch(lambda state, getters: getters["double"], lambda new: seen.append(new))

    store.commit("inc")
    unwatch()
    store.commit("inc")

    assert seen == [2]


def test_watch_requires_function():
    """Watching a non-callable is a fatal assertion."""
    store = counter()

    with pytest.raises(InvariantError, match="only accepts a function"):
        store.watch("count", lambda new, old: None)


def test_replace_state_swaps_root():
    """replace_state swaps the root for getters, watchers and handlers."""
    store = counter()
    seen = []
    store.watch(lambda state: state["count"], lambda new, old: seen.append(new))

    store.replace_state({"count": 7})

    assert store.state == {"count": 7}
    assert store.getters["double"] == 14
    assert seen == [7]
    store.commit("inc")
    assert store.state["count"] == 8


def test_strict_mode_allows_commits():
    """Strict mode accepts changes made inside mutations."""
    store = counter(strict=True)

    store.commit("inc")

    assert store.state["count"] == 1


def test_strict_mode_rejects_mutation_outside_commit():
    """Strict mode rejects writes made outside a commit."""
    store = counter(strict=True)

    store.state["count"] = 99
    with pytest.raises(StrictModeViolation, match="do not mutate store state outside mutation handlers"):
        store.commit("inc")


def test_strict_mode_off_tolerates_direct_writes():
    """Without strict mode, direct writes go unnoticed."""
    store = counter(strict=False)

    store.state["count"] = 99
    store.commit("inc")

    assert store.state["count"] == 100


def test_validation_errors_raise_at_construction():
    """Malformed handlers fail store construction."""
    with pytest.raises(ValidationError, match='getters should be function but "getters.g" is 1.'):
        Store({"getters": {"g": 1}})


def test_production_mode_skips_validation():
    """Production mode does not validate definitions."""
    store = Store({"state": {"count": 0}, "mutations": {"inc": inc, "bad": "nope"}}, production=True)

    store.commit("inc")

    assert store.state["count"] == 1


def test_plugins_run_once_at_construction():
    """Each plugin is called once with the store."""
    seen = []

    store = counter(plugins=[lambda s: seen.append(s)])

    assert seen == [store]


def test_custom_sink_factory_must_return_reactive_sink():
    """The sink factory must produce a ReactiveSink."""
    with pytest.raises(InvariantError, match="must return a ReactiveSink"):
        Store({}, sink_factory=lambda state: object())


def test_store_logs_carry_store_id(caplog):
    """Store log records carry the store's id."""
    caplog.set_level(logging.INFO, logger="statetree.store")
    store = counter()

    store.register_module("extra", {"state": {}})

    records = [r for r in caplog.records if r.name == "statetree.store"]
    assert records
    assert all(r.store_id == store.store_id for r in records)


def test_failing_watcher_does_not_interrupt_commit(caplog):
    """A raising store.watch callback still lets every mutation subscriber run."""
    store = counter()
    seen = []

    def broken(new, old):
        raise RuntimeError("watcher failed")

    store.watch(lambda state: state["count"], broken)
    store.watch(lambda state: state["count"], broken, sync=True)
    store.subscribe(lambda mutation, state: seen.append((mutation.type, state["count"])))

    store.commit("add", 1)

    assert store.state["count"] == 1
    assert seen == [("add", 1)]
    assert "Watcher callback failed" in caplog.text
