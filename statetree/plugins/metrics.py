"""
Prometheus metrics plugin.

Counts commits and action phases per type and times actions from their
"before" phase to settlement.

Usage:
    from prometheus_client import CollectorRegistry

    registry = CollectorRegistry()
    store = Store(definition, plugins=[create_metrics_plugin(registry)])
"""

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

from ..subscriptions import ActionRecord, MutationRecord

if TYPE_CHECKING:
    from ..store import Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreMetrics:
    """
    Metric handles for one registry.

    Fields:
        commits: Counter of commits (labels: type)
        actions: Counter of action phases (labels: type, phase)
        action_errors: Counter of rejected actions (labels: type)
        action_duration: Histogram of before -> settle time (labels: type)
    """
    commits: Counter
    actions: Counter
    action_errors: Counter
    action_duration: Histogram


def init_metrics(registry: CollectorRegistry, prefix: str = "statetree") -> StoreMetrics:
    """Create the metric set on registry."""
    return StoreMetrics(
        commits=Counter(
            f"{prefix}_commits_total",
            "Total number of committed mutations",
            labelnames=["type"],
            registry=registry,
        ),
        actions=Counter(
            f"{prefix}_actions_total",
            "Total number of action subscriber phases observed",
            labelnames=["type", "phase"],
            registry=registry,
        ),
        action_errors=Counter(
            f"{prefix}_action_errors_total",
            "Total number of rejected actions",
            labelnames=["type"],
            registry=registry,
        ),
        action_duration=Histogram(
            f"{prefix}_action_duration_seconds",
            "Duration of actions from dispatch to settlement in seconds",
            labelnames=["type"],
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
            registry=registry,
        ),
    )


def create_metrics_plugin(
    registry: Optional[CollectorRegistry] = None,
    prefix: str = "statetree",
    clock: Callable[[], float] = time.perf_counter,
) -> Callable[["Store"], None]:
    """
    Build a plugin recording store activity in prometheus metrics.

    Metrics are created when the factory is called, so one factory call
    must not be shared between registries.
    """
    metrics = init_metrics(registry if registry is not None else REGISTRY, prefix)

    def plugin(store: "Store") -> None:
        # per-type start stack; actions of one type settle in any order,
        # so durations are approximate when they overlap
        started: Dict[str, List[float]] = {}

        def on_mutation(mutation: MutationRecord, state: Any) -> None:
            metrics.commits.labels(type=mutation.type).inc()

        def before(action: ActionRecord, state: Any) -> None:
            metrics.actions.labels(type=action.type, phase="before").inc()
            started.setdefault(action.type, []).append(clock())

        def _observe(action: ActionRecord) -> None:
            stack = started.get(action.type)
            if stack:
                metrics.action_duration.labels(type=action.type).observe(clock() - stack.pop(0))

        def after(action: ActionRecord, state: Any) -> None:
            metrics.actions.labels(type=action.type, phase="after").inc()
            _observe(action)

        def error(action: ActionRecord, state: Any, err: BaseException) -> None:
            metrics.actions.labels(type=action.type, phase="error").inc()
            metrics.action_errors.labels(type=action.type).inc()
            _observe(action)

        store.subscribe(on_mutation)
        store.subscribe_action({"before": before, "after": after, "error": error})
        logger.info("Prometheus metrics attached to %s", store.store_id)

    return plugin
