"""
statetree

Hierarchical, namespaced state container: a tree of modules, each owning
a state slot, synchronous mutations, asynchronous actions and derived
getters, wired into one store.
"""

__version__ = "0.1.0"

from .store import Store
from .config import StoreSettings
from .installer import ActionContext, LocalContext
from .subscriptions import ActionRecord, MutationRecord
from .helpers import (
    create_namespaced_helpers,
    map_actions,
    map_getters,
    map_mutations,
    map_state,
)
from .sink import ReactiveSink, SnapshotSink
from .core.errors import (
    StateTreeError,
    InvariantError,
    ValidationError,
    UnknownTypeError,
    UnknownModuleError,
    DuplicateNamespaceError,
    DuplicateGetterError,
    SubscriberError,
    StrictModeViolation,
    HotUpdateMismatch,
)

__all__ = [
    "Store",
    "StoreSettings",
    "ActionContext",
    "LocalContext",
    "ActionRecord",
    "MutationRecord",
    "create_namespaced_helpers",
    "map_actions",
    "map_getters",
    "map_mutations",
    "map_state",
    "ReactiveSink",
    "SnapshotSink",
    "StateTreeError",
    "InvariantError",
    "ValidationError",
    "UnknownTypeError",
    "UnknownModuleError",
    "DuplicateNamespaceError",
    "DuplicateGetterError",
    "SubscriberError",
    "StrictModeViolation",
    "HotUpdateMismatch",
]
