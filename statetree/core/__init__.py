"""
Core module-tree primitives.

This package provides the building blocks the store wires together:
- Module: one node of the tree (state slot, handlers, children)
- ModuleCollection: path-addressed registry and namespace derivation
- Handler: resolved mutation/action/getter value
- Validation: shape checks for raw definitions
- Canonical: state fingerprints for change detection
- Tasks: future coercion and all-settle aggregation for actions
"""

from .module import Module, RawModule
from .collection import ModuleCollection
from .handlers import Handler, positional_arity
from .validation import assert_raw_module
from .canonical import canonicalize, canonical_json_str, state_fingerprint
from .tasks import settle_all, to_future
from .errors import (
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
    "Module",
    "RawModule",
    "ModuleCollection",
    "Handler",
    "positional_arity",
    "assert_raw_module",
    "canonicalize",
    "canonical_json_str",
    "state_fingerprint",
    "settle_all",
    "to_future",
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
