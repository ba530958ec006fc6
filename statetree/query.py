"""
Read-only introspection helpers for a store's module tree and tables.
"""

from typing import TYPE_CHECKING, Any, Dict, List

from .core.canonical import canonicalize, state_fingerprint
from .core.module import Module

if TYPE_CHECKING:
    from .store import Store


def list_modules(store: "Store") -> List[Dict[str, Any]]:
    """
    Flatten the module tree, root first, depth-first.

    Each row: path, namespace, namespaced, runtime, mutations, actions, getters.
    """
    rows: List[Dict[str, Any]] = []

    def visit(path: List[str], module: Module) -> None:
        rows.append(
            {
                "path": "/".join(path) or "<root>",
                "namespace": store._modules.get_namespace(path),
                "namespaced": module.namespaced,
                "runtime": module.runtime,
                "mutations": list(module.mutation_keys),
                "actions": list(module.action_keys),
                "getters": list(module.getter_keys),
            }
        )
        for key, child in module.children():
            visit(path + [key], child)

    visit([], store._modules.root)
    return rows


def qualified_types(store: "Store") -> Dict[str, Dict[str, int]]:
    """Qualified type -> handler count, per table."""
    return {
        "mutations": {t: len(h) for t, h in sorted(store._mutations.items())},
        "actions": {t: len(h) for t, h in sorted(store._actions.items())},
        "getters": {t: 1 for t in sorted(store._wrapped_getters)},
    }


def namespaces(store: "Store") -> List[str]:
    return sorted(store._modules_namespace_map)


def describe_store(store: "Store") -> Dict[str, Any]:
    return {
        "store_id": store.store_id,
        "strict": store.strict,
        "modules": list_modules(store),
        "namespaces": namespaces(store),
        "types": qualified_types(store),
        "state_fingerprint": state_fingerprint(store.state),
    }


def snapshot_state(store: "Store") -> Any:
    """Canonical (sorted, JSON-friendly) copy of the root state."""
    return canonicalize(store.state)
