"""
ModuleCollection: path-addressed registry of the module tree.

Owns the root Module. Paths are lists of child keys from the root; the
namespace of a path is derived on demand by walking from the root.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence

from .errors import HotUpdateMismatch, UnknownModuleError, report
from .module import Module, RawModule
from .validation import assert_raw_module

logger = logging.getLogger(__name__)

Path = Sequence[str]


class ModuleCollection:
    """
    Registry of modules.

    Usage:
        modules = ModuleCollection({"modules": {"cart": {...}}})
        modules.get(["cart"])
        modules.get_namespace(["cart"])
    """

    def __init__(self, raw_root: RawModule, validate: bool = True) -> None:
        self.validate = validate
        self.root: Module
        self.register([], raw_root, runtime=False)

    def register(self, path: Path, raw: RawModule, runtime: bool = True) -> None:
        """
        Create a module at path and recursively register its children.

        The whole subtree is validated and built before it is attached, so
        a failure leaves the registry unchanged.

        Args:
            path: Target path ([] replaces the root)
            raw: Raw module definition
            runtime: False only for modules present at construction

        Raises:
            ValidationError: If a handler value is malformed (validation enabled)
            UnknownModuleError: If the parent path does not exist
        """
        path = list(path)
        if self.validate:
            _assert_tree(path, raw)

        parent = self.get(path[:-1]) if path else None
        module = _build(raw, runtime)
        if parent is None:
            self.root = module
        else:
            parent.add_child(path[-1], module)

    def unregister(self, path: Path) -> bool:
        """
        Detach the module at path.

        Returns:
            True if a runtime module was detached. A missing module is
            reported; a module present at construction is left in place.
        """
        parent = self.find(path[:-1])
        key = path[-1]
        child = parent.get_child(key) if parent is not None else None

        if child is None:
            logger.warning(
                "[statetree] trying to unregister module '%s', which is not registered",
                key,
            )
            return False

        if not child.runtime:
            return False

        parent.remove_child(key)
        return True

    def is_registered(self, path: Path) -> bool:
        if not path:
            return True
        parent = self.find(path[:-1])
        if parent is None:
            return False
        return parent.has_child(path[-1])

    def find(self, path: Path) -> Optional[Module]:
        """Walk path, returning None on the first missing segment."""
        module: Optional[Module] = self.root
        for key in path:
            if module is None:
                return None
            module = module.get_child(key)
        return module

    def get(self, path: Path) -> Module:
        """
        Walk path from the root.

        Raises:
            UnknownModuleError: If any segment is missing
        """
        module = self.root
        for depth, key in enumerate(path):
            child = module.get_child(key)
            if child is None:
                raise UnknownModuleError(
                    f"[statetree] module not found: {'/'.join(path[: depth + 1])}"
                )
            module = child
        return module

    def get_namespace(self, path: Path) -> str:
        module = self.root
        namespace = ""
        for key in path:
            module = module.get_child(key)
            if module is None:
                raise UnknownModuleError(f"[statetree] module not found: {'/'.join(path)}")
            if module.namespaced:
                namespace += key + "/"
        return namespace

    def update(self, raw_root: RawModule) -> bool:
        """
        Hot-replace handler tables across the whole tree.

        The new definition is checked against the live tree first. If it
        names a module the live tree does not have, nothing is applied.

        Returns:
            True if the update was applied

        Raises:
            ValidationError: If any level of the new definition is malformed
        """
        missing = _find_missing([], self.root, raw_root)
        if missing is not None:
            report(
                logger,
                HotUpdateMismatch(
                    f"trying to add a new module '{'/'.join(missing)}' on hot reloading, "
                    "manual reload is needed"
                ),
                level=logging.WARNING,
            )
            return False

        if self.validate:
            _assert_tree([], raw_root)

        _update(self.root, raw_root)
        return True


def _find_missing(path: List[str], target: Module, raw: RawModule) -> Optional[List[str]]:
    for key, raw_child in (raw.get("modules") or {}).items():
        child_path = path + [key]
        child = target.get_child(key)
        if child is None:
            return child_path
        missing = _find_missing(child_path, child, raw_child)
        if missing is not None:
            return missing
    return None


def _build(raw: RawModule, runtime: bool) -> Module:
    module = Module(raw, runtime)
    for key, raw_child in (raw.get("modules") or {}).items():
        module.add_child(key, _build(raw_child, runtime))
    return module


def _assert_tree(path: List[str], raw: RawModule) -> None:
    assert_raw_module(path, raw)
    for key, raw_child in (raw.get("modules") or {}).items():
        _assert_tree(path + [key], raw_child)


def _update(target: Module, raw: Mapping[str, Any]) -> None:
    target.update(raw)
    for key, raw_child in (raw.get("modules") or {}).items():
        child = target.get_child(key)
        if child is not None:
            _update(child, raw_child)
