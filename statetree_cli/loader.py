"""
Resolve a CLI TARGET to a Store.

TARGET is "module.path:attribute" or "path/to/file.py:attribute". The
attribute may be a Store, a root module definition mapping, or a
zero-argument callable returning either.
"""

import importlib
import importlib.util
from pathlib import Path
from typing import Any, Mapping

from statetree import Store


class TargetError(Exception):
    """Raised when a TARGET cannot be loaded or is not a store."""
    pass


def _load_module(ref: str) -> Any:
    if ref.endswith(".py"):
        path = Path(ref)
        if not path.exists():
            raise TargetError(f"File not found: {ref}")
        spec = importlib.util.spec_from_file_location(path.stem, str(path))
        if spec is None or spec.loader is None:
            raise TargetError(f"Cannot import {ref}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    try:
        return importlib.import_module(ref)
    except ImportError as e:
        raise TargetError(f"Cannot import {ref}: {e}") from e


def load_store(target: str) -> Store:
    ref, sep, attr = target.rpartition(":")
    if not sep or not ref or not attr:
        raise TargetError(f"TARGET must look like module:attribute, got {target!r}")

    module = _load_module(ref)
    try:
        obj = getattr(module, attr)
    except AttributeError as e:
        raise TargetError(f"{ref} has no attribute {attr!r}") from e

    if callable(obj) and not isinstance(obj, Store):
        obj = obj()
    if isinstance(obj, Store):
        return obj
    if isinstance(obj, Mapping):
        return Store(obj)
    raise TargetError(f"{target} is neither a Store nor a module definition")
