"""
Handler: tagged variant for mutation, action and getter values.

A module definition may give a bare callable, or for actions a mapping
{"root": bool, "handler": fn}. Both shapes are resolved once, at
registration, into a Handler so the call path never inspects them again.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional


def positional_arity(fn: Callable[..., Any]) -> Optional[int]:
    """
    Count the positional parameters fn accepts.

    Returns None when fn takes *args or its signature cannot be read,
    meaning every argument should be passed through.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return None

    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count


@dataclass(frozen=True)
class Handler:
    """
    Resolved handler.

    Fields:
        fn: The user function
        root: Register under the bare key, bypassing the namespace (actions only)
        arity: Positional parameters fn accepts (None = all)
    """
    fn: Callable[..., Any]
    root: bool = False
    arity: Optional[int] = field(default=None, compare=False)

    @staticmethod
    def direct(fn: Callable[..., Any]) -> "Handler":
        return Handler(fn=fn, root=False, arity=positional_arity(fn))

    @staticmethod
    def with_options(fn: Callable[..., Any], root: bool = False) -> "Handler":
        return Handler(fn=fn, root=bool(root), arity=positional_arity(fn))

    @staticmethod
    def resolve(value: Any) -> "Handler":
        """Build a Handler from a raw definition value."""
        if isinstance(value, Handler):
            return value
        if isinstance(value, Mapping):
            return Handler.with_options(value["handler"], root=value.get("root", False))
        return Handler.direct(value)

    def __call__(self, *args: Any) -> Any:
        if self.arity is not None:
            args = args[: self.arity]
        return self.fn(*args)


def resolve_table(table: Optional[Mapping[str, Any]]) -> Dict[str, Handler]:
    """Resolve a raw {name: value} table, keeping definition order."""
    if not table:
        return {}
    return {key: Handler.resolve(value) for key, value in table.items()}
