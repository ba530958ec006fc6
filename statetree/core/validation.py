"""
Shape checks for raw module definitions.

Mutations and getters must be callables. Actions must be callables or
mappings carrying a callable "handler".
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from .errors import ValidationError


@dataclass(frozen=True)
class _Expectation:
    check: Callable[[Any], bool]
    expected: str


def _is_function(value: Any) -> bool:
    return callable(value)


def _is_action(value: Any) -> bool:
    return callable(value) or (
        isinstance(value, Mapping) and callable(value.get("handler"))
    )


EXPECTATIONS = {
    "getters": _Expectation(_is_function, "function"),
    "mutations": _Expectation(_is_function, "function"),
    "actions": _Expectation(_is_action, 'function or mapping with "handler" function'),
}


def _describe(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)


def make_assertion_message(
    path: Sequence[str], key: str, name: str, value: Any, expected: str
) -> str:
    buf = f'{key} should be {expected} but "{key}.{name}"'
    if path:
        buf += f' in module "{".".join(path)}"'
    buf += f" is {_describe(value)}."
    return buf


def assert_raw_module(path: Sequence[str], raw: Mapping[str, Any]) -> None:
    """
    Validate the handler tables of one raw module (children are not visited).

    Raises:
        ValidationError: If any mutation, getter or action value is malformed
    """
    for key, expectation in EXPECTATIONS.items():
        table = raw.get(key)
        if not table:
            continue
        for name, value in table.items():
            if not expectation.check(value):
                raise ValidationError(
                    "[statetree] "
                    + make_assertion_message(path, key, name, value, expectation.expected)
                )
