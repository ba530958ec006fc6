"""
Tests for handler resolution and positional arity.
"""

from statetree.core.handlers import Handler, positional_arity, resolve_table


def test_positional_arity_counts_positional_params():
    """Arity counts plain positional parameters."""
    assert positional_arity(lambda: None) == 0
    assert positional_arity(lambda state: None) == 1
    assert positional_arity(lambda state, payload=None: None) == 2


def test_positional_arity_ignores_keyword_only():
    """Keyword-only parameters do not add to arity."""
    def fn(state, *, flag=False):
        return None

    assert positional_arity(fn) == 1


def test_positional_arity_var_positional_passes_everything():
    """A *args handler accepts every argument."""
    assert positional_arity(lambda *args: None) is None


def test_handler_truncates_extra_arguments():
    """Handlers may declare fewer parameters than the engine passes."""
    h = Handler.direct(lambda state: state)

    assert h({"a": 1}, "payload", "extra") == {"a": 1}


def test_handler_passes_all_arguments_to_var_positional():
    """Calling a *args handler forwards all arguments."""
    h = Handler.direct(lambda *args: args)

    assert h(1, 2, 3) == (1, 2, 3)


def test_resolve_action_mapping():
    """{"root": True, "handler": fn} resolves to a root handler."""

    def fn(ctx):
        return "ok"

    h = Handler.resolve({"root": True, "handler": fn})

    assert h.root is True
    assert h.fn is fn
    assert h(None, "payload") == "ok"


def test_resolve_bare_callable_is_not_root():
    """A bare callable resolves to a non-root handler."""
    h = Handler.resolve(len)

    assert h.root is False
    assert Handler.resolve(h) is h


def test_resolve_table_keeps_definition_order():
    """Resolved tables keep definition order."""
    table = resolve_table({"z": lambda s: 1, "a": lambda s: 2})

    assert list(table) == ["z", "a"]
    assert resolve_table(None) == {}
