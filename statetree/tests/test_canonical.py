"""
Tests for canonical serialization and state fingerprints.

Deep watchers rely on these: equal trees must fingerprint equally,
any in-place edit must change the fingerprint.
"""

from statetree.core.canonical import (
    canonicalize,
    canonical_json_bytes,
    canonical_json_str,
    state_fingerprint,
)


def test_canonicalize_dict_key_order():
    """Dict key order must not affect canonical output."""
    d1 = {"z": 1, "a": 2, "m": 3}
    d2 = {"a": 2, "m": 3, "z": 1}

    assert canonicalize(d1) == canonicalize(d2)
    assert list(canonicalize(d1).keys()) == ["a", "m", "z"]


def test_canonicalize_nested_state_tree():
    """Module state nested under parent state is canonicalized recursively."""
    state = {
        "cart": {"items": [3, 1, 2], "meta": {"open": True}},
        "auth": {"user": None},
    }

    canon = canonicalize(state)

    assert list(canon.keys()) == ["auth", "cart"]
    assert list(canon["cart"].keys()) == ["items", "meta"]
    # list order is data, not layout
    assert canon["cart"]["items"] == [3, 1, 2]


def test_canonicalize_sets_and_tuples():
    """Sets become sorted lists, tuples become lists."""
    canon = canonicalize({"tags": {"b", "a"}, "pair": (1, 2)})

    assert canon["tags"] == ["a", "b"]
    assert canon["pair"] == [1, 2]


def test_canonical_json_str_compact_and_sorted():
    """Canonical JSON has sorted keys and no whitespace."""
    s = canonical_json_str({"b": 2, "a": 1})

    assert s == '{"a":1,"b":2}'
    assert canonical_json_bytes({"b": 2, "a": 1}) == s.encode("utf-8")


def test_canonical_handles_unicode():
    """Unicode strings are kept as-is."""
    assert "日本語" in canonical_json_str({"key": "日本語"})


def test_canonical_falls_back_to_repr():
    """Values JSON cannot encode are rendered instead of failing."""

    class Opaque:
        def __repr__(self):
            return "Opaque()"

    assert canonical_json_str({"x": Opaque()}) == '{"x":"Opaque()"}'


def test_state_fingerprint_detects_in_place_edit():
    """Editing a nested value in place changes the fingerprint."""
    state = {"count": {"value": 1}}
    before = state_fingerprint(state)

    state["count"]["value"] += 1

    assert state_fingerprint(state) != before
    assert state_fingerprint({"count": {"value": 2}}) == state_fingerprint(state)


def test_fingerprint_distinguishes_key_types():
    """An int key and its string form fingerprint differently."""
    assert state_fingerprint({1: "x"}) != state_fingerprint({"1": "x"})
    assert canonicalize({1: "x", "b": 2}) == {"int:1": "x", "b": 2}
