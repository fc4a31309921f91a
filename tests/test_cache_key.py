from __future__ import annotations

from powopy.request_support.cache_key import CacheKeyBuilder, flatten_params

URL = "https://example.test/api/2/search"


def _build(params: dict | None = None, *, namespace: str | None = None, version: str | None = "1.0.0") -> str:
    return CacheKeyBuilder().build("get", URL, params, namespace=namespace, version=version)


def test_empty_params_omit_query_string() -> None:
    assert _build({}) == f"powopy v=1.0.0 GET {URL}"
    assert _build(None) == f"powopy v=1.0.0 GET {URL}"


def test_query_values_are_form_encoded() -> None:
    assert _build({"q": "a b"}) == f"powopy v=1.0.0 GET {URL}?q=a+b"


def test_mapping_keys_are_sorted() -> None:
    assert _build({"b": 2, "a": 1}) == f"powopy v=1.0.0 GET {URL}?a=1&b=2"


def test_sequence_values_repeat_the_key_in_order() -> None:
    assert _build({"tag": ["a", "b"]}) == f"powopy v=1.0.0 GET {URL}?tag=a&tag=b"
    assert _build({"tag": ["b", "a"]}) == f"powopy v=1.0.0 GET {URL}?tag=b&tag=a"


def test_nested_mappings_use_bracket_notation() -> None:
    assert _build({"a": {"b": 1}}) == f"powopy v=1.0.0 GET {URL}?a%5Bb%5D=1"


def test_namespace_is_included_in_prefix() -> None:
    assert _build({}, namespace="my_app") == f"powopy ns=my_app v=1.0.0 GET {URL}"


def test_blank_namespace_and_version_are_omitted() -> None:
    assert _build({}, namespace="  ", version="") == f"powopy GET {URL}"


def test_method_is_upper_cased() -> None:
    assert CacheKeyBuilder().build("post", URL, {}) == f"powopy POST {URL}"


def test_non_string_keys_match_string_keys() -> None:
    assert _build({1: "x", "b": True}) == _build({"1": "x", "b": True})


def test_booleans_render_as_wire_values() -> None:
    assert _build({"accepted": True, "images": False}) == (
        f"powopy v=1.0.0 GET {URL}?accepted=true&images=false"
    )


def test_none_values_are_dropped() -> None:
    assert _build({"a": None, "b": 1}) == f"powopy v=1.0.0 GET {URL}?b=1"


def test_flatten_drops_values_without_a_key() -> None:
    assert flatten_params(["a", "b"]) == []
    assert flatten_params("bare") == []
    assert flatten_params(None) == []


def test_flatten_handles_deep_nesting_and_lists_of_mappings() -> None:
    params = {"f": {"z": [1, 2], "a": {"b": "c"}}, "rows": [{"x": 1}, {"x": 2}]}

    assert flatten_params(params) == [
        ("f[a][b]", "c"),
        ("f[z]", "1"),
        ("f[z]", "2"),
        ("rows[x]", "1"),
        ("rows[x]", "2"),
    ]


def test_flatten_sorts_set_members() -> None:
    assert flatten_params({"tag": {"b", "a"}}) == [("tag", "a"), ("tag", "b")]
