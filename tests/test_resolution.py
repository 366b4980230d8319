"""Tests for value resolution: alias, raw value, default and transform."""

import pytest

from modelknobs.attributes import coerce_schema
from modelknobs.resolution import Lazy, Literal, resolve_alias, resolve_field, resolve_values, unwrap


def resolve(schema, raw=None, options=None, store=None, partial=False):
    return resolve_values(coerce_schema(schema), raw, options, {} if store is None else store, partial)


class TestPrecedence:
    """Test the order in which a field's value is decided."""

    def test_raw_value_beats_default(self):
        """Test that an existing raw value wins over the default."""
        store = resolve({"a": {"default_value": 1}}, {"a": 2})
        assert store["a"] == 2

    @pytest.mark.parametrize("raw", [False, 0, ""])
    def test_falsy_raw_values_are_kept(self, raw):
        """Test that falsy raw values do not fall back to the default."""
        store = resolve({"a": {"default_value": "fallback"}}, {"a": raw})
        assert store["a"] == raw

    def test_absent_raw_value_uses_default(self):
        """Test that None and NaN fall back to the default."""
        assert resolve({"a": {"default_value": 1}}, {"a": None})["a"] == 1
        assert resolve({"a": {"default_value": 1}}, {"a": float("nan")})["a"] == 1
        assert resolve({"a": {"default_value": 1}})["a"] == 1

    def test_alias_overrides_raw_value(self):
        """Test that an alias replaces the raw input."""
        store = resolve({"a": {}, "b": {"alias": "a"}}, {"a": "x", "b": "ignored"})
        assert store["b"] == "x"

    def test_alias_joins_several_fields(self):
        """Test that list aliases join with single spaces."""
        schema = {"first": {}, "middle": {}, "last": {}, "full": {"alias": ["first", "middle", "last"]}}
        assert resolve(schema, {"first": "Ada", "last": "Lovelace"})["full"] == "Ada Lovelace"

    def test_alias_reads_resolved_values(self):
        """Test that aliases see defaults and transforms of their targets."""
        schema = {
            "full": {"alias": ["first", "last"]},
            "first": {"transform": str.upper},
            "last": {"default_value": "Smith"},
        }
        assert resolve(schema, {"first": "jo"})["full"] == "JO Smith"

    def test_alias_falls_back_to_default(self):
        """Test that an absent alias value uses the default."""
        store = resolve({"a": {}, "b": {"alias": "a", "default_value": "none"}})
        assert store["b"] == "none"

    def test_transform_applies_to_winner(self):
        """Test that the transform runs on raw values and defaults."""
        schema = {"a": {"transform": str.upper, "default_value": "dflt"}}
        assert resolve(schema, {"a": "raw"})["a"] == "RAW"
        assert resolve(schema)["a"] == "DFLT"

    def test_transform_skips_absent_values(self):
        """Test that the transform is not called without a value."""

        def transform(value):
            raise AssertionError("transform should not run")

        assert resolve({"a": {"transform": transform}})["a"] is None


class TestThunks:
    """Test callable raw values and defaults."""

    def test_default_thunk_receives_key_and_type(self):
        """Test that default factories get the field key and type."""
        store = resolve({"a": {"type": "string", "default_value": lambda key, type_name: f"{key}:{type_name}"}})
        assert store["a"] == "a:string"

    def test_raw_thunk(self):
        """Test that a callable raw value is invoked."""
        assert resolve({"a": {"type": "integer"}}, {"a": lambda key, type_name: 7})["a"] == 7

    def test_zero_argument_thunk(self):
        """Test that factories without parameters are called bare."""
        assert resolve({"a": {"default_value": list}})["a"] is list
        assert resolve({"a": {"default_value": lambda: []}})["a"] == []

    def test_function_type_stores_functions(self):
        """Test that function fields keep functions as data."""

        def handler(value):
            return value

        store = resolve({"a": {"type": "function", "transform": lambda fn: None}}, {"a": handler})
        assert store["a"] is handler

    def test_literal_and_lazy(self):
        """Test the explicit wrappers."""

        def handler():
            return "called"

        schema = {"a": {"type": "string"}, "b": {"type": "function"}}
        store = resolve(schema, {"a": Literal(handler), "b": Lazy(handler)})
        assert store["a"] is handler
        assert store["b"] == "called"

    def test_lazy_requires_callable(self):
        """Test that Lazy rejects non-callables."""
        with pytest.raises(TypeError):
            Lazy("value")

    def test_unwrap_leaves_plain_values(self):
        """Test that ordinary values pass through."""
        assert unwrap(5, "a", "integer") == 5
        assert unwrap(dict, "a", "object") is dict


class TestResolveValues:
    """Test whole-schema resolution."""

    def test_extra_keys_are_stored(self):
        """Test that raw keys outside the schema are kept."""
        assert resolve({"a": {}}, {"a": 1, "extra": 2}) == {"a": 1, "extra": 2}

    def test_hidden_fields_are_skipped(self):
        """Test the visibility gate during resolution."""
        schema = {"password": {"input": True}, "created": {"output": True, "default_value": "now"}}
        store = resolve(schema, {"password": "secret"}, {"output": True})
        assert "password" not in store
        assert store["created"] == "now"

    def test_partial_keeps_other_values(self):
        """Test that partial resolution leaves other stored values alone."""
        schema = {"a": {"default_value": 1}, "b": {}, "c": {"alias": ["a", "b"]}}
        store = resolve(schema, {"a": 5, "b": "x"})
        resolve(schema, {"b": "y"}, store=store, partial=True)
        assert store == {"a": 5, "b": "y", "c": "5 y"}

    def test_full_resolution_resets_to_defaults(self):
        """Test that a full resolution re-applies defaults."""
        schema = {"a": {"default_value": 1}}
        store = resolve(schema, {"a": 5})
        resolve(schema, {}, store=store)
        assert store["a"] == 1

    def test_resolve_alias_helpers(self):
        """Test alias resolution against a store."""
        store = {"a": "x", "b": None, "c": 3}
        assert resolve_alias("a", store) == "x"
        assert resolve_alias(["a", "b", "c"], store) == "x 3"
        assert resolve_alias(["b"], store) == ""

    def test_resolve_field_without_attribute(self):
        """Test that unknown fields keep their raw value."""
        assert resolve_field("x", None, {"x": 4}, {}) == 4
