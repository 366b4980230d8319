"""Tests for the shared helper functions."""

import base64
import math
import uuid
from datetime import date, datetime
from decimal import Decimal

import pytest

from modelknobs.utilities import (
    accepts_arguments,
    clone,
    exists,
    flatten,
    is_array,
    is_function,
    is_object,
    json_default,
    matches_formats,
    to_text,
)


class TestExists:
    """Test the existence predicate."""

    @pytest.mark.parametrize("value", [False, 0, "", [], {}, 0.0])
    def test_falsy_values_exist(self, value):
        """Test that falsy values count as present."""
        assert exists(value)

    @pytest.mark.parametrize("value", [None, math.nan, float("nan"), Decimal("NaN")])
    def test_absent_values(self, value):
        """Test that None and NaN count as absent."""
        assert not exists(value)


class TestTypeChecks:
    """Test is_object, is_array and is_function."""

    def test_is_object(self):
        """Test mapping detection."""
        assert is_object({})
        assert not is_object([])
        assert not is_object("text")

    def test_is_array(self):
        """Test list and tuple detection."""
        assert is_array([1])
        assert is_array((1,))
        assert not is_array("abc")
        assert not is_array({"a": 1})

    def test_is_function_excludes_classes(self):
        """Test that classes are not treated as functions."""
        assert is_function(lambda: None)
        assert is_function(len)
        assert not is_function(dict)
        assert not is_function("len")


class TestHelpers:
    """Test flatten, clone, to_text and accepts_arguments."""

    def test_flatten_one_level(self):
        """Test flattening nested lists and dropping None."""
        assert flatten([["a"], ["b", None, "c"], "d", None]) == ["a", "b", "c", "d"]
        assert flatten(None) == []

    def test_flatten_keeps_deeper_nesting(self):
        """Test that only one level is flattened."""
        assert flatten([[["a"]]]) == [["a"]]

    def test_clone_is_deep(self):
        """Test that mappings and lists are copied deeply."""
        original = {"tags": ["a"]}
        copied = clone(original)
        copied["tags"].append("b")
        assert original == {"tags": ["a"]}

    def test_clone_returns_other_values(self):
        """Test that other values are returned unchanged."""
        marker = object()
        assert clone(marker) is marker

    def test_to_text(self):
        """Test text rendering of values."""
        assert to_text(None) == ""
        assert to_text(True) == "true"
        assert to_text(["x", "y"]) == "x,y"
        assert to_text(3) == "3"

    def test_accepts_arguments(self):
        """Test arity detection."""
        assert accepts_arguments(lambda a, b: None, 2)
        assert accepts_arguments(lambda *args: None, 2)
        assert not accepts_arguments(lambda: None, 2)
        assert not accepts_arguments(lambda a: None, 2)

    def test_matches_formats(self):
        """Test strptime format matching."""
        assert matches_formats("2024-01-31", ["%Y-%m-%d"])
        assert not matches_formats("31-01-2024", ["%Y-%m-%d"])
        assert not matches_formats(20240131, ["%Y-%m-%d"])
        assert matches_formats(date(2024, 1, 31), [], accept=(date,))


class TestJsonDefault:
    """Test the json.dumps fallback."""

    def test_temporal_values(self):
        """Test that dates render as ISO text."""
        assert json_default(date(2024, 1, 31)) == "2024-01-31"
        assert json_default(datetime(2024, 1, 31, 12, 0)) == "2024-01-31T12:00:00"

    def test_scalars(self):
        """Test Decimal, UUID and bytes."""
        identifier = uuid.uuid4()
        assert json_default(Decimal("1.50")) == "1.50"
        assert json_default(identifier) == str(identifier)
        assert json_default(b"hi") == base64.b64encode(b"hi").decode("ascii")

    def test_unknown_type_raises(self):
        """Test that unsupported objects raise TypeError."""
        with pytest.raises(TypeError):
            json_default(object())
