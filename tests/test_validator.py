"""Tests for the per-field validation sequence."""

import pytest

from modelknobs.attributes import Attribute, coerce_schema
from modelknobs.validator import Validator


@pytest.fixture
def validator(registry):
    return Validator(registry)


class TestTypeGate:
    """Test the schema, required and type checks."""

    def test_unknown_type(self, validator):
        """Test a type without a registered predicate."""
        errors = validator.test(Attribute(type="postcode"), "zip", "AB1 2CD")
        assert errors == ["No validation function for type postcode used for zip"]

    def test_missing_type(self, validator):
        """Test a descriptor without a type."""
        assert validator.test(Attribute(), "a", 1) == ["No validation function for type None used for a"]

    def test_unknown_type_reported_even_when_absent(self, validator):
        """Test that the predicate check comes before the required check."""
        assert validator.test(Attribute(type="postcode"), "zip", None)

    def test_optional_absent_value(self, validator):
        """Test that absent optional values pass."""
        assert validator.test(Attribute(type="string"), "name", None) == []

    def test_required_absent_value(self, validator):
        """Test that absent required values fail."""
        errors = validator.test(Attribute(type="string", required=True), "name", None)
        assert errors == ["name of type string is required"]

    @pytest.mark.parametrize("type_name,value", [("boolean", False), ("integer", 0), ("string", "")])
    def test_required_falsy_values_exist(self, validator, type_name, value):
        """Test that falsy values satisfy required."""
        attribute = Attribute(type=type_name, required=True)
        assert validator.test(attribute, "field", value) == []

    def test_type_mismatch(self, validator):
        """Test a value failing its predicate."""
        errors = validator.test(Attribute(type="integer"), "age", "old")
        assert errors == ["age should be of type integer"]

    def test_options_reach_predicate(self, validator):
        """Test that descriptor options are passed to the predicate."""
        attribute = Attribute(type="phone", options={"locale": "en-US"})
        assert validator.test(attribute, "phone", "415-555-2671") == []


class TestConstraints:
    """Test choices, nested items and custom validators."""

    def test_choices(self, validator):
        """Test the closed value set."""
        attribute = Attribute(type="string", choices=["admin", "member"])
        assert validator.test(attribute, "role", "member") == []
        assert validator.test(attribute, "role", "guest") == [
            "role of type string should be one of admin,member"
        ]

    def test_choices_keep_booleans_apart(self, validator):
        """Test that booleans and numbers never match each other."""
        assert validator.test(Attribute(type="integer", choices=[1]), "n", 1) == []
        assert validator.test(Attribute(type="boolean", choices=[1]), "flag", True) == [
            "flag of type boolean should be one of 1"
        ]
        assert validator.test(Attribute(type="integer", choices=[True]), "n", 1) == [
            "n of type integer should be one of true"
        ]
        assert validator.test(Attribute(type="boolean", choices=[True]), "flag", True) == []

    def test_nested_list_items(self, validator):
        """Test that list elements are checked with their index as name."""
        attribute = Attribute(type="array", items=Attribute(type="integer"))
        assert validator.test(attribute, "ids", [1, 2]) == []
        assert validator.test(attribute, "ids", [1, "x", 3, "y"]) == [
            "1 should be of type integer",
            "3 should be of type integer",
        ]

    def test_nested_mapping_items(self, validator):
        """Test that mapping values are checked with their key as name."""
        attribute = Attribute(type="object", items=Attribute(type="string", required=True))
        assert validator.test(attribute, "labels", {"en": "Hello", "fr": None}) == [
            "fr of type string is required"
        ]

    def test_nested_items_recurse(self, validator):
        """Test items of items."""
        attribute = Attribute(type="array", items=Attribute(type="array", items=Attribute(type="integer")))
        assert validator.test(attribute, "grid", [[1, 2], [3, "x"]]) == ["1 should be of type integer"]

    def test_custom_validators(self, validator):
        """Test custom validators with one and two parameters."""
        seen = {}

        def with_options(value, options):
            seen["options"] = options
            return None if value > 0 else "must be positive"

        def value_only(value):
            return ["too big"] if value > 100 else None

        attribute = Attribute(type="integer", custom=[with_options, value_only], options={"limit": 1})
        assert validator.test(attribute, "count", 5) == []
        assert seen["options"] == {"limit": 1}
        assert validator.test(attribute, "count", -1) == ["must be positive"]
        assert validator.test(attribute, "count", 500) == ["too big"]

    def test_first_failing_constraint_wins(self, validator):
        """Test that a choices error hides items and custom errors."""
        attribute = Attribute(
            type="array",
            choices=[[1]],
            items=Attribute(type="string"),
            custom=[lambda value: "custom failed"],
        )
        assert validator.test(attribute, "a", [2]) == ["a of type array should be one of 1"]

    def test_items_error_hides_custom(self, validator):
        """Test that nested errors stop custom validation."""
        attribute = Attribute(
            type="array", items=Attribute(type="string"), custom=[lambda value: "custom failed"]
        )
        assert validator.test(attribute, "a", [2]) == ["0 should be of type string"]
        assert validator.test(attribute, "a", ["ok"]) == ["custom failed"]

    def test_custom_validation_ignores_non_functions(self, validator):
        """Test that non-callable entries are skipped."""
        assert validator.custom_validation(1, ["not a function", None]) is None
        assert validator.custom_validation(1, None) is None


class TestValidateSchema:
    """Test whole-schema validation."""

    def test_errors_in_schema_order(self, validator):
        """Test that errors are collected per field in order."""
        schema = coerce_schema(
            {
                "name": {"type": "string", "required": True},
                "age": {"type": "integer"},
                "email": {"type": "email", "required": True},
            }
        )
        errors = validator.validate(schema, {"age": "old", "email": "x@y.com"})
        assert errors == ["name of type string is required", "age should be of type integer"]

    def test_hidden_fields_not_validated(self, validator):
        """Test that the visibility gate applies to validation."""
        schema = coerce_schema({"password": {"type": "string", "required": True, "input": True}})
        assert validator.validate(schema, {}, {"output": True}) == []
        assert validator.validate(schema, {}, {"input": True}) == [
            "password of type string is required"
        ]

    def test_default_registry(self):
        """Test that the default registry is used when none is given."""
        assert Validator().test(Attribute(type="email"), "email", "a@b.com") == []
