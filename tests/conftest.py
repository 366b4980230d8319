"""Shared fixtures for modelknobs tests."""

import pytest

from modelknobs import define_model
from modelknobs.predicates import build_registry
from modelknobs.settings import Settings


@pytest.fixture
def person_schema():
    """Schema covering required fields, defaults, aliases and transforms."""
    return {
        "first_name": {"type": "string", "required": True},
        "last_name": {"type": "string", "required": True},
        "full_name": {"type": "string", "alias": ["first_name", "last_name"]},
        "email": {"type": "email", "transform": str.lower},
        "role": {"type": "string", "choices": ["admin", "member"], "default_value": "member"},
        "age": {"type": "integer"},
    }


@pytest.fixture
def person_values():
    """Valid raw values for ``person_schema``."""
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ADA@EXAMPLE.COM",
        "age": 36,
    }


@pytest.fixture
def Person(person_schema):
    """Model type built from ``person_schema``."""
    return define_model("Person", person_schema)


@pytest.fixture
def registry():
    """An isolated predicate registry, safe to register test predicates in."""
    return build_registry(Settings(use_env=False))
