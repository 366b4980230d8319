"""Value resolution: computing stored field values from raw input.

For each field the stored value is decided in this order:

1. the alias-derived value, when the attribute declares ``alias``;
2. otherwise the raw input value, when it exists;
3. otherwise the attribute's ``default_value``;

and the attribute's ``transform`` is then applied to whichever value won.

Raw values and defaults that are functions act as thunks: they are called
with ``(key, type)`` and their result is used. Fields of type ``"function"``
store functions as data instead. ``Lazy`` and ``Literal`` make either
intent explicit regardless of the field type.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any

from modelknobs.attributes import Attribute
from modelknobs.utilities import accepts_arguments, exists, is_array, is_function, to_text

logger = logging.getLogger(__name__)

FUNCTION_TYPE = "function"


class Literal:
    """A value stored as given, even when it is callable."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"


class Lazy:
    """A value computed by calling ``factory`` during resolution.

    The factory is called with ``(key, type)`` when it accepts two positional
    arguments and with no arguments otherwise.
    """

    __slots__ = ("factory",)

    def __init__(self, factory: Callable[..., Any]):
        if not callable(factory):
            raise TypeError("Lazy factory must be callable")
        self.factory = factory

    def evaluate(self, key: str, type_name: str | None) -> Any:
        if accepts_arguments(self.factory, 2):
            return self.factory(key, type_name)
        return self.factory()

    def __repr__(self) -> str:
        return f"Lazy({self.factory!r})"


def unwrap(value: Any, key: str, type_name: str | None) -> Any:
    """Turn a raw or default value into the value to store.

    Args:
        value: Raw input value or default value
        key: Field name passed to thunks
        type_name: Declared field type passed to thunks

    Returns:
        The literal value, or the result of invoking the thunk
    """
    if isinstance(value, Literal):
        return value.value
    if isinstance(value, Lazy):
        return value.evaluate(key, type_name)
    if type_name != FUNCTION_TYPE and is_function(value):
        return Lazy(value).evaluate(key, type_name)
    return value


def resolve_alias(alias: str | list[str] | tuple[str, ...], store: Mapping[str, Any]) -> Any:
    """Derive a value from other stored fields.

    A single alias copies that field's value. A sequence of aliases joins the
    referenced values with single spaces and trims the result.
    """
    if not is_array(alias):
        return store.get(alias)
    joined = ""
    for name in alias:
        joined = " ".join([joined, to_text(store.get(name))]).strip()
    return joined


def resolve_field(
    key: str,
    attribute: Attribute | None,
    raw_values: Mapping[str, Any],
    store: Mapping[str, Any],
) -> Any:
    """Compute the value to store for one field.

    Args:
        key: Field name
        attribute: Field definition, or None for fields outside the schema
        raw_values: Raw input values
        store: Values resolved so far (alias targets are read from here)

    Returns:
        The final value for the field
    """
    type_name = attribute.type if attribute else None

    if attribute is not None and attribute.alias:
        value = resolve_alias(attribute.alias, store)
    else:
        value = raw_values.get(key)
        value = unwrap(value, key, type_name) if exists(value) else None

    if not exists(value) and attribute is not None and exists(attribute.default_value):
        value = unwrap(attribute.default_value, key, type_name)

    transform = attribute.transform if attribute else None
    if transform is not None and exists(value):
        if not (type_name == FUNCTION_TYPE and is_function(value)):
            value = transform(value)

    return value


def resolve_values(
    schema: Mapping[str, Attribute],
    raw_values: Mapping[str, Any] | None,
    options: Mapping[str, Any] | None,
    store: MutableMapping[str, Any],
    partial: bool = False,
) -> MutableMapping[str, Any]:
    """Resolve raw input against a schema into ``store``.

    The fields resolved are the raw input keys followed by the schema keys not
    present in the input. Fields without an alias are resolved before aliased
    fields so that alias targets hold their new values. Fields hidden by the
    visibility gate are left untouched.

    A partial resolution only touches the raw input keys, aliased fields and
    schema fields that hold no value yet.

    Args:
        schema: Field definitions
        raw_values: Raw input values
        options: Owner options (``input`` / ``output`` flags)
        store: Stored values, updated in place
        partial: Keep stored values of schema fields missing from the input

    Returns:
        The updated store
    """
    raw_values = raw_values or {}
    keys = list(raw_values.keys()) + [key for key in schema if key not in raw_values]

    plain = [key for key in keys if not (key in schema and schema[key].alias)]
    aliased = [key for key in keys if key in schema and schema[key].alias]

    for key in plain + aliased:
        attribute = schema.get(key)
        if attribute is not None and attribute.is_hidden(options):
            logger.debug("Skipping hidden field %s", key)
            continue
        if partial and key not in raw_values and key in store and not (attribute and attribute.alias):
            continue
        store[key] = resolve_field(key, attribute, raw_values, store)

    return store
