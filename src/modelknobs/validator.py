"""Field validation against attribute definitions.

Each field goes through a fixed sequence of checks:

1. the type must have a registered predicate;
2. an absent value is fine unless the field is required;
3. a present value must satisfy the type predicate;
4. then the first of these that reports anything wins: ``choices``,
   ``items`` (recursively, per element) and ``custom`` validators.

Errors are returned as message strings and never raised here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from modelknobs.attributes import Attribute
from modelknobs.predicates import PredicateRegistry, default_registry
from modelknobs.utilities import (
    accepts_arguments,
    exists,
    flatten,
    is_array,
    is_function,
    is_object,
    to_text,
)

logger = logging.getLogger(__name__)

NO_VALIDATOR_MESSAGE = "No validation function for type {type} used for {key}"
REQUIRED_MESSAGE = "{key} of type {type} is required"
TYPE_MESSAGE = "{key} should be of type {type}"
CHOICE_MESSAGE = "{key} of type {type} should be one of {choices}"


def _in_choices(value: Any, choices: Iterable[Any]) -> bool:
    # Booleans only match booleans, so True is not taken for 1
    return any(
        choice == value and isinstance(choice, bool) == isinstance(value, bool)
        for choice in choices
    )


class Validator:
    """Validates stored values against a schema.

    Args:
        registry: Predicate registry used to look up type names
    """

    def __init__(self, registry: PredicateRegistry | None = None):
        self.registry = registry if registry is not None else default_registry

    def validate(
        self,
        schema: Mapping[str, Attribute],
        values: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> list[str]:
        """Validate every visible field of a schema.

        Args:
            schema: Field definitions, checked in order
            values: Stored values
            options: Owner options (``input`` / ``output`` flags)

        Returns:
            Flat list of error messages, empty when valid
        """
        errors: list[str] = []
        for key, attribute in schema.items():
            if attribute.is_hidden(options):
                continue
            errors.extend(self.test(attribute, key, values.get(key)))
        return errors

    def test(self, attribute: Attribute, key: Any, value: Any) -> list[str]:
        """Validate one value against its definition.

        Args:
            attribute: Field definition
            key: Field name (or element index) used in messages
            value: Value to check

        Returns:
            List of error messages, empty when valid
        """
        type_name = attribute.type
        check = self.registry.lookup(type_name)

        if check is None:
            return [NO_VALIDATOR_MESSAGE.format(type=type_name, key=key)]

        if not attribute.required and not exists(value):
            return []
        if attribute.required and not exists(value):
            return [REQUIRED_MESSAGE.format(key=key, type=type_name)]

        if not check(value, attribute.options):
            return [TYPE_MESSAGE.format(key=key, type=type_name)]

        choices = attribute.choices
        if choices and is_array(choices) and not _in_choices(value, choices):
            return [CHOICE_MESSAGE.format(key=key, type=type_name, choices=to_text(choices))]

        if attribute.items is not None and (is_array(value) or is_object(value)):
            errors = self.test_items(attribute.items, value)
            if errors:
                return errors

        if attribute.custom:
            return self.custom_validation(value, attribute.custom, attribute.options) or []

        return []

    def test_items(self, attribute: Attribute, value: Any) -> list[str]:
        """Validate every element of a list, or every value of a mapping.

        Element indexes (or mapping keys) are used as field names.
        """
        entries = value.items() if is_object(value) else enumerate(value)
        errors: list[str] = []
        for key, item in entries:
            errors.extend(self.test(attribute, key, item))
        return errors

    def custom_validation(
        self,
        value: Any,
        tests: Iterable[Any] | None,
        options: Mapping[str, Any] | None = None,
    ) -> list[str] | None:
        """Run custom validators against a value.

        Each validator is called as ``test(value, options)`` (or ``test(value)``
        when it takes a single argument) and may return an error message, a
        list of messages, or None. Entries that are not functions are ignored.

        Returns:
            The collected messages, or None when there are none
        """
        results = []
        for test in tests or []:
            if not is_function(test):
                continue
            if accepts_arguments(test, 2):
                results.append(test(value, options))
            else:
                results.append(test(value))

        errors = flatten(results)
        if errors:
            logger.debug("Custom validation produced %d error(s)", len(errors))
        return errors or None
