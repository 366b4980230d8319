"""Ordered collections of models sharing one declared model type."""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from modelknobs.exceptions import ModelValidationError, SerializationError, ValidationError
from modelknobs.model import Model, Validatable, project
from modelknobs.utilities import clone, flatten, json_default

logger = logging.getLogger(__name__)

INVALID_TYPE_MESSAGE = "Model collection does not have a valid type to validate its models"
INSTANCE_MESSAGE = "Model at index({index}) of type {actual} is not an instance of {expected}"


class ModelCollection:
    """An ordered list of entries validated against a model type.

    Entries may be models, raw mappings or plain values. With ``coerce``
    every entry is passed through the model type's constructor, so the
    collection then only holds instances of that type.

    Args:
        model_type: Model class entries must be instances of
        values: Initial entries
        coerce: Convert every entry to ``model_type``
    """

    def __init__(
        self,
        model_type: type | None = None,
        values: Iterable[Any] | None = None,
        coerce: bool = False,
    ):
        self._type: type | None = None
        self._entries: list[Any] = []
        self.set_type(model_type)
        self.set_values(values, coerce)

    def __str__(self) -> str:
        model_type = self.get_type()
        return getattr(model_type, "__name__", "") if model_type is not None else ""

    def __repr__(self) -> str:
        return f"ModelCollection({self}, {self._entries!r})"

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._entries))

    def get_type(self) -> type | None:
        return self._type

    def set_type(self, model_type: type | None, coerce: bool = False) -> ModelCollection:
        """Set the declared model type.

        Args:
            model_type: Model class entries must be instances of
            coerce: Re-coerce the stored entries to the new type
        """
        self._type = model_type
        if coerce:
            self.set_values(list(self._entries), coerce=True)
        return self

    def get_values(self, strict: bool = False) -> list[Any]:
        """Project the entries to plain data (models via ``to_dict``)."""
        return self.to_dict(strict)

    def set_values(self, values: Iterable[Any] | None, coerce: bool = False) -> ModelCollection:
        """Replace all entries.

        Plain mappings and lists are copied; models are stored as given.

        Raises:
            ValidationError: If values is a string or a mapping
        """
        if values is None:
            values = []
        if isinstance(values, (str, bytes, Mapping)):
            raise ValidationError(
                f"Collection values must be a sequence, got {type(values).__name__}",
                context={"collection": str(self)},
            )

        entries = []
        for value in values:
            if coerce:
                value = self.coerce(value)
            entries.append(clone(value))

        self._entries = entries
        return self

    def get_value(self, index: int, strict: bool = False) -> Any:
        """Get the entry at ``index``, or None when out of range.

        Args:
            index: Position in the collection
            strict: Return a model's schema-only values mapping instead of the model
        """
        try:
            value = self._entries[index]
        except (IndexError, TypeError):
            return None
        if strict and isinstance(value, Model):
            return value.get_values(strict)
        return value

    def add_value(self, value: Any, index: int | None = None, coerce: bool = False) -> ModelCollection:
        """Append an entry, or replace the one at ``index``.

        Raises:
            IndexError: If index is out of range
        """
        if coerce:
            value = self.coerce(value)
        value = clone(value)
        if index is None:
            self._entries.append(value)
        else:
            self._entries[index] = value
        return self

    def delete_value(self, index: int) -> ModelCollection:
        """Remove the entry at ``index``; out of range indexes are ignored."""
        if -len(self._entries) <= index < len(self._entries):
            del self._entries[index]
        return self

    def coerce(self, value: Any) -> Any:
        """Convert a value to the declared model type.

        A model is rebuilt from its stored values. Model types receive the
        value as ``values=``; other types get it as the only argument. The
        value is returned unchanged when there is no callable type.
        """
        model_type = self.get_type()
        if model_type is None or not callable(model_type):
            return value
        logger.debug("Coercing %s to %s", type(value).__name__, self)
        if isinstance(value, Model):
            value = value.get_values()
        if inspect.isclass(model_type) and issubclass(model_type, Model):
            return model_type(values=value)
        return model_type(value)

    def is_valid(self, return_errors: bool = False) -> bool | list[str] | None:
        """Validate every entry against the declared type.

        Args:
            return_errors: Return the error messages instead of a boolean

        Returns:
            A boolean, or (with return_errors) the list of error messages or
            None when there are none
        """
        model_type = self.get_type()
        errors = flatten(
            self.test(value, model_type, index) for index, value in enumerate(self._entries)
        )

        if return_errors:
            return errors or None

        return not errors

    def validate(self) -> ModelCollection:
        """Raise if any entry is invalid.

        Raises:
            ModelValidationError: Carrying the list of error messages
        """
        errors = self.is_valid(True)
        if not errors:
            return self
        logger.debug("Collection of %s failed validation with %d error(s)", self, len(errors))
        raise ModelValidationError(errors, str(self) or None)

    def test(self, value: Any = None, model_type: type | None = None, index: int | None = None) -> list[str]:
        """Validate one entry.

        Args:
            value: Entry to check
            model_type: Class the entry must be an instance of
            index: Entry position used in messages

        Returns:
            List of error messages, empty when valid
        """
        if model_type is None or not inspect.isclass(model_type):
            return [INVALID_TYPE_MESSAGE]

        if not isinstance(value, model_type):
            return [
                INSTANCE_MESSAGE.format(
                    index=index, actual=type(value).__name__, expected=model_type.__name__
                )
            ]

        if isinstance(value, Validatable):
            return value.is_valid(True) or []
        return []

    def to_dict(self, strict: bool = False) -> list[Any]:
        """Project the entries to plain dicts, lists and scalars."""
        return [project(value, strict) for value in self._entries]

    def to_json(self, strict: bool = False, **kwargs: Any) -> str:
        """Serialize ``to_dict()`` as JSON text.

        Raises:
            SerializationError: If an entry cannot be encoded
        """
        kwargs.setdefault("default", json_default)
        try:
            return json.dumps(self.to_dict(strict), **kwargs)
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Cannot serialize collection of {str(self) or 'untyped entries'}: {e}",
                context={"collection": str(self)},
            ) from e
