"""Model: a record holding a schema, owner options and resolved values.

Example:
    ```python
    from modelknobs import Model

    user = Model(
        {
            "first_name": {"type": "string", "required": True},
            "last_name": {"type": "string", "required": True},
            "full_name": {"type": "string", "alias": ["first_name", "last_name"]},
            "email": {"type": "email", "transform": str.lower},
            "role": {"type": "string", "choices": ["admin", "member"], "default_value": "member"},
        },
        {"first_name": "Ada", "last_name": "Lovelace", "email": "ADA@EXAMPLE.COM"},
    )

    user.get_value("full_name")
    # 'Ada Lovelace'
    user.is_valid()
    # True
    user.to_dict()
    # {'first_name': 'Ada', 'last_name': 'Lovelace', 'email': 'ada@example.com',
    #  'role': 'member', 'full_name': 'Ada Lovelace'}
    ```

Domain types are subclasses that declare ``schema``, or that ``define_model``
builds from one. ``ModelCollection`` constructs them with ``values=``.
"""

from __future__ import annotations

import copy
import inspect
import json
import logging
from collections.abc import Mapping
from typing import Any, ClassVar, Protocol, runtime_checkable

from modelknobs.attributes import Attribute, coerce_attribute, coerce_schema
from modelknobs.exceptions import ModelValidationError, SerializationError, ValidationError
from modelknobs.predicates import PredicateRegistry
from modelknobs.resolution import resolve_values
from modelknobs.utilities import exists, is_array, is_object, json_default, to_text
from modelknobs.validator import Validator

logger = logging.getLogger(__name__)


@runtime_checkable
class Validatable(Protocol):
    """Anything that validates itself and projects to plain data."""

    def is_valid(self, return_errors: bool = False) -> Any: ...

    def validate(self) -> Any: ...

    def to_dict(self, strict: bool = False) -> Any: ...


def project(value: Any, strict: bool = False) -> Any:
    """Project a stored value to plain dicts, lists and scalars.

    Models and collections are replaced by their ``to_dict`` output, and
    lists, tuples and mappings are projected element by element.
    """
    if isinstance(value, Validatable) and not inspect.isclass(value):
        return value.to_dict(strict=strict)
    if is_object(value):
        return {key: project(item, strict) for key, item in value.items()}
    if is_array(value):
        return [project(item, strict) for item in value]
    return value


class Model:
    """A typed record built from an attribute schema.

    Args:
        attributes: Mapping of field names to attribute definitions
        values: Raw values resolved against the attributes
        options: Owner options; ``input`` and ``output`` drive the visibility gate
        registry: Predicate registry (default: the class ``registry``)
    """

    schema: ClassVar[Mapping[str, Any]] = {}
    registry: ClassVar[PredicateRegistry | None] = None

    def __init__(
        self,
        attributes: Mapping[str, Attribute | Mapping[str, Any]] | None = None,
        values: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        registry: PredicateRegistry | None = None,
    ):
        self._attributes: dict[str, Attribute] = {}
        self._options: dict[str, Any] = {}
        self._values: dict[str, Any] = {}
        self._validator = Validator(registry if registry is not None else type(self).registry)

        self.set_attributes(attributes if attributes is not None else type(self).schema)
        self.set_options(options)
        self.set_values(values)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    def to_string(self, name_key: str | None = None, id_key: str | None = None) -> str:
        """Render the model as ``"{name}-{id}"``.

        A missing half is left out along with its hyphen.

        Args:
            name_key: Field holding the name (default: ``name``)
            id_key: Field holding the identifier (default: ``id``)
        """
        name = self.get_value(name_key or "name")
        identifier = self.get_value(id_key or "id")
        text = f"{to_text(name) if exists(name) else ''}-{to_text(identifier) if exists(identifier) else ''}"
        return text.removeprefix("-").removesuffix("-")

    def to_dict(self, strict: bool = False) -> dict[str, Any]:
        """Project the stored values to plain data.

        Args:
            strict: Only include fields declared by the schema

        Returns:
            Dictionary of plain values
        """
        return {key: project(value, strict) for key, value in self.get_values(strict).items()}

    def to_json(self, strict: bool = False, **kwargs: Any) -> str:
        """Serialize ``to_dict()`` as JSON text.

        Raises:
            SerializationError: If a value cannot be encoded
        """
        kwargs.setdefault("default", json_default)
        try:
            return json.dumps(self.to_dict(strict), **kwargs)
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Cannot serialize {type(self).__name__}: {e}",
                context={"model": type(self).__name__},
            ) from e

    def get_attributes(self) -> dict[str, Attribute]:
        """Get a copy of the attribute definitions."""
        return copy.deepcopy(self._attributes)

    def set_attributes(self, attributes: Mapping[str, Attribute | Mapping[str, Any]] | None) -> Model:
        """Replace the attribute definitions with a copy of ``attributes``."""
        self._attributes = coerce_schema(attributes)
        return self

    def get_attribute(self, key: str) -> Attribute | None:
        """Get the definition of one field, or None."""
        return self._attributes.get(key)

    def add_attribute(self, key: str, attribute: Attribute | Mapping[str, Any]) -> Model:
        """Add or replace the definition of one field."""
        self._attributes[key] = coerce_attribute(attribute, key)
        return self

    def delete_attribute(self, key: str) -> Model:
        """Remove the definition of one field (its value is kept)."""
        self._attributes.pop(key, None)
        return self

    def get_options(self) -> dict[str, Any]:
        return copy.deepcopy(self._options)

    def set_options(self, options: Mapping[str, Any] | None) -> Model:
        self._options = copy.deepcopy(dict(options)) if options else {}
        return self

    def get_option(self, key: str, default: Any = None) -> Any:
        return self._options.get(key, default)

    def get_values(self, strict: bool = False) -> dict[str, Any]:
        """Get the stored values.

        Args:
            strict: Only include fields declared by the schema
        """
        if strict:
            return {key: value for key, value in self._values.items() if key in self._attributes}
        return dict(self._values)

    def set_values(self, values: Mapping[str, Any] | Model | None) -> Model:
        """Resolve raw values against the schema and store the results.

        Every schema field is resolved, so fields absent from ``values`` fall
        back to their defaults.

        Raises:
            ValidationError: If values is not a mapping
        """
        if isinstance(values, Model):
            values = values.get_values()
        if values is not None and not isinstance(values, Mapping):
            raise ValidationError(
                f"Model values must be a mapping, got {type(values).__name__}",
                context={"model": type(self).__name__},
            )
        resolve_values(self._attributes, values, self._options, self._values)
        return self

    def get_value(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def add_value(self, key: str, value: Any) -> Model:
        """Resolve and store a single value.

        Other stored values are kept; aliased fields are recomputed.
        """
        resolve_values(self._attributes, {key: value}, self._options, self._values, partial=True)
        return self

    def delete_value(self, key: str) -> Model:
        self._values.pop(key, None)
        return self

    def is_valid(self, return_errors: bool = False) -> bool | list[str] | None:
        """Check the stored values against the schema.

        Args:
            return_errors: Return the error messages instead of a boolean

        Returns:
            A boolean, or (with return_errors) the list of error messages or
            None when there are none
        """
        errors = self._validator.validate(self._attributes, self._values, self._options)

        if return_errors:
            return errors or None

        return not errors

    def validate(self) -> Model:
        """Raise if the model is invalid.

        Returns:
            Self, for chaining

        Raises:
            ModelValidationError: Carrying the list of error messages
        """
        errors = self.is_valid(True)
        if not errors:
            return self
        logger.debug("%s failed validation with %d error(s)", type(self).__name__, len(errors))
        raise ModelValidationError(errors, type(self).__name__)

    def test(self, attribute: Attribute | Mapping[str, Any], key: str) -> list[str]:
        """Validate the stored value of ``key`` against ``attribute``.

        Returns:
            List of error messages, empty when valid
        """
        if not isinstance(attribute, Attribute):
            attribute = Attribute.from_dict(attribute, key)
        return self._validator.test(attribute, key, self.get_value(key))

    def custom_validation(
        self,
        value: Any = None,
        tests: list[Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> list[str] | None:
        """Run custom validators against a value.

        Returns:
            The collected messages, or None when there are none
        """
        return self._validator.custom_validation(value, tests, options)


def define_model(
    name: str,
    attributes: Mapping[str, Attribute | Mapping[str, Any]],
    options: Mapping[str, Any] | None = None,
    registry: PredicateRegistry | None = None,
    doc: str | None = None,
) -> type[Model]:
    """Create a Model subclass with a fixed schema.

    Instances are built as ``ModelType(values=None, options=None)``; options
    passed there replace the ones given here.

    Args:
        name: Class name
        attributes: Schema shared by every instance (each instance copies it)
        options: Default owner options
        registry: Predicate registry used by instances
        doc: Class docstring

    Returns:
        The new model type
    """
    schema = coerce_schema(attributes)
    default_options = dict(options or {})

    def __init__(self, values=None, options=None):
        Model.__init__(
            self,
            schema,
            values,
            options if options is not None else default_options,
            registry,
        )

    namespace = {
        "__init__": __init__,
        "__doc__": doc or f"Model type {name}.",
        "schema": schema,
        "registry": registry,
    }
    logger.debug("Defining model type %s with %d attribute(s)", name, len(schema))
    return type(name, (Model,), namespace)
