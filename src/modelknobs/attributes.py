"""Attribute descriptors: the per-field definitions of a model schema.

A schema maps field names to ``Attribute`` instances. Plain mappings are
accepted wherever an attribute is expected and converted on ingestion, so
both of these declare the same field:

    ```python
    {"email": {"type": "email", "required": True}}
    {"email": Attribute(type="email", required=True)}
    ```
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import MISSING, dataclass
from dataclasses import field as dataclass_field
from dataclasses import fields as dataclass_fields
from typing import Any

from modelknobs.exceptions import AttributeDefinitionError

logger = logging.getLogger(__name__)

# Accepted spellings for default_value in plain mappings
DEFAULT_KEYS = ("default_value", "default")


@dataclass
class Attribute:
    """Definition of a single model field.

    Attributes:
        type: Name of the type predicate used to check the value
        required: Whether an absent value is an error
        default_value: Value (or ``(key, type)`` factory) used when absent
        alias: Field name, or names joined with spaces, the value is copied from
        transform: Function applied to the resolved value
        choices: Closed set of allowed values
        items: Definition applied to every element of a list or mapping value
        custom: Extra validators ``(value, options) -> error | None``
        input: Field only exists on input models
        output: Field only exists on output models
        options: Passed through to the type predicate and custom validators
        description: Free text describing the field
    """

    type: str | None = None
    required: bool = False
    default_value: Any = None
    alias: str | Sequence[str] | None = None
    transform: Callable[[Any], Any] | None = None
    choices: Sequence[Any] | None = None
    items: Attribute | None = None
    custom: list[Callable[..., Any]] = dataclass_field(default_factory=list)
    input: bool = False
    output: bool = False
    options: dict[str, Any] = dataclass_field(default_factory=dict)
    description: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], key: str | None = None) -> Attribute:
        """Create an attribute from a plain mapping.

        Args:
            data: Mapping of descriptor keys
            key: Field name, used in error and log messages

        Returns:
            A new, independent Attribute

        Raises:
            AttributeDefinitionError: If the mapping is malformed
        """
        if not isinstance(data, Mapping):
            raise AttributeDefinitionError(
                key, f"definition must be a mapping, got {type(data).__name__}"
            )

        known = {f.name for f in dataclass_fields(cls)}
        kwargs: dict[str, Any] = {}
        for name, value in data.items():
            if name in DEFAULT_KEYS:
                kwargs.setdefault("default_value", copy.deepcopy(value))
            elif name in known:
                kwargs[name] = copy.deepcopy(value)
            else:
                logger.warning("Ignoring unknown key '%s' in definition of %s", name, key)

        if kwargs.get("items") is not None:
            kwargs["items"] = coerce_attribute(kwargs["items"], key)

        custom = kwargs.get("custom")
        if custom is None:
            kwargs.pop("custom", None)
        elif callable(custom):
            kwargs["custom"] = [custom]
        elif isinstance(custom, (list, tuple)):
            kwargs["custom"] = list(custom)
        else:
            raise AttributeDefinitionError(key, "custom must be a function or a list of functions")

        if kwargs.get("options") is None:
            kwargs.pop("options", None)
        elif not isinstance(kwargs["options"], Mapping):
            raise AttributeDefinitionError(key, "options must be a mapping")
        else:
            kwargs["options"] = dict(kwargs["options"])

        if kwargs.get("transform") is not None and not callable(kwargs["transform"]):
            raise AttributeDefinitionError(key, "transform must be callable")

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert the attribute to its plain mapping form.

        Keys holding their default are left out.
        """
        result: dict[str, Any] = {}
        for f in dataclass_fields(self):
            value = getattr(self, f.name)
            default = f.default if f.default is not MISSING else f.default_factory()  # type: ignore[misc]
            if value is default or (type(value) is type(default) and value == default):
                continue
            if f.name == "items":
                value = value.to_dict()
            result[f.name] = value
        return result

    def is_hidden(self, options: Mapping[str, Any] | None) -> bool:
        """Check the visibility gate for an owner's options.

        An input-only field is hidden from output models, and an output-only
        field is hidden from input models.
        """
        options = options or {}
        return bool(
            (self.input and options.get("output"))
            or (self.output and options.get("input"))
        )

    def get(self, name: str, default: Any = None) -> Any:
        """Mapping-style access to descriptor keys."""
        return getattr(self, name, default)

    def __getitem__(self, name: str) -> Any:
        try:
            return getattr(self, name)
        except AttributeError:
            raise KeyError(name) from None


def coerce_attribute(value: Attribute | Mapping[str, Any], key: str | None = None) -> Attribute:
    """Return an independent Attribute built from an Attribute or a mapping.

    Functions held by the descriptor are shared; everything else is copied.
    """
    if isinstance(value, Attribute):
        return copy.deepcopy(value)
    return Attribute.from_dict(value, key)


def coerce_schema(
    attributes: Mapping[str, Attribute | Mapping[str, Any]] | None,
) -> dict[str, Attribute]:
    """Convert a schema mapping into an owned ``{name: Attribute}`` dict.

    Raises:
        AttributeDefinitionError: If the schema or any descriptor is malformed
    """
    if attributes is None:
        return {}
    if not isinstance(attributes, Mapping):
        raise AttributeDefinitionError(
            None, f"Schema must be a mapping, got {type(attributes).__name__}"
        )
    return {key: coerce_attribute(value, key) for key, value in attributes.items()}
