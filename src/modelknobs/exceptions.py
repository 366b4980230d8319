"""Exception hierarchy for modelknobs.

Every exception raised by the package derives from ``ModelknobsError``, which
carries an optional ``context`` dictionary for structured error details.

Validation failures are normally reported as lists of message strings (see
``Model.is_valid``). Only ``Model.validate`` and ``ModelCollection.validate``
convert those lists into a raised ``ModelValidationError``.

Example:
    ```python
    from modelknobs import Model, ModelValidationError

    model = Model({"email": {"type": "email", "required": True}})
    try:
        model.validate()
    except ModelValidationError as e:
        print(e.errors)
        # ['email of type email is required']
    ```
"""

from __future__ import annotations

import json
from typing import Any, Dict, List


class ModelknobsError(Exception):
    """Base exception for all modelknobs errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (takes precedence when both are given)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationError(ModelknobsError):
    """Raised when data or definitions fail validation checks."""

    pass


class ConfigurationError(ModelknobsError):
    """Raised when settings or factory configuration is invalid or missing."""

    pass


class NotFoundError(ModelknobsError):
    """Raised when a requested item is not registered."""

    pass


class OperationError(ModelknobsError):
    """Raised when a registry or model operation cannot be performed."""

    pass


class SerializationError(ModelknobsError):
    """Raised when a model cannot be projected to JSON text."""

    pass


class ModelValidationError(ValidationError):
    """Raised by ``validate()`` when a model or collection holds errors.

    The message is the JSON-serialized list of error strings, in field or
    index order.
    """

    def __init__(self, errors: List[str], model_name: str | None = None):
        self.errors = list(errors)
        self.model_name = model_name
        context: Dict[str, Any] = {"errors": self.errors}
        if model_name:
            context["model"] = model_name
        super().__init__(json.dumps(self.errors), context=context)


class AttributeDefinitionError(ValidationError):
    """Raised when an attribute descriptor is structurally malformed."""

    def __init__(self, key: str | None, message: str):
        self.key = key
        if key is not None:
            message = f"Attribute '{key}': {message}"
        super().__init__(message, context={"key": key} if key is not None else None)


class PredicateNotFoundError(NotFoundError):
    """Raised when a predicate is requested by name and not registered."""

    def __init__(self, name: str, available: List[str] | None = None):
        self.name = name
        self.available = available or []
        super().__init__(
            f"No validation function for type {name}",
            context={"type": name, "available": self.available},
        )


__all__ = [
    "ModelknobsError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
    "SerializationError",
    "ModelValidationError",
    "AttributeDefinitionError",
    "PredicateNotFoundError",
]
