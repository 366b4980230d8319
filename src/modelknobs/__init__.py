"""Runtime data models and validation driven by declarative attribute schemas.

This package provides:

- **Attributes**: Per-field definitions (type, default, alias, transform, rules)
- **Models**: Records that resolve raw input against a schema and validate it
- **Collections**: Ordered lists of models validated against one model type
- **Predicates**: A pluggable registry of named type checks
- **Factory**: Model types built from configuration dicts or YAML files

Example:
    ```python
    from modelknobs import ModelCollection, define_model

    Person = define_model("Person", {
        "name": {"type": "string", "required": True},
        "email": {"type": "email"},
    })

    people = ModelCollection(Person, [{"name": "Ada"}, {"email": "x"}], coerce=True)
    people.is_valid(True)
    # ['name of type string is required', 'email should be of type email']
    ```
"""

from modelknobs.attributes import Attribute, coerce_attribute, coerce_schema
from modelknobs.collection import ModelCollection
from modelknobs.exceptions import (
    AttributeDefinitionError,
    ConfigurationError,
    ModelknobsError,
    ModelValidationError,
    NotFoundError,
    OperationError,
    PredicateNotFoundError,
    SerializationError,
    ValidationError,
)
from modelknobs.factory import ModelFactory, model_factory
from modelknobs.model import Model, Validatable, define_model
from modelknobs.predicates import (
    PredicateRegistry,
    build_registry,
    default_registry,
    predicate,
)
from modelknobs.registry import Registry
from modelknobs.resolution import Lazy, Literal
from modelknobs.settings import Settings, default_settings
from modelknobs.utilities import exists
from modelknobs.validator import Validator

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Attribute",
    "Model",
    "ModelCollection",
    "Validatable",
    "Validator",
    "define_model",
    "coerce_attribute",
    "coerce_schema",
    "Lazy",
    "Literal",
    "exists",
    # Predicates
    "PredicateRegistry",
    "build_registry",
    "default_registry",
    "predicate",
    "Registry",
    # Configuration
    "Settings",
    "default_settings",
    "ModelFactory",
    "model_factory",
    # Exceptions
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
