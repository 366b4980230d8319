"""Build model types from configuration dictionaries and YAML files."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Union

from modelknobs.exceptions import ConfigurationError
from modelknobs.model import Model, define_model
from modelknobs.predicates import PredicateRegistry
from modelknobs.registry import Registry
from modelknobs.settings import load_data_file

logger = logging.getLogger(__name__)

BUILTIN_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "lower": str.lower,
    "upper": str.upper,
    "strip": str.strip,
    "title": str.title,
    "int": int,
    "float": float,
    "str": str,
}


class ModelFactory:
    """Factory for creating model types from configuration.

    Configuration files can't hold functions, so ``transform`` and ``custom``
    entries given as strings are looked up by name among the factory's
    registered functions.

    Configuration Options:
        name (str): Model type name
        description (str): Optional docstring for the type
        options (dict): Default owner options (``input`` / ``output``)
        attributes (dict | list): Field definitions, either a mapping of
            field name to definition or a list of definitions carrying ``name``

    Example Configuration:
        models:
          - name: User
            attributes:
              - name: email
                type: email
                required: true
                transform: lower
              - name: role
                type: string
                choices: [admin, member]
                default: member
    """

    def __init__(self, registry: PredicateRegistry | None = None):
        self.registry = registry
        self.functions: Registry[Callable[..., Any]] = Registry("functions")
        for name, fn in BUILTIN_FUNCTIONS.items():
            self.functions.register(name, fn)

    def register_function(self, name: str, fn: Callable[..., Any], allow_overwrite: bool = False) -> None:
        """Make a function available to ``transform`` and ``custom`` by name."""
        self.functions.register(name, fn, allow_overwrite=allow_overwrite)

    def create(self, **config) -> type[Model]:
        """Create a model type from configuration.

        Args:
            **config: Model configuration

        Returns:
            A Model subclass

        Raises:
            ConfigurationError: If the configuration is malformed
        """
        name = config.get("name", "UnnamedModel")
        logger.info(f"Creating model type: {name}")

        attributes = self._collect_attributes(name, config.get("attributes", {}))
        return define_model(
            name,
            attributes,
            options=config.get("options"),
            registry=self.registry,
            doc=config.get("description"),
        )

    def load_models(self, path: Union[str, Path]) -> dict[str, type[Model]]:
        """Create every model type listed under ``models`` in a YAML or JSON file.

        Returns:
            Mapping of model name to model type
        """
        data = load_data_file(path)
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Model file must hold a mapping: {path}", context={"path": str(path)}
            )

        models: dict[str, type[Model]] = {}
        for model_config in data.get("models") or []:
            if not isinstance(model_config, dict) or not model_config.get("name"):
                logger.warning("Model configuration missing 'name', skipping")
                continue
            models[model_config["name"]] = self.create(**model_config)
        return models

    def _collect_attributes(self, model_name: str, attributes: Any) -> dict[str, dict[str, Any]]:
        """Normalize attribute configuration into ``{field: definition}``."""
        if isinstance(attributes, dict):
            entries = [{**definition, "name": key} for key, definition in attributes.items()]
        elif isinstance(attributes, list):
            entries = attributes
        else:
            raise ConfigurationError(
                f"Attributes of {model_name} must be a mapping or a list",
                context={"model": model_name},
            )

        result: dict[str, dict[str, Any]] = {}
        for entry in entries:
            field_name = entry.get("name") if isinstance(entry, dict) else None
            if not field_name:
                logger.warning(f"Attribute configuration in {model_name} missing 'name', skipping")
                continue
            definition = {k: v for k, v in entry.items() if k != "name"}
            result[field_name] = self._resolve_functions(model_name, definition)
        return result

    def _resolve_functions(self, model_name: str, definition: dict[str, Any]) -> dict[str, Any]:
        """Replace function names in ``transform``, ``custom`` and ``items``."""
        if isinstance(definition.get("transform"), str):
            definition["transform"] = self._lookup(model_name, definition["transform"])

        custom = definition.get("custom")
        if isinstance(custom, str):
            definition["custom"] = [self._lookup(model_name, custom)]
        elif isinstance(custom, list):
            definition["custom"] = [
                self._lookup(model_name, test) if isinstance(test, str) else test for test in custom
            ]

        if isinstance(definition.get("items"), dict):
            definition["items"] = self._resolve_functions(model_name, dict(definition["items"]))
        return definition

    def _lookup(self, model_name: str, function_name: str) -> Callable[..., Any]:
        fn = self.functions.get_optional(function_name)
        if fn is None:
            raise ConfigurationError(
                f"Unknown function '{function_name}' in {model_name}",
                context={"model": model_name, "available": self.functions.list_keys()},
            )
        return fn


# Module-level instance for convenience
model_factory = ModelFactory()
