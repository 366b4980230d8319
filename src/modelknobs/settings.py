"""Library settings with defaults, file loading and environment overrides.

Settings tune the built-in type predicates: the phone locale and the
``strptime`` formats accepted by the ``date``, ``time`` and ``datetime``
types.

Environment variable format:
    MODELKNOBS_<SETTING>

Examples:
    - MODELKNOBS_PHONE_LOCALE=en-US -> phone_locale = "en-US"
    - MODELKNOBS_TIME_FORMATS='["%H:%M"]' -> time_formats = ["%H:%M"]
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Union

import yaml  # type: ignore[import-untyped]

from modelknobs.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "phone_locale": "en-GB",
    "date_formats": [
        "%Y-%m-%d",
        "%Y/%m/%d",
        "%m/%d/%Y",
        "%d/%m/%Y",
        "%d %B %Y",
        "%B %d, %Y",
        "%a, %d %b %Y %H:%M:%S %Z",
    ],
    "time_formats": ["%H:%M", "%H:%M:%S", "%H:%M:%S%z"],
    "datetime_formats": [
        "%Y-%m-%d %H:%M",
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d %H:%M:%S%z",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%dT%H:%M:%S%z",
        "%Y-%m-%dT%H:%M:%S.%f%z",
    ],
}


def load_data_file(path: Union[str, Path]) -> Any:
    """Read a YAML or JSON file.

    Args:
        path: Path to a ``.yaml``, ``.yml`` or ``.json`` file

    Returns:
        The parsed document

    Raises:
        ConfigurationError: If the file is missing, unsupported or malformed
    """
    path = Path(path).resolve()

    if not path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {path}", context={"path": str(path)}
        )

    suffix = path.suffix.lower()
    try:
        with open(path, encoding="utf-8") as f:
            if suffix in (".yaml", ".yml"):
                return yaml.safe_load(f)
            elif suffix == ".json":
                return json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Could not parse configuration file {path}: {e}", context={"path": str(path)}
        ) from e

    raise ConfigurationError(
        f"Unsupported file format: {suffix}", context={"path": str(path)}
    )


class Settings:
    """Manages predicate settings and their defaults.

    Values are resolved in this order: explicitly set values, loaded values
    (first seen takes precedence), environment overrides, built-in defaults.
    """

    ENV_PREFIX = "MODELKNOBS_"

    def __init__(self, settings: Dict[str, Any] | None = None, use_env: bool = True) -> None:
        """Initialize the settings.

        Args:
            settings: Optional settings dictionary to load
            use_env: Whether to apply ``MODELKNOBS_*`` environment overrides
        """
        self._settings: Dict[str, Any] = {}
        if settings:
            self.load_settings(settings)
        if use_env:
            self.load_settings(self.get_env_overrides())

    @classmethod
    def from_file(cls, path: Union[str, Path], use_env: bool = True) -> "Settings":
        """Create settings from a YAML or JSON file.

        The file may hold the settings at top level or under a ``settings``
        key.
        """
        data = load_data_file(path) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Settings file must contain a mapping: {path}", context={"path": str(path)}
            )
        if isinstance(data.get("settings"), dict):
            data = data["settings"]
        return cls(data, use_env=use_env)

    def load_settings(self, settings: Dict[str, Any]) -> None:
        """Load settings from a dictionary.

        Args:
            settings: Settings dictionary
        """
        for key, value in settings.items():
            if key not in DEFAULT_SETTINGS:
                logger.warning("Ignoring unknown setting: %s", key)
                continue
            if key not in self._settings:
                self._settings[key] = copy.deepcopy(value)

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value.

        Args:
            key: Setting key
            default: Default value if neither set nor built in

        Returns:
            Setting value or default
        """
        if key in self._settings:
            return self._settings[key]
        if key in DEFAULT_SETTINGS:
            return copy.deepcopy(DEFAULT_SETTINGS[key])
        return default

    def set_setting(self, key: str, value: Any) -> None:
        """Set a setting value, replacing any loaded one."""
        self._settings[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """Get the effective settings, defaults included."""
        return {key: self.get_setting(key) for key in DEFAULT_SETTINGS}

    def get_env_overrides(self) -> Dict[str, Any]:
        """Collect ``MODELKNOBS_*`` environment overrides.

        Returns:
            Dictionary mapping setting names to parsed values
        """
        overrides = {}

        for key, value in os.environ.items():
            if key.startswith(self.ENV_PREFIX):
                name = key[len(self.ENV_PREFIX):].lower()
                overrides[name] = self._parse_value(value)

        return overrides

    def _parse_value(self, value: str) -> Any:
        """Parse an environment variable value to an appropriate type.

        Args:
            value: String value from environment

        Returns:
            Parsed value (list, bool, int, float, or the original string)
        """
        if value.startswith("[") or value.startswith("{"):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        if value.lower() in ["true", "yes"]:
            return True
        elif value.lower() in ["false", "no"]:
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value


default_settings = Settings()
