"""Type predicates and the registry that maps type names to them.

A predicate is a pure function ``(value, options) -> bool``. Attribute
descriptors name their type, and the validator looks the predicate up in a
``PredicateRegistry``. An unknown name yields ``None`` rather than an
exception so the validator can report it as an ordinary error string.

Example:
    ```python
    from modelknobs.predicates import default_registry, predicate

    default_registry.lookup("email")("someone@example.com", None)
    # True

    @predicate("postcode")
    def is_postcode(value, options=None):
        return isinstance(value, str) and len(value) <= 8
    ```
"""

from __future__ import annotations

import base64
import binascii
import ipaddress
import json
import logging
import math
import re
import uuid
from collections.abc import Callable, Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from modelknobs.exceptions import PredicateNotFoundError
from modelknobs.registry import Registry
from modelknobs.settings import Settings, default_settings
from modelknobs.utilities import exists, is_array, is_function, is_object, matches_formats

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, Any], bool]

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
ALPHA_PATTERN = re.compile(r"^[a-z]+$", re.IGNORECASE)
ALPHA_NUMERIC_PATTERN = re.compile(r"^[0-9a-z]+$", re.IGNORECASE)
HEX_PATTERN = re.compile(r"^[0-9a-f]+$", re.IGNORECASE)
INT_PATTERN = re.compile(r"^[-+]?(?:0|[1-9][0-9]*)$")
FLOAT_PATTERN = re.compile(r"^[-+]?(?:[0-9]+)?(?:\.[0-9]*)?(?:[eE][-+]?[0-9]+)?$")
NUMERIC_PATTERN = re.compile(r"^[-+]?(?:[0-9]*\.)?[0-9]+$")
TLD_PATTERN = re.compile(r"^(?:[a-z\u00a1-\uffff]{2,}|xn[a-z0-9-]{2,})$", re.IGNORECASE)
LABEL_PATTERN = re.compile(r"^[a-z\u00a1-\uffff0-9-]+$", re.IGNORECASE)
EMAIL_LOCAL_PATTERN = re.compile(
    r"^[a-z0-9!#$%&'*+\-/=?^_`{|}~]+(?:\.[a-z0-9!#$%&'*+\-/=?^_`{|}~]+)*$", re.IGNORECASE
)
WHITESPACE_PATTERN = re.compile(r"\s")

# Mobile number patterns per locale
PHONE_PATTERNS: dict[str, re.Pattern[str]] = {
    "en-GB": re.compile(r"^(?:\+?44|0)7\d{9}$"),
    "en-IE": re.compile(r"^(?:\+?353|0)8[356789]\d{7}$"),
    "en-US": re.compile(
        r"^(?:(?:\+1|1)?[ -]?)?(?:\([2-9][0-9]{2}\)|[2-9][0-9]{2})[ -]?[2-9][0-9]{2}[ -]?[0-9]{4}$"
    ),
    "en-CA": re.compile(
        r"^(?:(?:\+1|1)?[ -]?)?(?:\([2-9][0-9]{2}\)|[2-9][0-9]{2})[ -]?[2-9][0-9]{2}[ -]?[0-9]{4}$"
    ),
    "en-AU": re.compile(r"^(?:\+?61|0)4\d{8}$"),
    "en-IN": re.compile(r"^(?:\+?91|0)?[6789]\d{9}$"),
    "fr-FR": re.compile(r"^(?:\+?33|0)[67]\d{8}$"),
    "de-DE": re.compile(r"^(?:\+49|0)1(?:5[0-25-9]\d|6[023]|7[0-9])\d{7,8}$"),
}

URL_PROTOCOLS = ("http", "https", "ftp")
MAX_URL_LENGTH = 2083


class PredicateRegistry(Registry[Predicate]):
    """Registry of type predicates keyed by type name."""

    def __init__(self, name: str = "predicates"):
        super().__init__(name)

    def register_predicate(
        self, name: str, predicate: Predicate, allow_overwrite: bool = False
    ) -> None:
        """Register a predicate under a type name.

        Raises:
            OperationError: If the name is taken and allow_overwrite is False
        """
        self.register(name, predicate, allow_overwrite=allow_overwrite)

    def get(self, key: str) -> Predicate:
        """Get the predicate for a type name.

        Raises:
            PredicateNotFoundError: If no predicate is registered for the name
        """
        found = self.lookup(key)
        if found is None:
            raise PredicateNotFoundError(key, self.list_keys())
        return found

    def lookup(self, name: Any) -> Predicate | None:
        """Find the predicate for a type name.

        Returns:
            The predicate, or None when no predicate is registered for the name
        """
        if not isinstance(name, str):
            return None
        return self.get_optional(name)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, Decimal):
        return value.is_finite()
    return isinstance(value, float) and math.isfinite(value)


def _is_ip(value: Any, version: int | None = None) -> bool:
    if not isinstance(value, str):
        return False
    try:
        address = ipaddress.ip_address(value)
    except ValueError:
        return False
    return version is None or address.version == int(version)


def _is_fqdn(
    value: Any,
    require_tld: bool = True,
    allow_underscores: bool = False,
    allow_trailing_dot: bool = False,
) -> bool:
    if not isinstance(value, str) or not value:
        return False
    if allow_trailing_dot and value.endswith("."):
        value = value[:-1]

    parts = value.split(".")
    if require_tld:
        if len(parts) < 2:
            return False
        tld = parts.pop()
        if not TLD_PATTERN.match(tld):
            return False

    for part in parts:
        if allow_underscores:
            part = part.replace("_", "")
        if not part or len(part) > 63:
            return False
        if not LABEL_PATTERN.match(part):
            return False
        if part.startswith("-") or part.endswith("-"):
            return False
    return True


class BuiltinPredicates:
    """The built-in type predicates, parameterized by settings.

    Args:
        settings: Settings supplying the phone locale and temporal formats
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings

    def as_dict(self) -> dict[str, Predicate]:
        """Map every built-in type name to its predicate."""
        return {
            "array": self.array,
            "buffer": self.buffer,
            "string": self.string,
            "boolean": self.boolean,
            "ip": self.ip,
            "url": self.url,
            "slug": self.slug,
            "uuid": self.uuid,
            "fqdn": self.fqdn,
            "json": self.json,
            "email": self.email,
            "alpha": self.alpha,
            "base64": self.base64,
            "hex": self.hex,
            "alpha_numeric": self.alpha_numeric,
            "phone": self.phone,
            "function": self.function,
            "date": self.date,
            "time": self.time,
            "datetime": self.datetime,
            "daterange": self.daterange,
            "integer": self.integer,
            "float": self.float,
            "number": self.number,
            "object": self.object,
        }

    def array(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return exists(value) and is_array(value)

    def buffer(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return exists(value) and isinstance(value, (bytes, bytearray, memoryview))

    def string(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return exists(value) and isinstance(value, str)

    def boolean(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return exists(value) and isinstance(value, bool)

    def ip(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        version = (options or {}).get("version")
        return exists(value) and _is_ip(value, version)

    def url(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        """URL with an optional scheme whose host is an FQDN or IP address."""
        options = options or {}
        if not isinstance(value, str) or not value or len(value) >= MAX_URL_LENGTH:
            return False
        if WHITESPACE_PATTERN.search(value) or value.lower().startswith("mailto:"):
            return False

        rest = value
        if "://" in rest:
            scheme, rest = rest.split("://", 1)
            if scheme.lower() not in options.get("protocols", URL_PROTOCOLS):
                return False
        elif options.get("require_protocol"):
            return False

        for separator in ("#", "?", "/"):
            rest = rest.split(separator, 1)[0]
        if "@" in rest:
            rest = rest.rsplit("@", 1)[1]
        if not rest:
            return False

        if rest.startswith("["):
            host, _, remainder = rest[1:].partition("]")
            port = remainder[1:] if remainder.startswith(":") else remainder
            if not _is_ip(host, 6):
                return False
        else:
            host, _, port = rest.partition(":")
            if not (_is_ip(host) or _is_fqdn(host)):
                return False

        if port:
            return port.isdigit() and 0 < int(port) <= 65535
        return True

    def slug(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return exists(value) and isinstance(value, str) and not UUID_PATTERN.match(value)

    def uuid(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        if isinstance(value, uuid.UUID):
            return True
        return exists(value) and isinstance(value, str) and bool(UUID_PATTERN.match(value))

    def fqdn(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        options = options or {}
        return exists(value) and _is_fqdn(
            value,
            require_tld=options.get("require_tld", True),
            allow_underscores=options.get("allow_underscores", False),
            allow_trailing_dot=options.get("allow_trailing_dot", False),
        )

    def json(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        """JSON text holding an object or an array."""
        if not isinstance(value, str):
            return False
        try:
            parsed = json.loads(value)
        except (ValueError, RecursionError):
            return False
        return isinstance(parsed, (dict, list))

    def email(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        if not isinstance(value, str) or len(value) > 254 or "@" not in value:
            return False
        local, domain = value.rsplit("@", 1)
        if not local or len(local) > 64:
            return False
        return bool(EMAIL_LOCAL_PATTERN.match(local)) and _is_fqdn(domain)

    def alpha(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return isinstance(value, str) and bool(ALPHA_PATTERN.match(value))

    def base64(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        if not isinstance(value, str) or not value or len(value) % 4:
            return False
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            return False
        return True

    def hex(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return isinstance(value, str) and bool(HEX_PATTERN.match(value))

    def alpha_numeric(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return isinstance(value, str) and bool(ALPHA_NUMERIC_PATTERN.match(value))

    def phone(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        """Mobile phone number for ``options['locale']`` (or ``any``)."""
        if not isinstance(value, str):
            return False
        locale = (options or {}).get("locale") or self.settings.get_setting("phone_locale")
        if locale == "any":
            return any(pattern.match(value) for pattern in PHONE_PATTERNS.values())
        pattern = PHONE_PATTERNS.get(locale)
        if pattern is None:
            logger.warning("No phone pattern for locale %s", locale)
            return False
        return bool(pattern.match(value))

    def function(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return exists(value) and callable(value)

    def date(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        if isinstance(value, date):
            return True
        if not isinstance(value, str) or not value:
            return False
        if matches_formats(value, self.settings.get_setting("date_formats")):
            return True
        try:
            datetime.fromisoformat(value)
        except ValueError:
            return False
        return True

    def time(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return matches_formats(
            value, self.settings.get_setting("time_formats"), accept=(time, datetime)
        )

    def datetime(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return matches_formats(
            value, self.settings.get_setting("datetime_formats"), accept=(datetime,)
        )

    def daterange(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        """Two dates or datetimes, given as a sequence or as JSON text."""
        if not exists(value):
            return False
        candidate = value
        if isinstance(value, str):
            try:
                candidate = json.loads(value)
            except (ValueError, RecursionError):
                candidate = value
        if not is_array(candidate) or len(candidate) < 2:
            return False
        return all(
            self.date(bound, options) or self.datetime(bound, options)
            for bound in candidate[:2]
        )

    def integer(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        if isinstance(value, str):
            return bool(INT_PATTERN.match(value))
        if not _is_number(value):
            return False
        if isinstance(value, float):
            return value.is_integer()
        if isinstance(value, Decimal):
            return value == value.to_integral_value()
        return True

    def float(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        if isinstance(value, str):
            return value not in ("", ".", "-", "+") and bool(FLOAT_PATTERN.match(value))
        return _is_number(value)

    def number(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        if isinstance(value, str):
            return bool(NUMERIC_PATTERN.match(value))
        return _is_number(value)

    def object(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return exists(value) and is_object(value)


def build_registry(settings: Settings | None = None) -> PredicateRegistry:
    """Create a registry holding every built-in predicate.

    Args:
        settings: Settings for the locale and format dependent predicates

    Returns:
        A new PredicateRegistry
    """
    registry = PredicateRegistry()
    for name, fn in BuiltinPredicates(settings).as_dict().items():
        registry.register_predicate(name, fn)
    return registry


default_registry = build_registry()


def predicate(name: str, registry: PredicateRegistry | None = None, allow_overwrite: bool = False):
    """Decorator registering a function as the predicate for a type name.

    Args:
        name: Type name used in attribute descriptors
        registry: Target registry (default: ``default_registry``)
        allow_overwrite: Whether to replace an existing predicate
    """
    target = registry if registry is not None else default_registry

    def decorator(fn: Predicate) -> Predicate:
        if not is_function(fn):
            raise TypeError(f"Predicate for type {name} must be a function")
        target.register_predicate(name, fn, allow_overwrite=allow_overwrite)
        return fn

    return decorator
