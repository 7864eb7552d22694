"""Message resolution for constraint violations.

This module turns ``ConstraintViolation`` records into human-readable
messages for a requested locale. It never takes part in validation itself:
it only runs on demand, after the violations were collected.

Templates live in a ``MessageStore`` keyed by locale tag. The store ships
with the bundles found in ``objvalid/messages`` (``messages.json`` is the
default bundle, ``messages_<tag>.json`` the localized ones) and accepts
additional or overriding templates through ``register`` and ``load_json``.

Lookup for a template key tries, in order:

1. the exact locale (``pt_BR``)
2. the language only (``pt``)
3. the default bundle (tag ``""``)

and finally the default bundle's generic ``Constraint`` template. When even
that is missing, ``MissingTemplateError`` is raised.

Templates reference constraint parameters by name (``{min}``, ``{values}``)
and the rejected value as ``{validatedValue}``. Values are formatted with
the separators and date patterns of the resolved bundle.

Usage:
    >>> from objvalid.constraints import greater
    >>> from objvalid.errors import ConstraintViolation
    >>> violation = ConstraintViolation("age", -1, greater(0))
    >>> resolver = MessageResolver()
    >>> resolver.resolve(violation, "en")
    'Must be greater than 0'
    >>> resolver.resolve(violation, "pt-BR")
    'Deve ser maior que 0'
"""

import json
import logging
import numbers
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from jsonschema import Draft7Validator

from objvalid.constraints import Constraint
from objvalid.errors import ConstraintViolation, MissingTemplateError

logger = logging.getLogger(__name__)

DEFAULT_BUNDLE = ""
GENERIC_KEY = "Constraint"
VALIDATED_VALUE = "validatedValue"
PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")

BUNDLE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": {"type": "string"},
}

Draft7Validator.check_schema(BUNDLE_SCHEMA)
_bundle_validator = Draft7Validator(BUNDLE_SCHEMA)

# Formatter settings stored alongside the templates
GROUPING_SEPARATOR_KEY = "formatters.number.groupingSeparator"
DECIMAL_SEPARATOR_KEY = "formatters.number.decimalSeparator"
ITERABLE_SEPARATOR_KEY = "formatters.iterable.separator"
DATE_PATTERN_KEY = "formatters.date.pattern"
DATETIME_PATTERN_KEY = "formatters.datetime.pattern"

FORMATTER_DEFAULTS: Dict[str, str] = {
    GROUPING_SEPARATOR_KEY: ",",
    DECIMAL_SEPARATOR_KEY: ".",
    ITERABLE_SEPARATOR_KEY: ", ",
    DATE_PATTERN_KEY: "%Y-%m-%d",
    DATETIME_PATTERN_KEY: "%Y-%m-%d %H:%M:%S",
}


def normalize_locale(tag: Optional[str]) -> str:
    """Normalize a locale tag to ``language[_REGION]``.

    Examples:
        >>> normalize_locale("pt-br")
        'pt_BR'
        >>> normalize_locale("EN")
        'en'
        >>> normalize_locale(None)
        ''
    """
    if not tag:
        return DEFAULT_BUNDLE
    parts = tag.replace("-", "_").split("_")
    language = parts[0].lower()
    rest = [p.upper() if len(p) == 2 else p for p in parts[1:] if p]
    return "_".join([language] + rest)


def candidate_locales(tag: str) -> List[str]:
    """Ordered locale tags to search for ``tag``, ending with the default bundle.

    Examples:
        >>> candidate_locales("pt_BR")
        ['pt_BR', 'pt', '']
        >>> candidate_locales("")
        ['']
    """
    candidates: List[str] = []
    if tag:
        candidates.append(tag)
        language = tag.split("_")[0]
        if language != tag:
            candidates.append(language)
    candidates.append(DEFAULT_BUNDLE)
    return candidates


def _locale_from_filename(stem: str) -> str:
    # messages.json -> "", messages_pt_BR.json -> "pt_BR"
    _, _, tag = stem.partition("_")
    return normalize_locale(tag)


@lru_cache(maxsize=None)
def _packaged_bundles() -> Dict[str, Dict[str, str]]:
    bundles: Dict[str, Dict[str, str]] = {}
    folder = resources.files("objvalid") / "messages"
    for entry in folder.iterdir():
        if not entry.name.endswith(".json"):
            continue
        messages = json.loads(entry.read_text(encoding="utf-8"))
        _bundle_validator.validate(messages)
        bundles[_locale_from_filename(entry.name[: -len(".json")])] = messages
    logger.debug("Loaded packaged message bundles: %s", sorted(bundles))
    return bundles


class MessageStore:
    """Locale-keyed message templates.

    Attributes:
        bundles: Mapping of normalized locale tag to ``{key: template}``

    Examples:
        >>> store = MessageStore(include_defaults=False)
        >>> store.register("es", {"NotNull": "No puede ser nulo"})
        >>> store.find("NotNull", "es_MX")
        'No puede ser nulo'
        >>> store.find("NotNull", "fr") is None
        True
    """

    def __init__(
        self,
        bundles: Optional[Dict[str, Dict[str, str]]] = None,
        include_defaults: bool = True,
    ) -> None:
        """Initialize the store.

        Args:
            bundles: Optional extra bundles keyed by locale tag, layered over the defaults
            include_defaults: Whether to start from the packaged bundles

        Raises:
            jsonschema.ValidationError: If a bundle is not a flat mapping of strings
        """
        self.bundles: Dict[str, Dict[str, str]] = {}
        if include_defaults:
            for tag, messages in _packaged_bundles().items():
                self.bundles[tag] = dict(messages)
        for tag, messages in (bundles or {}).items():
            self.register(tag, messages)

    def register(self, locale: str, messages: Dict[str, str]) -> None:
        """Add templates for ``locale``, overriding existing keys.

        Raises:
            jsonschema.ValidationError: If ``messages`` is not a flat mapping of strings
        """
        _bundle_validator.validate(messages)
        self.bundles.setdefault(normalize_locale(locale), {}).update(messages)

    def load_json(self, path: Union[str, Path], locale: str) -> None:
        """Register the templates of a JSON document for ``locale``."""
        with open(path, "r", encoding="utf-8") as fh:
            messages = json.load(fh)
        self.register(locale, messages)

    def find(self, key: str, locale: str) -> Optional[str]:
        """Look up ``key`` along the fallback chain of ``locale``; ``None`` if absent."""
        for tag in candidate_locales(normalize_locale(locale)):
            template = self.bundles.get(tag, {}).get(key)
            if template:
                logger.debug("Template '%s' for locale '%s' found in bundle '%s'", key, locale, tag)
                return template
        return None

    def template(self, key: str, locale: str) -> str:
        """Look up ``key``, falling back to the generic template.

        Raises:
            MissingTemplateError: If neither ``key`` nor the generic template exists
        """
        template = self.find(key, locale)
        if template is not None:
            return template

        generic = self.bundles.get(DEFAULT_BUNDLE, {}).get(GENERIC_KEY)
        if generic:
            logger.warning("No template for '%s' (locale '%s'), using generic template", key, locale)
            return generic

        raise MissingTemplateError(key, locale, candidate_locales(normalize_locale(locale)))

    def setting(self, key: str, locale: str) -> str:
        """Formatter setting for ``locale``, defaulting to ``FORMATTER_DEFAULTS``."""
        value = self.find(key, locale)
        return value if value is not None else FORMATTER_DEFAULTS[key]


TypeFormatter = Callable[[Any, "ValueFormatter"], str]
"""Type alias for custom value formatters.

A formatter receives the value and the ``ValueFormatter`` of the current
locale, so it can read bundle settings or format nested values.
"""


class ValueFormatter:
    """Formats parameter and rejected values for one locale.

    Formatters registered by type are looked up along the value's MRO and
    take precedence over the built-in rules below.
    """

    def __init__(
        self,
        store: MessageStore,
        locale: str,
        formatters: Optional[Mapping[type, TypeFormatter]] = None,
    ) -> None:
        self.store = store
        self.locale = locale
        self.formatters: Mapping[type, TypeFormatter] = formatters or {}

    def lookup(self, value_type: type) -> Optional[TypeFormatter]:
        """Registered formatter for ``value_type`` or its nearest base class."""
        for klass in value_type.__mro__:
            formatter = self.formatters.get(klass)
            if formatter is not None:
                return formatter
        return None

    def format(self, value: Any) -> str:
        if value is None:
            return ""
        custom = self.lookup(type(value))
        if custom is not None:
            return custom(value, self)
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, numbers.Number) and not isinstance(value, complex):
            return self.format_number(value)
        if isinstance(value, datetime):
            if value.time() == time(0) and value.tzinfo is None:
                return value.strftime(self.store.setting(DATE_PATTERN_KEY, self.locale))
            return value.strftime(self.store.setting(DATETIME_PATTERN_KEY, self.locale))
        if isinstance(value, date):
            return value.strftime(self.store.setting(DATE_PATTERN_KEY, self.locale))
        if isinstance(value, (set, frozenset)):
            return self.format_iterable(_stable_order(value))
        if isinstance(value, (list, tuple)):
            return self.format_iterable(value)
        return str(value)

    def format_number(self, value: Any) -> str:
        try:
            text = f"{Decimal(str(value)):,f}"
        except (InvalidOperation, ValueError):
            return str(value)
        grouping = self.store.setting(GROUPING_SEPARATOR_KEY, self.locale)
        decimal = self.store.setting(DECIMAL_SEPARATOR_KEY, self.locale)
        return text.replace(",", "\0").replace(".", decimal).replace("\0", grouping)

    def format_iterable(self, values: Iterable[Any]) -> str:
        separator = self.store.setting(ITERABLE_SEPARATOR_KEY, self.locale)
        return separator.join(self.format(v) for v in values)


def _stable_order(values: Iterable[Any]) -> List[Any]:
    try:
        return sorted(values)
    except TypeError:
        return list(values)


@dataclass(frozen=True)
class ConstraintViolationMessage:
    """A violation together with its resolved message.

    Attributes:
        property: Path of the rejected value
        value: The rejected value (``None`` when absent)
        constraint: The constraint that failed
        message: Message resolved for the requested locale
    """
    property: str
    value: Any
    constraint: Constraint
    message: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"property": self.property}
        if self.value is not None:
            result["value"] = self.value
        result.update(self.constraint.to_dict())
        result["message"] = self.message
        return result


class MessageResolver:
    """Resolves violation messages with locale fallback.

    Attributes:
        store: Template store used for lookups
        default_locale: Locale used when a call does not name one
        formatters: Custom value formatters keyed by type

    Examples:
        >>> from decimal import Decimal
        >>> from objvalid.constraints import greater
        >>> from objvalid.errors import ConstraintViolation
        >>> resolver = MessageResolver()
        >>> resolver.register_formatter(Decimal, lambda v, fmt: f"${v:.2f}")
        >>> resolver.resolve(ConstraintViolation("price", Decimal(0), greater(Decimal(5))))
        'Must be greater than $5.00'
    """

    def __init__(
        self,
        store: Optional[MessageStore] = None,
        default_locale: str = "en",
        formatters: Optional[Mapping[type, TypeFormatter]] = None,
    ) -> None:
        self.store = store if store is not None else MessageStore()
        self.default_locale = normalize_locale(default_locale)
        self.formatters: Dict[type, TypeFormatter] = dict(formatters or {})

    def register_formatter(self, value_type: type, formatter: TypeFormatter) -> None:
        """Format values of ``value_type`` (and its subclasses) with ``formatter``."""
        self.formatters[value_type] = formatter

    def unregister_formatter(self, value_type: type) -> None:
        """Remove the formatter registered for exactly ``value_type``, if any."""
        self.formatters.pop(value_type, None)

    def resolve(self, violation: ConstraintViolation, locale: Optional[str] = None) -> str:
        """Return the interpolated message for ``violation``.

        Placeholders are substituted in one pass, so parameter text that looks
        like a placeholder is inserted verbatim. Unknown placeholders are kept.

        Raises:
            MissingTemplateError: If no template exists in any tier
        """
        tag = normalize_locale(locale) if locale else self.default_locale
        constraint = violation.constraint
        template = self.store.template(constraint.message_key, tag)

        formatter = ValueFormatter(self.store, tag, self.formatters)
        values: Dict[str, Any] = dict(constraint.params)
        values[VALIDATED_VALUE] = violation.value

        def substitute(match: "re.Match[str]") -> str:
            name = match.group(1)
            if name not in values:
                return match.group(0)
            return formatter.format(values[name])

        return PLACEHOLDER_PATTERN.sub(substitute, template)

    def to_message(
        self, violation: ConstraintViolation, locale: Optional[str] = None
    ) -> ConstraintViolationMessage:
        return ConstraintViolationMessage(
            property=violation.property,
            value=violation.value,
            constraint=violation.constraint,
            message=self.resolve(violation, locale),
        )

    def map_to_message(
        self, violations: Iterable[ConstraintViolation], locale: Optional[str] = None
    ) -> List[ConstraintViolationMessage]:
        """Resolve every violation, preserving order."""
        return [self.to_message(v, locale) for v in violations]


__all__ = [
    "BUNDLE_SCHEMA",
    "ConstraintViolationMessage",
    "DEFAULT_BUNDLE",
    "GENERIC_KEY",
    "MessageResolver",
    "MessageStore",
    "TypeFormatter",
    "ValueFormatter",
    "candidate_locales",
    "normalize_locale",
]
