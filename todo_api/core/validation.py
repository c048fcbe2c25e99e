"""Declarative field validation and input sanitization.

A rule set maps field names to an ordered list of ``Rule`` values::

    rules = {
        "name": [Rule.required(), Rule.string(), Rule.max_length(255), Rule.not_empty()],
        "priority": [Rule.enum(["low", "medium", "high"])],
    }

    validator = Validator()
    if not validator.validate(payload, rules):
        raise ValidationError(validator.first_error(), details={"errors": validator.errors()})

Validation never raises; it only collects human-readable messages. A field
that is missing or ``None`` is absent, and only ``REQUIRED`` fails on an
absent value.
"""

import html
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, assert_never

UUID_V4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Calendar date and a time of day; the offset is checked on the parsed value
DATETIME_PREFIX_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}")


class RuleKind(Enum):
    REQUIRED = "required"
    STRING = "string"
    BOOLEAN = "boolean"
    ARRAY = "array"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    NOT_EMPTY = "not_empty"
    UUID = "uuid"
    DATETIME = "datetime"
    ENUM = "enum"
    MAX_ITEMS = "max_items"
    ARRAY_ITEM_MAX_LENGTH = "array_item_max_length"


@dataclass(frozen=True)
class Rule:
    """A rule kind and its argument (a bound or an allowed-values tuple)."""

    kind: RuleKind
    arg: Any = None

    @classmethod
    def required(cls) -> "Rule":
        return cls(RuleKind.REQUIRED)

    @classmethod
    def string(cls) -> "Rule":
        return cls(RuleKind.STRING)

    @classmethod
    def boolean(cls) -> "Rule":
        return cls(RuleKind.BOOLEAN)

    @classmethod
    def array(cls) -> "Rule":
        return cls(RuleKind.ARRAY)

    @classmethod
    def min_length(cls, length: int) -> "Rule":
        return cls(RuleKind.MIN_LENGTH, length)

    @classmethod
    def max_length(cls, length: int) -> "Rule":
        return cls(RuleKind.MAX_LENGTH, length)

    @classmethod
    def not_empty(cls) -> "Rule":
        return cls(RuleKind.NOT_EMPTY)

    @classmethod
    def uuid(cls) -> "Rule":
        return cls(RuleKind.UUID)

    @classmethod
    def iso_datetime(cls) -> "Rule":
        return cls(RuleKind.DATETIME)

    @classmethod
    def enum(cls, allowed: Sequence[Any]) -> "Rule":
        return cls(RuleKind.ENUM, tuple(allowed))

    @classmethod
    def max_items(cls, count: int) -> "Rule":
        return cls(RuleKind.MAX_ITEMS, count)

    @classmethod
    def array_item_max_length(cls, length: int) -> "Rule":
        return cls(RuleKind.ARRAY_ITEM_MAX_LENGTH, length)


RuleSet = Mapping[str, Sequence[Rule]]


def is_valid_uuid(value: Any) -> bool:
    """Check for the textual UUID v4 form (version 4, RFC 4122 variant)."""
    return isinstance(value, str) and UUID_V4_PATTERN.match(value) is not None


def is_valid_datetime(value: Any) -> bool:
    """Check for an ISO 8601 timestamp with date, time and an offset or ``Z``."""
    if not isinstance(value, str) or DATETIME_PREFIX_PATTERN.match(value) is None:
        return False
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return False
    return parsed.tzinfo is not None


def _in_allowed(value: Any, allowed: Sequence[Any]) -> bool:
    # Type-preserving: True must not match 1, "1" must not match 1
    return any(type(value) is type(option) and value == option for option in allowed)


def check_rule(field: str, value: Any, rule: Rule) -> str | None:
    """Apply one rule to one value. Returns an error message or None."""
    if rule.kind is not RuleKind.REQUIRED and value is None:
        return None

    match rule.kind:
        case RuleKind.REQUIRED:
            if value is None or value == "":
                return f"{field} is required"
        case RuleKind.STRING:
            if not isinstance(value, str):
                return f"{field} must be a string"
        case RuleKind.BOOLEAN:
            if not isinstance(value, bool):
                return f"{field} must be a boolean"
        case RuleKind.ARRAY:
            if not isinstance(value, list):
                return f"{field} must be an array"
        case RuleKind.MIN_LENGTH:
            if isinstance(value, str) and len(value) < rule.arg:
                return f"{field} must be at least {rule.arg} characters"
        case RuleKind.MAX_LENGTH:
            if isinstance(value, str) and len(value) > rule.arg:
                return f"{field} must not exceed {rule.arg} characters"
        case RuleKind.NOT_EMPTY:
            if isinstance(value, str) and value.strip() == "":
                return f"{field} cannot be empty or whitespace only"
        case RuleKind.UUID:
            if not is_valid_uuid(value):
                return f"{field} must be a valid UUID"
        case RuleKind.DATETIME:
            if not is_valid_datetime(value):
                return f"{field} must be a valid ISO 8601 datetime"
        case RuleKind.ENUM:
            if not _in_allowed(value, rule.arg):
                allowed = ", ".join(str(option) for option in rule.arg)
                return f"{field} must be one of: {allowed}"
        case RuleKind.MAX_ITEMS:
            if isinstance(value, list) and len(value) > rule.arg:
                return f"{field} must not exceed {rule.arg} items"
        case RuleKind.ARRAY_ITEM_MAX_LENGTH:
            if isinstance(value, list):
                for item in value:
                    if isinstance(item, str) and len(item) > rule.arg:
                        return f"{field} items must not exceed {rule.arg} characters"
        case _:
            assert_never(rule.kind)
    return None


class Validator:
    """Evaluates a rule set against a payload and keeps the errors."""

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def validate(self, data: Mapping[str, Any], rules: RuleSet) -> bool:
        self._errors = {}
        for field, field_rules in rules.items():
            value = data.get(field)
            for rule in field_rules:
                message = check_rule(field, value, rule)
                if message is not None:
                    self._errors.setdefault(field, []).append(message)
        return not self._errors

    def errors(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self._errors.items()}

    def first_error(self) -> str | None:
        for messages in self._errors.values():
            if messages:
                return messages[0]
        return None


def sanitize_string(value: str | None) -> str | None:
    """Trim whitespace and HTML-escape ``& < > " '``."""
    if value is None:
        return None
    return html.escape(value.strip(), quote=True)


def sanitize_array(values: list[Any] | None) -> list[Any] | None:
    """Sanitize every string element; other elements pass through."""
    if values is None:
        return None
    return [sanitize_string(item) if isinstance(item, str) else item for item in values]
