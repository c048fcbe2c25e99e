"""Helpers shared by the API handlers."""

from collections.abc import Iterable, Mapping
from typing import Any

from starlette.requests import Request

from todo_api.core.errors import InvalidUuidError, ValidationError
from todo_api.core.validation import RuleSet, Validator, is_valid_uuid, sanitize_array, sanitize_string


def payload(request: Request) -> dict[str, Any]:
    """The JSON object parsed by the dispatcher for ``expects_json`` routes."""
    return getattr(request.state, "payload", {})


def require_uuid(value: str, label: str = "ID") -> str:
    """Reject a path identifier that is not a UUID v4, before any storage access."""
    if not is_valid_uuid(value):
        raise InvalidUuidError(f"Invalid {label} format")
    return value


def sanitize_fields(data: Mapping[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    """Copy ``data`` with the named string and array fields sanitized.

    Values of other types are left alone so the type rules can report them.
    """
    cleaned = dict(data)
    for field in fields:
        value = cleaned.get(field)
        if isinstance(value, str):
            cleaned[field] = sanitize_string(value)
        elif isinstance(value, list):
            cleaned[field] = sanitize_array(value)
    return cleaned


def validate_or_raise(data: Mapping[str, Any], rules: RuleSet) -> None:
    """Run a rule set and raise ValidationError carrying the first message."""
    validator = Validator()
    if not validator.validate(data, rules):
        raise ValidationError(
            validator.first_error() or "Validation failed",
            details={"errors": validator.errors()},
        )


def require_any_field(data: Mapping[str, Any], fields: Iterable[str]) -> None:
    """Reject an update that names none of the updatable fields."""
    if not any(field in data for field in fields):
        raise ValidationError("At least one field must be provided")


def only_present(rules: RuleSet, data: Mapping[str, Any]) -> RuleSet:
    """Restrict a rule set to the fields present in an update payload."""
    return {field: field_rules for field, field_rules in rules.items() if field in data}
