"""
Validator: checks candidate records against the write contract before any side effect.
Pydantic errors are translated into ordered FieldError entries with a stable message vocabulary.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from accounts.errors import FieldError, ValidationError
from accounts.schemas.user import Credentials, UserWrite

# Message templates keyed by pydantic error type; ctx values fill the placeholders.
_MESSAGES = {
    "missing": "should have required property '{field}'",
    "string_too_short": "should NOT be shorter than {min_length} characters",
    "string_too_long": "should NOT be longer than {max_length} characters",
    "string_pattern_mismatch": 'should match pattern "{pattern}"',
    "string_type": "should be string",
    "int_type": "should be integer",
    "greater_than": "should be > {gt}",
    "model_type": "should be object",
    "model_attributes_type": "should be object",
}


def _path(loc: tuple[int | str, ...]) -> str:
    return "".join(f".{part}" for part in loc)


def _message(error: dict[str, Any]) -> str:
    template = _MESSAGES.get(error["type"])
    if template is None:
        return error["msg"]
    loc = error.get("loc") or ("",)
    return template.format(field=loc[-1], **(error.get("ctx") or {}))


def to_field_errors(exc: PydanticValidationError) -> list[FieldError]:
    """All errors, in the order pydantic reports them (declaration order of fields)."""
    return [FieldError(path=_path(e["loc"]), message=_message(e)) for e in exc.errors()]


def validate_user(record: Any) -> UserWrite:
    """Return the parsed write record or raise ValidationError with every field error."""
    try:
        return UserWrite.model_validate(record)
    except PydanticValidationError as exc:
        raise ValidationError(to_field_errors(exc)) from None


def validate_credentials(credentials: Any) -> Credentials:
    try:
        return Credentials.model_validate(credentials)
    except PydanticValidationError as exc:
        raise ValidationError(to_field_errors(exc)) from None


def write_json_schema() -> dict[str, Any]:
    """JSON Schema of the write contract. A fresh dict per call."""
    return UserWrite.model_json_schema()
