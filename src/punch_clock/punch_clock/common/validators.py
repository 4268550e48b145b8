from __future__ import annotations

import re

from ..core.constants import SECRET_CODE_LENGTH
from ..core.exceptions import ValidationError

_SECRET_CODE_RE = re.compile(rf"^\d{{{SECRET_CODE_LENGTH}}}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_secret_code(value: str) -> str:
    code = (value or "").strip()
    if not code:
        raise ValidationError("Secret code is required")
    if not _SECRET_CODE_RE.match(code):
        raise ValidationError(f"Secret code must be exactly {SECRET_CODE_LENGTH} digits")
    return code


def require_non_negative(value, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number
