"""Field rule checks used by [Validator][smarthub.validation.validator.Validator].

Private helpers, one per rule. Each returns ``None`` when the value passes
or a short message fragment (``"is required"``, ``"must be at most 50
characters"``) when it does not, so the caller can collect every
violation before raising.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime
from enum import StrEnum
from typing import Any


def check_no_null(value: Any) -> str | None:
    """Reject non-strings and strings with null bytes (PostgreSQL incompatible)."""
    if not isinstance(value, str):
        return f"must be a string, got {type(value).__name__}"
    if "\x00" in value:
        return "must not contain null bytes"
    return None


def check_required_length(
    value: Any, *, min_length: int = 1, max_length: int | None = None
) -> str | None:
    """Required string whose character count lies in ``[min_length, max_length]``."""
    if problem := check_no_null(value):
        return problem
    if not value:
        return "is required"
    if len(value) < min_length:
        return f"must be at least {min_length} characters"
    if max_length is not None and len(value) > max_length:
        return f"must be at most {max_length} characters"
    return None


def check_optional_length(value: Any, *, max_length: int) -> str | None:
    """Optional string (empty allowed) of at most ``max_length`` characters."""
    if problem := check_no_null(value):
        return problem
    if len(value) > max_length:
        return f"must be at most {max_length} characters"
    return None


def check_alphanumeric(value: str) -> str | None:
    """ASCII letters and digits only; empty passes."""
    if value and not (value.isascii() and value.isalnum()):
        return "must contain only letters and digits"
    return None


def check_starts_with(value: str, prefix: str) -> str | None:
    if value and not value.startswith(prefix):
        return f"must start with {prefix!r}"
    return None


def check_enum(value: Any, enum_cls: type[StrEnum]) -> str | None:
    """Membership in ``enum_cls`` by value (lowercase strings or members)."""
    allowed = [member.value for member in enum_cls]
    if not isinstance(value, str) or value not in allowed:
        return f"must be one of {', '.join(allowed)}"
    return None


def check_value_map(value: Any) -> str | None:
    """JSON object: string keys, JSON values, no null bytes, finite numbers.

    Walks nested mappings and lists; the message names the first offending
    path below the field
    (``"value at 'nested.x' must be a finite number"``).
    """
    if not isinstance(value, Mapping):
        return f"must be a mapping, got {type(value).__name__}"
    for key, item in value.items():
        if not isinstance(key, str) or not key:
            return "keys must be non-empty strings"
        if "\x00" in key:
            return "keys must not contain null bytes"
        if problem := _check_json_value(item, key):
            return problem
    return None


def _check_json_value(value: Any, path: str) -> str | None:
    if value is None or isinstance(value, (bool, int)):
        return None
    if isinstance(value, float):
        return None if math.isfinite(value) else f"value at {path!r} must be a finite number"
    if isinstance(value, str):
        return f"value at {path!r} must not contain null bytes" if "\x00" in value else None
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                return f"keys under {path!r} must be strings"
            if "\x00" in key:
                return f"keys under {path!r} must not contain null bytes"
            if problem := _check_json_value(item, f"{path}.{key}"):
                return problem
        return None
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            if problem := _check_json_value(item, f"{path}[{i}]"):
                return problem
        return None
    return f"value at {path!r} has unsupported type {type(value).__name__}"


def check_timestamp(value: Any) -> str | None:
    """Timezone-aware ``datetime``."""
    if not isinstance(value, datetime):
        return f"must be a datetime, got {type(value).__name__}"
    if value.tzinfo is None:
        return "must be timezone-aware"
    return None
