"""Pure stateless field validation — coerces raw LLM values or rejects them.

Every function returns the normalised value, or None when the value is
rejected. Nothing here raises: untrusted LLM output is forced into the
closed type system of FieldDefinition before it can reach a Profile.
"""

from __future__ import annotations

import math
import re
from typing import Any

from app.registration.fields import FieldDefinition


def _is_number(value: Any) -> bool:
    # bool is an int subclass; JSON true/false is never a measurement
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_number(
    value: Any,
    minimum: float | None = None,
    maximum: float | None = None,
) -> int | None:
    """Accept real JSON numbers within [minimum, maximum], rounded to int.

    Quoted numbers ("25") and words ("twenty-five") are rejected, as are
    out-of-range values (rejected, not clamped).
    """
    if not _is_number(value):
        return None
    # JSON integers are unbounded; only floats can be nan/inf
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if minimum is not None and value < minimum:
        return None
    if maximum is not None and value > maximum:
        return None
    if isinstance(value, int):
        return value
    # Python rounds half to even; measurements round half up
    return int(math.floor(value + 0.5))


def validate_enum(value: Any, allowed: tuple[str, ...] | list[str]) -> str | None:
    """Exact, case-sensitive membership."""
    if isinstance(value, str) and value in allowed:
        return value
    return None


def validate_text(
    value: Any,
    max_length: int | None = None,
    pattern: str | None = None,
) -> str | None:
    """Trimmed non-empty string, optionally length- and regex-checked."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if max_length is not None and len(text) > max_length:
        return None
    if pattern is not None:
        try:
            if re.search(pattern, text) is None:
                return None
        except re.error:
            return None
    return text


def validate_boolean(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def validate_field(definition: FieldDefinition, value: Any) -> Any:
    """Dispatch on definition.type. None/missing always rejects."""
    if value is None:
        return None
    if definition.type == "number":
        return validate_number(value, definition.minimum, definition.maximum)
    if definition.type == "enum":
        return validate_enum(value, definition.enum_values)
    if definition.type == "boolean":
        return validate_boolean(value)
    return validate_text(value, definition.max_length, definition.pattern)


def validate_fields(
    payload: dict[str, Any],
    definitions: list[FieldDefinition],
) -> dict[str, Any]:
    """Sparse result: only keys whose value validates are present."""
    result: dict[str, Any] = {}
    for definition in definitions:
        value = validate_field(definition, payload.get(definition.key))
        if value is not None:
            result[definition.key] = value
    return result
