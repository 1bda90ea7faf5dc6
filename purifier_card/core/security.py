"""Validation of command arguments before they are sent to Home Assistant."""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

SanitizedValue = str | int | float | bool

_MAX_STRING_LENGTH = 64


class SanitizationError(ValueError):
    """Raised when caller-supplied command arguments are unsafe."""


def _sanitize_value(key: str, value: Any) -> SanitizedValue:
    if isinstance(value, bool) or isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        cleaned = value.strip().replace("\n", " ").replace("\r", " ")
        if len(cleaned) > _MAX_STRING_LENGTH:
            raise SanitizationError(f"Argument '{key}' is too long")
        return cleaned
    raise SanitizationError(f"Unsupported value for argument '{key}'")


def sanitize_command_arguments(
    args: Mapping[str, Any] | None,
    allowed_keys: Iterable[str],
) -> dict[str, SanitizedValue]:
    """Keep the allowed scalar arguments and reject anything unsafe.

    ``entity_id`` is never taken from the caller; the target entity comes
    from the detected roles.
    """

    allowed = {key for key in allowed_keys if key != "entity_id"}
    if args is None:
        return {}

    sanitized: dict[str, SanitizedValue] = {}
    for key, value in args.items():
        key_str = str(key)
        if key_str.startswith("__"):
            raise SanitizationError("Unsafe argument key detected")
        if key_str not in allowed or value is None:
            continue
        sanitized[key_str] = _sanitize_value(key_str, value)
    return sanitized


def bounded_percentage(value: SanitizedValue) -> int:
    """Coerce a fan speed to an integer within 0..100."""

    if isinstance(value, bool):
        raise SanitizationError("Percentage must be numeric")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise SanitizationError("Percentage must be numeric") from exc
    if not math.isfinite(number):
        raise SanitizationError("Percentage must be finite")
    return max(0, min(int(number), 100))
