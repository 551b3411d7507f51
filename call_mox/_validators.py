"""Shared validation helpers."""

from __future__ import annotations

from .errors import ConfigurationError


def validate_call_count(value: int, *, name: str = "count") -> int:
    """Ensure *value* is usable as a non-negative call count."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer, got {type(value).__name__}"
        raise ConfigurationError(msg)

    if value < 0:
        msg = f"{name} must be >= 0, got {value}"
        raise ConfigurationError(msg)
    return value


def validate_operation_name(name: object) -> str:
    """Ensure *name* names a method rather than a dunder or an empty string."""
    if not isinstance(name, str) or not name:
        msg = f"operation name must be a non-empty string, got {name!r}"
        raise ConfigurationError(msg)
    if name.startswith("__") and name.endswith("__"):
        msg = f"special method {name!r} cannot be configured"
        raise ConfigurationError(msg)
    return name
