"""
Shared utility functions for parsing environment and form values

Provides common helpers for:
- String parsing: Environment variable conversion (parse_bool, parse_float)
- Form coercion: Interval fields typed by an operator (coerce_int_field)

These utilities are used by the controller configuration and input validation.
"""

from __future__ import annotations

from typing import Any


def strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def parse_bool(value: str | None, default: bool = False) -> bool:
    """Interpret env-style booleans."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_float(value: str | None, default: float) -> float:
    """Best-effort float parser with fallback."""
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def coerce_int_field(value: Any) -> int:
    """Interpret a number typed into a form field; blanks and junk become 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if value is None:
        return 0
    text = str(value).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except ValueError:
        return 0
