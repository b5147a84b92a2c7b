"""Shared formatting utilities used by the exporters."""
from datetime import date
from typing import Any, Optional

# Characters replaced by "_" in generated file names
_UNSAFE_FILENAME_CHARS = '/\\:*?"<>| '


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a date as YYYY-MM-DD, or None."""
    if value is None:
        return None
    return value.strftime("%Y-%m-%d")


def stringify_value(value: Any) -> str:
    """Render a property value as a group key.

    Examples:
        stringify_value(42)    -> "42"
        stringify_value(12.7)  -> "13"
        stringify_value(None)  -> "null"
    """
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:.0f}"
    return str(value)


def sanitize_filename(name: str) -> str:
    """Replace characters that are invalid in file names with underscores."""
    result = name
    for char in _UNSAFE_FILENAME_CHARS:
        result = result.replace(char, "_")
    result = result.strip()
    return result or "unknown"
