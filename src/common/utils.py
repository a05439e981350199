"""Common utility functions."""

from typing import Any


def get_value(obj: Any, key: str) -> Any:
    """Get value from dict or object attribute."""
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def truncate(text: str, limit: int) -> str:
    """Hard character cut of text to at most limit characters."""
    return text[:limit]
