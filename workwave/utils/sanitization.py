import html
from typing import Any, Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(value.strip(), quote=True)


def sanitize_list(values: Optional[list[Any]]) -> list[Any]:
    """Escape every string entry of a list (skills, tags)"""
    if not values:
        return []
    return [sanitize_string(item) if isinstance(item, str) else item for item in values]
