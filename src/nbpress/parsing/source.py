"""Normalization of notebook text fields."""

from typing import Any


def normalize_source(value: Any) -> str:
    """Collapse a notebook text field into a single string.

    Notebook JSON stores multi-line text either as one string or as a list of
    line fragments (each usually keeping its trailing newline). Missing values
    become the empty string.

    Args:
        value: Raw ``source``/``text``/MIME payload value

    Returns:
        str: The joined text
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "".join(normalize_source(part) for part in value)
    return str(value)
