"""Small helpers shared across modules."""

from typing import Any

__all__ = ["merge"]


def merge(merged: dict[str, Any], other: dict[str, Any]) -> dict[str, Any]:
    """Merge `other` into `merged` (in place) and return it.

    Nested tables are merged recursively, arrays are concatenated and
    anything else from `other` wins:

        merge({"staccato": {"tick": 1}}, {"staccato": {"sink": "stdout"}})
        == {"staccato": {"tick": 1, "sink": "stdout"}}
    """
    for key, value in other.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            current.extend(value)
        else:
            merged[key] = value
    return merged
