"""Helpers for working with result rows as plain dictionaries."""

from collections.abc import Iterable
from typing import Any

Row = dict[str, Any]


def resolve_path(row: Row, path: str) -> Any:
    """Read a possibly join-qualified value (``"manager.username"``) from a row.

    Returns:
        The value, or None when any segment is missing
    """
    if path in row:
        return row[path]
    value: Any = row
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def sort_rows(
    rows: Iterable[Row],
    keys: Iterable[tuple[str, bool]],
    *,
    casefold: bool = False,
) -> list[Row]:
    """Stable multi-key sort with missing values last in either direction.

    Args:
        rows: Rows to sort
        keys: ``(path, descending)`` pairs, most significant first
        casefold: Compare strings case-insensitively

    Returns:
        A new sorted list
    """
    ordered = list(rows)
    # Least significant key first; each pass is stable
    for path, descending in reversed(list(keys)):
        present: list[Row] = []
        missing: list[Row] = []
        for row in ordered:
            (missing if resolve_path(row, path) is None else present).append(row)

        def sort_key(row: Row, path: str = path) -> Any:
            value = resolve_path(row, path)
            if casefold and isinstance(value, str):
                return value.casefold()
            return value

        present.sort(key=sort_key, reverse=descending)
        ordered = present + missing
    return ordered
