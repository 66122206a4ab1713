"""
Categories are stored as a single comma-joined string per row. Everything
that reads or writes that column goes through here.
"""
from typing import Iterable

import sqlalchemy
from sqlalchemy.sql import ColumnElement

DELIMITER = ","

# Tab label meaning "no filter".
ALL = "All"

_ESCAPE = "/"


def encode(labels: Iterable[str]) -> str:
    """
    Joins labels for storage. Labels must already be normalized, nothing is
    trimmed, deduped or escaped here.
    """
    return DELIMITER.join(labels)


def decode(raw: str | None) -> set[str]:
    if not raw:
        return set()
    return {part.strip() for part in raw.split(DELIMITER) if part.strip()}


def normalize(labels: Iterable[str]) -> list[str]:
    """
    Trims labels, drops empty ones and duplicates (first one wins).
    Raises ValueError for a label that contains the delimiter.
    """
    normalized: list[str] = []
    for label in labels:
        label = label.strip()
        if not label:
            continue
        if DELIMITER in label:
            raise ValueError(f"Category {label!r} can't contain {DELIMITER!r}.")
        if label not in normalized:
            normalized.append(label)
    return normalized


def is_all(category: str | None) -> bool:
    """None, blank and "All" all mean no filter."""
    return category is None or not category.strip() or category == ALL


def _escape_like(label: str) -> str:
    return (
        label.replace(_ESCAPE, _ESCAPE * 2)
        .replace("%", _ESCAPE + "%")
        .replace("_", _ESCAPE + "_")
    )


def contains(column: ColumnElement[str], label: str) -> ColumnElement[bool]:
    """
    True when `label` is one whole element of the stored string.
    Wrapping both sides in delimiters keeps "Spo" from matching "Sports".

    The pattern is a single bound parameter so no `%` ends up in the SQL text.
    """
    wrapped = sqlalchemy.literal(DELIMITER, sqlalchemy.String) + column + DELIMITER
    pattern = f"%{DELIMITER}{_escape_like(label.strip())}{DELIMITER}%"
    return wrapped.like(pattern, escape=_ESCAPE)
