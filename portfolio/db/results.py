"""Normalization of raw result shapes returned by the cloud driver.

The driver may hand back a flat list of rows, an object wrapping the rows in
a ``data`` field, or a single row object. Callers only ever see ``list[dict]``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional, Sequence

from .base import Row, Rows

logger = logging.getLogger(__name__)


class ResultShape(Enum):
    """Raw result shapes recognised by :func:`classify`."""

    ROWS = "rows"
    WRAPPED = "wrapped"
    SINGLE = "single"
    EMPTY = "empty"
    UNKNOWN = "unknown"


def classify(raw: Any) -> ResultShape:
    if raw is None:
        return ResultShape.EMPTY
    if isinstance(raw, Mapping):
        if isinstance(raw.get("data"), (list, tuple)):
            return ResultShape.WRAPPED
        return ResultShape.SINGLE
    if isinstance(raw, (list, tuple)):
        return ResultShape.ROWS
    return ResultShape.UNKNOWN


def _to_row(item: Any, columns: Optional[Sequence[str]]) -> Optional[Row]:
    if isinstance(item, Mapping):
        return dict(item)
    if isinstance(item, (list, tuple)) and columns:
        return dict(zip(columns, item))
    return None


def _rows_from_list(items: Sequence[Any], columns: Optional[Sequence[str]]) -> Rows:
    rows: Rows = []
    for item in items:
        row = _to_row(item, columns)
        if row is None:
            logger.debug("Dropping unrecognised row of type %s", type(item).__name__)
            continue
        rows.append(row)
    return rows


def _rows_from_wrapped(raw: Mapping[str, Any], columns: Optional[Sequence[str]]) -> Rows:
    wrapped_columns = raw.get("columns") or columns
    return _rows_from_list(raw["data"], wrapped_columns)


def _rows_from_single(raw: Mapping[str, Any], columns: Optional[Sequence[str]]) -> Rows:
    return [dict(raw)]


def normalize_rows(raw: Any, columns: Optional[Sequence[str]] = None) -> Rows:
    """Convert any raw driver result into a list of row dicts (possibly empty)."""
    shape = classify(raw)
    if shape is ResultShape.ROWS:
        return _rows_from_list(raw, columns)
    if shape is ResultShape.WRAPPED:
        return _rows_from_wrapped(raw, columns)
    if shape is ResultShape.SINGLE:
        return _rows_from_single(raw, columns)
    if shape is ResultShape.UNKNOWN:
        logger.warning("Unrecognised result shape %s, treating as empty", type(raw).__name__)
    return []


def first_row(raw: Any, columns: Optional[Sequence[str]] = None) -> Optional[Row]:
    """First row of a normalized result, or None when nothing matched."""
    rows = normalize_rows(raw, columns)
    return rows[0] if rows else None
