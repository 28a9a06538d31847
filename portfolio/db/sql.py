"""Literal rendering for drivers that cannot bind parameters.

The cloud driver receives fully rendered SQL text, so every ``?`` placeholder
is replaced with an escaped literal before the statement leaves the process.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Sequence

from .base import QueryError


def escape_literal(value: Any) -> str:
    """Render one Python value as an SQLite literal."""
    if value is None:
        return "NULL"
    # bool before int: True is an int
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise QueryError(f"Cannot render non-finite float {value!r} as SQL literal")
        return repr(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"X'{bytes(value).hex()}'"
    text = str(value)
    return "'" + text.replace("'", "''") + "'"


def render_sql(sql: str, parameters: Sequence[Any] | None = None) -> str:
    """Substitute ``?`` placeholders left to right with escaped literals.

    Placeholders inside quoted literals or identifiers are left alone. The
    number of parameters must match the number of placeholders exactly.
    """
    params = list(parameters or ())
    out: list[str] = []
    used = 0
    quote: str | None = None

    for ch in sql:
        if quote:
            out.append(ch)
            # a doubled quote toggles out and straight back in, which is fine
            if ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
            out.append(ch)
        elif ch == "?":
            if used >= len(params):
                raise QueryError(
                    f"Not enough parameters for SQL statement: got {len(params)}"
                )
            out.append(escape_literal(params[used]))
            used += 1
        else:
            out.append(ch)

    if used != len(params):
        raise QueryError(
            f"Too many parameters for SQL statement: {len(params)} supplied, {used} placeholders"
        )
    return "".join(out)
