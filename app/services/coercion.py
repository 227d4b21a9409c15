"""
Typed accessors over loosely-typed sales columns.

Rows loaded from different sources store `age` and `phone_number` as
either numbers or strings, and `tags` as either a list or a comma-joined
string. Every read path goes through the functions here so that display
code and query filters agree on a single canonical type per field:

- `coerce_phone` / `phone_expr`  -> str
- `coerce_age` / `age_expr`      -> int
- `split_tags` / `join_tags`     -> list[str] / comma-joined str

The `*_expr` helpers return the SQL-side equivalent, used when the
comparison has to run inside the database.
"""

import math
from typing import Any, Optional

from sqlalchemy import Integer, String, case, cast
from sqlalchemy.sql.elements import ColumnElement

from app.models.transaction import Transaction

# Text that coerce_age reads as a non-negative number
NUMERIC_AGE_PATTERN = r"^\s*[0-9]+(\.[0-9]*)?\s*$"


def coerce_phone(value: Any) -> str:
    """Canonical string form of a stored phone number. Never raises."""
    if value is None:
        return ""
    # Extended-JSON exports wrap 64-bit integers as {"$numberLong": "..."}
    if isinstance(value, dict) and "$numberLong" in value:
        value = value["$numberLong"]
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def coerce_age(value: Any) -> Optional[int]:
    """Integer age from an int, float or numeric string; None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) or math.isinf(value) else int(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) or math.isinf(number) else int(number)


def split_tags(value: Any) -> list[str]:
    """Tokenize stored tags into trimmed, non-empty strings (order kept)."""
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        parts = []
        for item in value:
            parts.extend(split_tags(item))
        return parts
    else:
        return []
    return [part.strip() for part in parts if part.strip()]


def join_tags(value: Any) -> Optional[str]:
    """Storage form of tags: comma-joined tokens, or None when there are none."""
    tokens = split_tags(value)
    return ",".join(tokens) if tokens else None


def phone_expr() -> ColumnElement:
    """SQL expression for the phone number as text."""
    return cast(Transaction.phone_number, String)


def age_expr() -> ColumnElement:
    """SQL expression for the age as an integer; NULL unless the stored text is numeric."""
    return case(
        (Transaction.age.regexp_match(NUMERIC_AGE_PATTERN), cast(Transaction.age, Integer)),
        else_=None,
    )
