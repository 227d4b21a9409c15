"""
Filter Compiler.

Turns the dashboard's filter parameters into a single SQLAlchemy
predicate. The listing endpoint, the stats endpoint and the MCP tools all
go through `build_filter`, so the same input always selects the same rows.

Parsing is lenient: a malformed `ageRange` or `dateRange` (bad JSON, a
non-object, unparsable or out-of-range bounds) means "no constraint" on
that dimension rather than a failed request.

Compilation produces one conjunction. Each of these is an independent
member of it:
  - search:      customer_name ILIKE %term% OR CAST(phone AS TEXT) ILIKE %term%
  - categorical: column IN (values), one clause per dimension
  - tags:        OR over requested tags of tags ILIKE %tag%
  - age:         CAST(age AS INTEGER) BETWEEN min AND max
  - date:        date >= start, date <= end
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from sqlalchemy import and_, or_, true
from sqlalchemy.sql.elements import ColumnElement

from app.models.transaction import Transaction
from app.schemas.filters import AgeRange, DateRange, FilterSpec, RawFilterParams
from app.services.coercion import age_expr, coerce_age, phone_expr

logger = logging.getLogger(__name__)

# UI sentinel meaning "no selection"
ALL_VALUES = "All"

DEFAULT_AGE_MIN = 0
DEFAULT_AGE_MAX = 150

# FilterSpec field -> column, for the exact-membership filters
CATEGORICAL_COLUMNS = {
    "customer_region": Transaction.customer_region,
    "gender": Transaction.gender,
    "product_category": Transaction.product_category,
    "payment_method": Transaction.payment_method,
    "order_status": Transaction.order_status,
}


@dataclass(frozen=True)
class CompiledFilter:
    """A FilterSpec together with the clauses it compiled to."""
    spec: FilterSpec
    clauses: tuple[ColumnElement, ...] = field(default_factory=tuple)

    @property
    def predicate(self) -> ColumnElement:
        """The WHERE condition; matches everything when there are no clauses."""
        if not self.clauses:
            return true()
        if len(self.clauses) == 1:
            return self.clauses[0]
        return and_(*self.clauses)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def normalize_values(value: Any) -> list[str]:
    """Scalar or sequence -> list of non-blank strings, without the 'All' sentinel."""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple, set)) else [value]
    values = []
    for item in items:
        if item is None:
            continue
        text = str(item).strip()
        if text and text != ALL_VALUES and text not in values:
            values.append(text)
    return values


def _parse_object(value: Any, name: str) -> Optional[dict]:
    """Accept a dict or a JSON object string; anything else is ignored."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.debug(f"Ignoring malformed {name}: {value!r}")
            return None
    if not isinstance(value, dict):
        logger.debug(f"Ignoring non-object {name}: {value!r}")
        return None
    return value


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        # fromisoformat only understands a trailing "Z" from 3.11 on
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Ignoring unparsable date bound: {value!r}")
            return None
    # Stored dates are naive UTC
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except OverflowError:
            logger.debug(f"Ignoring out-of-range date bound: {value!r}")
            return None
    return parsed


def _parse_age_bound(value: Any, default: int) -> int:
    """An age bound inside DEFAULT_AGE_MIN..DEFAULT_AGE_MAX, else `default`."""
    age = coerce_age(value)
    if age is None or not DEFAULT_AGE_MIN <= age <= DEFAULT_AGE_MAX:
        if value is not None:
            logger.debug(f"Ignoring unusable age bound: {value!r}")
        return default
    return age


def parse_age_range(value: Any) -> Optional[AgeRange]:
    data = _parse_object(value, "ageRange")
    if data is None:
        return None
    return AgeRange(
        min=_parse_age_bound(data.get("min"), DEFAULT_AGE_MIN),
        max=_parse_age_bound(data.get("max"), DEFAULT_AGE_MAX),
    )


def parse_date_range(value: Any) -> Optional[DateRange]:
    data = _parse_object(value, "dateRange")
    if data is None:
        return None
    start = _parse_datetime(data.get("start"))
    end = _parse_datetime(data.get("end"))
    if start is None and end is None:
        return None
    return DateRange(start=start, end=end)


def parse_filter_params(raw: Union[RawFilterParams, dict]) -> FilterSpec:
    """Normalize raw request parameters into a FilterSpec. Never raises."""
    if isinstance(raw, dict):
        raw = RawFilterParams.model_validate(raw)

    return FilterSpec(
        search=(raw.search or "").strip(),
        customer_region=normalize_values(raw.customer_region),
        gender=normalize_values(raw.gender),
        product_category=normalize_values(raw.product_category),
        tags=normalize_values(raw.tags),
        payment_method=normalize_values(raw.payment_method),
        order_status=normalize_values(raw.order_status),
        age_range=parse_age_range(raw.age_range),
        date_range=parse_date_range(raw.date_range),
    )


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------

def _search_clause(term: str) -> ColumnElement:
    return or_(
        Transaction.customer_name.icontains(term, autoescape=True),
        phone_expr().icontains(term, autoescape=True),
    )


def _tags_clause(tags: list[str]) -> ColumnElement:
    return or_(*[Transaction.tags.icontains(tag, autoescape=True) for tag in tags])


def _age_clause(age_range: AgeRange) -> ColumnElement:
    age = age_expr()
    return and_(age >= age_range.min, age <= age_range.max)


def _date_clauses(date_range: DateRange) -> list[ColumnElement]:
    clauses = []
    if date_range.start is not None:
        clauses.append(Transaction.date >= date_range.start)
    if date_range.end is not None:
        clauses.append(Transaction.date <= date_range.end)
    return clauses


def compile_filters(spec: FilterSpec) -> CompiledFilter:
    """Compile a FilterSpec into the conjunction of its clauses."""
    if spec.is_empty:
        return CompiledFilter(spec=spec)

    clauses: list[ColumnElement] = []

    if spec.search:
        clauses.append(_search_clause(spec.search))

    for name, column in CATEGORICAL_COLUMNS.items():
        values = getattr(spec, name)
        if values:
            clauses.append(column.in_(values))

    if spec.tags:
        clauses.append(_tags_clause(spec.tags))

    if spec.age_range is not None:
        clauses.append(_age_clause(spec.age_range))

    if spec.date_range is not None:
        clauses.extend(_date_clauses(spec.date_range))

    return CompiledFilter(spec=spec, clauses=tuple(clauses))


def build_filter(raw: Union[RawFilterParams, dict]) -> CompiledFilter:
    """Parse and compile in one step. The only entry point request handlers use."""
    return compile_filters(parse_filter_params(raw))
