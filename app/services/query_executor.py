"""
Query Executor.

Runs a compiled filter against the transaction store:
- a sorted, paginated page of rows plus the total matching count
- the dashboard aggregates (units, amount, discount)
- single-record lookup and dropdown option enumeration

Sorting only ever uses columns from SORT_COLUMNS; unknown keys fall back
to date and unknown directions to descending.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.sql.elements import ColumnElement

from app.models.transaction import Transaction
from app.schemas.transaction import DashboardStats, FilterOptions
from app.services.coercion import split_tags
from app.services.filter_compiler import CompiledFilter
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)

# Transaction ids are stored as signed 64-bit integers
MIN_RECORD_ID = -(2**63)
MAX_RECORD_ID = 2**63 - 1

DEFAULT_SORT_KEY = "date"
DEFAULT_SORT_ORDER = "desc"

SORT_COLUMNS = {
    "date": Transaction.date,
    "customerName": Transaction.customer_name,
    "quantity": Transaction.quantity,
}

# Labels the dashboard has historically sent for the same keys
SORT_ALIASES = {
    "Date": "date",
    "Customer Name": "customerName",
    "customer_name": "customerName",
    "Quantity": "quantity",
}

# Columns needed to render a table row
LISTING_COLUMNS = (
    Transaction.transaction_id,
    Transaction.date,
    Transaction.customer_id,
    Transaction.customer_name,
    Transaction.phone_number,
    Transaction.gender,
    Transaction.age,
    Transaction.customer_region,
    Transaction.product_category,
    Transaction.quantity,
    Transaction.total_amount,
    Transaction.product_id,
    Transaction.employee_name,
)


@dataclass(frozen=True)
class SortSpec:
    key: str = DEFAULT_SORT_KEY
    order: str = DEFAULT_SORT_ORDER

    def order_by(self) -> list[ColumnElement]:
        column = SORT_COLUMNS[self.key]
        if self.order == "asc":
            return [column.asc(), Transaction.id.asc()]
        # Primary key tiebreak keeps pages stable across requests
        return [column.desc(), Transaction.id.desc()]


def resolve_sort(sort_by: Optional[str], sort_order: Optional[str]) -> SortSpec:
    """Map requested sort parameters onto the allow-list."""
    key = SORT_ALIASES.get(sort_by or "", sort_by or "")
    if key not in SORT_COLUMNS:
        key = DEFAULT_SORT_KEY
    order = (sort_order or "").strip().lower()
    if order not in ("asc", "desc"):
        order = DEFAULT_SORT_ORDER
    return SortSpec(key=key, order=order)


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def compute(cls, page: int, limit: int, total: int) -> "Pagination":
        if page < 1 or limit < 1:
            raise ValueError(f"page and limit must be >= 1 (got page={page}, limit={limit})")
        total_pages = math.ceil(total / limit)
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class PageResult:
    records: list[Transaction]
    pagination: Pagination


class QueryExecutor:
    """
    Stateless executor bound to a TransactionStore.
    Build one per request from the request's session.
    """

    def __init__(self, store: TransactionStore):
        self.store = store

    def execute(
        self,
        compiled: CompiledFilter,
        sort: SortSpec,
        page: int,
        limit: int,
    ) -> PageResult:
        """Fetch one page of matching rows and the total match count."""
        predicate = compiled.predicate
        total = self.store.count(predicate)
        pagination = Pagination.compute(page, limit, total)

        if pagination.offset >= total:
            # Past the last page; the window would select nothing
            return PageResult(records=[], pagination=pagination)

        records = self.store.find(
            predicate,
            order_by=sort.order_by(),
            offset=pagination.offset,
            limit=limit,
            columns=LISTING_COLUMNS,
        )
        logger.debug(
            "Page %d/%d: %d of %d rows (sort=%s %s)",
            page, pagination.total_pages, len(records), total, sort.key, sort.order,
        )
        return PageResult(records=records, pagination=pagination)

    def aggregate(self, compiled: CompiledFilter) -> DashboardStats:
        """Count and sum the matching rows for the dashboard cards."""
        predicate = compiled.predicate
        total_transactions = self.store.count(predicate)
        sums = self.store.aggregate(
            predicate,
            units=Transaction.quantity,
            amount=Transaction.total_amount,
            # Per-row product; summing the factors separately is not equivalent
            discount=Transaction.total_amount * Transaction.discount_percentage / 100.0,
        )
        return DashboardStats(
            total_transactions=total_transactions,
            total_units_sold=int(sums["units"]),
            total_amount=float(sums["amount"]),
            total_discount=float(sums["discount"]),
        )

    def find_by_id(self, transaction_id: int) -> Optional[Transaction]:
        if not MIN_RECORD_ID <= transaction_id <= MAX_RECORD_ID:
            return None
        return self.store.find_by_id(transaction_id)

    def filter_options(self) -> FilterOptions:
        """Sorted distinct values for every dropdown, over the whole table."""
        tags = set()
        for value in self.store.distinct(Transaction.tags):
            tags.update(split_tags(value))

        return FilterOptions(
            regions=self._sorted_distinct(Transaction.customer_region),
            genders=self._sorted_distinct(Transaction.gender),
            categories=self._sorted_distinct(Transaction.product_category),
            payment_methods=self._sorted_distinct(Transaction.payment_method),
            order_statuses=self._sorted_distinct(Transaction.order_status),
            tags=sorted(tags),
        )

    def _sorted_distinct(self, column) -> list[str]:
        values = {str(value).strip() for value in self.store.distinct(column)}
        return sorted(value for value in values if value)
