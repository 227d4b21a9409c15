"""
Transactions API endpoints.
Filtered, sorted and paginated access to sales records for the dashboard table.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import get_executor, get_filter_params
from app.core.config import get_settings
from app.core.errors import RecordNotFoundError, StoreError
from app.schemas.filters import RawFilterParams
from app.schemas.transaction import (
    FilterOptionsResponse,
    TransactionDetail,
    TransactionDetailResponse,
    TransactionListResponse,
    TransactionSummary,
)
from app.services.filter_compiler import build_filter
from app.services.query_executor import QueryExecutor, resolve_sort

settings = get_settings()

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Rows per page"
    ),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="date, customerName or quantity"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
    filters: RawFilterParams = Depends(get_filter_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """
    List transactions matching the dashboard filters.
    Filter parameters: search, customerRegion, gender, ageRange, productCategory,
    tags, paymentMethod, orderStatus, dateRange.
    """
    compiled = build_filter(filters)
    sort = resolve_sort(sort_by, sort_order)

    try:
        result = executor.execute(compiled, sort, page=page, limit=limit)
    except SQLAlchemyError as e:
        raise StoreError("Failed to fetch transactions") from e

    pagination = result.pagination
    return TransactionListResponse(
        data=[TransactionSummary.from_record(t) for t in result.records],
        total_count=pagination.total,
        page=pagination.page,
        total_pages=pagination.total_pages,
        has_next_page=pagination.has_next,
        has_prev_page=pagination.has_prev,
    )


@router.get("/filter-options", response_model=FilterOptionsResponse)
async def get_filter_options(executor: QueryExecutor = Depends(get_executor)):
    """Distinct values for every dropdown filter, over all transactions."""
    try:
        options = executor.filter_options()
    except SQLAlchemyError as e:
        raise StoreError("Failed to fetch filter options") from e

    return FilterOptionsResponse(data=options)


@router.get("/{transaction_id}", response_model=TransactionDetailResponse)
async def get_transaction(transaction_id: int, executor: QueryExecutor = Depends(get_executor)):
    """Full detail of a single transaction."""
    try:
        transaction = executor.find_by_id(transaction_id)
    except SQLAlchemyError as e:
        raise StoreError("Failed to fetch transaction") from e

    if transaction is None:
        raise RecordNotFoundError("Transaction not found")

    return TransactionDetailResponse(data=TransactionDetail.from_record(transaction))
