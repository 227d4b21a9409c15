"""
Dashboard statistics endpoint.
Accepts the same flat filter parameters as the transactions listing.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import get_executor, get_filter_params
from app.core.errors import StoreError
from app.schemas.filters import RawFilterParams
from app.schemas.transaction import DashboardStatsResponse
from app.services.filter_compiler import build_filter
from app.services.query_executor import QueryExecutor

router = APIRouter(prefix="/stats", tags=["Statistics"])


@router.get("/dashboard", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    filters: RawFilterParams = Depends(get_filter_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """Transaction count, units sold, total amount and total discount for the current filters."""
    compiled = build_filter(filters)
    try:
        stats = executor.aggregate(compiled)
    except SQLAlchemyError as e:
        raise StoreError("Failed to load dashboard stats.") from e

    return DashboardStatsResponse(data=stats)
