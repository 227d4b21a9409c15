from typing import Optional
from contextlib import contextmanager

from mcp.server.fastmcp import FastMCP

# Import standard app components
from app.core.database import SessionLocal
from app.schemas.filters import RawFilterParams
from app.schemas.transaction import TransactionDetail, TransactionSummary
from app.services.filter_compiler import build_filter
from app.services.query_executor import QueryExecutor, resolve_sort
from app.services.transaction_store import TransactionStore

# Create an MCP server instance
mcp = FastMCP("Retail-Sales-Data-Server")

MAX_LIMIT = 100


@contextmanager
def get_executor():
    db = SessionLocal()
    try:
        yield QueryExecutor(TransactionStore(db))
    finally:
        db.close()


def _filters(
    search: str = "",
    customer_region: Optional[list[str]] = None,
    gender: Optional[list[str]] = None,
    product_category: Optional[list[str]] = None,
    tags: Optional[list[str]] = None,
    payment_method: Optional[list[str]] = None,
    order_status: Optional[list[str]] = None,
    age_range: Optional[dict] = None,
    date_range: Optional[dict] = None,
) -> RawFilterParams:
    return RawFilterParams(
        search=search,
        customer_region=customer_region,
        gender=gender,
        product_category=product_category,
        tags=tags,
        payment_method=payment_method,
        order_status=order_status,
        age_range=age_range,
        date_range=date_range,
    )


@mcp.tool()
def search_transactions(
    search: str = "",
    customer_region: Optional[list[str]] = None,
    gender: Optional[list[str]] = None,
    product_category: Optional[list[str]] = None,
    tags: Optional[list[str]] = None,
    payment_method: Optional[list[str]] = None,
    order_status: Optional[list[str]] = None,
    age_range: Optional[dict] = None,
    date_range: Optional[dict] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "date",
    sort_order: str = "desc",
) -> dict:
    """
    Search sales transactions with the dashboard filters.
    age_range is {"min": int, "max": int}; date_range is {"start": ISO date, "end": ISO date}.
    """
    compiled = build_filter(_filters(
        search, customer_region, gender, product_category, tags,
        payment_method, order_status, age_range, date_range,
    ))
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_LIMIT)
    with get_executor() as executor:
        result = executor.execute(compiled, resolve_sort(sort_by, sort_order), page=page, limit=limit)
        rows = [
            TransactionSummary.from_record(t).model_dump(by_alias=True, mode="json")
            for t in result.records
        ]
    return {
        "transactions": rows,
        "total": result.pagination.total,
        "page": result.pagination.page,
        "total_pages": result.pagination.total_pages,
    }


@mcp.tool()
def get_dashboard_stats(
    search: str = "",
    customer_region: Optional[list[str]] = None,
    gender: Optional[list[str]] = None,
    product_category: Optional[list[str]] = None,
    tags: Optional[list[str]] = None,
    payment_method: Optional[list[str]] = None,
    order_status: Optional[list[str]] = None,
    age_range: Optional[dict] = None,
    date_range: Optional[dict] = None,
) -> dict:
    """Transaction count, units sold, total amount and total discount for the given filters."""
    compiled = build_filter(_filters(
        search, customer_region, gender, product_category, tags,
        payment_method, order_status, age_range, date_range,
    ))
    with get_executor() as executor:
        stats = executor.aggregate(compiled)
    return stats.model_dump(by_alias=True)


@mcp.tool()
def get_filter_options() -> dict:
    """Distinct regions, genders, categories, payment methods, order statuses and tags."""
    with get_executor() as executor:
        return executor.filter_options().model_dump(by_alias=True)


@mcp.tool()
def get_transaction(transaction_id: int) -> dict:
    """Full detail of one transaction by its numeric id."""
    with get_executor() as executor:
        transaction = executor.find_by_id(transaction_id)
        if transaction is None:
            return {"error": "Transaction not found"}
        return TransactionDetail.from_record(transaction).model_dump(by_alias=True, mode="json")


if __name__ == "__main__":
    # Start the standard streaming stdio server
    print("Starting Retail Sales Data MCP Server on stdio...")
    mcp.run()
