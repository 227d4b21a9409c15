"""
Shared request dependencies.

The dashboard sends multi-valued filters either as repeated keys
(`gender=Male&gender=Female`) or in bracket form (`gender[]=Male`), and
structured ranges either as JSON (`ageRange={"min":20,"max":30}`) or as
bracketed keys (`ageRange[min]=20`). Both spellings are collected here so
the filter compiler only ever sees one shape.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.filters import RawFilterParams
from app.services.query_executor import QueryExecutor
from app.services.transaction_store import TransactionStore

MULTI_VALUE_PARAMS = (
    "customerRegion",
    "gender",
    "productCategory",
    "tags",
    "paymentMethod",
    "orderStatus",
)

RANGE_PARAMS = {
    "ageRange": ("min", "max"),
    "dateRange": ("start", "end"),
}


def get_executor(db: Session = Depends(get_db)) -> QueryExecutor:
    """Query executor bound to the request's database session."""
    return QueryExecutor(TransactionStore(db))


def _range_param(request: Request, name: str, keys: tuple[str, str]) -> Optional[object]:
    params = request.query_params
    if name in params:
        return params[name]
    bracketed = {key: params[f"{name}[{key}]"] for key in keys if f"{name}[{key}]" in params}
    return bracketed or None


def get_filter_params(request: Request) -> RawFilterParams:
    """Collect the raw filter parameters from the query string."""
    params = request.query_params
    collected = {
        name: params.getlist(name) + params.getlist(f"{name}[]")
        for name in MULTI_VALUE_PARAMS
    }
    for name, keys in RANGE_PARAMS.items():
        collected[name] = _range_param(request, name, keys)
    collected["search"] = params.get("search", "")
    return RawFilterParams.model_validate(collected)
