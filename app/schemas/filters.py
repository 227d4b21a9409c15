"""Pydantic schemas for dashboard filter input."""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawFilterParams(BaseModel):
    """
    Filter parameters exactly as the client sent them.

    Multi-valued filters are already collected into lists; the structured
    ranges are left untouched (JSON string, dict or None) and are only
    interpreted by the filter compiler.
    """
    model_config = ConfigDict(populate_by_name=True)

    search: str = ""
    customer_region: list[str] = Field(default_factory=list, alias="customerRegion")
    gender: list[str] = Field(default_factory=list)
    product_category: list[str] = Field(default_factory=list, alias="productCategory")
    tags: list[str] = Field(default_factory=list)
    payment_method: list[str] = Field(default_factory=list, alias="paymentMethod")
    order_status: list[str] = Field(default_factory=list, alias="orderStatus")
    age_range: Any = Field(None, alias="ageRange")
    date_range: Any = Field(None, alias="dateRange")

    @field_validator(
        "customer_region", "gender", "product_category", "tags",
        "payment_method", "order_status",
        mode="before",
    )
    @classmethod
    def _as_list(cls, value: Any) -> list[str]:
        """Query strings carry either a single value or a repeated key."""
        if value is None:
            return []
        if isinstance(value, (list, tuple, set)):
            return [str(item) for item in value if item is not None]
        return [str(value)]

    @field_validator("search", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class AgeRange(BaseModel):
    """Inclusive age bounds."""
    min: int = Field(0, description="Lowest age to include")
    max: int = Field(150, description="Highest age to include")


class DateRange(BaseModel):
    """Inclusive date bounds; either side may be open."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class FilterSpec(BaseModel):
    """Normalized, request-scoped set of filter values."""
    search: str = ""
    customer_region: list[str] = Field(default_factory=list)
    gender: list[str] = Field(default_factory=list)
    product_category: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    payment_method: list[str] = Field(default_factory=list)
    order_status: list[str] = Field(default_factory=list)
    age_range: Optional[AgeRange] = None
    date_range: Optional[DateRange] = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.search
            or self.customer_region
            or self.gender
            or self.product_category
            or self.tags
            or self.payment_method
            or self.order_status
            or self.age_range
            or self.date_range
        )
