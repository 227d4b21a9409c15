"""Pydantic schemas for Transaction API responses."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.transaction import Transaction
from app.services.coercion import coerce_age, coerce_phone, split_tags


class CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase for the dashboard frontend."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionSummary(CamelModel):
    """Row of the transactions table (listing projection)."""
    transaction_id: int = Field(..., alias="id", description="Transaction identifier")
    date: datetime = Field(..., description="Sale timestamp")
    customer_id: str = Field(..., description="Customer identifier")
    customer_name: str = Field(..., description="Customer display name")
    phone_number: str = Field("", description="Phone number as text")
    gender: Optional[str] = Field(None, description="Male / Female")
    age: Optional[int] = Field(None, description="Customer age")
    customer_region: Optional[str] = Field(None, description="East / West / North / South / Central")
    product_category: Optional[str] = Field(None, description="Product category")
    quantity: int = Field(0, description="Units sold")
    total_amount: float = Field(0.0, description="Amount before discount")
    product_id: str = Field(..., description="Product identifier")
    employee_name: Optional[str] = Field(None, description="Salesperson name")

    @classmethod
    def summary_fields(cls, record: Transaction) -> dict:
        return dict(
            transaction_id=record.transaction_id,
            date=record.date,
            customer_id=record.customer_id,
            customer_name=record.customer_name,
            phone_number=coerce_phone(record.phone_number),
            gender=record.gender,
            age=coerce_age(record.age),
            customer_region=record.customer_region,
            product_category=record.product_category,
            quantity=record.quantity,
            total_amount=record.total_amount,
            product_id=record.product_id,
            employee_name=record.employee_name,
        )

    @classmethod
    def from_record(cls, record: Transaction) -> "TransactionSummary":
        return cls(**cls.summary_fields(record))


class TransactionDetail(TransactionSummary):
    """Full transaction record returned by the single-record lookup."""
    customer_type: Optional[str] = None
    product_name: str = ""
    brand: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    price_per_unit: float = 0.0
    discount_percentage: float = 0.0
    final_amount: float = 0.0
    payment_method: Optional[str] = None
    order_status: Optional[str] = None
    delivery_type: Optional[str] = None
    store_id: Optional[str] = None
    store_location: Optional[str] = None
    salesperson_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Transaction) -> "TransactionDetail":
        return cls(
            **cls.summary_fields(record),
            customer_type=record.customer_type,
            product_name=record.product_name,
            brand=record.brand,
            tags=split_tags(record.tags),
            price_per_unit=record.price_per_unit,
            discount_percentage=record.discount_percentage,
            final_amount=record.final_amount,
            payment_method=record.payment_method,
            order_status=record.order_status,
            delivery_type=record.delivery_type,
            store_id=record.store_id,
            store_location=record.store_location,
            salesperson_id=record.salesperson_id,
        )


class TransactionListResponse(CamelModel):
    """One page of transactions with pagination metadata."""
    success: bool = True
    data: list[TransactionSummary]
    total_count: int
    page: int
    total_pages: int
    has_next_page: bool = False
    has_prev_page: bool = False
    message: str = "Transactions retrieved successfully"


class TransactionDetailResponse(CamelModel):
    success: bool = True
    data: TransactionDetail
    message: str = "Transaction retrieved successfully"


class FilterOptions(CamelModel):
    """Distinct values for every dropdown filter, each sorted."""
    regions: list[str] = Field(default_factory=list)
    genders: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    payment_methods: list[str] = Field(default_factory=list)
    order_statuses: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class FilterOptionsResponse(CamelModel):
    success: bool = True
    data: FilterOptions
    message: str = "Filter options retrieved successfully"


class DashboardStats(CamelModel):
    """Metric cards shown above the transactions table."""
    total_transactions: int = Field(0, description="Matching transaction count")
    total_units_sold: int = Field(0, description="Sum of quantity")
    total_amount: float = Field(0.0, description="Sum of total amount")
    total_discount: float = Field(0.0, description="Sum of total amount x discount %")


class DashboardStatsResponse(CamelModel):
    success: bool = True
    data: DashboardStats


class ErrorResponse(CamelModel):
    """Body of every non-2xx response raised by this API."""
    success: bool = False
    message: str
    error: Optional[str] = None
