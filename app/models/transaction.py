"""
Transaction model representing a single retail sale.
Maps onto the `sales` table that backs the dashboard.

Some columns come from loosely-typed sources: `age` and `phone_number`
may hold either numbers or numeric strings, and `tags` holds a
comma-joined list. Read them through `app.services.coercion`.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Float, DateTime, Integer, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Transaction(Base):
    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Surrogate primary key"
    )
    transaction_id: Mapped[int] = mapped_column(
        Integer,
        unique=True,
        nullable=False,
        index=True,
        doc="Business transaction identifier used for lookups"
    )
    date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        index=True,
        doc="When the sale happened"
    )

    # Customer
    customer_id: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    phone_number: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        doc="Phone number; stored as text or a large integer depending on source"
    )
    gender: Mapped[Optional[str]] = mapped_column(String(10), index=True, doc="Male, Female")
    age: Mapped[Optional[str]] = mapped_column(
        String(16),
        nullable=True,
        doc="Customer age; stored as an integer or a numeric string depending on source"
    )
    customer_region: Mapped[Optional[str]] = mapped_column(
        String(20),
        index=True,
        doc="East, West, North, South, Central"
    )
    customer_type: Mapped[Optional[str]] = mapped_column(String(20), doc="New, Returning, Loyal")

    # Product
    product_id: Mapped[str] = mapped_column(String(50), nullable=False)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(String(100))
    product_category: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    tags: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Comma-joined product tags, e.g. 'casual,formal'"
    )

    # Amounts
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_per_unit: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    discount_percentage: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        doc="Discount in percent, 0-100"
    )
    total_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    final_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Order
    payment_method: Mapped[Optional[str]] = mapped_column(
        String(30),
        index=True,
        doc="UPI, Credit Card, Debit Card, Cash, Wallet, Net Banking"
    )
    order_status: Mapped[Optional[str]] = mapped_column(
        String(20),
        doc="Completed, Pending, Cancelled, Returned"
    )
    delivery_type: Mapped[Optional[str]] = mapped_column(String(20), doc="Standard, Express, Store Pickup")

    # Store
    store_id: Mapped[Optional[str]] = mapped_column(String(50))
    store_location: Mapped[Optional[str]] = mapped_column(String(100))
    salesperson_id: Mapped[Optional[str]] = mapped_column(String(50))
    employee_name: Mapped[Optional[str]] = mapped_column(String(200))

    __table_args__ = (
        Index("ix_sales_name_phone", "customer_name", "phone_number"),
        Index("ix_sales_date_region", "date", "customer_region"),
        Index("ix_sales_category_payment", "product_category", "payment_method"),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.transaction_id}, customer={self.customer_name}, "
            f"amount={self.total_amount}, category={self.product_category})>"
        )
