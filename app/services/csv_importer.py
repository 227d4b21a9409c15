"""
CSV Importer.

Loads the retail sales export (one row per transaction, headers such as
"Transaction ID", "Customer Name", "Phone Number") into the sales table.

Values are stored as they arrive: pandas hands back phone numbers and ages
as integers or strings depending on the file, and the coercion accessors
deal with that at read time. Tags are normalized to their comma-joined form.

Usage:
    python -m app.services.csv_importer path/to/sales.csv
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
from sqlalchemy.orm import Session

from app.models.transaction import Transaction
from app.services.coercion import join_tags

logger = logging.getLogger(__name__)

# CSV header -> Transaction attribute
COLUMN_MAP = {
    "Transaction ID": "transaction_id",
    "Date": "date",
    "Customer ID": "customer_id",
    "Customer Name": "customer_name",
    "Phone Number": "phone_number",
    "Gender": "gender",
    "Age": "age",
    "Customer Region": "customer_region",
    "Customer Type": "customer_type",
    "Product ID": "product_id",
    "Product Name": "product_name",
    "Brand": "brand",
    "Product Category": "product_category",
    "Tags": "tags",
    "Quantity": "quantity",
    "Price per Unit": "price_per_unit",
    "Discount Percentage": "discount_percentage",
    "Total Amount": "total_amount",
    "Final Amount": "final_amount",
    "Payment Method": "payment_method",
    "Order Status": "order_status",
    "Delivery Type": "delivery_type",
    "Store ID": "store_id",
    "Store Location": "store_location",
    "Salesperson ID": "salesperson_id",
    "Employee Name": "employee_name",
}

REQUIRED_COLUMNS = ["Transaction ID", "Date", "Customer ID", "Customer Name", "Product ID", "Product Name"]

NUMERIC_DEFAULTS = {
    "quantity": 0,
    "price_per_unit": 0.0,
    "discount_percentage": 0.0,
    "total_amount": 0.0,
    "final_amount": 0.0,
}


class CsvImportError(ValueError):
    """The file cannot be imported as a sales export."""


def _clean(value: Any) -> Any:
    """NaN/NaT -> None, numpy scalars -> Python scalars."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item"):
        value = value.item()
    # A column with gaps is read as float; keep whole numbers integral
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _to_record(row: dict) -> dict:
    record = {}
    for header, attribute in COLUMN_MAP.items():
        if header in row:
            record[attribute] = _clean(row[header])

    record["transaction_id"] = int(record["transaction_id"])
    record["date"] = pd.Timestamp(record["date"]).to_pydatetime().replace(tzinfo=None)
    record["customer_id"] = str(record["customer_id"])
    record["product_id"] = str(record["product_id"])
    record["tags"] = join_tags(record.get("tags"))
    for attribute, default in NUMERIC_DEFAULTS.items():
        if record.get(attribute) is None:
            record[attribute] = default
    record["quantity"] = int(record["quantity"])
    return record


def read_sales_csv(path: Union[str, Path]) -> pd.DataFrame:
    """Read and validate the export; rows missing a transaction id are dropped."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    df = pd.read_csv(path)
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise CsvImportError(f"{path.name} is missing required columns: {', '.join(missing)}")

    df["Date"] = pd.to_datetime(df["Date"], errors="coerce")
    before = len(df)
    df = df.dropna(subset=["Transaction ID", "Date"])
    if len(df) < before:
        logger.warning(f"Dropped {before - len(df)} rows without a transaction id or date")

    logger.info(f"Loaded {len(df)} records from {path.name}")
    return df


def import_csv(db: Session, path: Union[str, Path], batch_size: int = 1000) -> int:
    """
    Import a sales CSV. Transactions whose id is already stored are skipped.
    Returns the number of rows inserted.
    """
    df = read_sales_csv(path)
    existing = {row[0] for row in db.query(Transaction.transaction_id).all()}

    inserted = 0
    skipped = 0
    batch: list[Transaction] = []
    for row in df.to_dict(orient="records"):
        record = _to_record(row)
        if record["transaction_id"] in existing:
            skipped += 1
            continue
        existing.add(record["transaction_id"])
        batch.append(Transaction(**record))

        if len(batch) >= batch_size:
            db.add_all(batch)
            db.commit()
            inserted += len(batch)
            batch = []

    if batch:
        db.add_all(batch)
        db.commit()
        inserted += len(batch)

    logger.info(f"Imported {inserted} transactions ({skipped} already present)")
    return inserted


def main(argv: Optional[list[str]] = None) -> None:
    from app.core.database import SessionLocal, init_db

    parser = argparse.ArgumentParser(description="Import a retail sales CSV into the dashboard database")
    parser.add_argument("path", help="CSV file to import")
    parser.add_argument("--batch-size", type=int, default=1000)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    init_db()
    db = SessionLocal()
    try:
        import_csv(db, args.path, batch_size=args.batch_size)
    finally:
        db.close()


if __name__ == "__main__":
    main()
