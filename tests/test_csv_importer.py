"""Tests for the sales CSV importer."""

from datetime import datetime

import pytest

from app.models.transaction import Transaction
from app.services.coercion import coerce_age, coerce_phone, split_tags
from app.services.csv_importer import CsvImportError, import_csv

HEADER = (
    "Transaction ID,Date,Customer ID,Customer Name,Phone Number,Gender,Age,Customer Region,"
    "Customer Type,Product ID,Product Name,Brand,Product Category,Tags,Quantity,Price per Unit,"
    "Discount Percentage,Total Amount,Final Amount,Payment Method,Order Status,Delivery Type,"
    "Store ID,Store Location,Salesperson ID,Employee Name"
)

ROWS = [
    '1,2023-09-26,CUST-1,Neha Yadav,9720639364,Female,21,South,Returning,PROD-1,Cotton Shirt,'
    'Zara,Clothing,"casual, cotton",2,500,10,1000,900,UPI,Completed,Standard,ST001,Mumbai,EMP01,Harsh Agarwal',
    '2,2023-10-01,CUST-2,Rohan Das,9812345678,Male,,North,New,PROD-2,Earbuds,'
    'Boat,Electronics,wireless,1,1500,0,1500,1500,Cash,Pending,Express,ST002,Delhi,EMP02,Sakshi Kapoor',
]


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "sales.csv"
    path.write_text("\n".join([HEADER, *ROWS]) + "\n", encoding="utf-8")
    return path


def test_import_csv(session, csv_file):
    assert import_csv(session, csv_file) == 2

    neha = session.query(Transaction).filter(Transaction.transaction_id == 1).one()
    assert neha.date == datetime(2023, 9, 26)
    assert coerce_phone(neha.phone_number) == "9720639364"
    assert coerce_age(neha.age) == 21
    assert split_tags(neha.tags) == ["casual", "cotton"]
    assert neha.discount_percentage == 10
    assert neha.employee_name == "Harsh Agarwal"

    rohan = session.query(Transaction).filter(Transaction.transaction_id == 2).one()
    assert coerce_age(rohan.age) is None
    assert coerce_phone(rohan.phone_number) == "9812345678"


def test_import_csv_skips_existing_ids(session, csv_file):
    import_csv(session, csv_file)
    assert import_csv(session, csv_file) == 0
    assert session.query(Transaction).count() == 2


def test_import_csv_requires_core_columns(session, tmp_path):
    path = tmp_path / "broken.csv"
    path.write_text("Transaction ID,Customer Name\n1,Someone\n", encoding="utf-8")
    with pytest.raises(CsvImportError):
        import_csv(session, path)


def test_import_csv_missing_file(session, tmp_path):
    with pytest.raises(FileNotFoundError):
        import_csv(session, tmp_path / "nope.csv")
