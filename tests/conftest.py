"""Pytest configuration and fixtures."""

import itertools
import os
from datetime import datetime

# Must be set before the app settings are first loaded
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.main import app
from app.models.transaction import Transaction


@pytest.fixture
def engine():
    """In-memory SQLite database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_transaction(session):
    """Insert a transaction; any column can be overridden by keyword."""
    ids = itertools.count(1)

    def _make(**overrides) -> Transaction:
        transaction_id = overrides.pop("transaction_id", None) or next(ids)
        values = dict(
            transaction_id=transaction_id,
            date=datetime(2023, 6, 1, 12, 0),
            customer_id=f"CUST{transaction_id:04d}",
            customer_name="Test Customer",
            phone_number="9000000000",
            gender="Male",
            age=30,
            customer_region="East",
            customer_type="New",
            product_id="PROD0001",
            product_name="Test Item",
            brand="Acme",
            product_category="Clothing",
            tags="casual",
            quantity=1,
            price_per_unit=100.0,
            discount_percentage=0.0,
            total_amount=100.0,
            final_amount=100.0,
            payment_method="UPI",
            order_status="Completed",
            delivery_type="Standard",
            store_id="ST001",
            store_location="Mumbai",
            salesperson_id="EMP01",
            employee_name="Harsh Agarwal",
        )
        values.update(overrides)
        transaction = Transaction(**values)
        session.add(transaction)
        session.commit()
        return transaction

    return _make


@pytest.fixture
def client(session_factory):
    """API client whose requests use the test database."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
