"""Tests for the demo data seeder."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.models.transaction import Transaction
from app.services.coercion import coerce_age, coerce_phone, split_tags
from app.services.filter_compiler import build_filter
from app.services.seed_data import seed_database


def test_seed_inserts_requested_count(session):
    assert seed_database(session, count=50) == 50
    assert session.query(Transaction).count() == 50


def test_seed_skips_populated_database(session):
    seed_database(session, count=10)
    assert seed_database(session, count=10) == 0
    assert session.query(Transaction).count() == 10


def test_seed_is_deterministic(session_factory):
    first = session_factory()
    seed_database(first, count=20, seed=7)
    names = [t.customer_name for t in first.query(Transaction).order_by(Transaction.transaction_id)]
    first.close()

    other_engine = create_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(other_engine)
    second = sessionmaker(bind=other_engine)()
    seed_database(second, count=20, seed=7)
    other_names = [t.customer_name for t in second.query(Transaction).order_by(Transaction.transaction_id)]
    second.close()
    other_engine.dispose()

    assert names == other_names


def test_seeded_rows_coerce_cleanly(session):
    seed_database(session, count=40)

    for t in session.query(Transaction):
        assert 18 <= coerce_age(t.age) <= 70
        assert coerce_phone(t.phone_number).isdigit()
        assert split_tags(t.tags)
        assert 0 <= t.discount_percentage <= 100
        assert t.final_amount <= t.total_amount


def test_seeded_rows_are_filterable_by_age(session):
    seed_database(session, count=60)
    predicate = build_filter({"ageRange": {"min": 18, "max": 70}}).predicate
    assert session.query(Transaction).filter(predicate).count() == 60
