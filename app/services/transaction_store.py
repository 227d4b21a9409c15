"""
Transaction Store.

Thin read-only access layer over the `sales` table. The query executor
receives one of these instead of reaching for a global session, which
keeps it testable against any database a Session can be bound to.
"""

from typing import Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, load_only
from sqlalchemy.sql.elements import ColumnElement

from app.models.transaction import Transaction


class TransactionStore:
    """find / count / aggregate / find_by_id / distinct over Transaction rows."""

    def __init__(self, db: Session):
        self.db = db

    def find(
        self,
        predicate: ColumnElement,
        order_by: Sequence[ColumnElement],
        offset: int,
        limit: int,
        columns: Optional[Sequence] = None,
    ) -> list[Transaction]:
        """Ordered window of matching rows, optionally loading only `columns`."""
        query = self.db.query(Transaction).filter(predicate)
        if columns:
            query = query.options(load_only(*columns))
        return query.order_by(*order_by).offset(offset).limit(limit).all()

    def count(self, predicate: ColumnElement) -> int:
        """Number of rows matching the predicate."""
        return (
            self.db.query(func.count(Transaction.id))
            .filter(predicate)
            .scalar()
        ) or 0

    def aggregate(self, predicate: ColumnElement, **sums: ColumnElement) -> dict[str, float]:
        """
        Sum each named expression over the matching rows.
        Every sum falls back to 0 when nothing matches.
        """
        labelled = [
            func.coalesce(func.sum(expression), 0).label(name)
            for name, expression in sums.items()
        ]
        row = (
            self.db.query(*labelled)
            .select_from(Transaction)
            .filter(predicate)
            .one()
        )
        return {name: row._mapping[name] or 0 for name in sums}

    def find_by_id(self, transaction_id: int) -> Optional[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(Transaction.transaction_id == transaction_id)
            .first()
        )

    def distinct(self, column) -> list:
        """Distinct non-null values of a column, in no particular order."""
        rows = self.db.query(column).filter(column.isnot(None)).distinct().all()
        return [row[0] for row in rows]
