"""
Database engine and session management using SQLAlchemy.
Defaults to a local SQLite file; any SQLAlchemy URL can be configured.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session
from typing import Generator

from app.core.config import get_settings

settings = get_settings()

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False  # Required for SQLite

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    echo=settings.DATABASE_ECHO,
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for all SQLAlchemy models."""
    pass


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.
    Ensures proper cleanup after each request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all database tables from model metadata."""
    # Register models on the metadata before create_all
    import app.models.transaction  # noqa: F401

    Base.metadata.create_all(bind=engine)


def ping(db: Session) -> bool:
    """Round-trip a trivial statement to confirm the database is reachable."""
    db.execute(text("SELECT 1"))
    return True
