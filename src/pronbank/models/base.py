"""Base model configuration."""
import logging
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Iterator

from sqlalchemy import Column, DateTime, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from pronbank.config import settings
from pronbank.errors import StoreError

logger = logging.getLogger(__name__)

# Create SQLAlchemy engine
engine = create_engine(settings.database.url, echo=settings.database.echo)


if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        """Enforce foreign keys on SQLite connections."""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

# expire_on_commit=False keeps returned records readable after the session closes
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

# Create declarative base class
Base = declarative_base()


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class TimestampMixin:
    """Mixin to add timestamp columns to models."""
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)


def init_db() -> None:
    """Initialize database."""
    Base.metadata.create_all(bind=engine)  # Create tables if they don't exist


@contextmanager
def store_operation(db: Session, description: str) -> Iterator[None]:
    """Roll back and raise StoreError when a database call fails."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Store failure while trying to {description}: {e}")
        raise StoreError(f"Could not {description}") from e
