"""
Database connection and session management
"""
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, pool
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from oms_console.config import settings

# Create engine with connection pooling and timeout
engine = create_engine(
    settings.database_connection_string,
    poolclass=pool.QueuePool,
    pool_size=5,
    max_overflow=10,
    pool_pre_ping=True,  # Verify connections before using
    pool_recycle=3600,  # Recycle connections after 1 hour
    connect_args={
        "connect_timeout": 10,
        "options": "-c statement_timeout=120000"  # large CSV batches can run for a while
    },
    echo=settings.DEBUG,
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Yield a database session and close it afterwards
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction_scope(db: Session) -> Generator[Session, None, None]:
    """
    Bind one unit of work to a transaction: commit when the block finishes,
    roll back and re-raise when it fails.

    Earlier work on the same session is not affected by a rollback here as long
    as it was committed before entering the block.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
