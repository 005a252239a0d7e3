"""
Database session management - SQLAlchemy engine and session factory.
This module provides the database connection and session dependency for FastAPI.
"""

from sqlalchemy import create_engine  # Creates the database connection pool
from sqlalchemy.orm import sessionmaker  # Factory for creating database sessions

from aistudio.core.config import settings  # App configuration with DATABASE_URL

# ---------------------------------------------------------------------------
# DATABASE ENGINE
# ---------------------------------------------------------------------------
# pool_pre_ping=True: test each pooled connection with "SELECT 1" before use,
# so a restarted PostgreSQL doesn't surface as a stale-connection error.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# ---------------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------------
# - autocommit=False: handlers call db.commit() explicitly
# - autoflush=False: objects are flushed when we say so, not before each query
#
# SessionLocal is also used outside requests by the background job worker
# (aistudio.services.job_queue), which opens one short session per job.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/api/calls")
        def list_calls(db: Session = Depends(get_db)):
            ...

    One session per request; close() always runs, even when the handler raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
