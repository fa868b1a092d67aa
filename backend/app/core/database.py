import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.core.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    if settings.is_sqlite:
        # In-memory SQLite only lives as long as its connection, so every
        # session has to share a single one
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }


# Create database engine - manages connection pool
engine = create_engine(settings.DATABASE_URL, **_engine_options())

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    The session is checked out of the pool for the duration of one request
    and closed (returned to the pool) when the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create tables for every registered model and seed the version row."""
    # Importing the models package registers every table on Base.metadata
    import app.models  # noqa: F401
    from app.repositories.compatibility_repository import compatibility_repository

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        compatibility_repository.ensure_version_row(db)
    finally:
        db.close()
    logger.info("Database initialised")
