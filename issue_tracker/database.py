"""
Database Configuration and Session Management

SQLAlchemy engine, session factory and the declarative base
shared by all models.

NOTE: Tenant scoping is not applied here. Every query filters by
organization_id in the repositories.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool
from datetime import datetime, timezone
from issue_tracker.config import get_settings
import logging

logger = logging.getLogger(__name__)

settings = get_settings()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the naive DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _engine_kwargs(url: str) -> dict:
    kwargs = {
        "poolclass": QueuePool,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
        "echo": settings.DEBUG,
    }
    if url.startswith("sqlite"):
        # Sessions are used from FastAPI's threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

# expire_on_commit=False so handlers can serialize rows after commit
# without another round trip.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False
)

Base = declarative_base()


@event.listens_for(engine, "connect")
def set_connection_timezone(dbapi_connection, connection_record):
    """Set connection-level configuration on new connections."""
    # PostgreSQL only; SQLite has no session time zone
    if settings.DATABASE_URL.startswith("postgresql"):
        cursor = dbapi_connection.cursor()
        cursor.execute("SET TIME ZONE 'UTC'")
        cursor.close()
    logger.debug("New database connection established")


def get_db() -> Session:
    """
    Dependency function that provides a database session.

    One session per request, closed after the response is sent.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Create all tables.

    Development and test convenience only. Production schemas are
    managed by migrations.
    """
    # Register models on Base.metadata
    import issue_tracker.models  # noqa: F401

    logger.warning("init_db() called - use migrations in production!")
    Base.metadata.create_all(bind=engine)
