"""
Database engine, session factory and the per-request session dependency.

The engine (and its connection pool) is built once by the application
factory and kept on ``app.state``; handlers never touch a module-level pool.
"""

from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import DATABASE_URL, DB_MAX_OVERFLOW, DB_POOL_SIZE, DB_POOL_TIMEOUT
from app.utils.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def _is_in_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in database_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(
    database_url: str = DATABASE_URL,
    pool_size: int = DB_POOL_SIZE,
    max_overflow: int = DB_MAX_OVERFLOW,
    pool_timeout: int = DB_POOL_TIMEOUT,
) -> Engine:
    """
    Build the SQLAlchemy engine with a bounded connection pool.

    In-memory SQLite gets a single shared connection, otherwise every
    connection would see its own empty database.
    """
    is_sqlite = database_url.startswith("sqlite")

    if is_sqlite and _is_in_memory_sqlite(database_url):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        kwargs = {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
        }
        if is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["pool_recycle"] = 1800  # Reconnect after 30 minutes
        engine = create_engine(database_url, **kwargs)

    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables that don't exist yet."""
    # Register every model on Base.metadata before create_all
    from app.models import car, favorite  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database successfully initialized")
    except SQLAlchemyError:
        logger.error("Error initializing database", exc_info=True)
        raise


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding a session for the lifetime of one request.

    The session is closed on every exit path, which also rolls back anything
    left uncommitted after an error.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
