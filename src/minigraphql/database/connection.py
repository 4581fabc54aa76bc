"""
Database connection management
"""

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from ..config import get_database_url, settings
from ..dbmodels import Base
from ..logging import get_logger

logger = get_logger(__name__)

# Global shared connection pool
_engine: Engine | None = None
_session_local: sessionmaker[Session] | None = None
_initialized = False
_init_lock = threading.Lock()  # Protect initialization from race conditions


def reset_database() -> None:
    """Dispose and forget the shared engine (for tests)."""
    global _engine, _session_local, _initialized
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_local = None
    _initialized = False


def _engine_options(db_url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.sql_echo}
    if db_url.startswith("sqlite"):
        # Request threads share the pool; SQLite connections must allow that.
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
    return options


def init_database(database_url: str | None = None, force_reinit: bool = False) -> None:
    """Initialize the shared engine and create missing tables.

    Thread-safe initialization using a lock to prevent race conditions
    when multiple threads attempt to initialize simultaneously.
    """
    global _engine, _session_local, _initialized

    # Fast path: already initialized, no lock needed
    if _initialized and not force_reinit and database_url is None:
        return

    with _init_lock:
        # Double-check after acquiring lock (another thread may have initialized)
        if _initialized and not force_reinit and database_url is None:
            return

        if _engine is not None:
            _engine.dispose()

        db_url = database_url or get_database_url()
        _engine = create_engine(db_url, **_engine_options(db_url))
        _session_local = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

        ok, error_message = check_database_connection()
        if not ok:
            logger.error("Database connection check failed", error=error_message)
            raise RuntimeError(error_message)

        Base.metadata.create_all(_engine)

        _initialized = True
        logger.info("Database initialized", database_url=_engine.url.render_as_string())


def get_engine() -> Engine:
    """Get the shared SQLAlchemy engine."""
    if _engine is None:
        init_database()
    if _engine is None:
        raise RuntimeError("Database not initialized")
    return _engine


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get a database session from the shared pool.

    Commits on success, rolls back on error.
    """
    if _session_local is None:
        init_database()

    if _session_local is None:
        raise RuntimeError("Database not initialized")

    session = _session_local()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_database_connection() -> tuple[bool, str | None]:
    """
    Test the database connection and return a helpful error message.

    Returns:
        tuple: (success: bool, error_message: str | None)
    """
    if _engine is None:
        return False, "Database engine not initialized"

    try:
        with _engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            return True, None
    except Exception as e:
        error_str = str(e)
        if "unable to open database file" in error_str:
            return False, (
                f"Cannot open database file: {error_str}\n"
                f"Please check that the directory in MINIGRAPHQL_DATABASE_URL exists."
            )
        if "Connection refused" in error_str or "could not connect" in error_str:
            return False, (
                f"Cannot connect to database server: {error_str}\n"
                f"The database server appears to be down or unreachable."
            )
        return False, f"Database connection error ({type(e).__name__}): {error_str}"
