"""
Database connection management using SQLAlchemy.

This module handles engine creation, session management, and provides
utilities for database operations. A DatabaseManager is constructed once
at process start and handed to the stores that need it.
"""

import os
from contextlib import contextmanager
from typing import Generator, Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from socialgraph.database.models import Base


# Default database path
DEFAULT_DB_PATH = "data/socialgraph.db"
DEFAULT_TIMEOUT_SECONDS = 5.0
MEMORY_DB = ":memory:"


def get_database_url(db_path: str = DEFAULT_DB_PATH) -> str:
    """
    Get database URL.

    Args:
        db_path: Path to SQLite database file, ":memory:", or a full
            SQLAlchemy URL (returned unchanged)

    Returns:
        SQLAlchemy database URL
    """
    if "://" in db_path:
        return db_path
    if db_path == MEMORY_DB:
        return "sqlite://"

    # Ensure directory exists
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    # SQLite URL format: sqlite:///path/to/database.db
    return f"sqlite:///{os.path.abspath(db_path)}"


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """
    Enable foreign key constraints for SQLite.

    SQLite disables foreign key constraints by default.
    This event listener enables them for all SQLite connections.
    """
    if type(dbapi_conn).__module__.startswith("sqlite3"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseManager:
    """
    Database connection manager.

    Handles engine creation, session management, and database initialization.
    """

    def __init__(
        self,
        db_path: str = DEFAULT_DB_PATH,
        echo: bool = False,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize database manager.

        Args:
            db_path: Path to SQLite database file, ":memory:" or a full URL
            echo: If True, log all SQL statements (useful for debugging)
            timeout: Seconds a store call may wait for a connection or lock
        """
        self.db_path = db_path
        self.database_url = get_database_url(db_path)
        self.timeout = timeout

        if self.database_url.startswith("sqlite"):
            engine_kwargs = {
                "connect_args": {"check_same_thread": False, "timeout": timeout},
            }
            # A private in-memory database only exists on one connection
            if self.database_url == "sqlite://":
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs = {"pool_timeout": timeout, "pool_pre_ping": True}

        self.engine = create_engine(self.database_url, echo=echo, **engine_kwargs)

        # Results are converted to plain types before the session closes,
        # so objects are not expired on commit.
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    def create_tables(self):
        """
        Create all tables defined in the models.

        This creates tables if they don't exist. Existing tables are not modified.
        """
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        """
        Drop all tables defined in the models.

        WARNING: This will delete all data in the database!
        """
        Base.metadata.drop_all(bind=self.engine)

    def reset_database(self):
        """
        Drop and recreate all tables.

        WARNING: This will delete all data in the database!
        """
        self.drop_tables()
        self.create_tables()

    def get_session(self) -> Session:
        """
        Get a new database session.

        Returns:
            SQLAlchemy Session object. The caller is responsible for
            committing and closing it; prefer ``session_scope``.
        """
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.

        Automatically commits on success and rolls back on failure.

        Usage:
            with db_manager.session_scope() as session:
                session.add(user)

        Yields:
            SQLAlchemy Session object
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self):
        """Close the database engine and all connections."""
        self.engine.dispose()


def session_dependency(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    """
    Yield a transactional session from ``db_manager``.

    Useful for FastAPI dependency injection:

        def get_db(services = Depends(get_services)):
            yield from session_dependency(services.db_manager)
    """
    with db_manager.session_scope() as session:
        yield session
