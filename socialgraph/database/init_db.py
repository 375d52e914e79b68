"""
Database initialization and schema creation.

This module provides functions to initialize the database schema and
verify that the expected tables exist.
"""

import logging

from sqlalchemy import inspect

from socialgraph.database.connection import DatabaseManager, DEFAULT_DB_PATH

logger = logging.getLogger(__name__)

EXPECTED_TABLES = {'users', 'graph_edges'}


def init_database(db_path: str = DEFAULT_DB_PATH, reset: bool = False) -> DatabaseManager:
    """
    Initialize the database and create all tables.

    Args:
        db_path: Path to SQLite database file (or a full SQLAlchemy URL)
        reset: If True, drop existing tables before creating new ones

    Returns:
        DatabaseManager instance
    """
    db_manager = DatabaseManager(db_path=db_path)

    if reset:
        logger.info("Resetting database (dropping all tables)...")
        db_manager.reset_database()
    else:
        db_manager.create_tables()
    logger.info(f"Database tables ready at {db_manager.database_url}")

    return db_manager


def verify_schema(db_manager: DatabaseManager) -> bool:
    """
    Verify that all tables exist in the database.

    Args:
        db_manager: DatabaseManager instance

    Returns:
        True if all tables exist, False otherwise
    """
    inspector = inspect(db_manager.engine)
    existing_tables = set(inspector.get_table_names())

    missing_tables = EXPECTED_TABLES - existing_tables

    if missing_tables:
        logger.error(f"Missing tables: {missing_tables}")
        return False

    logger.info(f"All tables exist: {sorted(existing_tables)}")
    return True
