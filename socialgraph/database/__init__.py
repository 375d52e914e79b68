"""
Database module for the social graph.

This module provides database models, connection management, the user
directory, the edge store and CRUD operations using SQLAlchemy ORM.
"""

from socialgraph.database.models import Base, User, GraphEdge
from socialgraph.database.connection import DatabaseManager
from socialgraph.database.init_db import init_database, verify_schema
from socialgraph.database.directory import UserDirectory
from socialgraph.database.edge_store import EdgeStore
from socialgraph.database import crud

__all__ = [
    # Models
    'Base',
    'User',
    'GraphEdge',
    # Connection
    'DatabaseManager',
    # Initialization
    'init_database',
    'verify_schema',
    # Stores
    'UserDirectory',
    'EdgeStore',
    # CRUD module
    'crud',
]
