"""
Service wiring.

Builds the graph services once at process start with explicit
dependencies; request handlers and scripts receive the container by
reference instead of reaching for module-level singletons.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from socialgraph.api import config
from socialgraph.core.cache import AdjacencyCache
from socialgraph.core.graph_engine import GraphEngine
from socialgraph.core.retry import RetryConfig
from socialgraph.core.suggestions import SuggestionEngine
from socialgraph.database.connection import DatabaseManager
from socialgraph.database.directory import UserDirectory
from socialgraph.database.edge_store import EdgeStore

logger = logging.getLogger(__name__)


@dataclass
class GraphServices:
    """Everything a request handler needs, constructed once."""

    db_manager: DatabaseManager
    directory: UserDirectory
    edge_store: EdgeStore
    cache: Optional[AdjacencyCache]
    graph: GraphEngine
    suggestions: SuggestionEngine

    def close(self) -> None:
        if self.cache is not None:
            self.cache.clear()
        self.db_manager.close()


def build_services(
    db_path: Optional[str] = None,
    cache_enabled: Optional[bool] = None,
    cache_ttl: Optional[float] = None,
    retry_attempts: Optional[int] = None,
    store_timeout: Optional[float] = None,
    suggestion_timeout: Optional[float] = None,
    create_tables: bool = True,
) -> GraphServices:
    """
    Construct the graph services. Unset arguments fall back to the environment.

    Args:
        db_path: Database file path, ":memory:" or a full SQLAlchemy URL
        cache_enabled: Use the adjacency cache
        cache_ttl: Adjacency cache TTL in seconds
        retry_attempts: Attempts per store call
        store_timeout: Store call timeout in seconds
        suggestion_timeout: Suggestion traversal time budget in seconds
        create_tables: Create missing tables on start

    Returns:
        GraphServices container
    """
    db_manager = DatabaseManager(
        db_path=db_path or config.get_database_path(),
        timeout=store_timeout if store_timeout is not None else config.get_store_timeout(),
    )
    if create_tables:
        db_manager.create_tables()

    retry_config = RetryConfig(
        max_attempts=retry_attempts if retry_attempts is not None else config.get_store_retry_attempts()
    )
    directory = UserDirectory(db_manager, retry_config)
    edge_store = EdgeStore(db_manager, retry_config)

    if cache_enabled is None:
        cache_enabled = config.get_cache_enabled()
    cache = None
    if cache_enabled:
        cache = AdjacencyCache(ttl=cache_ttl if cache_ttl is not None else config.get_cache_ttl())

    graph = GraphEngine(edge_store, directory, cache=cache)
    suggestions = SuggestionEngine(
        graph,
        timeout=suggestion_timeout if suggestion_timeout is not None else config.get_suggestion_timeout(),
    )

    logger.info(f"Graph services ready (database: {db_manager.database_url})")
    return GraphServices(
        db_manager=db_manager,
        directory=directory,
        edge_store=edge_store,
        cache=cache,
        graph=graph,
        suggestions=suggestions,
    )
