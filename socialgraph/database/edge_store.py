"""
Persistence and indexing for directed follow edges.

Every public method is one unit of work in its own session, expressed as a
single atomic statement where the contract requires it (unique-key insert,
delete-by-key, in-place increment), and retried on transient failures.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy import and_, case, delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from socialgraph.core.exceptions import InvalidArgument, NotFound, Unavailable
from socialgraph.core.retry import RetryConfig, with_retry
from socialgraph.core.types import COUNTER_FIELDS, INITIAL_WEIGHT, MAX_WEIGHT, Edge
from socialgraph.database.connection import DatabaseManager
from socialgraph.database.models import GraphEdge, utcnow

logger = logging.getLogger(__name__)

DEFAULT_DECAY_BATCH_SIZE = 500

# weight DESC, created_at DESC; edge_id keeps pages stable on ties
_LISTING_ORDER = (
    GraphEdge.weight.desc(),
    GraphEdge.created_at.desc(),
    GraphEdge.edge_id.desc(),
)


def edge_to_snapshot(row: GraphEdge) -> Edge:
    """Convert a GraphEdge row to a detached Edge."""
    return Edge(
        source_id=row.source_id,
        target_id=row.target_id,
        weight=row.weight,
        interaction_counts={name: getattr(row, name) or 0 for name in COUNTER_FIELDS},
        last_interaction_at=row.last_interaction_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        edge_id=row.edge_id,
    )


def _pair_filter(source_id: str, target_id: str):
    return and_(GraphEdge.source_id == source_id, GraphEdge.target_id == target_id)


class EdgeStore:
    """
    Edge persistence keyed by the ordered pair (source_id, target_id).

    The unique constraint on the pair is the single source of truth for
    edge existence; callers never check-then-insert themselves.
    """

    def __init__(self, db_manager: DatabaseManager, retry_config: Optional[RetryConfig] = None):
        """
        Initialize edge store.

        Args:
            db_manager: Database manager providing sessions
            retry_config: Retry policy for transient store failures
        """
        self.db_manager = db_manager
        self.retry_config = retry_config or RetryConfig()

    def _run(self, operation: str, func):
        def attempt():
            with self.db_manager.session_scope() as session:
                return func(session)
        return with_retry(attempt, self.retry_config, operation=operation)

    @staticmethod
    def _get_row(session: Session, source_id: str, target_id: str) -> Optional[GraphEdge]:
        return session.execute(
            select(GraphEdge).where(_pair_filter(source_id, target_id))
        ).scalar_one_or_none()

    # ==================== MUTATIONS ====================

    def upsert_edge(self, source_id: str, target_id: str) -> Tuple[Edge, bool]:
        """
        Create the edge if it does not exist.

        An existing edge is returned unchanged; its weight is never reset.

        Args:
            source_id: Follower
            target_id: Followed user

        Returns:
            Tuple of (edge, created)

        Raises:
            InvalidArgument: If source_id == target_id
            NotFound: If either user has no directory record
        """
        if source_id == target_id:
            raise InvalidArgument("Users cannot follow themselves")

        def op(session: Session) -> Tuple[Edge, bool]:
            existing = self._get_row(session, source_id, target_id)
            if existing is not None:
                return edge_to_snapshot(existing), False

            now = utcnow()
            row = GraphEdge(
                source_id=source_id,
                target_id=target_id,
                weight=INITIAL_WEIGHT,
                likes=0,
                comments=0,
                messages=0,
                shares=0,
                mentions=0,
                last_interaction_at=now,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            try:
                session.flush()
            except IntegrityError:
                # A concurrent follow won the unique-key race
                session.rollback()
                existing = self._get_row(session, source_id, target_id)
                if existing is None:
                    # No competing row: a foreign key rejected an unknown user
                    raise NotFound(f"Unknown user in edge {source_id} -> {target_id}") from None
                return edge_to_snapshot(existing), False
            return edge_to_snapshot(row), True

        return self._run("upsert_edge", op)

    def delete_edge(self, source_id: str, target_id: str) -> bool:
        """
        Delete the edge by key.

        Returns:
            True if an edge was removed, False if none existed
        """
        def op(session: Session) -> bool:
            result = session.execute(
                delete(GraphEdge).where(_pair_filter(source_id, target_id)),
                execution_options={"synchronize_session": False}
            )
            return result.rowcount > 0

        return self._run("delete_edge", op)

    def increment_weight(
        self,
        source_id: str,
        target_id: str,
        delta: float,
        counter_field: str
    ) -> bool:
        """
        Atomically add ``delta`` to the weight (capped at 1.0) and bump a counter.

        The arithmetic runs inside a single UPDATE so concurrent interactions
        on the same edge never lose an increment. Missing edges are ignored.

        Args:
            source_id: Follower
            target_id: Followed user
            delta: Non-negative weight increment
            counter_field: One of likes, comments, messages, shares, mentions

        Returns:
            True if an edge was updated, False if it does not exist
        """
        if counter_field not in COUNTER_FIELDS:
            raise InvalidArgument(f"Unknown interaction counter: {counter_field}")
        if delta < 0:
            raise InvalidArgument("Weight increment must be non-negative")

        counter = getattr(GraphEdge, counter_field)
        raised = GraphEdge.weight + delta

        def op(session: Session) -> bool:
            now = utcnow()
            result = session.execute(
                update(GraphEdge)
                .where(_pair_filter(source_id, target_id))
                .values(
                    {
                        GraphEdge.weight: case((raised > MAX_WEIGHT, MAX_WEIGHT), else_=raised),
                        counter: counter + 1,
                        GraphEdge.last_interaction_at: now,
                        GraphEdge.updated_at: now,
                    }
                ),
                execution_options={"synchronize_session": False}
            )
            return result.rowcount > 0

        return self._run("increment_weight", op)

    def decay_all(
        self,
        factor: float,
        floor: float,
        batch_size: int = DEFAULT_DECAY_BATCH_SIZE
    ) -> int:
        """
        Multiply every weight above ``floor`` by ``factor``, never below ``floor``.

        The sweep walks edge ids in batches; each batch is one UPDATE in its
        own transaction. A batch that still fails after retries is logged and
        skipped so the rest of the sweep proceeds. Re-running is safe.

        Args:
            factor: Multiplier in (0, 1]
            floor: Minimum weight
            batch_size: Number of edge ids per UPDATE

        Returns:
            Number of edges updated
        """
        if batch_size < 1:
            raise InvalidArgument("batch_size must be >= 1")

        bounds = self._run(
            "decay_bounds",
            lambda session: session.execute(
                select(func.min(GraphEdge.edge_id), func.max(GraphEdge.edge_id))
            ).one()
        )
        low, high = bounds
        if low is None:
            return 0

        decayed = GraphEdge.weight * factor
        affected = 0
        failed_batches = 0

        for start in range(low, high + 1, batch_size):
            end = start + batch_size

            def op(session: Session, start=start, end=end) -> int:
                result = session.execute(
                    update(GraphEdge)
                    .where(
                        GraphEdge.edge_id >= start,
                        GraphEdge.edge_id < end,
                        GraphEdge.weight > floor,
                    )
                    .values(
                        weight=case((decayed < floor, floor), else_=decayed),
                        updated_at=utcnow(),
                    ),
                    execution_options={"synchronize_session": False}
                )
                return result.rowcount

            try:
                affected += self._run("decay_batch", op)
            except (Unavailable, SQLAlchemyError) as e:
                failed_batches += 1
                logger.error(f"Decay batch [{start}, {end}) skipped: {e}")

        if failed_batches:
            logger.warning(f"Decay sweep finished with {failed_batches} skipped batch(es)")
        return affected

    # ==================== READS ====================

    def find_edge(self, source_id: str, target_id: str) -> Optional[Edge]:
        def op(session: Session) -> Optional[Edge]:
            row = self._get_row(session, source_id, target_id)
            return edge_to_snapshot(row) if row else None
        return self._run("find_edge", op)

    def find_edges_from(self, source_id: str, target_ids: Iterable[str]) -> Dict[str, Edge]:
        """
        Batched lookup of the edges from ``source_id`` to any of ``target_ids``.

        Returns:
            Mapping of target_id to Edge for the pairs that exist
        """
        targets = list(set(target_ids))
        if not targets:
            return {}

        def op(session: Session) -> Dict[str, Edge]:
            rows = session.execute(
                select(GraphEdge).where(
                    GraphEdge.source_id == source_id,
                    GraphEdge.target_id.in_(targets),
                )
            ).scalars()
            return {row.target_id: edge_to_snapshot(row) for row in rows}
        return self._run("find_edges_from", op)

    def list_by_source(self, source_id: str, limit: int, offset: int = 0) -> List[Edge]:
        """Outgoing edges ordered by weight desc, then newest first."""
        def op(session: Session) -> List[Edge]:
            rows = session.execute(
                select(GraphEdge)
                .where(GraphEdge.source_id == source_id)
                .order_by(*_LISTING_ORDER)
                .offset(offset)
                .limit(limit)
            ).scalars()
            return [edge_to_snapshot(row) for row in rows]
        return self._run("list_by_source", op)

    def list_by_target(self, target_id: str, limit: int, offset: int = 0) -> List[Edge]:
        """Incoming edges ordered by weight desc, then newest first."""
        def op(session: Session) -> List[Edge]:
            rows = session.execute(
                select(GraphEdge)
                .where(GraphEdge.target_id == target_id)
                .order_by(*_LISTING_ORDER)
                .offset(offset)
                .limit(limit)
            ).scalars()
            return [edge_to_snapshot(row) for row in rows]
        return self._run("list_by_target", op)

    def target_ids(self, source_id: str, limit: Optional[int] = None) -> List[str]:
        """Ids followed by ``source_id``, strongest first (id-only projection)."""
        def op(session: Session) -> List[str]:
            stmt = (
                select(GraphEdge.target_id)
                .where(GraphEdge.source_id == source_id)
                .order_by(*_LISTING_ORDER)
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(session.execute(stmt).scalars())
        return self._run("target_ids", op)

    def source_ids(self, target_id: str, limit: Optional[int] = None) -> List[str]:
        """Ids following ``target_id``, strongest first (id-only projection)."""
        def op(session: Session) -> List[str]:
            stmt = (
                select(GraphEdge.source_id)
                .where(GraphEdge.target_id == target_id)
                .order_by(*_LISTING_ORDER)
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(session.execute(stmt).scalars())
        return self._run("source_ids", op)

    def count_by_source(self, source_id: str) -> int:
        return self._run(
            "count_by_source",
            lambda session: session.execute(
                select(func.count(GraphEdge.edge_id)).where(GraphEdge.source_id == source_id)
            ).scalar_one()
        )

    def count_by_target(self, target_id: str) -> int:
        return self._run(
            "count_by_target",
            lambda session: session.execute(
                select(func.count(GraphEdge.edge_id)).where(GraphEdge.target_id == target_id)
            ).scalar_one()
        )

    def count_all(self) -> int:
        return self._run(
            "count_all",
            lambda session: session.execute(select(func.count(GraphEdge.edge_id))).scalar_one()
        )
