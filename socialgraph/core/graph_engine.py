"""
Social graph engine.

Public API for follow/unfollow, interaction weighting, decay, follower and
following listings, relationship strength and mutual-connection queries.
Orchestrates the EdgeStore, the UserDirectory and the optional
AdjacencyCache.
"""

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional

from socialgraph.core.cache import AdjacencyCache
from socialgraph.core.exceptions import InvalidArgument, NotFound
from socialgraph.core.types import (
    DEFAULT_DECAY_FACTOR,
    DEFAULT_DECAY_FLOOR,
    MAX_WEIGHT,
    Edge,
    FollowResult,
    GraphEntry,
    GraphStats,
    InteractionType,
    RelationshipStrength,
    UserNode,
    normalize_user_id,
    validate_page,
)
from socialgraph.database.directory import UserDirectory
from socialgraph.database.edge_store import EdgeStore

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
MAX_BULK_CHECK = 500

STRONG_THRESHOLD = 0.7
MODERATE_THRESHOLD = 0.4


def classify_relationship(is_following: bool, is_followed_by: bool, weight: float) -> str:
    """
    Categorize a relationship from its follow directions and combined weight.

    Returns:
        'none', 'strong', 'moderate' or 'weak'
    """
    is_mutual = is_following and is_followed_by
    if not is_following and not is_followed_by:
        return "none"
    if is_mutual and weight >= STRONG_THRESHOLD:
        return "strong"
    if is_mutual or weight >= MODERATE_THRESHOLD:
        return "moderate"
    return "weak"


def relationship_description(strength: RelationshipStrength) -> str:
    """Human-readable summary of a relationship, from the caller's side."""
    if not strength.is_following and not strength.is_followed_by:
        return "No connection"

    if strength.is_mutual:
        if strength.category == "strong":
            return "Close mutual connection with frequent interactions"
        if strength.category == "moderate":
            return "Mutual connection with regular interactions"
        return "Mutual connection"

    if strength.is_following:
        return "You follow them, but they don't follow back"
    return "They follow you, but you don't follow back"


class GraphEngine:
    """
    Follow-graph service object.

    Constructed once at process start with its collaborators and shared by
    all request handlers. It holds no graph state of its own: the edge store
    is authoritative, and the cache (when given) only short-cuts reads.

    Usage:
        engine = GraphEngine(edge_store, directory, cache=AdjacencyCache())
        engine.follow_user("alice", "bob")
        engine.update_edge_weight("alice", "bob", "message")
        strength = engine.get_relationship_strength("alice", "bob")
    """

    def __init__(
        self,
        edge_store: EdgeStore,
        directory: UserDirectory,
        cache: Optional[AdjacencyCache] = None,
    ):
        """
        Initialize graph engine.

        Args:
            edge_store: Edge persistence
            directory: User directory collaborator
            cache: Optional adjacency cache (None disables caching)
        """
        self.edge_store = edge_store
        self.directory = directory
        self.cache = cache

        logger.info(f"GraphEngine initialized (cache: {'on' if cache else 'off'})")

    # ==================== FOLLOW / UNFOLLOW ====================

    def follow_user(self, source_id, target_id) -> FollowResult:
        """
        Follow a user: create the directed edge source -> target.

        Following an already-followed user is a successful no-op; counters
        only move when the edge was newly created.

        Raises:
            InvalidArgument: Self-follow or malformed ids
            NotFound: Follower or target user does not exist
        """
        source_id = normalize_user_id(source_id)
        target_id = normalize_user_id(target_id)
        if source_id == target_id:
            raise InvalidArgument("Users cannot follow themselves")

        users = self.directory.get_users([source_id, target_id])
        if source_id not in users:
            raise NotFound(f"User {source_id} not found")
        if target_id not in users:
            raise NotFound(f"Target user {target_id} not found")

        _, created = self.edge_store.upsert_edge(source_id, target_id)
        if created:
            self.directory.adjust_follow_counts(source_id, target_id, +1)
            logger.info(f"{source_id} followed {target_id}")
        else:
            logger.debug(f"{source_id} already follows {target_id}")

        self._invalidate(source_id, target_id)
        return self._follow_result(source_id, target_id, is_following=True, changed=created)

    def unfollow_user(self, source_id, target_id) -> FollowResult:
        """
        Remove the edge source -> target if present.

        Unfollowing a user that is not followed (including oneself) is a
        harmless no-op; ``FollowResult.changed`` tells whether an edge was
        removed.
        """
        source_id = normalize_user_id(source_id)
        target_id = normalize_user_id(target_id)
        if source_id == target_id:
            logger.debug(f"Ignoring self-unfollow by {source_id}")
            return self._follow_result(source_id, target_id, is_following=False, changed=False)

        removed = self.edge_store.delete_edge(source_id, target_id)
        if removed:
            self.directory.adjust_follow_counts(source_id, target_id, -1)
            logger.info(f"{source_id} unfollowed {target_id}")

        self._invalidate(source_id, target_id)
        return self._follow_result(source_id, target_id, is_following=False, changed=removed)

    def _follow_result(
        self,
        source_id: str,
        target_id: str,
        is_following: bool,
        changed: bool
    ) -> FollowResult:
        users = self.directory.get_users([source_id, target_id])
        source = users.get(source_id)
        target = users.get(target_id)
        return FollowResult(
            is_following=is_following,
            follower_count=target.followers_count if target else 0,
            following_count=source.following_count if source else 0,
            changed=changed,
        )

    # ==================== EDGE WEIGHTS ====================

    def update_edge_weight(self, source_id, target_id, interaction_type) -> bool:
        """
        Strengthen an existing edge after an interaction.

        Args:
            source_id: User who performed the interaction
            target_id: User who received it
            interaction_type: like, comment, message, share or mention

        Returns:
            True if an edge was updated. Interactions never create edges,
            and self-interactions are not tracked.
        """
        source_id = normalize_user_id(source_id)
        target_id = normalize_user_id(target_id)
        interaction = InteractionType.parse(interaction_type)

        if source_id == target_id:
            logger.debug(f"Ignoring self-interaction by {source_id}")
            return False

        updated = self.edge_store.increment_weight(
            source_id,
            target_id,
            interaction.weight_increment,
            interaction.counter_field,
        )
        if updated:
            logger.debug(f"Recorded {interaction.value}: {source_id} -> {target_id}")
        else:
            logger.debug(f"No edge {source_id} -> {target_id}; {interaction.value} not recorded")

        self._invalidate(source_id, target_id)
        return updated

    def apply_weight_decay(
        self,
        decay_factor: float = DEFAULT_DECAY_FACTOR,
        floor: float = DEFAULT_DECAY_FLOOR,
        batch_size: Optional[int] = None,
    ) -> int:
        """
        Decay every edge weight above ``floor`` toward it.

        Meant to run on a fixed schedule (daily) so weights reflect recent
        interaction rather than all-time totals.

        Returns:
            Number of edges updated
        """
        if not 0 < decay_factor <= 1:
            raise InvalidArgument("decay_factor must be in (0, 1]")
        if not 0 <= floor < MAX_WEIGHT:
            raise InvalidArgument("floor must be in [0, 1)")

        logger.info(f"Applying weight decay (factor={decay_factor}, floor={floor})")
        kwargs = {"batch_size": batch_size} if batch_size is not None else {}
        affected = self.edge_store.decay_all(decay_factor, floor, **kwargs)
        logger.info(f"Weight decay applied to {affected} edges")
        return affected

    # ==================== FOLLOWERS / FOLLOWING ====================

    def get_followers(self, user_id, limit: int = 50, offset: int = 0) -> List[GraphEntry]:
        """
        Users who follow ``user_id``, most engaged first.

        Args:
            user_id: The user whose followers to list
            limit: Page size (1..100)
            offset: Number of edges to skip

        Returns:
            List of GraphEntry (follower profile + edge)
        """
        user_id = normalize_user_id(user_id)
        validate_page(limit, offset, MAX_PAGE_SIZE)

        edges = self.edge_store.list_by_target(user_id, limit=limit, offset=offset)
        return self._join_profiles(edges, key=lambda e: e.source_id)

    def get_following(self, user_id, limit: int = 50, offset: int = 0) -> List[GraphEntry]:
        """Users ``user_id`` follows, most engaged first."""
        user_id = normalize_user_id(user_id)
        validate_page(limit, offset, MAX_PAGE_SIZE)

        edges = self.edge_store.list_by_source(user_id, limit=limit, offset=offset)
        return self._join_profiles(edges, key=lambda e: e.target_id)

    def _join_profiles(self, edges: List[Edge], key) -> List[GraphEntry]:
        users = self.directory.get_users(key(e) for e in edges)
        entries = []
        for edge in edges:
            user = users.get(key(edge))
            if user is None:
                logger.warning(f"Edge {edge.source_id} -> {edge.target_id} references unknown user")
                continue
            entries.append(GraphEntry(user=user, edge=edge))
        return entries

    def get_followers_count(self, user_id) -> int:
        """Follower count from the edge set (source of truth)."""
        return self.edge_store.count_by_target(normalize_user_id(user_id))

    def get_following_count(self, user_id) -> int:
        """Following count from the edge set (source of truth)."""
        return self.edge_store.count_by_source(normalize_user_id(user_id))

    def is_following(self, source_id, target_id) -> bool:
        source_id = normalize_user_id(source_id)
        target_id = normalize_user_id(target_id)
        return self.edge_store.find_edge(source_id, target_id) is not None

    def bulk_check_following(self, source_id, target_ids: Iterable) -> Dict[str, bool]:
        """
        Follow status of ``source_id`` toward each of ``target_ids`` in one query.

        Returns:
            Mapping of every requested target id to True/False
        """
        source_id = normalize_user_id(source_id)
        targets = [normalize_user_id(t) for t in target_ids]
        if len(targets) > MAX_BULK_CHECK:
            raise InvalidArgument(f"At most {MAX_BULK_CHECK} targets per bulk check")

        found = self.edge_store.find_edges_from(source_id, targets)
        return {target: target in found for target in targets}

    # ==================== RELATIONSHIP STRENGTH ====================

    def get_relationship_strength(self, user_a, user_b) -> RelationshipStrength:
        """
        Analyze the relationship between two users from both directed edges.

        The combined weight averages both directions (a missing edge counts
        as 0) and is capped at 1.0.
        """
        user_a = normalize_user_id(user_a)
        user_b = normalize_user_id(user_b)

        outgoing = self.edge_store.find_edge(user_a, user_b)
        incoming = self.edge_store.find_edge(user_b, user_a)

        is_following = outgoing is not None
        is_followed_by = incoming is not None

        total = 0.0
        last_interaction = None
        for edge in (outgoing, incoming):
            if edge is None:
                continue
            total += edge.weight
            if edge.last_interaction_at and (
                last_interaction is None or edge.last_interaction_at > last_interaction
            ):
                last_interaction = edge.last_interaction_at

        weight = min(total / 2, MAX_WEIGHT)

        return RelationshipStrength(
            source_id=user_a,
            target_id=user_b,
            is_following=is_following,
            is_followed_by=is_followed_by,
            is_mutual=is_following and is_followed_by,
            weight=weight,
            category=classify_relationship(is_following, is_followed_by, weight),
            last_interaction=last_interaction,
        )

    # ==================== MUTUAL CONNECTIONS ====================

    def following_ids(self, user_id: str) -> FrozenSet[str]:
        """Everyone ``user_id`` follows (read path, cache-accelerated)."""
        if self.cache is None:
            return frozenset(self.edge_store.target_ids(user_id))

        cached = self.cache.get_following(user_id)
        if cached is not None:
            return cached
        version = self.cache.version(user_id)
        ids = self.edge_store.target_ids(user_id)
        return self.cache.set_following(user_id, ids, version=version)

    def follower_ids(self, user_id: str) -> FrozenSet[str]:
        """Everyone following ``user_id`` (read path, cache-accelerated)."""
        if self.cache is None:
            return frozenset(self.edge_store.source_ids(user_id))

        cached = self.cache.get_followers(user_id)
        if cached is not None:
            return cached
        version = self.cache.version(user_id)
        ids = self.edge_store.source_ids(user_id)
        return self.cache.set_followers(user_id, ids, version=version)

    def get_mutual_connections(self, user_a, user_b) -> List[UserNode]:
        """Users that both ``user_a`` and ``user_b`` follow."""
        user_a = normalize_user_id(user_a)
        user_b = normalize_user_id(user_b)
        mutual = self.following_ids(user_a) & self.following_ids(user_b)
        return self._profiles_sorted(mutual)

    def get_mutual_followers(self, user_a, user_b) -> List[UserNode]:
        """Users that follow both ``user_a`` and ``user_b``."""
        user_a = normalize_user_id(user_a)
        user_b = normalize_user_id(user_b)
        mutual = self.follower_ids(user_a) & self.follower_ids(user_b)
        return self._profiles_sorted(mutual)

    def _profiles_sorted(self, user_ids: Iterable[str]) -> List[UserNode]:
        users = self.directory.get_users(user_ids)
        return [users[uid] for uid in sorted(users)]

    # ==================== STATISTICS ====================

    def get_graph_stats(self) -> GraphStats:
        """Global graph statistics for dashboards."""
        total_nodes = self.directory.count_active()
        total_edges = self.edge_store.count_all()

        average = total_edges / total_nodes if total_nodes > 0 else 0.0
        density = (
            total_edges / (total_nodes * (total_nodes - 1)) if total_nodes > 1 else 0.0
        )
        return GraphStats(
            total_nodes=total_nodes,
            total_edges=total_edges,
            avg_followers_per_user=average,
            avg_following_per_user=average,
            network_density=density,
        )

    def _invalidate(self, *user_ids: str) -> None:
        if self.cache is not None:
            self.cache.invalidate(*user_ids)
