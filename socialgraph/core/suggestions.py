"""
Friends-of-friends user suggestions.

Scores second-degree connections by mutual-connection count and profile
affinity (department, year, college, popularity), backfilling from the
caller's department when the social neighborhood is too sparse.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from socialgraph.core.exceptions import InvalidArgument, NotFound
from socialgraph.core.graph_engine import GraphEngine
from socialgraph.core.types import Suggestion, SuggestionFilters, UserNode, normalize_user_id

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 50
FIRST_DEGREE_LIMIT = 100
SECOND_DEGREE_LIMIT = 50
CONNECTION_PATH_LENGTH = 3

# Scoring weights
MUTUAL_POINTS = 3.0
SAME_DEPT_AND_YEAR_POINTS = 5.0
SAME_DEPT_POINTS = 3.0
SAME_YEAR_POINTS = 2.0
SAME_COLLEGE_POINTS = 1.0
FOLLOWER_POINTS_PER_FOLLOWER = 0.1
MAX_FOLLOWER_POINTS = 5.0
MAX_SCORE = 100.0


class _Candidate:
    __slots__ = ("user", "connectors", "from_fallback")

    def __init__(self, user: UserNode, connectors: List[str], from_fallback: bool = False):
        self.user = user
        self.connectors = connectors
        self.from_fallback = from_fallback


def _same_department(a: UserNode, b: UserNode) -> bool:
    return bool(a.department) and a.department == b.department


def _same_year(a: UserNode, b: UserNode) -> bool:
    return a.year is not None and a.year == b.year


def _same_college(a: UserNode, b: UserNode) -> bool:
    return bool(a.college) and a.college == b.college


def score_candidate(viewer: UserNode, candidate: UserNode, mutual_count: int) -> float:
    """
    Relevance score of ``candidate`` for ``viewer``, clamped to [0, 100].

    +3 per mutual connection; +5 same department and year, else +3 same
    department, else +2 same year; +1 same college; plus a popularity bonus
    of 0.1 per follower capped at 5.
    """
    score = MUTUAL_POINTS * mutual_count

    same_dept = _same_department(viewer, candidate)
    same_year = _same_year(viewer, candidate)
    if same_dept and same_year:
        score += SAME_DEPT_AND_YEAR_POINTS
    elif same_dept:
        score += SAME_DEPT_POINTS
    elif same_year:
        score += SAME_YEAR_POINTS

    if _same_college(viewer, candidate):
        score += SAME_COLLEGE_POINTS

    score += min(candidate.followers_count * FOLLOWER_POINTS_PER_FOLLOWER, MAX_FOLLOWER_POINTS)

    return max(0.0, min(score, MAX_SCORE))


def _format_names(names: List[str], total: int) -> str:
    others = total - len(names)
    if others <= 0:
        return " and ".join(names)
    noun = "other" if others == 1 else "others"
    return f"{', '.join(names)} and {others} {noun}"


def suggestion_reason(
    viewer: UserNode,
    candidate: UserNode,
    connector_names: List[str],
    mutual_count: int,
    from_fallback: bool = False,
) -> str:
    """Human-readable reason derived from the dominant scoring factor."""
    if mutual_count > 0 and connector_names:
        return f"Followed by {_format_names(connector_names, mutual_count)}"
    if mutual_count > 0:
        noun = "connection" if mutual_count == 1 else "connections"
        return f"{mutual_count} mutual {noun}"

    same_dept = _same_department(viewer, candidate)
    same_year = _same_year(viewer, candidate)
    if same_dept and same_year:
        return f"In your department and year ({candidate.department}, {candidate.year})"
    if same_dept and not from_fallback:
        return f"From your department ({candidate.department})"
    if same_year:
        return f"Also in year {candidate.year}"
    if _same_college(viewer, candidate):
        return f"From your college ({candidate.college})"
    if from_fallback:
        return f"Popular in {candidate.department}"
    return "Suggested for you"


class SuggestionEngine:
    """
    Generates "people you may know" suggestions.

    This class handles:
    - Building the exclusion set (self and everyone already followed)
    - Expanding the caller's strongest first-degree edges to second degree
    - Backfilling from the caller's department for sparse neighborhoods
    - Scoring, ranking and explaining each suggestion

    The traversal is deterministic for fixed data; there is no randomness.
    """

    def __init__(
        self,
        graph: GraphEngine,
        timeout: Optional[float] = None,
        first_degree_limit: int = FIRST_DEGREE_LIMIT,
        second_degree_limit: int = SECOND_DEGREE_LIMIT,
        clock=time.monotonic,
    ):
        """
        Initialize suggestion engine.

        Args:
            graph: Graph engine used for edge and directory access
            timeout: Default time budget in seconds for second-degree expansion
            first_degree_limit: Number of strongest outgoing edges to expand
            second_degree_limit: Outgoing edges fetched per first-degree user
            clock: Monotonic clock (injectable for tests)
        """
        self.graph = graph
        self.edge_store = graph.edge_store
        self.directory = graph.directory
        self.timeout = timeout
        self.first_degree_limit = first_degree_limit
        self.second_degree_limit = second_degree_limit
        self.clock = clock

    def get_suggestions(
        self,
        user_id,
        filters: Optional[SuggestionFilters] = None,
        limit: int = 20,
        deadline: Optional[float] = None,
    ) -> List[Suggestion]:
        """
        Suggest users for ``user_id`` to follow.

        Args:
            user_id: User to generate suggestions for
            filters: Optional same-department / same-year / same-college filters
            limit: Maximum suggestions to return (1..50)
            deadline: Monotonic instant after which second-degree expansion
                stops; defaults to now + ``timeout`` when a timeout is set

        Returns:
            Suggestions ranked by score, then mutual-connection count

        Raises:
            InvalidArgument: Malformed id or out-of-range limit
            NotFound: Caller does not exist
        """
        user_id = normalize_user_id(user_id)
        filters = filters or SuggestionFilters()
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_SUGGESTIONS:
            raise InvalidArgument(f"limit must be between 1 and {MAX_SUGGESTIONS}")
        if deadline is None and self.timeout is not None:
            deadline = self.clock() + self.timeout

        viewer = self.directory.get_user(user_id)
        if viewer is None:
            raise NotFound(f"User {user_id} not found")

        logger.info(f"Generating suggestions for {user_id} (limit={limit})")

        # Step 1: exclusion set
        excluded = set(self.graph.following_ids(user_id))
        excluded.add(user_id)

        # Steps 2-3: friends of friends
        connectors_by_candidate = self._expand_second_degree(user_id, excluded, deadline)

        candidates: Dict[str, _Candidate] = {}
        profiles = self.directory.get_users(connectors_by_candidate)
        for candidate_id, connectors in connectors_by_candidate.items():
            user = profiles.get(candidate_id)
            if user is None or not user.is_active:
                continue
            if not self._passes_filters(viewer, user, filters):
                continue
            candidates[candidate_id] = _Candidate(user, connectors)

        logger.debug(f"  {len(candidates)} second-degree candidates after filtering")

        # Step 4: department backfill for sparse neighborhoods
        if len(candidates) < limit and viewer.department:
            self._backfill_from_department(viewer, filters, excluded, candidates, limit)

        # Steps 5-7: score, rank, explain
        connector_ids = {cid for c in candidates.values() for cid in c.connectors[:2]}
        connector_profiles = self.directory.get_users(connector_ids)

        suggestions = []
        for candidate_id, candidate in candidates.items():
            mutual_count = len(candidate.connectors)
            names = [
                connector_profiles[cid].name or cid
                for cid in candidate.connectors[:2]
                if cid in connector_profiles
            ]
            suggestions.append(
                Suggestion(
                    user=candidate.user,
                    score=score_candidate(viewer, candidate.user, mutual_count),
                    mutual_connections=mutual_count,
                    connection_path=candidate.connectors[:CONNECTION_PATH_LENGTH],
                    reason=suggestion_reason(
                        viewer, candidate.user, names, mutual_count, candidate.from_fallback
                    ),
                )
            )

        suggestions.sort(key=lambda s: (-s.score, -s.mutual_connections, s.user.user_id))
        result = suggestions[:limit]

        logger.info(f"Returning {len(result)} suggestions for {user_id}")
        return result

    def _expand_second_degree(
        self,
        user_id: str,
        excluded: set,
        deadline: Optional[float],
    ) -> Dict[str, List[str]]:
        """Map each second-degree candidate to the first-degree users linking to it."""
        first_degree = self.edge_store.target_ids(user_id, limit=self.first_degree_limit)
        connectors: Dict[str, List[str]] = defaultdict(list)

        for index, friend_id in enumerate(first_degree):
            if deadline is not None and self.clock() >= deadline:
                logger.warning(
                    f"Suggestion traversal for {user_id} stopped at deadline "
                    f"after {index}/{len(first_degree)} first-degree users"
                )
                break

            for candidate_id in self.edge_store.target_ids(friend_id, limit=self.second_degree_limit):
                if candidate_id in excluded:
                    continue
                connectors[candidate_id].append(friend_id)

        return dict(connectors)

    def _backfill_from_department(
        self,
        viewer: UserNode,
        filters: SuggestionFilters,
        excluded: set,
        candidates: Dict[str, _Candidate],
        limit: int,
    ) -> None:
        needed = limit - len(candidates)
        skip = excluded | set(candidates)
        fallback = self.directory.list_by_department(
            viewer.department,
            exclude=skip,
            limit=needed * 2,
            year=viewer.year if filters.same_year else None,
            college=viewer.college if filters.same_college else None,
        )

        added = 0
        for user in fallback:
            if added >= needed:
                break
            if user.user_id in skip or not self._passes_filters(viewer, user, filters):
                continue
            candidates[user.user_id] = _Candidate(user, [], from_fallback=True)
            added += 1

        logger.debug(f"  Backfilled {added} candidates from department {viewer.department}")

    @staticmethod
    def _passes_filters(viewer: UserNode, user: UserNode, filters: SuggestionFilters) -> bool:
        if filters.same_department and user.department != viewer.department:
            return False
        if filters.same_year and (viewer.year is None or user.year != viewer.year):
            return False
        if filters.same_college and (not viewer.college or user.college != viewer.college):
            return False
        return True
