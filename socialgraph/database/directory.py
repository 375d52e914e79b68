"""
SQL-backed user directory.

The graph core only reads user attributes (department, year, college,
activity flag) through this collaborator and asks it to shift the
denormalized follower/following counters.
"""

import logging
from typing import Dict, Iterable, List, Optional

from socialgraph.core.retry import RetryConfig, with_retry
from socialgraph.core.types import UserNode
from socialgraph.database import crud
from socialgraph.database.connection import DatabaseManager
from socialgraph.database.models import User

logger = logging.getLogger(__name__)


def user_to_node(user: User) -> UserNode:
    """Convert a User row to a detached UserNode."""
    return UserNode(
        user_id=user.user_id,
        name=user.name or "",
        department=user.department or "",
        year=user.year,
        college=user.college,
        is_active=bool(user.is_active),
        followers_count=user.followers_count or 0,
        following_count=user.following_count or 0,
    )


class UserDirectory:
    """Read-mostly lookup of user attributes used for scoring and listing."""

    def __init__(self, db_manager: DatabaseManager, retry_config: Optional[RetryConfig] = None):
        self.db_manager = db_manager
        self.retry_config = retry_config or RetryConfig()

    def _run(self, operation: str, func):
        def attempt():
            with self.db_manager.session_scope() as session:
                return func(session)
        return with_retry(attempt, self.retry_config, operation=operation)

    def get_user(self, user_id: str) -> Optional[UserNode]:
        def op(session):
            user = crud.get_user(session, user_id)
            return user_to_node(user) if user else None
        return self._run("get_user", op)

    def exists(self, user_id: str) -> bool:
        return self.get_user(user_id) is not None

    def get_users(self, user_ids: Iterable[str]) -> Dict[str, UserNode]:
        """Batch lookup; ids with no record are absent from the result."""
        ids = list(user_ids)
        if not ids:
            return {}

        def op(session):
            return {u.user_id: user_to_node(u) for u in crud.get_users_by_ids(session, ids)}
        return self._run("get_users", op)

    def list_by_department(
        self,
        department: str,
        exclude: Iterable[str] = (),
        limit: int = 40,
        year: Optional[int] = None,
        college: Optional[str] = None,
    ) -> List[UserNode]:
        """Active users of ``department`` ordered by follower count descending."""
        excluded = list(exclude)

        def op(session):
            users = crud.get_department_users(
                session,
                department,
                exclude_ids=excluded,
                limit=limit,
                year=year,
                college=college,
            )
            return [user_to_node(u) for u in users]
        return self._run("list_by_department", op)

    def adjust_follow_counts(self, source_id: str, target_id: str, delta: int) -> None:
        def op(session):
            crud.adjust_follow_counts(session, source_id, target_id, delta)
        self._run("adjust_follow_counts", op)
        logger.debug(f"Follow counters shifted by {delta:+d}: {source_id} -> {target_id}")

    def count_active(self) -> int:
        return self._run("count_active", lambda session: crud.get_user_count(session, active_only=True))
