"""
Plain result types returned by the graph and suggestion engines.

These are detached snapshots: nothing here holds a database session, so
results can be handed to request handlers and serialized freely.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from socialgraph.core.exceptions import InvalidArgument


MAX_USER_ID_LENGTH = 64
_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# Weight bounds for follow edges
INITIAL_WEIGHT = 0.1
MAX_WEIGHT = 1.0
DEFAULT_DECAY_FACTOR = 0.99
DEFAULT_DECAY_FLOOR = 0.05


class InteractionType(str, Enum):
    """Interaction kinds that strengthen a follow edge."""

    LIKE = "like"
    COMMENT = "comment"
    MESSAGE = "message"
    SHARE = "share"
    MENTION = "mention"

    @property
    def counter_field(self) -> str:
        """Name of the per-type counter column on the edge."""
        return f"{self.value}s"

    @property
    def weight_increment(self) -> float:
        return WEIGHT_INCREMENTS[self]

    @classmethod
    def parse(cls, value) -> "InteractionType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            allowed = ", ".join(t.value for t in cls)
            raise InvalidArgument(
                f"Invalid interaction type {value!r}. Must be one of: {allowed}"
            ) from None


WEIGHT_INCREMENTS: Dict[InteractionType, float] = {
    InteractionType.LIKE: 0.02,
    InteractionType.COMMENT: 0.05,
    InteractionType.MESSAGE: 0.08,
    InteractionType.SHARE: 0.03,
    InteractionType.MENTION: 0.04,
}

COUNTER_FIELDS = tuple(t.counter_field for t in InteractionType)


def normalize_user_id(value) -> str:
    """
    Convert an identifier from a collaborator into the canonical ``str`` form.

    Args:
        value: Identifier as received (str or int)

    Returns:
        Canonical string identifier

    Raises:
        InvalidArgument: If the identifier is empty, too long or malformed
    """
    if value is None or isinstance(value, bool):
        raise InvalidArgument("User id is required")
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        raise InvalidArgument(f"Unsupported user id type: {type(value).__name__}")

    user_id = value.strip()
    if not user_id:
        raise InvalidArgument("User id is required")
    if len(user_id) > MAX_USER_ID_LENGTH:
        raise InvalidArgument(f"User id longer than {MAX_USER_ID_LENGTH} characters")
    if not _USER_ID_PATTERN.match(user_id):
        raise InvalidArgument(f"Malformed user id: {value!r}")
    return user_id


def validate_page(limit: int, offset: int, max_limit: int) -> None:
    """Enforce server-side pagination bounds."""
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= max_limit:
        raise InvalidArgument(f"limit must be between 1 and {max_limit}")
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise InvalidArgument("offset must be >= 0")


@dataclass(frozen=True)
class UserNode:
    """Read-only projection of a user from the directory."""

    user_id: str
    name: str
    department: str
    year: Optional[int] = None
    college: Optional[str] = None
    is_active: bool = True
    followers_count: int = 0
    following_count: int = 0


@dataclass(frozen=True)
class Edge:
    """Snapshot of a directed follow edge (source follows target)."""

    source_id: str
    target_id: str
    weight: float
    interaction_counts: Dict[str, int]
    last_interaction_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    edge_id: Optional[int] = None


@dataclass(frozen=True)
class GraphEntry:
    """A follower/following list item: the other user plus the edge."""

    user: UserNode
    edge: Edge


@dataclass(frozen=True)
class FollowResult:
    """Outcome of a follow or unfollow call."""

    is_following: bool
    follower_count: int
    following_count: int
    # True when the call actually created or removed an edge
    changed: bool = False


@dataclass(frozen=True)
class RelationshipStrength:
    source_id: str
    target_id: str
    is_following: bool
    is_followed_by: bool
    is_mutual: bool
    weight: float
    category: str  # 'strong' | 'moderate' | 'weak' | 'none'
    last_interaction: Optional[datetime] = None


@dataclass(frozen=True)
class SuggestionFilters:
    same_department: bool = False
    same_year: bool = False
    same_college: bool = False


@dataclass
class Suggestion:
    """A ranked "people you may know" entry."""

    user: UserNode
    score: float
    mutual_connections: int
    connection_path: List[str] = field(default_factory=list)
    reason: str = ""


@dataclass(frozen=True)
class GraphStats:
    total_nodes: int
    total_edges: int
    avg_followers_per_user: float
    avg_following_per_user: float
    network_density: float
