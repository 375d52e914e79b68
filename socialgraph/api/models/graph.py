"""
Pydantic schemas for the follow graph API.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from socialgraph.core.types import InteractionType


class UserSummary(BaseModel):
    """Profile projection returned in lists."""

    user_id: str
    name: str
    department: str
    year: int | None = None
    college: str | None = None
    is_active: bool

    class Config:
        from_attributes = True


class FollowResponse(BaseModel):
    is_following: bool
    follower_count: int
    following_count: int


class InteractionCreate(BaseModel):
    """Request body for recording an interaction."""

    target_id: str = Field(..., min_length=1, max_length=64)
    interaction_type: InteractionType


class InteractionResponse(BaseModel):
    recorded: bool
    source_id: str
    target_id: str
    interaction_type: InteractionType
    recorded_at: datetime


class RelationshipResponse(BaseModel):
    source_id: str
    target_id: str
    is_following: bool
    is_followed_by: bool
    is_mutual: bool
    weight: float
    category: Literal["strong", "moderate", "weak", "none"]
    last_interaction: datetime | None = None
    description: str


class MutualResponse(BaseModel):
    type: Literal["mutual_following", "mutual_followers"]
    users: list[UserSummary]
    count: int


class ConnectionItem(BaseModel):
    """Follower/following list item with relationship metadata."""

    user: UserSummary
    followed_at: datetime
    weight: float
    last_interaction: datetime | None = None
    is_followed_by_me: bool


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ConnectionListResponse(BaseModel):
    user_id: str
    items: list[ConnectionItem]
    pagination: Pagination


class GlobalStats(BaseModel):
    total_users: int
    total_connections: int
    avg_followers_per_user: float
    avg_following_per_user: float
    network_density: float


class CallerStats(BaseModel):
    user_id: str
    followers: int
    following: int
    engagement_ratio: float


class StatsResponse(BaseModel):
    global_stats: GlobalStats
    user: CallerStats
