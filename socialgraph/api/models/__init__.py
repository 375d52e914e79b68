"""
Pydantic schemas for API request/response validation.
"""

from socialgraph.api.models.user import UserCreate, UserResponse
from socialgraph.api.models.graph import (
    ConnectionItem,
    ConnectionListResponse,
    FollowResponse,
    InteractionCreate,
    InteractionResponse,
    MutualResponse,
    Pagination,
    RelationshipResponse,
    StatsResponse,
    UserSummary,
)
from socialgraph.api.models.suggestion import SuggestionItem, SuggestionResponse

__all__ = [
    "UserCreate",
    "UserResponse",
    "UserSummary",
    "FollowResponse",
    "InteractionCreate",
    "InteractionResponse",
    "RelationshipResponse",
    "MutualResponse",
    "ConnectionItem",
    "ConnectionListResponse",
    "Pagination",
    "StatsResponse",
    "SuggestionItem",
    "SuggestionResponse",
]
