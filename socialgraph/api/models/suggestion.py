"""
Pydantic schemas for Suggestion API.
"""

from pydantic import BaseModel

from socialgraph.api.models.graph import UserSummary


class SuggestionItem(BaseModel):
    """Single suggestion with score and explanation."""

    user: UserSummary
    score: float
    mutual_connections: int
    connection_path: list[str]
    reason: str


class SuggestionResponse(BaseModel):
    """Response model for suggestions list."""

    user_id: str
    suggestions: list[SuggestionItem]
    n: int
