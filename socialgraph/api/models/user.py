"""
Pydantic schemas for User API.
"""

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Request body for creating a user directory record."""

    user_id: str = Field(..., min_length=1, max_length=64, pattern="^[A-Za-z0-9_-]+$")
    name: str = Field(..., min_length=1, max_length=100)
    department: str = Field(..., min_length=1, max_length=100)
    year: int | None = Field(None, ge=1, le=3000)
    college: str | None = Field(None, max_length=100)
    is_active: bool = True


class UserResponse(BaseModel):
    """Response model for user."""

    user_id: str
    name: str
    department: str
    year: int | None = None
    college: str | None = None
    is_active: bool
    followers_count: int
    following_count: int

    class Config:
        from_attributes = True
