"""
SQLAlchemy ORM models for the social graph database.

This module defines the User directory table and the GraphEdge table
holding directed follow relationships with interaction weights.
"""

from datetime import datetime, timezone
from typing import List
from sqlalchemy import (
    Boolean, Integer, String, Float, ForeignKey,
    CheckConstraint, UniqueConstraint, Index, TIMESTAMP
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in TIMESTAMP columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class User(Base):
    """
    User directory record.

    Attributes:
        user_id: Primary key, canonical string identifier
        name: Display name
        department: Academic department
        year: Year/batch (students only)
        college: College identifier (multi-college deployments)
        is_active: False once the account is deactivated
        followers_count: Denormalized count of incoming edges
        following_count: Denormalized count of outgoing edges
        created_at: Timestamp when record was created
        updated_at: Timestamp when record was last updated
    """
    __tablename__ = 'users'

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    department: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    year: Mapped[int] = mapped_column(Integer, nullable=True)
    college: Mapped[str] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    followers_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    following_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        default=utcnow,
        onupdate=utcnow
    )

    # Relationships
    outgoing_edges: Mapped[List["GraphEdge"]] = relationship(
        "GraphEdge",
        foreign_keys="GraphEdge.source_id",
        back_populates="source",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    incoming_edges: Mapped[List["GraphEdge"]] = relationship(
        "GraphEdge",
        foreign_keys="GraphEdge.target_id",
        back_populates="target",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("followers_count >= 0", name='check_followers_count'),
        CheckConstraint("following_count >= 0", name='check_following_count'),
        Index('idx_users_department', 'department'),
        Index('idx_users_department_followers', 'department', 'followers_count'),
    )

    def __repr__(self) -> str:
        return f"<User(user_id='{self.user_id}', name='{self.name}', department='{self.department}', year={self.year})>"


class GraphEdge(Base):
    """
    Directed follow edge: source follows target.

    Attributes:
        edge_id: Primary key, auto-incremented
        source_id: Follower (foreign key to users)
        target_id: Followed user (foreign key to users)
        weight: Engagement weight in [0, 1], starts at 0.1
        likes/comments/messages/shares/mentions: Interaction counters
        last_interaction_at: When the last interaction was recorded
        created_at: When the follow relationship was created
        updated_at: Last update to edge data
    """
    __tablename__ = 'graph_edges'

    edge_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey('users.user_id', ondelete='CASCADE'),
        nullable=False
    )
    target_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey('users.user_id', ondelete='CASCADE'),
        nullable=False
    )
    weight: Mapped[float] = mapped_column(Float, nullable=False, default=0.1)
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    messages: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shares: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mentions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_interaction_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        default=utcnow,
        onupdate=utcnow
    )

    # Relationships
    source: Mapped["User"] = relationship(
        "User", foreign_keys=[source_id], back_populates="outgoing_edges"
    )
    target: Mapped["User"] = relationship(
        "User", foreign_keys=[target_id], back_populates="incoming_edges"
    )

    # Constraints and indexes
    __table_args__ = (
        CheckConstraint("source_id <> target_id", name='check_no_self_follow'),
        CheckConstraint("weight >= 0 AND weight <= 1", name='check_weight_range'),
        UniqueConstraint('source_id', 'target_id', name='unique_source_target'),
        Index('idx_edges_source', 'source_id'),
        Index('idx_edges_target', 'target_id'),
        Index('idx_edges_source_weight', 'source_id', 'weight'),
        Index('idx_edges_target_weight', 'target_id', 'weight'),
        Index('idx_edges_last_interaction', 'last_interaction_at'),
    )

    def __repr__(self) -> str:
        return f"<GraphEdge(edge_id={self.edge_id}, source_id='{self.source_id}', target_id='{self.target_id}', weight={self.weight})>"
