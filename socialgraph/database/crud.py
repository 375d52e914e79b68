"""
CRUD operations for the User directory table.

This module provides Create, Read, Update, Delete operations on users.
Follow edges are owned by ``socialgraph.database.edge_store``.
"""

from typing import Iterable, List, Optional
from sqlalchemy import case, func, update
from sqlalchemy.orm import Session

from socialgraph.database.models import User


# ==================== USER CRUD OPERATIONS ====================

def create_user(
    session: Session,
    user_id: str,
    name: str,
    department: str,
    year: Optional[int] = None,
    college: Optional[str] = None,
    is_active: bool = True,
) -> User:
    """
    Create a new user.

    Args:
        session: Database session
        user_id: Canonical user identifier
        name: Display name
        department: Academic department
        year: Year/batch (optional)
        college: College identifier (optional)
        is_active: Whether the account is active

    Returns:
        Created User object

    Raises:
        ValueError: If user_id is empty or year is not positive
    """
    if not user_id:
        raise ValueError("user_id is required")
    if year is not None and year <= 0:
        raise ValueError("Year must be a positive integer")

    user = User(
        user_id=user_id,
        name=name,
        department=department,
        year=year,
        college=college,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def get_user(session: Session, user_id: str) -> Optional[User]:
    """
    Get a user by ID.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User object or None if not found
    """
    return session.query(User).filter(User.user_id == user_id).first()


def get_users_by_ids(session: Session, user_ids: Iterable[str]) -> List[User]:
    """
    Get all users whose id is in ``user_ids``.

    Missing ids are silently skipped; order is unspecified.
    """
    ids = list(set(user_ids))
    if not ids:
        return []
    return session.query(User).filter(User.user_id.in_(ids)).all()


def get_users(
    session: Session,
    skip: int = 0,
    limit: int = 100
) -> List[User]:
    """
    Get a list of users with pagination.

    Args:
        session: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return

    Returns:
        List of User objects
    """
    return session.query(User).order_by(User.user_id).offset(skip).limit(limit).all()


def get_user_count(session: Session, active_only: bool = False) -> int:
    """
    Get total count of users.

    Args:
        session: Database session
        active_only: Count only active accounts

    Returns:
        Total number of users
    """
    query = session.query(func.count(User.user_id))
    if active_only:
        query = query.filter(User.is_active.is_(True))
    return query.scalar()


def get_department_users(
    session: Session,
    department: str,
    exclude_ids: Iterable[str] = (),
    limit: int = 40,
    year: Optional[int] = None,
    college: Optional[str] = None,
) -> List[User]:
    """
    Get active users of a department, most followed first.

    Args:
        session: Database session
        department: Department to match
        exclude_ids: User IDs to leave out
        limit: Maximum number of records to return
        year: Restrict to this year when given
        college: Restrict to this college when given

    Returns:
        List of User objects ordered by followers_count descending
    """
    query = session.query(User).filter(
        User.department == department,
        User.is_active.is_(True),
    )
    excluded = list(set(exclude_ids))
    if excluded:
        query = query.filter(User.user_id.notin_(excluded))
    if year is not None:
        query = query.filter(User.year == year)
    if college is not None:
        query = query.filter(User.college == college)

    return query.order_by(
        User.followers_count.desc(),
        User.user_id.asc()
    ).limit(limit).all()


def update_user(
    session: Session,
    user_id: str,
    **kwargs
) -> Optional[User]:
    """
    Update user information.

    Args:
        session: Database session
        user_id: User ID
        **kwargs: Fields to update (name, department, year, college, is_active)

    Returns:
        Updated User object or None if not found
    """
    user = get_user(session, user_id)
    if user:
        for key, value in kwargs.items():
            if hasattr(user, key):
                setattr(user, key, value)
        session.commit()
        session.refresh(user)
    return user


def delete_user(session: Session, user_id: str) -> bool:
    """
    Delete a user.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        True if user was deleted, False if not found
    """
    user = get_user(session, user_id)
    if user:
        session.delete(user)
        session.commit()
        return True
    return False


def adjust_follow_counts(
    session: Session,
    source_id: str,
    target_id: str,
    delta: int
) -> None:
    """
    Atomically shift denormalized counters after an edge mutation.

    ``following_count`` moves on the source, ``followers_count`` on the
    target. Counters never go below zero.

    Args:
        session: Database session
        source_id: Follower
        target_id: Followed user
        delta: +1 after a create, -1 after a delete
    """
    following = User.following_count + delta
    followers = User.followers_count + delta

    session.execute(
        update(User)
        .where(User.user_id == source_id)
        .values(following_count=case((following < 0, 0), else_=following)),
        execution_options={"synchronize_session": False}
    )
    session.execute(
        update(User)
        .where(User.user_id == target_id)
        .values(followers_count=case((followers < 0, 0), else_=followers)),
        execution_options={"synchronize_session": False}
    )
    session.commit()
