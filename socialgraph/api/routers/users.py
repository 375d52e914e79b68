"""
User directory API endpoints.

The directory is owned by the wider application; these endpoints exist
to seed and inspect it when the service runs standalone.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from socialgraph.api.dependencies import get_db
from socialgraph.api.models.user import UserCreate, UserResponse
from socialgraph.database import crud

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse)
def create_user(user_in: UserCreate, db: Session = Depends(get_db)):
    """Create a new user directory record."""
    if crud.get_user(db, user_in.user_id):
        raise HTTPException(status_code=409, detail="User already exists")
    try:
        user = crud.create_user(
            db,
            user_id=user_in.user_id,
            name=user_in.name,
            department=user_in.department,
            year=user_in.year,
            college=user_in.college,
            is_active=user_in.is_active,
        )
        return user
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError:
        raise HTTPException(status_code=409, detail="User already exists")


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Get user profile by ID."""
    user = crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
