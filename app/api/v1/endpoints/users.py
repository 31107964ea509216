"""
User Endpoints Module

This module lets authenticated users look each other up (to pick project
members and assignees) and manage their own profile through the /me endpoints.
"""
from typing import Any, List
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.api import deps
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import UserRead, UserUpdate
from app.core.security import get_password_hash

router = APIRouter()

@router.get("", response_model=List[UserRead])
def read_users(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Retrieve a paginated list of users.

    Args:
        db: Database session
        skip: Number of records to skip (for pagination)
        limit: Maximum number of records to return
        current_user: Currently authenticated user

    Returns:
        List[UserRead]: List of user objects (passwords excluded)
    """
    users = db.exec(select(User).order_by(User.email).offset(skip).limit(limit)).all()
    return users

@router.get("/me", response_model=UserRead)
def read_user_me(
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Get the current authenticated user's profile.
    """
    return current_user

@router.put("/me", response_model=UserRead)
def update_user_me(
    *,
    db: Session = Depends(get_db),
    user_in: UserUpdate,
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Update the current user's own profile.

    Only provided fields are updated; a new password is hashed before storage.

    Raises:
        HTTPException 400: If the new email is already used by another account
    """
    if user_in.email is not None and user_in.email != current_user.email:
        taken = db.exec(select(User).where(User.email == user_in.email)).first()
        if taken:
            raise HTTPException(status_code=400, detail="User with this email already exists.")
        current_user.email = user_in.email

    # Update password if provided (will be hashed)
    if user_in.password is not None:
        current_user.password = get_password_hash(user_in.password)
    if user_in.full_name is not None:
        current_user.full_name = user_in.full_name

    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return current_user

@router.get("/{user_id}", response_model=UserRead)
def read_user_by_id(
    user_id: str,
    current_user: User = Depends(deps.get_current_active_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Get a specific user by ID.

    Raises:
        HTTPException 404: If the user doesn't exist
    """
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
