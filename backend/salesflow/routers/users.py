"""User endpoints."""
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import Optional
from ..database import get_db
from ..repository import StateRepository
from ..schemas import PasswordResetRequest, UserCreate, UserResponse
from ..auth import PermissionChecker
from ..state import User, UserRole
from ..use_cases.user_admin import (
    create_user_use_case,
    delete_user_use_case,
    reset_password_use_case,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def get_users(
    role: Optional[UserRole] = None,
    current_user: User = Depends(PermissionChecker("canManageUsers")),
    db: Session = Depends(get_db)
):
    """Get all users, optionally only one role."""
    users = StateRepository(db).load().users
    if role is not None:
        users = tuple(u for u in users if u.role == role)
    return [UserResponse.model_validate(u) for u in users]


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    data: UserCreate,
    current_user: User = Depends(PermissionChecker("canManageUsers")),
    db: Session = Depends(get_db)
):
    """Create a user."""
    repo = StateRepository(db)
    state, user = create_user_use_case(
        state=repo.load(),
        username=data.username,
        name=data.name,
        email=data.email,
        role=data.role,
        password=data.password,
    )
    repo.save(state)
    return UserResponse.model_validate(user)


@router.post("/{user_id}/reset-password", status_code=204)
def reset_password(
    user_id: str,
    data: PasswordResetRequest,
    current_user: User = Depends(PermissionChecker("canManageUsers")),
    db: Session = Depends(get_db)
):
    """Set a new password for a user."""
    repo = StateRepository(db)
    repo.save(reset_password_use_case(state=repo.load(), user_id=user_id, new_password=data.new_password))
    return Response(status_code=204)


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: str,
    current_user: User = Depends(PermissionChecker("canManageUsers")),
    db: Session = Depends(get_db)
):
    """Delete a user that no order refers to."""
    repo = StateRepository(db)
    repo.save(delete_user_use_case(state=repo.load(), user_id=user_id, current_user=current_user))
    return Response(status_code=204)
