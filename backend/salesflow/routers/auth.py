"""Auth endpoints."""
import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..auth import create_user_token, get_current_user
from ..config import settings
from ..database import get_db
from ..repository import StateRepository
from ..schemas import AuthUserResponse, LoginRequest, TokenResponse, UserResponse
from ..security import get_role_ui_permissions
from ..state import User
from ..use_cases.user_admin import login_use_case, logout_use_case

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _set_no_store(response: Response) -> None:
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"


def _auth_user_response(user: User) -> AuthUserResponse:
    base = UserResponse.model_validate(user)
    return AuthUserResponse(**base.model_dump(), permissions=get_role_ui_permissions(user.role))


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Login with username and password."""
    _set_no_store(response)
    repo = StateRepository(db)
    state, user = login_use_case(
        state=repo.load(),
        username=(payload.username or "").strip(),
        password=payload.password,
    )
    repo.save(state)

    return TokenResponse(
        access_token=create_user_token(user),
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=_auth_user_response(user),
    )


@router.post("/logout")
def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Clear the session user from the store."""
    _set_no_store(response)
    repo = StateRepository(db)
    state = repo.load()
    updated = logout_use_case(state=state, user=current_user)
    if updated is not state:
        repo.save(updated)
    logger.info("User %s logged out", current_user.username)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=AuthUserResponse)
def get_me(response: Response, current_user: User = Depends(get_current_user)):
    """Get current user info."""
    _set_no_store(response)
    return _auth_user_response(current_user)
