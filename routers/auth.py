"""
Authentication routes for registration, login and the caller's profile.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.config import settings
from core.rate_limiting import check_rate_limit
from core.security import create_access_token, get_current_user
from db_config import get_db
from models.models import User
from schemas.auth import RegisterRequest, LoginRequest, AuthResponse
from schemas.user import UserRead
from services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_token(user: User) -> AuthResponse:
    access_token = create_access_token(data={"sub": str(user.id)})
    return AuthResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=UserRead.model_validate(user),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_rate_limit("auth"))],
)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user.

    - **email**: unique, compared case-insensitively
    - **password**: minimum 6 characters
    - **role**: `learner` or `sharer`
    """
    user = UserService(db).register(data)
    return _issue_token(user)


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(check_rate_limit("auth"))],
)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    user = UserService(db).authenticate(data.email, data.password)
    return _issue_token(user)


@router.get("/profile", response_model=UserRead)
def get_profile(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's record."""
    return UserRead.model_validate(current_user)
