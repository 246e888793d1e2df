"""
User routes: profile editing, dashboard and member directory.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.security import get_current_user
from db_config import get_db
from models.models import User, UserRoleEnum
from schemas.dashboard import DashboardRead
from schemas.user import UserRead, UserPublic, ProfileUpdate
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=UserRead)
def get_profile(current_user: User = Depends(get_current_user)):
    return UserRead.model_validate(current_user)


@router.put("/profile", response_model=UserRead)
def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Replace name, bio, skills and interests.

    Omitted skills or interests are cleared.
    """
    user = UserService(db).update_profile(current_user, data)
    return UserRead.model_validate(user)


@router.get("/dashboard", response_model=DashboardRead)
def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Activity counts plus the most recent courses, circles and chats."""
    dashboard = UserService(db).get_dashboard(current_user)
    return DashboardRead.model_validate(dashboard, from_attributes=True)


@router.get("", response_model=List[UserRead])
def list_users(
    search: Optional[str] = Query(None, description="Substring of name or email"),
    role: Optional[UserRoleEnum] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Up to 20 other users matching the filters."""
    users = UserService(db).list_users(current_user, search=search, role=role)
    return [UserRead.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserPublic)
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Public profile with joined circles and shared courses."""
    return UserPublic.model_validate(UserService(db).get_public_user(user_id))
