"""
Router for study circles.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.security import get_current_user
from db_config import get_db
from models.models import User, DifficultyLevelEnum
from schemas.circle import StudyCircleCreate, StudyCircleUpdate, StudyCircleRead
from services.circle_service import CircleService

router = APIRouter(prefix="/circles", tags=["Study Circles"])


@router.get("", response_model=List[StudyCircleRead])
def list_circles(
    topic: Optional[str] = Query(None, description="Case-insensitive topic substring"),
    skill_level: Optional[DifficultyLevelEnum] = Query(None),
    search: Optional[str] = Query(None, description="Substring of name or topic"),
    db: Session = Depends(get_db)
):
    circles = CircleService(db).list_circles(topic=topic, skill_level=skill_level, search=search)
    return [StudyCircleRead.model_validate(circle) for circle in circles]


@router.post("", response_model=StudyCircleRead, status_code=status.HTTP_201_CREATED)
def create_circle(
    data: StudyCircleCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a circle; the creator becomes its first member."""
    circle = CircleService(db).create_circle(data, current_user)
    return StudyCircleRead.model_validate(circle)


@router.get("/{circle_id}", response_model=StudyCircleRead)
def get_circle(circle_id: int, db: Session = Depends(get_db)):
    return StudyCircleRead.model_validate(CircleService(db).get_circle(circle_id))


@router.put("/{circle_id}", response_model=StudyCircleRead)
def update_circle(
    circle_id: int,
    data: StudyCircleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    circle = CircleService(db).update_circle(circle_id, data, current_user)
    return StudyCircleRead.model_validate(circle)


@router.delete("/{circle_id}")
def delete_circle(
    circle_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CircleService(db).delete_circle(circle_id, current_user)
    return {"message": "Study circle deleted"}


@router.post("/{circle_id}/join", response_model=StudyCircleRead)
def join_circle(
    circle_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Join a circle if it has room."""
    circle = CircleService(db).join_circle(circle_id, current_user)
    return StudyCircleRead.model_validate(circle)


@router.post("/{circle_id}/leave", response_model=StudyCircleRead)
def leave_circle(
    circle_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Leave a circle; the creator cannot leave."""
    circle = CircleService(db).leave_circle(circle_id, current_user)
    return StudyCircleRead.model_validate(circle)
