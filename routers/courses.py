"""
Router for course listings and access requests.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.security import get_current_user
from db_config import get_db
from models.models import User, SharingTypeEnum, DifficultyLevelEnum
from schemas.course import (
    CourseCreate, CourseUpdate, CourseRead,
    CourseRequestCreate, CourseRequestStatusUpdate, CourseRequestRead
)
from services.course_service import CourseService

router = APIRouter(prefix="/courses", tags=["Courses"])


# ============ Courses ============

@router.get("", response_model=List[CourseRead])
def list_courses(
    category: Optional[str] = Query(None),
    type: Optional[SharingTypeEnum] = Query(None),
    difficulty: Optional[DifficultyLevelEnum] = Query(None),
    search: Optional[str] = Query(None, description="Substring of title or description"),
    db: Session = Depends(get_db)
):
    """List available courses, newest first."""
    courses = CourseService(db).list_courses(
        category=category, course_type=type, difficulty=difficulty, search=search
    )
    return [CourseRead.model_validate(course) for course in courses]


@router.post("", response_model=CourseRead, status_code=status.HTTP_201_CREATED)
def create_course(
    data: CourseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    course = CourseService(db).create_course(data, current_user)
    return CourseRead.model_validate(course)


# Request routes are declared before /{course_id} so "requests" is not parsed as an id

@router.get("/requests/sent", response_model=List[CourseRequestRead])
def list_sent_requests(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    requests = CourseService(db).list_sent_requests(current_user)
    return [CourseRequestRead.model_validate(r) for r in requests]


@router.get("/requests/received", response_model=List[CourseRequestRead])
def list_received_requests(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    requests = CourseService(db).list_received_requests(current_user)
    return [CourseRequestRead.model_validate(r) for r in requests]


@router.put("/requests/{request_id}", response_model=CourseRequestRead)
def update_request_status(
    request_id: int,
    data: CourseRequestStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Approve or deny a request addressed to one of the caller's courses."""
    course_request = CourseService(db).update_request_status(request_id, data, current_user)
    return CourseRequestRead.model_validate(course_request)


@router.get("/{course_id}", response_model=CourseRead)
def get_course(course_id: int, db: Session = Depends(get_db)):
    return CourseRead.model_validate(CourseService(db).get_course(course_id))


@router.put("/{course_id}", response_model=CourseRead)
def update_course(
    course_id: int,
    data: CourseUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    course = CourseService(db).update_course(course_id, data, current_user)
    return CourseRead.model_validate(course)


@router.delete("/{course_id}")
def delete_course(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    CourseService(db).delete_course(course_id, current_user)
    return {"message": "Course deleted"}


# ============ Access requests ============

@router.post("/{course_id}/request", response_model=CourseRequestRead, status_code=status.HTTP_201_CREATED)
def request_access(
    course_id: int,
    data: CourseRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Ask the owner for access to a course.

    Rejected when the caller owns the course or already has a pending or
    approved request for it.
    """
    course_request = CourseService(db).request_access(course_id, data, current_user)
    return CourseRequestRead.model_validate(course_request)
