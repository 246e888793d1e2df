"""
Course exchange service: listings and the access request workflow.
"""
from typing import List, Optional

from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.exceptions import (
    AuthorizationException, ConflictException, InvalidOperationException,
    ResourceNotFoundException
)
from core.logging import get_logger
from models.models import (
    User, Course, CourseRequest, AvailabilityEnum, SharingTypeEnum,
    DifficultyLevelEnum, RequestStatusEnum, ACTIVE_REQUEST_STATUSES, DEFAULT_COURSE_IMAGE
)
from schemas.course import (
    CourseCreate, CourseUpdate, CourseRequestCreate, CourseRequestStatusUpdate
)

logger = get_logger("course_service")

# Allowed moves when request transitions are enforced
REQUEST_TRANSITIONS = {
    RequestStatusEnum.pending: {RequestStatusEnum.approved, RequestStatusEnum.denied},
    RequestStatusEnum.approved: set(),
    RequestStatusEnum.denied: set(),
}


def _request_options():
    return (
        selectinload(CourseRequest.course),
        selectinload(CourseRequest.requester),
        selectinload(CourseRequest.owner),
    )


class CourseService:
    """Service for course listings and access requests."""

    def __init__(self, db: Session):
        self.db = db

    def _get_course(self, course_id: int) -> Course:
        course = self.db.execute(
            select(Course).options(selectinload(Course.owner)).where(Course.id == course_id)
        ).scalar_one_or_none()
        if course is None:
            raise ResourceNotFoundException("Course not found")
        return course

    def _get_owned_course(self, course_id: int, user: User) -> Course:
        course = self._get_course(course_id)
        if course.owner_id != user.id:
            logger.warning("Course ownership check failed", course_id=course_id, user_id=user.id)
            raise AuthorizationException("Not authorized to modify this course")
        return course

    def _get_request(self, request_id: int) -> CourseRequest:
        course_request = self.db.execute(
            select(CourseRequest).options(*_request_options()).where(CourseRequest.id == request_id)
        ).scalar_one_or_none()
        if course_request is None:
            raise ResourceNotFoundException("Request not found")
        return course_request

    def _has_active_request(self, course_id: int, requester_id: int) -> bool:
        """Pending or approved request by `requester_id` for the course."""
        existing = self.db.execute(
            select(CourseRequest.id).where(
                CourseRequest.course_id == course_id,
                CourseRequest.requester_id == requester_id,
                CourseRequest.status.in_(ACTIVE_REQUEST_STATUSES),
            )
        ).first()
        return existing is not None

    # ---- Courses ----

    def list_courses(
        self,
        category: Optional[str] = None,
        course_type: Optional[SharingTypeEnum] = None,
        difficulty: Optional[DifficultyLevelEnum] = None,
        search: Optional[str] = None,
    ) -> List[Course]:
        """Available courses, newest first."""
        stmt = (
            select(Course)
            .options(selectinload(Course.owner))
            .where(Course.availability == AvailabilityEnum.available)
        )

        if category:
            stmt = stmt.where(Course.category == category)
        if course_type:
            stmt = stmt.where(Course.type == course_type)
        if difficulty:
            stmt = stmt.where(Course.difficulty == difficulty)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Course.title.ilike(pattern), Course.description.ilike(pattern)))

        stmt = stmt.order_by(Course.created_at.desc(), Course.id.desc())
        return self.db.execute(stmt).scalars().all()

    def get_course(self, course_id: int) -> Course:
        return self._get_course(course_id)

    def create_course(self, data: CourseCreate, owner: User) -> Course:
        values = data.model_dump()
        values["image_url"] = values.get("image_url") or DEFAULT_COURSE_IMAGE

        course = Course(**values, owner_id=owner.id)
        self.db.add(course)
        self.db.commit()

        logger.info("Course created", course_id=course.id, owner_id=owner.id)
        return self._get_course(course.id)

    def update_course(self, course_id: int, data: CourseUpdate, user: User) -> Course:
        course = self._get_owned_course(course_id, user)

        # owner_id is not part of the update schema, so ownership cannot move
        updates = data.model_dump(exclude_unset=True)
        if "image_url" in updates and not updates["image_url"]:
            updates["image_url"] = DEFAULT_COURSE_IMAGE
        for field, value in updates.items():
            if value is not None:
                setattr(course, field, value)

        self.db.commit()
        self.db.refresh(course)

        logger.info("Course updated", course_id=course.id)
        return course

    def delete_course(self, course_id: int, user: User) -> None:
        course = self._get_owned_course(course_id, user)
        self.db.delete(course)
        self.db.commit()
        logger.info("Course deleted", course_id=course_id, owner_id=user.id)

    # ---- Access requests ----

    def request_access(self, course_id: int, data: CourseRequestCreate, requester: User) -> CourseRequest:
        """
        File a pending access request.

        Checks run in order: course exists, requester is not the owner, no
        active request already exists. The partial unique index settles
        concurrent duplicates at insert time.
        """
        course = self._get_course(course_id)

        if course.owner_id == requester.id:
            raise InvalidOperationException("Cannot request your own course")

        if self._has_active_request(course_id, requester.id):
            raise ConflictException("Request already exists")

        course_request = CourseRequest(
            course_id=course.id,
            requester_id=requester.id,
            owner_id=course.owner_id,
            reason=data.reason,
            time_window=data.time_window,
            status=RequestStatusEnum.pending,
        )
        self.db.add(course_request)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Duplicate course request rejected by index", course_id=course_id, requester_id=requester.id)
            raise ConflictException("Request already exists")

        logger.info(
            "Course access requested",
            request_id=course_request.id,
            course_id=course_id,
            requester_id=requester.id,
        )
        return self._get_request(course_request.id)

    def list_sent_requests(self, user: User) -> List[CourseRequest]:
        return self.db.execute(
            select(CourseRequest)
            .options(*_request_options())
            .where(CourseRequest.requester_id == user.id)
            .order_by(CourseRequest.created_at.desc(), CourseRequest.id.desc())
        ).scalars().all()

    def list_received_requests(self, user: User) -> List[CourseRequest]:
        return self.db.execute(
            select(CourseRequest)
            .options(*_request_options())
            .where(CourseRequest.owner_id == user.id)
            .order_by(CourseRequest.created_at.desc(), CourseRequest.id.desc())
        ).scalars().all()

    def update_request_status(
        self, request_id: int, data: CourseRequestStatusUpdate, user: User
    ) -> CourseRequest:
        course_request = self._get_request(request_id)

        if course_request.owner_id != user.id:
            logger.warning("Request status change denied", request_id=request_id, user_id=user.id)
            raise AuthorizationException("Not authorized to update this request")

        if settings.enforce_request_transitions:
            allowed = REQUEST_TRANSITIONS.get(course_request.status, set())
            if data.status not in allowed:
                raise InvalidOperationException(
                    f"Cannot change request from {course_request.status.value} to {data.status.value}"
                )

        course_request.status = data.status
        if data.message is not None:
            course_request.message = data.message

        try:
            self.db.commit()
        except IntegrityError:
            # Re-approving a denied request while another one is active
            self.db.rollback()
            raise ConflictException("Another active request exists for this course")

        logger.info("Course request updated", request_id=request_id, status=data.status.value)
        return self._get_request(request_id)
