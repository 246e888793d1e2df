"""
User service: registration, credentials, profile and dashboard aggregation.
"""
from typing import List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from core.exceptions import AuthenticationException, ConflictException, ResourceNotFoundException
from core.logging import get_logger
from core.security import get_password_hash, verify_password
from models.models import (
    User, Course, CourseRequest, StudyCircle, StudyCircleMember, ChatbotHistory,
    UserRoleEnum, RequestStatusEnum
)
from schemas.auth import RegisterRequest
from schemas.user import ProfileUpdate

logger = get_logger("user_service")

RECENT_ITEMS = 5
USER_LIST_LIMIT = 20


class UserService:
    """Service for account and profile operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_by_email(self, email: str) -> Optional[User]:
        return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def register(self, data: RegisterRequest) -> User:
        """Create an account; the email is already normalized by the schema."""
        if self._get_by_email(data.email):
            logger.warning("Registration failed - email already exists", email=data.email)
            raise ConflictException("User already exists")

        user = User(
            name=data.name,
            email=data.email,
            password_hash=get_password_hash(data.password),
            role=data.role,
            bio=data.bio,
            skills=data.skills,
            interests=data.interests,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Registration lost a race on email", email=data.email)
            raise ConflictException("User already exists")

        self.db.refresh(user)
        logger.info("User registered successfully", user_id=user.id, role=user.role.value)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Login failed - invalid credentials", email=email)
            raise AuthenticationException("Invalid credentials")

        logger.info("User logged in", user_id=user.id)
        return user

    def update_profile(self, user: User, data: ProfileUpdate) -> User:
        user.name = data.name
        user.bio = data.bio
        user.skills = data.skills
        user.interests = data.interests
        self.db.commit()
        self.db.refresh(user)

        logger.info("Profile updated", user_id=user.id)
        return user

    def get_dashboard(self, user: User) -> dict:
        """Counts plus the five newest courses, circles and chats for `user`."""
        def count(stmt) -> int:
            return self.db.execute(stmt).scalar() or 0

        stats = {
            "total_courses": count(
                select(func.count(Course.id)).where(Course.owner_id == user.id)
            ),
            "total_circles": count(
                select(func.count()).select_from(StudyCircleMember).where(StudyCircleMember.user_id == user.id)
            ),
            "total_chats": count(
                select(func.count(ChatbotHistory.id)).where(ChatbotHistory.user_id == user.id)
            ),
            "sent_requests": count(
                select(func.count(CourseRequest.id)).where(CourseRequest.requester_id == user.id)
            ),
            "received_requests": count(
                select(func.count(CourseRequest.id)).where(CourseRequest.owner_id == user.id)
            ),
            "pending_requests": count(
                select(func.count(CourseRequest.id)).where(
                    CourseRequest.owner_id == user.id,
                    CourseRequest.status == RequestStatusEnum.pending,
                )
            ),
        }

        recent_courses = self.db.execute(
            select(Course)
            .options(selectinload(Course.owner))
            .where(Course.owner_id == user.id)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .limit(RECENT_ITEMS)
        ).scalars().all()

        recent_circles = self.db.execute(
            select(StudyCircle)
            .join(StudyCircleMember, StudyCircleMember.circle_id == StudyCircle.id)
            .options(
                selectinload(StudyCircle.creator),
                selectinload(StudyCircle.memberships).selectinload(StudyCircleMember.user),
            )
            .where(StudyCircleMember.user_id == user.id)
            .order_by(StudyCircle.created_at.desc(), StudyCircle.id.desc())
            .limit(RECENT_ITEMS)
        ).scalars().all()

        recent_chats = self.db.execute(
            select(ChatbotHistory)
            .where(ChatbotHistory.user_id == user.id)
            .order_by(ChatbotHistory.created_at.desc(), ChatbotHistory.id.desc())
            .limit(RECENT_ITEMS)
        ).scalars().all()

        return {
            "user": user,
            "stats": stats,
            "recent_courses": recent_courses,
            "recent_circles": recent_circles,
            "recent_chats": recent_chats,
        }

    def list_users(
        self,
        current_user: User,
        search: Optional[str] = None,
        role: Optional[UserRoleEnum] = None,
    ) -> List[User]:
        """Other users, optionally filtered by name/email substring and role."""
        stmt = select(User).where(User.id != current_user.id)

        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        if role:
            stmt = stmt.where(User.role == role)

        stmt = stmt.order_by(User.created_at.desc(), User.id.desc()).limit(USER_LIST_LIMIT)
        return self.db.execute(stmt).scalars().all()

    def get_public_user(self, user_id: int) -> User:
        user = self.db.execute(
            select(User)
            .options(
                selectinload(User.circle_memberships).selectinload(StudyCircleMember.circle),
                selectinload(User.courses_shared),
            )
            .where(User.id == user_id)
        ).scalar_one_or_none()

        if user is None:
            raise ResourceNotFoundException("User not found")
        return user
