"""
Database models for the application.
"""
import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, Text, ForeignKey, Enum as SAEnum,
    JSON, PrimaryKeyConstraint, Index, CheckConstraint, text
)
from sqlalchemy.orm import relationship

from db_config import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


DEFAULT_COURSE_IMAGE = (
    "https://images.pexels.com/photos/5427674/pexels-photo-5427674.jpeg"
    "?auto=compress&cs=tinysrgb&w=800"
)


# --- ENUM Types ---
class UserRoleEnum(enum.Enum):
    learner = "learner"
    sharer = "sharer"

class AvailabilityEnum(enum.Enum):
    available = "available"
    busy = "busy"
    completed = "completed"

class SharingTypeEnum(enum.Enum):
    lend = "lend"
    exchange = "exchange"

class DifficultyLevelEnum(enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"

class RequestStatusEnum(enum.Enum):
    pending = "pending"
    approved = "approved"
    denied = "denied"

class MessageTypeEnum(enum.Enum):
    direct = "direct"
    group = "group"


ACTIVE_REQUEST_STATUSES = (RequestStatusEnum.pending, RequestStatusEnum.approved)
_ACTIVE_REQUEST_CLAUSE = "status IN ('pending', 'approved')"


# --- Model Definitions ---

class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(SAEnum(UserRoleEnum, name="user_role_enum"), nullable=False)
    bio = Column(Text, nullable=False, default="")
    skills = Column(JSON, nullable=False, default=list)
    interests = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    courses_shared = relationship("Course", back_populates="owner", cascade="all, delete-orphan")
    circle_memberships = relationship("StudyCircleMember", back_populates="user", cascade="all, delete-orphan")
    created_circles = relationship("StudyCircle", back_populates="creator")
    chatbot_history = relationship("ChatbotHistory", back_populates="user", cascade="all, delete-orphan")

    @property
    def joined_circles(self):
        return [membership.circle for membership in self.circle_memberships]


class Course(Base):
    __tablename__ = "course"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    platform = Column(String(100), nullable=False)
    image_url = Column(String(500), nullable=False, default=DEFAULT_COURSE_IMAGE)
    availability = Column(
        SAEnum(AvailabilityEnum, name="availability_enum"),
        nullable=False,
        default=AvailabilityEnum.available,
        index=True,
    )
    type = Column(SAEnum(SharingTypeEnum, name="sharing_type_enum"), nullable=False)
    owner_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    duration = Column(String(100), nullable=False, default="")
    difficulty = Column(
        SAEnum(DifficultyLevelEnum, name="difficulty_level_enum"),
        nullable=False,
        default=DifficultyLevelEnum.beginner,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    owner = relationship("User", back_populates="courses_shared")
    requests = relationship("CourseRequest", back_populates="course", cascade="all, delete-orphan")


class CourseRequest(Base):
    __tablename__ = "course_request"
    __table_args__ = (
        # One active request per (course, requester); denied requests do not count
        Index(
            "uq_course_request_active",
            "course_id",
            "requester_id",
            unique=True,
            postgresql_where=text(_ACTIVE_REQUEST_CLAUSE),
            sqlite_where=text(_ACTIVE_REQUEST_CLAUSE),
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("course.id", ondelete="CASCADE"), nullable=False, index=True)
    requester_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    reason = Column(Text, nullable=False, default="")
    time_window = Column(String(100), nullable=False, default="")
    status = Column(
        SAEnum(RequestStatusEnum, name="request_status_enum"),
        nullable=False,
        default=RequestStatusEnum.pending,
    )
    message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    course = relationship("Course", back_populates="requests")
    requester = relationship("User", foreign_keys=[requester_id])
    owner = relationship("User", foreign_keys=[owner_id])


class StudyCircle(Base):
    __tablename__ = "study_circle"
    __table_args__ = (
        CheckConstraint("max_members >= 1", name="ck_study_circle_max_members_positive"),
        CheckConstraint("member_count <= max_members", name="ck_study_circle_capacity"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    topic = Column(String(150), nullable=False, index=True)
    skill_level = Column(SAEnum(DifficultyLevelEnum, name="difficulty_level_enum"), nullable=False)
    availability = Column(String(255), nullable=False)
    goals = Column(Text, nullable=False)
    resources = Column(JSON, nullable=False, default=list)
    creator_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    max_members = Column(Integer, nullable=False, default=10)
    # Mirrors the number of membership rows; updated conditionally on join
    member_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    creator = relationship("User", back_populates="created_circles")
    memberships = relationship(
        "StudyCircleMember",
        back_populates="circle",
        cascade="all, delete-orphan",
        order_by="StudyCircleMember.joined_at",
    )
    messages = relationship("Message", back_populates="study_circle", cascade="all, delete-orphan")

    @property
    def members(self):
        return [membership.user for membership in self.memberships]


class StudyCircleMember(Base):
    __tablename__ = "study_circle_member"
    __table_args__ = (PrimaryKeyConstraint("circle_id", "user_id"),)

    circle_id = Column(Integer, ForeignKey("study_circle.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("user.id"), primary_key=True)
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    circle = relationship("StudyCircle", back_populates="memberships")
    user = relationship("User", back_populates="circle_memberships")


class Message(Base):
    __tablename__ = "message"
    __table_args__ = (
        CheckConstraint(
            "(message_type = 'direct' AND receiver_id IS NOT NULL AND study_circle_id IS NULL) OR "
            "(message_type = 'group' AND study_circle_id IS NOT NULL AND receiver_id IS NULL)",
            name="ck_message_shape",
        ),
        Index("ix_message_direct_pair", "sender_id", "receiver_id", "created_at"),
        Index("ix_message_circle_created", "study_circle_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    sender_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    receiver_id = Column(Integer, ForeignKey("user.id"), nullable=True)
    study_circle_id = Column(Integer, ForeignKey("study_circle.id", ondelete="CASCADE"), nullable=True)
    content = Column(Text, nullable=False)
    message_type = Column(SAEnum(MessageTypeEnum, name="message_type_enum"), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])
    study_circle = relationship("StudyCircle", back_populates="messages")


class ChatbotHistory(Base):
    __tablename__ = "chatbot_history"
    __table_args__ = (
        Index("ix_chatbot_history_user_created", "user_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    topic = Column(String(100), nullable=False, default="general")

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="chatbot_history")
