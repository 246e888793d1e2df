# Schemas package for Pydantic models
from .user import UserBrief, UserRead, UserPublic, ProfileUpdate, CircleSummary, CourseSummary
from .auth import RegisterRequest, LoginRequest, AuthResponse
from .course import (
    CourseCreate, CourseUpdate, CourseRead, CourseBrief,
    CourseRequestCreate, CourseRequestStatusUpdate, CourseRequestRead
)
from .circle import StudyCircleCreate, StudyCircleUpdate, StudyCircleRead, StudyCircleBrief
from .message import (
    DirectMessageCreate, GroupMessageCreate, MessageRead, ConversationRead, MarkReadResponse
)
from .chatbot import (
    ChatbotAskRequest, ChatbotAnswer, ChatbotHistoryRead, ChatbotHistoryPage, Pagination
)
from .dashboard import DashboardStats, DashboardRead

__all__ = [
    "UserBrief", "UserRead", "UserPublic", "ProfileUpdate", "CircleSummary", "CourseSummary",
    "RegisterRequest", "LoginRequest", "AuthResponse",
    "CourseCreate", "CourseUpdate", "CourseRead", "CourseBrief",
    "CourseRequestCreate", "CourseRequestStatusUpdate", "CourseRequestRead",
    "StudyCircleCreate", "StudyCircleUpdate", "StudyCircleRead", "StudyCircleBrief",
    "DirectMessageCreate", "GroupMessageCreate", "MessageRead", "ConversationRead", "MarkReadResponse",
    "ChatbotAskRequest", "ChatbotAnswer", "ChatbotHistoryRead", "ChatbotHistoryPage", "Pagination",
    "DashboardStats", "DashboardRead",
]
