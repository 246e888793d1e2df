"""
Dashboard aggregate returned to the signed-in user.
"""
from typing import List
from pydantic import BaseModel
from schemas.chatbot import ChatbotHistoryRead
from schemas.circle import StudyCircleRead
from schemas.course import CourseRead
from schemas.user import UserRead


class DashboardStats(BaseModel):
    total_courses: int
    total_circles: int
    total_chats: int
    sent_requests: int
    received_requests: int
    pending_requests: int


class DashboardRead(BaseModel):
    user: UserRead
    stats: DashboardStats
    recent_courses: List[CourseRead]
    recent_circles: List[StudyCircleRead]
    recent_chats: List[ChatbotHistoryRead]
