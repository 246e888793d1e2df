"""
Pydantic schemas for direct and circle messages.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from models.models import MessageTypeEnum
from schemas.circle import StudyCircleBrief
from schemas.user import UserBrief


class _MessageContent(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message content cannot be blank")
        return v


class DirectMessageCreate(_MessageContent):
    receiver_id: int


class GroupMessageCreate(_MessageContent):
    study_circle_id: int


class MessageRead(BaseModel):
    id: int
    sender_id: int
    receiver_id: Optional[int] = None
    study_circle_id: Optional[int] = None
    content: str
    message_type: MessageTypeEnum
    is_read: bool
    created_at: datetime
    sender: UserBrief
    receiver: Optional[UserBrief] = None
    study_circle: Optional[StudyCircleBrief] = None

    class Config:
        from_attributes = True


class ConversationRead(BaseModel):
    """Latest direct message with a peer plus the caller's unread count."""
    peer: UserBrief
    last_message: MessageRead
    unread_count: int


class MarkReadResponse(BaseModel):
    message: str
    updated: int
