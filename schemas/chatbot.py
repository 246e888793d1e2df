"""
Pydantic schemas for the study assistant.
"""
from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, field_validator


class ChatbotAskRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=4000)
    topic: str = Field("general", max_length=100)

    @field_validator("question")
    @classmethod
    def strip_question(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Question cannot be blank")
        return v

    @field_validator("topic")
    @classmethod
    def default_topic(cls, v: str) -> str:
        return v.strip() or "general"


class ChatbotAnswer(BaseModel):
    question: str
    answer: str
    topic: str
    timestamp: datetime
    is_fallback: bool = False


class ChatbotHistoryRead(BaseModel):
    id: int
    user_id: int
    question: str
    answer: str
    topic: str
    created_at: datetime

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ChatbotHistoryPage(BaseModel):
    history: List[ChatbotHistoryRead]
    pagination: Pagination
