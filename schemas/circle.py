"""
Pydantic schemas for study circles.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from models.models import DifficultyLevelEnum
from schemas.user import UserBrief


class StudyCircleBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    topic: str = Field(..., min_length=1, max_length=150)
    skill_level: DifficultyLevelEnum
    availability: str = Field(..., min_length=1, max_length=255)
    goals: str = Field(..., min_length=1)
    resources: List[str] = []


class StudyCircleCreate(StudyCircleBase):
    max_members: Optional[int] = Field(None, ge=1, le=500)


class StudyCircleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    topic: Optional[str] = Field(None, min_length=1, max_length=150)
    skill_level: Optional[DifficultyLevelEnum] = None
    availability: Optional[str] = Field(None, min_length=1, max_length=255)
    goals: Optional[str] = Field(None, min_length=1)
    resources: Optional[List[str]] = None
    max_members: Optional[int] = Field(None, ge=1, le=500)
    is_active: Optional[bool] = None


class StudyCircleRead(StudyCircleBase):
    id: int
    creator_id: int
    max_members: int
    member_count: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    creator: UserBrief
    members: List[UserBrief] = []

    class Config:
        from_attributes = True


class StudyCircleBrief(BaseModel):
    id: int
    name: str
    topic: str

    class Config:
        from_attributes = True
