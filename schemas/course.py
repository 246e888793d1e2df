"""
Pydantic schemas for course listings and access requests.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from models.models import (
    AvailabilityEnum, SharingTypeEnum, DifficultyLevelEnum, RequestStatusEnum
)
from schemas.user import UserBrief


class CourseOwner(UserBrief):
    bio: str = ""


# Course Schemas
class CourseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    platform: str = Field(..., min_length=1, max_length=100)
    type: SharingTypeEnum
    category: str = Field(..., min_length=1, max_length=100)
    duration: str = Field("", max_length=100)
    difficulty: DifficultyLevelEnum = DifficultyLevelEnum.beginner
    availability: AvailabilityEnum = AvailabilityEnum.available


class CourseCreate(CourseBase):
    image_url: Optional[str] = Field(None, max_length=500)


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    platform: Optional[str] = Field(None, min_length=1, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    availability: Optional[AvailabilityEnum] = None
    type: Optional[SharingTypeEnum] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    duration: Optional[str] = Field(None, max_length=100)
    difficulty: Optional[DifficultyLevelEnum] = None


class CourseRead(CourseBase):
    id: int
    image_url: str
    owner_id: int
    owner: CourseOwner
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CourseBrief(BaseModel):
    id: int
    title: str
    platform: str
    category: str
    image_url: str

    class Config:
        from_attributes = True


# Course Request Schemas
class CourseRequestCreate(BaseModel):
    reason: str = Field("", max_length=2000)
    time_window: str = Field("", max_length=100)


class CourseRequestStatusUpdate(BaseModel):
    status: RequestStatusEnum
    message: Optional[str] = Field(None, max_length=2000)


class CourseRequestRead(BaseModel):
    id: int
    course_id: int
    requester_id: int
    owner_id: int
    reason: str
    time_window: str
    status: RequestStatusEnum
    message: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    course: CourseBrief
    requester: UserBrief
    owner: UserBrief

    class Config:
        from_attributes = True
