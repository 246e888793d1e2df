"""
User-related Pydantic schemas for request/response validation.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from models.models import UserRoleEnum, DifficultyLevelEnum


def _unique_tags(values: Optional[List[str]]) -> List[str]:
    """Trim, drop blanks and duplicates while keeping first-seen order.

    Runs after pydantic has checked the value is a list of strings.
    """
    seen = []
    for value in values or []:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen


class UserBrief(BaseModel):
    """The populated form of a user reference (owner, creator, sender...)."""
    id: int
    name: str
    email: str
    role: UserRoleEnum

    class Config:
        from_attributes = True


class UserRead(BaseModel):
    """Schema for reading user data (excludes the password hash)."""
    id: int
    name: str
    email: str
    role: UserRoleEnum
    bio: str = ""
    skills: List[str] = []
    interests: List[str] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CircleSummary(BaseModel):
    id: int
    name: str
    topic: str
    skill_level: DifficultyLevelEnum

    class Config:
        from_attributes = True


class CourseSummary(BaseModel):
    id: int
    title: str
    platform: str
    category: str

    class Config:
        from_attributes = True


class UserPublic(UserRead):
    """Public profile with summaries of joined circles and shared courses."""
    joined_circles: List[CircleSummary] = []
    courses_shared: List[CourseSummary] = []


class ProfileUpdate(BaseModel):
    """
    Replacement values for the editable profile fields.

    Omitted skills or interests reset to empty lists.
    """
    name: str = Field(..., min_length=1, max_length=100)
    bio: str = Field("", max_length=2000)
    skills: List[str] = []
    interests: List[str] = []

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @field_validator("skills", "interests")
    @classmethod
    def dedupe_tags(cls, v: List[str]) -> List[str]:
        return _unique_tags(v)
