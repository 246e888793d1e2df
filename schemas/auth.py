"""
Authentication-related Pydantic schemas.
"""
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from models.models import UserRoleEnum
from schemas.user import UserRead, _unique_tags


class RegisterRequest(BaseModel):
    """Registration request schema."""
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="Email address, stored lowercased")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    role: UserRoleEnum
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

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("skills", "interests")
    @classmethod
    def dedupe_tags(cls, v: List[str]) -> List[str]:
        return _unique_tags(v)


class LoginRequest(BaseModel):
    """Login request schema."""
    email: str = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AuthResponse(BaseModel):
    """Token issued on register and login."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiration time in seconds")
    user: UserRead
