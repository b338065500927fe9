"""User profile model shared by the cache, the identity merge and admin flows."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

UserRole = Literal["student", "teacher", "parent", "admin"]


def normalize_username(username: str) -> str:
    normalized = username.strip().upper()
    if not normalized:
        raise ValueError("Username cannot be empty.")
    return normalized


class UserProfile(BaseModel):
    id: str = Field(..., min_length=1)
    username: str
    full_name: str = "User"
    role: UserRole = "student"
    active: bool = True
    allowed_modules: List[str] = Field(default_factory=list)
    institute: Optional[str] = None
    school: Optional[str] = None
    assigned_teacher_id: Optional[str] = None
    teacher_notes: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    grade: Optional[str] = None
    curriculum: Optional[str] = None
    password: Optional[str] = None

    @field_validator("username")
    @classmethod
    def _upper_username(cls, value: str) -> str:
        return normalize_username(value)


__all__ = ["UserProfile", "UserRole", "normalize_username"]
