from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from app.models.user import UserRole
from app.schemas.base import APIModel, Email


# Shared properties
class UserBase(APIModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: Email = Field(..., max_length=255)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


# Properties to receive via API on creation
class UserCreate(UserBase):
    password: str = Field(..., min_length=1)


# Properties to receive via API on update; an empty password keeps the old one
class UserUpdate(UserBase):
    password: Optional[str] = None


# Properties to return to client
class User(APIModel):
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


# Owner details embedded in task responses
class UserSummary(APIModel):
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class RoleUpdate(APIModel):
    role: UserRole


# Properties for the credential check
class UserLogin(APIModel):
    username: str
    password: str


class UserTaskSummary(UserSummary):
    total_tasks: int
    pending_tasks: int
    in_progress_tasks: int
    completed_tasks: int
    cancelled_tasks: int
    overdue_tasks: int
