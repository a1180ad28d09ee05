from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from app.models.user import UserRole
from app.schemas.common import CamelRequest, CamelResponse


class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = Field(None, max_length=20)
    course: Optional[str] = Field(None, max_length=100)
    college: Optional[str] = Field(None, max_length=255)
    role: UserRole = UserRole.STUDENT

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(CamelResponse):
    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool
    phone: Optional[str] = None
    course: Optional[str] = None
    college: Optional[str] = None
    avatar: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime


class UserUpdate(CamelRequest):
    """Fields a user (or an admin) may change on a profile"""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value
