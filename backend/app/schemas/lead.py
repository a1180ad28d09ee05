from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from app.models.lead import LeadSource, LeadStatus
from app.schemas.common import CamelRequest, CamelResponse


class LeadCreate(CamelRequest):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=r'^[6-9]\d{9}$', description="10-digit Indian mobile number")
    college: str = Field(..., min_length=1, max_length=100)
    source: LeadSource = LeadSource.WEBSITE_POPUP

    @field_validator("name", "phone", "college", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class LeadUpdate(CamelRequest):
    status: Optional[LeadStatus] = None
    notes: Optional[str] = Field(None, max_length=500)


class LeadResponse(CamelResponse):
    id: str
    name: str
    email: str
    phone: str
    college: str
    source: LeadSource
    status: LeadStatus
    notes: Optional[str] = None
    submission_count: int
    last_submitted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
