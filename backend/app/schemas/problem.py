from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.models.problem import ProblemDomain, ProblemCategory, ProblemDifficulty, ProblemStatus
from app.schemas.common import CamelRequest, CamelResponse


def _clean_items(value):
    if not isinstance(value, list):
        return value
    return [item.strip() if isinstance(item, str) else item for item in value
            if not isinstance(item, str) or item.strip()]


class ProblemCreate(CamelRequest):
    """Manually submitted problem statement (stricter than bulk import rows)"""
    title: str = Field(..., min_length=5, max_length=200)
    abstract: str = Field(..., min_length=50, max_length=5000)
    domain: ProblemDomain
    category: ProblemCategory
    difficulty: ProblemDifficulty
    duration: str = Field(..., min_length=1, max_length=50)
    technologies: List[str] = Field(..., min_length=1)
    deliverables: List[str] = Field(..., min_length=1)
    prerequisites: List[str] = []
    learning_outcomes: List[str] = []
    tags: List[str] = []
    status: ProblemStatus = ProblemStatus.DRAFT
    featured: bool = False
    custom_id: Optional[str] = Field(None, max_length=20)

    @field_validator("title", "abstract", "duration", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("technologies", "deliverables", "prerequisites", "learning_outcomes", "tags", mode="before")
    @classmethod
    def drop_blank_items(cls, value):
        return _clean_items(value)


class ProblemUpdate(CamelRequest):
    title: Optional[str] = Field(None, min_length=5, max_length=200)
    abstract: Optional[str] = Field(None, min_length=50, max_length=5000)
    domain: Optional[ProblemDomain] = None
    category: Optional[ProblemCategory] = None
    difficulty: Optional[ProblemDifficulty] = None
    duration: Optional[str] = Field(None, min_length=1, max_length=50)
    technologies: Optional[List[str]] = Field(None, min_length=1)
    deliverables: Optional[List[str]] = Field(None, min_length=1)
    prerequisites: Optional[List[str]] = None
    learning_outcomes: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    status: Optional[ProblemStatus] = None
    featured: Optional[bool] = None

    @field_validator("technologies", "deliverables", "prerequisites", "learning_outcomes", "tags", mode="before")
    @classmethod
    def drop_blank_items(cls, value):
        return _clean_items(value)


class ProblemStatusUpdate(CamelRequest):
    status: ProblemStatus


class CreatorSummary(CamelResponse):
    id: str
    name: str
    email: str


class ProblemResponse(CamelResponse):
    id: str
    custom_id: str
    title: str
    abstract: str
    domain: ProblemDomain
    category: ProblemCategory
    difficulty: ProblemDifficulty
    duration: str
    technologies: List[str] = []
    deliverables: List[str] = []
    prerequisites: List[str] = []
    learning_outcomes: List[str] = []
    tags: List[str] = []
    status: ProblemStatus
    featured: bool
    view_count: int
    created_by: Optional[CreatorSummary] = Field(None, validation_alias="creator", serialization_alias="createdBy")
    created_at: datetime
    updated_at: Optional[datetime] = None


class RowErrorResponse(CamelResponse):
    row: int
    field: str
    message: str


class ImportOutcomeResponse(CamelResponse):
    imported: int
    failed: int
    errors: List[RowErrorResponse]
