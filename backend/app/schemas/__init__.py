# Pydantic schemas
from app.schemas.problem import (
    ProblemCreate,
    ProblemUpdate,
    ProblemStatusUpdate,
    ProblemResponse,
    ImportOutcomeResponse,
)
from app.schemas.auth import UserRegister, UserLogin, UserResponse, UserUpdate
from app.schemas.lead import LeadCreate, LeadUpdate, LeadResponse
from app.schemas.common import MessageResponse, serialize, serialize_many

__all__ = [
    "ProblemCreate",
    "ProblemUpdate",
    "ProblemStatusUpdate",
    "ProblemResponse",
    "ImportOutcomeResponse",
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "UserUpdate",
    "LeadCreate",
    "LeadUpdate",
    "LeadResponse",
    "MessageResponse",
    "serialize",
    "serialize_many",
]
