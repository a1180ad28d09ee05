# Re-export all models for convenient imports
from app.models.user import User, UserRole
from app.models.problem import (
    ProblemStatement,
    DomainSequence,
    ProblemDomain,
    ProblemCategory,
    ProblemDifficulty,
    ProblemStatus,
)
from app.models.lead import Lead, LeadSource, LeadStatus

__all__ = [
    # User
    "User",
    "UserRole",
    # Problem statements
    "ProblemStatement",
    "DomainSequence",
    "ProblemDomain",
    "ProblemCategory",
    "ProblemDifficulty",
    "ProblemStatus",
    # Leads
    "Lead",
    "LeadSource",
    "LeadStatus",
]
