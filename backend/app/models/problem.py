from sqlalchemy import (
    Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, Boolean, Index, CheckConstraint
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
import re

from app.core.database import Base
from app.core.types import GUID, StringList, generate_uuid


# 2-3 uppercase letters followed by 3 digits: AI001, AIM001, IOT002
CUSTOM_ID_PATTERN = re.compile(r"^[A-Z]{2,3}\d{3}$")


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class ProblemDomain(str, enum.Enum):
    """Problem statement domains"""
    AI_ML = "AI & Machine Learning"
    IOT = "IoT & Embedded Systems"
    CLOUD = "Cloud Computing"
    WEB_MOBILE = "Web & Mobile Applications"
    CYBERSECURITY = "Cybersecurity & Blockchain"
    DATA_SCIENCE = "Data Science & Analytics"
    NETWORKING = "Networking & Communication"
    MECHANICAL_ECE = "Mechanical / ECE Projects"


class ProblemCategory(str, enum.Enum):
    """Project size category"""
    MAJOR = "Major"
    MINOR = "Minor"
    CAPSTONE = "Capstone"


class ProblemDifficulty(str, enum.Enum):
    """Difficulty level"""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ProblemStatus(str, enum.Enum):
    """Publication status"""
    ACTIVE = "Active"
    DRAFT = "Draft"
    ARCHIVED = "Archived"


DOMAIN_VALUES = _enum_values(ProblemDomain)
CATEGORY_VALUES = _enum_values(ProblemCategory)
DIFFICULTY_VALUES = _enum_values(ProblemDifficulty)
STATUS_VALUES = _enum_values(ProblemStatus)


class ProblemStatement(Base):
    """Catalog entry for an academic project problem statement"""
    __tablename__ = "problem_statements"

    __table_args__ = (
        Index('ix_problem_statements_custom_id', 'custom_id', unique=True),
        Index('ix_problem_statements_domain_status', 'domain', 'status'),
        Index('ix_problem_statements_difficulty_status', 'difficulty', 'status'),
        Index('ix_problem_statements_featured_status', 'featured', 'status'),
        Index('ix_problem_statements_created_by', 'created_by'),
        Index('ix_problem_statements_view_count', 'view_count'),
        # Containment lookups on tags; GIN needs JSONB so other backends skip it
        Index('ix_problem_statements_tags', 'tags', postgresql_using='gin').ddl_if(dialect='postgresql'),
        CheckConstraint('view_count >= 0', name='ck_problem_statements_view_count'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    custom_id = Column(String(6), nullable=False)  # AIM001, IOT002

    title = Column(String(200), nullable=False)
    abstract = Column(Text, nullable=False)
    domain = Column(SQLEnum(ProblemDomain, values_callable=_enum_values, name="problem_domain", length=50),
                    nullable=False)
    category = Column(SQLEnum(ProblemCategory, values_callable=_enum_values, name="problem_category"),
                      default=ProblemCategory.MAJOR, nullable=False)
    difficulty = Column(SQLEnum(ProblemDifficulty, values_callable=_enum_values, name="problem_difficulty"),
                        default=ProblemDifficulty.INTERMEDIATE, nullable=False)
    duration = Column(String(50), nullable=False)  # "8-10 weeks"

    technologies = Column(StringList, default=list, nullable=False)
    deliverables = Column(StringList, default=list, nullable=False)
    prerequisites = Column(StringList, default=list, nullable=False)
    learning_outcomes = Column(StringList, default=list, nullable=False)
    tags = Column(StringList, default=list, nullable=False)

    status = Column(SQLEnum(ProblemStatus, values_callable=_enum_values, name="problem_status"),
                    default=ProblemStatus.DRAFT, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)
    view_count = Column(Integer, default=0, nullable=False)

    created_by = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<ProblemStatement {self.custom_id}>"


class DomainSequence(Base):
    """Last identifier sequence number handed out per domain"""
    __tablename__ = "domain_sequences"

    domain = Column(String(100), primary_key=True)
    last_value = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<DomainSequence {self.domain}={self.last_value}>"
