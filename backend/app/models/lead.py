from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Index, CheckConstraint
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class LeadSource(str, enum.Enum):
    """Where a lead was captured"""
    WEBSITE_POPUP = "website_popup"
    CONTACT_FORM = "contact_form"
    REFERRAL = "referral"
    SOCIAL_MEDIA = "social_media"
    OTHER = "other"


class LeadStatus(str, enum.Enum):
    """Sales pipeline status"""
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    LOST = "lost"
    RESUBMITTED = "resubmitted"


class Lead(Base):
    """Prospective student captured from the marketing site"""
    __tablename__ = "leads"

    __table_args__ = (
        Index('ix_leads_email', 'email'),
        Index('ix_leads_status', 'status'),
        Index('ix_leads_created_at', 'created_at'),
        CheckConstraint('submission_count >= 1', name='ck_leads_submission_count'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(10), nullable=False)
    college = Column(String(100), nullable=False)

    source = Column(SQLEnum(LeadSource), default=LeadSource.WEBSITE_POPUP, nullable=False)
    status = Column(SQLEnum(LeadStatus), default=LeadStatus.NEW, nullable=False)
    notes = Column(String(500), nullable=True)

    submission_count = Column(Integer, default=1, nullable=False)
    last_submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Lead {self.email}>"
