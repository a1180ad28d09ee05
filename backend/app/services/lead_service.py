"""
Lead Service - capture and manage prospective-student leads
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.lead import Lead, LeadSource, LeadStatus
from app.core.exceptions import LeadNotFoundError
from app.core.logging_config import logger
from app.utils.pagination import paginate


class LeadService:
    """Lead capture (public) and lead management (staff)"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def capture(
        self,
        name: str,
        email: str,
        phone: str,
        college: str,
        source: LeadSource = LeadSource.WEBSITE_POPUP,
    ) -> Tuple[Lead, bool]:
        """
        Record a lead submission.

        A second submission with the same email updates the existing lead in
        place and marks it resubmitted.

        Returns:
            (lead, created) - created is False for a resubmission
        """
        email = email.strip().lower()
        now = datetime.utcnow()

        result = await self.db.execute(select(Lead).where(Lead.email == email))
        lead = result.scalar_one_or_none()

        if lead:
            lead.name = name
            lead.phone = phone
            lead.college = college
            lead.source = source
            lead.submission_count = (lead.submission_count or 1) + 1
            lead.last_submitted_at = now
            lead.status = LeadStatus.RESUBMITTED
            await self.db.commit()
            logger.info(f"Lead resubmitted: {email} - submission #{lead.submission_count}")
            return lead, False

        lead = Lead(
            name=name,
            email=email,
            phone=phone,
            college=college,
            source=source,
            status=LeadStatus.NEW,
            submission_count=1,
            last_submitted_at=now,
        )
        self.db.add(lead)
        await self.db.commit()
        logger.info(f"New lead captured: {email} from {college}")
        return lead, True

    async def list_leads(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        query = select(Lead)
        if status:
            query = query.where(Lead.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(
                func.lower(Lead.name).like(pattern),
                func.lower(Lead.email).like(pattern),
                func.lower(Lead.college).like(pattern),
            ))
        query = query.order_by(Lead.created_at.desc())
        return await paginate(self.db, query, page, limit)

    async def get_lead(self, lead_id: str) -> Lead:
        result = await self.db.execute(select(Lead).where(Lead.id == lead_id))
        lead = result.scalar_one_or_none()
        if not lead:
            raise LeadNotFoundError(lead_id)
        return lead

    async def update_lead(self, lead_id: str, status: Optional[LeadStatus] = None,
                          notes: Optional[str] = None) -> Lead:
        lead = await self.get_lead(lead_id)
        if status is not None:
            lead.status = status
        if notes is not None:
            lead.notes = notes
        lead.updated_at = datetime.utcnow()
        await self.db.commit()
        return lead

    async def delete_lead(self, lead_id: str) -> None:
        lead = await self.get_lead(lead_id)
        await self.db.delete(lead)
        await self.db.commit()

    async def get_stats(self) -> Dict[str, Any]:
        total = (await self.db.execute(select(func.count(Lead.id)))).scalar() or 0

        week_ago = datetime.utcnow() - timedelta(days=7)
        recent = (await self.db.execute(
            select(func.count(Lead.id)).where(Lead.created_at >= week_ago)
        )).scalar() or 0

        result = await self.db.execute(select(Lead.status, func.count(Lead.id)).group_by(Lead.status))
        by_status = [{"_id": status.value, "count": count} for status, count in result.all()]

        return {"total": total, "recent": recent, "byStatus": by_status}
