"""
Lead capture (public) and lead management (staff) endpoints
"""
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.core.rate_limiter import upload_rate_limit
from app.models.lead import LeadStatus
from app.models.user import User
from app.modules.auth.dependencies import get_current_staff
from app.schemas.common import serialize, serialize_many
from app.schemas.lead import LeadCreate, LeadUpdate, LeadResponse
from app.services.lead_service import LeadService

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.post("")
@upload_rate_limit()
async def capture_lead(
    request: Request,
    lead_data: LeadCreate,
    db: AsyncSession = Depends(get_db)
):
    """Capture a lead from the website popup; repeat emails update the existing lead"""
    lead, created = await LeadService(db).capture(
        name=lead_data.name,
        email=lead_data.email,
        phone=lead_data.phone,
        college=lead_data.college,
        source=lead_data.source,
    )

    if created:
        return JSONResponse(status_code=201, content={
            "success": True,
            "message": "Lead captured successfully",
            "data": serialize(LeadResponse, lead),
        })

    return {
        "success": True,
        "message": "Lead updated successfully (existing email)",
        "data": serialize(LeadResponse, lead),
    }


@router.get("")
async def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[LeadStatus] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db)
):
    page_data = await LeadService(db).list_leads(status, search, page, limit)
    return {
        "success": True,
        "data": {
            "leads": serialize_many(LeadResponse, page_data["items"]),
            "pagination": {
                "current": page_data["page"],
                "pages": page_data["pages"],
                "total": page_data["total"],
            },
        },
    }


@router.get("/stats")
async def lead_stats(
    current_user: User = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db)
):
    return {"success": True, "data": await LeadService(db).get_stats()}


@router.get("/{lead_id}")
async def get_lead(
    lead_id: str,
    current_user: User = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db)
):
    lead = await LeadService(db).get_lead(lead_id)
    return {"success": True, "data": serialize(LeadResponse, lead)}


@router.put("/{lead_id}/status")
async def update_lead(
    lead_id: str,
    lead_data: LeadUpdate,
    current_user: User = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db)
):
    lead = await LeadService(db).update_lead(lead_id, status=lead_data.status, notes=lead_data.notes)
    return {
        "success": True,
        "message": "Lead updated successfully",
        "data": serialize(LeadResponse, lead),
    }


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: str,
    current_user: User = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db)
):
    await LeadService(db).delete_lead(lead_id)
    return {"success": True, "message": "Lead deleted successfully"}
