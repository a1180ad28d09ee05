from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user, get_current_staff
from app.schemas.auth import UserResponse
from app.schemas.common import serialize_many
from app.schemas.problem import ProblemResponse
from app.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/dashboard")
async def dashboard(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return {"success": True, "data": await AnalyticsService(db).dashboard()}


@router.get("/problems")
async def problem_analytics(
    period: int = Query(30, ge=1, le=3650, description="Days to look back"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    data = await AnalyticsService(db).problems(period)
    data["problemsInPeriod"] = serialize_many(ProblemResponse, data["problemsInPeriod"])
    return {"success": True, "data": data}


@router.get("/users")
async def user_analytics(
    current_user: User = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db)
):
    data = await AnalyticsService(db).users()
    data["recentUsers"] = serialize_many(UserResponse, data["recentUsers"])
    return {"success": True, "data": data}
