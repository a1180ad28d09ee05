"""
Public read-only catalog API (no authentication)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.problem import ProblemDomain, ProblemDifficulty, ProblemStatus
from app.schemas.common import serialize, serialize_many
from app.schemas.problem import ProblemResponse
from app.services.problem_service import ProblemService
from app.utils.pagination import paginated_response

router = APIRouter(prefix="/public", tags=["Public"])

PUBLIC_PREFIX = "/api/v1/public"


@router.get("")
async def public_api_info():
    return {
        "success": True,
        "message": "TRIZEN CMS Public API",
        "version": "1.0.0",
        "description": "Public endpoints for accessing problem statements",
        "endpoints": {
            "problems": f"{PUBLIC_PREFIX}/problems",
            "featured": f"{PUBLIC_PREFIX}/problems/featured",
            "popular": f"{PUBLIC_PREFIX}/problems/popular",
            "search": f"{PUBLIC_PREFIX}/problems/search",
            "stats": f"{PUBLIC_PREFIX}/problems/stats",
            "domain": f"{PUBLIC_PREFIX}/problems/domain/{{domain}}",
            "problem": f"{PUBLIC_PREFIX}/problems/{{customId}}",
        },
    }


@router.get("/problems")
async def public_problems(
    domain: Optional[ProblemDomain] = None,
    difficulty: Optional[ProblemDifficulty] = None,
    status: Optional[ProblemStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    page_data = await ProblemService(db).list_problems(domain, difficulty, status, page, limit)
    return paginated_response(page_data, serialize_many(ProblemResponse, page_data["items"]))


@router.get("/problems/featured")
async def public_featured(limit: int = Query(6, ge=1, le=100), db: AsyncSession = Depends(get_db)):
    problems = await ProblemService(db).featured(limit)
    return {"success": True, "count": len(problems), "data": serialize_many(ProblemResponse, problems)}


@router.get("/problems/popular")
async def public_popular(limit: int = Query(10, ge=1, le=100), db: AsyncSession = Depends(get_db)):
    problems = await ProblemService(db).popular(limit)
    return {"success": True, "count": len(problems), "data": serialize_many(ProblemResponse, problems)}


@router.get("/problems/search")
async def public_search(
    q: Optional[str] = None,
    domain: Optional[str] = None,
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    page_data = await ProblemService(db).search(q, domain, difficulty, category, page, limit)
    return paginated_response(page_data, serialize_many(ProblemResponse, page_data["items"]))


@router.get("/problems/stats")
async def public_stats(db: AsyncSession = Depends(get_db)):
    """Counts over Active problems only"""
    return {"success": True, "data": await ProblemService(db).get_public_stats()}


@router.get("/problems/domain/{domain}")
async def public_by_domain(
    domain: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    page_data = await ProblemService(db).list_by_domain(domain, page, limit)
    return paginated_response(page_data, serialize_many(ProblemResponse, page_data["items"]))


@router.get("/problems/{custom_id}")
async def public_problem(custom_id: str, db: AsyncSession = Depends(get_db)):
    problem = await ProblemService(db).get_by_custom_id(custom_id)
    return {"success": True, "data": serialize(ProblemResponse, problem)}
