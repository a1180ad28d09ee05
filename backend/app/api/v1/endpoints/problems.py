"""
Problem statement endpoints: catalog reads, staff writes, CSV bulk upload
"""
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import InvalidFileTypeError, UploadTooLargeError, ValidationError
from app.core.logging_config import logger
from app.core.rate_limiter import upload_rate_limit
from app.models.problem import ProblemDomain, ProblemDifficulty, ProblemStatus
from app.models.user import User
from app.modules.auth.dependencies import get_current_user, get_current_admin, get_current_staff
from app.schemas.common import serialize, serialize_many
from app.schemas.problem import (
    ProblemCreate,
    ProblemUpdate,
    ProblemStatusUpdate,
    ProblemResponse,
    ImportOutcomeResponse,
)
from app.services.bulk_import import BulkImportService
from app.services.csv_template import download_template, TEMPLATE_FILENAME
from app.services.problem_service import ProblemService
from app.utils.pagination import paginated_response

router = APIRouter(prefix="/problems", tags=["Problems"])


def _page(page_data: dict) -> dict:
    return paginated_response(page_data, serialize_many(ProblemResponse, page_data["items"]))


def _is_csv_upload(file: UploadFile) -> bool:
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type in settings.ALLOWED_CSV_CONTENT_TYPES:
        return True
    filename = (file.filename or "").lower()
    return any(filename.endswith("." + ext.lstrip(".").lower()) for ext in settings.ALLOWED_CSV_EXTENSIONS)


# ========== Public catalog ==========

@router.get("")
async def list_problems(
    domain: Optional[ProblemDomain] = None,
    difficulty: Optional[ProblemDifficulty] = None,
    status: Optional[ProblemStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """List problems, newest first"""
    page_data = await ProblemService(db).list_problems(domain, difficulty, status, page, limit)
    return _page(page_data)


@router.get("/featured")
async def featured_problems(
    limit: int = Query(6, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    problems = await ProblemService(db).featured(limit)
    return {"success": True, "count": len(problems), "data": serialize_many(ProblemResponse, problems)}


@router.get("/popular")
async def popular_problems(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    problems = await ProblemService(db).popular(limit)
    return {"success": True, "count": len(problems), "data": serialize_many(ProblemResponse, problems)}


@router.get("/search")
async def search_problems(
    q: Optional[str] = None,
    domain: Optional[str] = None,
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """Search Active problems by title, abstract and tags"""
    page_data = await ProblemService(db).search(q, domain, difficulty, category, page, limit)
    return _page(page_data)


@router.get("/stats")
async def problem_stats(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return {"success": True, "data": await ProblemService(db).get_stats()}


# ========== Bulk upload ==========

@router.get("/template")
async def get_template(current_user: User = Depends(get_current_user)):
    """Download the CSV template for bulk upload"""
    return Response(
        content=download_template(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'}
    )


@router.post("/bulk-upload")
@upload_rate_limit()
async def bulk_upload(
    request: Request,
    file: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db)
):
    """
    Import problem statements from a CSV file.

    Rows are validated and stored independently; the response lists every
    rejected row. Only an unreadable file fails the whole request.
    """
    if file is None:
        raise ValidationError("No CSV file uploaded", field="file")

    if not _is_csv_upload(file):
        raise InvalidFileTypeError(file.content_type or file.filename or "unknown", settings.ALLOWED_CSV_CONTENT_TYPES)

    content = await file.read(settings.MAX_CSV_UPLOAD_SIZE + 1)
    if len(content) > settings.MAX_CSV_UPLOAD_SIZE:
        raise UploadTooLargeError(len(content), settings.MAX_CSV_UPLOAD_SIZE)

    logger.info(f"Bulk upload of {file.filename} ({len(content)} bytes) by {current_user.email}")

    outcome = await BulkImportService(db).import_csv(content, str(current_user.id), filename=file.filename)

    return {
        "success": True,
        "message": f"Bulk upload completed. {outcome.imported} imported, {outcome.failed} failed.",
        "data": ImportOutcomeResponse.model_validate(outcome).model_dump(by_alias=True),
    }


# ========== Lookups ==========

@router.get("/domain/{domain}")
async def problems_by_domain(
    domain: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    page_data = await ProblemService(db).list_by_domain(domain, page, limit)
    return _page(page_data)


@router.get("/custom/{custom_id}")
async def problem_by_custom_id(custom_id: str, db: AsyncSession = Depends(get_db)):
    """Fetch by custom ID (AIM001, IOT002, ...); counts a view"""
    problem = await ProblemService(db).get_by_custom_id(custom_id)
    return {"success": True, "data": serialize(ProblemResponse, problem)}


@router.get("/{problem_id}")
async def get_problem(problem_id: str, db: AsyncSession = Depends(get_db)):
    problem = await ProblemService(db).get_problem(problem_id)
    return {"success": True, "data": serialize(ProblemResponse, problem)}


# ========== Staff writes ==========

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_problem(
    problem_data: ProblemCreate,
    current_user: User = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db)
):
    problem = await ProblemService(db).create_problem(problem_data.model_dump(), created_by=str(current_user.id))
    return {
        "success": True,
        "message": "Problem created successfully",
        "data": serialize(ProblemResponse, problem),
    }


@router.put("/{problem_id}")
async def update_problem(
    problem_id: str,
    problem_data: ProblemUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update a problem; only its creator or an admin may do this"""
    problem = await ProblemService(db).update_problem(
        problem_id, problem_data.model_dump(exclude_unset=True), current_user
    )
    return {
        "success": True,
        "message": "Problem updated successfully",
        "data": serialize(ProblemResponse, problem),
    }


@router.put("/{problem_id}/status")
async def update_problem_status(
    problem_id: str,
    status_data: ProblemStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    problem = await ProblemService(db).update_status(problem_id, status_data.status, current_user)
    return {
        "success": True,
        "message": f"Problem status updated to {problem.status.value}",
        "data": serialize(ProblemResponse, problem),
    }


@router.put("/{problem_id}/featured")
async def toggle_featured(
    problem_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    problem = await ProblemService(db).toggle_featured(problem_id)
    return {
        "success": True,
        "message": f"Problem {'featured' if problem.featured else 'unfeatured'} successfully",
        "data": serialize(ProblemResponse, problem),
    }


@router.delete("/{problem_id}")
async def delete_problem(
    problem_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await ProblemService(db).delete_problem(problem_id)
    return {"success": True, "message": "Problem deleted successfully"}
