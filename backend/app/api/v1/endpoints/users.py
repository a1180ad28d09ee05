"""
User management endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from datetime import datetime, timedelta
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import UserNotFoundError, AuthorizationError
from app.core.logging_config import logger
from app.models.user import User, UserRole
from app.modules.auth.dependencies import get_current_user, get_current_admin, get_current_staff
from app.schemas.auth import UserResponse, UserUpdate
from app.schemas.common import serialize, serialize_many
from app.utils.pagination import paginate

router = APIRouter(prefix="/users", tags=["Users"])


async def _get_user_or_404(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise UserNotFoundError(user_id)
    return user


@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|inactive|all)$"),
    current_user: User = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db)
):
    """List users with search and filters"""
    query = select(User)

    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(or_(
            func.lower(User.name).like(pattern),
            func.lower(User.email).like(pattern)
        ))

    if role and role != "all":
        try:
            query = query.where(User.role == UserRole(role))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown role: {role}")

    if status_filter == "active":
        query = query.where(User.is_active.is_(True))
    elif status_filter == "inactive":
        query = query.where(User.is_active.is_(False))

    page_data = await paginate(db, query.order_by(User.created_at.desc()), page, limit)

    return {
        "success": True,
        "data": {
            "users": serialize_many(UserResponse, page_data["items"]),
            "pagination": {
                "total": page_data["total"],
                "pages": page_data["pages"],
                "current": page_data["page"],
            },
        },
    }


@router.get("/stats")
async def user_stats(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """User counts by role and status"""
    async def count(*conditions) -> int:
        q = select(func.count(User.id))
        if conditions:
            q = q.where(*conditions)
        return (await db.execute(q)).scalar() or 0

    total = await count()
    active = await count(User.is_active.is_(True))
    week_ago = datetime.utcnow() - timedelta(days=7)

    by_status = [
        {"_id": "active", "count": active},
        {"_id": "inactive", "count": total - active},
    ]

    return {
        "success": True,
        "data": {
            "total": total,
            "active": active,
            "students": await count(User.role == UserRole.STUDENT),
            "faculty": await count(User.role == UserRole.FACULTY),
            "admins": await count(User.role == UserRole.ADMIN),
            "recent": await count(User.created_at >= week_ago),
            "byStatus": [s for s in by_status if s["count"]],
        },
    }


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user = await _get_user_or_404(db, user_id)
    return {"success": True, "data": serialize(UserResponse, user)}


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update a profile; users may edit themselves, admins anyone"""
    user = await _get_user_or_404(db, user_id)

    if str(current_user.id) != str(user.id) and current_user.role != UserRole.ADMIN:
        raise AuthorizationError("Not authorized to update this user")

    updates = user_data.model_dump(exclude_unset=True)

    if "email" in updates and updates["email"] != user.email:
        result = await db.execute(select(User).where(User.email == updates["email"]))
        if result.scalar_one_or_none():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists with this email"
            )

    for key, value in updates.items():
        if value is None and key in ("name", "email", "is_active"):
            continue
        setattr(user, key, value)
    user.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(user)

    return {"success": True, "data": serialize(UserResponse, user)}


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await _get_user_or_404(db, user_id)
    await db.delete(user)
    await db.commit()

    logger.info(f"User {user.email} deleted by {current_user.email}")
    return {"success": True, "message": "User deleted successfully"}
