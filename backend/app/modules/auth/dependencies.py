from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import uuid

from app.core.database import get_db
from app.core.security import decode_token
from app.core.logging_config import set_user_id
from app.models.user import User, UserRole

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Not authorized to access this route") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if not credentials:
        raise _unauthorized()

    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token payload")

    try:
        uuid.UUID(user_id)
    except ValueError:
        raise _unauthorized("Invalid user ID format")

    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise _unauthorized("Account is deactivated. Please contact administrator.")

    # Rate limiting and log lines are keyed by user from here on
    request.state.user_id = str(user.id)
    set_user_id(str(user.id))

    return user


def require_roles(*roles: UserRole):
    """Dependency factory: current user must hold one of the given roles"""

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {current_user.role.value} is not authorized to access this route"
            )
        return current_user

    return checker


get_current_admin = require_roles(UserRole.ADMIN)
get_current_staff = require_roles(UserRole.ADMIN, UserRole.FACULTY)
