"""
Pagination Utility Module

Offset pagination shared by the catalog, user and lead listings.
"""
import math
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

MAX_PAGE_SIZE = 100


def clamp_page(page: int, limit: int) -> tuple:
    """Normalize page (1-indexed) and limit (1..MAX_PAGE_SIZE)"""
    return max(1, page), max(1, min(MAX_PAGE_SIZE, limit))


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    limit: int = 10,
    count_query: Optional[Select] = None
) -> Dict[str, Any]:
    """
    Apply pagination to a SQLAlchemy query.

    Args:
        db: Database session
        query: Base query, already filtered and ordered
        page: Page number (1-indexed)
        limit: Items per page
        count_query: Optional custom count query

    Returns:
        Dictionary with items, total, page, limit and pages
    """
    page, limit = clamp_page(page, limit)

    if count_query is None:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    items = list(result.scalars().all())

    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit) if total else 0,
    }


def paginated_response(page_data: Dict[str, Any], items: List[Any]) -> Dict[str, Any]:
    """Envelope for list endpoints: serialized items plus paging counters"""
    return {
        "success": True,
        "count": len(items),
        "total": page_data["total"],
        "page": page_data["page"],
        "pages": page_data["pages"],
        "data": items,
    }
