"""
Problem Service - problem statement store and catalog queries

All writes of problem statements go through ProblemService.create_problem so
that identifier allocation happens inside the insert transaction.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select, update, func, or_, case, cast, String
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.problem import ProblemStatement, ProblemStatus
from app.models.user import User, UserRole
from app.services.id_allocator import (
    id_allocator, IdentifierAllocator, normalize_identifier, is_valid_identifier
)
from app.core.exceptions import (
    ProblemNotFoundError,
    AuthorizationError,
    IdentifierConflictError,
    DuplicateIdentifierError,
)
from app.core.logging_config import logger
from app.core.config import settings
from app.utils.pagination import paginate


# Fields a caller may never set through update_problem
PROTECTED_FIELDS = {"id", "custom_id", "view_count", "created_by", "created_at", "updated_at"}


def is_custom_id_conflict(error: IntegrityError) -> bool:
    """True when an IntegrityError comes from the unique index on custom_id"""
    return "custom_id" in str(error.orig)


class ProblemService:
    """Problem statement persistence and catalog queries"""

    def __init__(self, db: AsyncSession, allocator: Optional[IdentifierAllocator] = None):
        self.db = db
        self.allocator = allocator or id_allocator

    # ========== Single-record writes ==========

    async def create_problem(self, data: Dict[str, Any], created_by: str) -> ProblemStatement:
        """
        Insert a problem statement and commit it.

        A format-valid custom_id in data is kept as is; otherwise one is
        allocated from the domain counter. Collisions of an allocated ID with
        a concurrent write are retried up to ID_ALLOCATION_MAX_RETRIES times.

        Raises:
            DuplicateIdentifierError: supplied custom_id is already taken
            IdentifierConflictError: no unique ID could be allocated
        """
        fields = dict(data)
        supplied = normalize_identifier(fields.pop("custom_id", None))
        preserved = supplied if is_valid_identifier(supplied) else None

        max_attempts = 1 if preserved else settings.ID_ALLOCATION_MAX_RETRIES + 1
        custom_id = preserved

        for attempt in range(1, max_attempts + 1):
            try:
                if not preserved:
                    custom_id = await self.allocator.allocate(self.db, fields["domain"])

                problem = ProblemStatement(**fields, custom_id=custom_id, created_by=created_by)
                self.db.add(problem)
                await self.db.commit()

            except IdentifierConflictError:
                await self.db.rollback()
                raise

            except IntegrityError as e:
                await self.db.rollback()
                if not is_custom_id_conflict(e):
                    raise
                if preserved:
                    raise DuplicateIdentifierError(preserved)

                logger.warning(
                    f"Identifier {custom_id} collided on insert (attempt {attempt}/{max_attempts})",
                    extra={"event_type": "id_allocation", "custom_id": custom_id, "attempt": attempt}
                )
                continue

            logger.info(f"Problem {custom_id} created by {created_by}")
            return await self.get_problem(problem.id)

        raise IdentifierConflictError(str(fields.get("domain")), max_attempts, custom_id)

    async def update_problem(self, problem_id: str, data: Dict[str, Any], user: User) -> ProblemStatement:
        """Apply a partial update; owner or admin only"""
        problem = await self.get_problem(problem_id)
        self._check_can_edit(problem, user)

        for key, value in data.items():
            if key in PROTECTED_FIELDS:
                continue
            setattr(problem, key, value)
        problem.updated_at = datetime.utcnow()

        await self.db.commit()
        return await self.get_problem(problem_id)

    async def update_status(self, problem_id: str, status: ProblemStatus, user: User) -> ProblemStatement:
        problem = await self.get_problem(problem_id)
        self._check_can_edit(problem, user)

        problem.status = ProblemStatus(status)
        problem.updated_at = datetime.utcnow()
        await self.db.commit()
        return await self.get_problem(problem_id)

    async def toggle_featured(self, problem_id: str) -> ProblemStatement:
        problem = await self.get_problem(problem_id)
        problem.featured = not problem.featured
        problem.updated_at = datetime.utcnow()
        await self.db.commit()
        return await self.get_problem(problem_id)

    async def delete_problem(self, problem_id: str) -> None:
        problem = await self.get_problem(problem_id)
        await self.db.delete(problem)
        await self.db.commit()
        logger.info(f"Problem {problem.custom_id} deleted")

    def _check_can_edit(self, problem: ProblemStatement, user: User) -> None:
        if str(problem.created_by) != str(user.id) and user.role != UserRole.ADMIN:
            raise AuthorizationError("Not authorized to update this problem")

    # ========== Lookups ==========

    async def get_problem(self, problem_id: str) -> ProblemStatement:
        """Fetch by internal id with the creator loaded"""
        result = await self.db.execute(
            select(ProblemStatement)
            .options(selectinload(ProblemStatement.creator))
            .where(ProblemStatement.id == str(problem_id))
            .execution_options(populate_existing=True)
        )
        problem = result.scalar_one_or_none()
        if not problem:
            raise ProblemNotFoundError(str(problem_id))
        return problem

    async def get_by_custom_id(self, custom_id: str) -> ProblemStatement:
        """Case-insensitive lookup by custom ID; counts as one view"""
        normalized = normalize_identifier(custom_id) or ""

        result = await self.db.execute(
            update(ProblemStatement)
            .where(ProblemStatement.custom_id == normalized)
            .values(view_count=ProblemStatement.view_count + 1)
            .returning(ProblemStatement.id)
            .execution_options(synchronize_session=False)
        )
        problem_id = result.scalar_one_or_none()
        if problem_id is None:
            raise ProblemNotFoundError(custom_id)

        await self.db.commit()
        return await self.get_problem(problem_id)

    # ========== Catalog queries ==========

    def _base_query(self):
        return select(ProblemStatement).options(selectinload(ProblemStatement.creator))

    async def list_problems(
        self,
        domain: Optional[str] = None,
        difficulty: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        query = self._base_query()
        if domain:
            query = query.where(ProblemStatement.domain == domain)
        if difficulty:
            query = query.where(ProblemStatement.difficulty == difficulty)
        if status:
            query = query.where(ProblemStatement.status == status)

        query = query.order_by(ProblemStatement.created_at.desc())
        return await paginate(self.db, query, page, limit)

    async def list_by_domain(self, domain_slug: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Active problems of a domain; hyphens in the slug stand for spaces"""
        domain = domain_slug.replace("-", " ")
        query = (
            self._base_query()
            .where(ProblemStatement.domain == domain, ProblemStatement.status == ProblemStatus.ACTIVE)
            .order_by(ProblemStatement.created_at.desc())
        )
        return await paginate(self.db, query, page, limit)

    async def featured(self, limit: int = 6) -> List[ProblemStatement]:
        result = await self.db.execute(
            self._base_query()
            .where(ProblemStatement.featured.is_(True), ProblemStatement.status == ProblemStatus.ACTIVE)
            .order_by(ProblemStatement.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def popular(self, limit: int = 10) -> List[ProblemStatement]:
        result = await self.db.execute(
            self._base_query()
            .where(ProblemStatement.status == ProblemStatus.ACTIVE, ProblemStatement.view_count > 0)
            .order_by(ProblemStatement.view_count.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def search(
        self,
        q: Optional[str] = None,
        domain: Optional[str] = None,
        difficulty: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """Active problems matching q in title, abstract or tags"""
        query = self._base_query().where(ProblemStatement.status == ProblemStatus.ACTIVE)

        if q:
            pattern = f"%{q.lower()}%"
            query = query.where(or_(
                func.lower(ProblemStatement.title).like(pattern),
                func.lower(ProblemStatement.abstract).like(pattern),
                func.lower(cast(ProblemStatement.tags, String)).like(pattern),
            ))
        if domain:
            query = query.where(ProblemStatement.domain == domain)
        if difficulty:
            query = query.where(ProblemStatement.difficulty == difficulty)
        if category:
            query = query.where(ProblemStatement.category == category)

        query = query.order_by(ProblemStatement.view_count.desc(), ProblemStatement.created_at.desc())
        return await paginate(self.db, query, page, limit)

    # ========== Statistics ==========

    async def _distribution(self, column) -> List[Dict[str, Union[str, int]]]:
        """Counts per value of column over Active problems, largest first"""
        count = func.count(ProblemStatement.id)
        result = await self.db.execute(
            select(column, count)
            .where(ProblemStatement.status == ProblemStatus.ACTIVE)
            .group_by(column)
            .order_by(count.desc())
        )
        return [{"_id": _value(value), "count": n} for value, n in result.all()]

    async def get_stats(self) -> Dict[str, Any]:
        """Admin statistics over every problem"""
        result = await self.db.execute(
            select(ProblemStatement.status, ProblemStatement.featured, ProblemStatement.view_count)
        )
        rows = result.all()

        overview = {
            "total": len(rows),
            "active": sum(1 for r in rows if r.status == ProblemStatus.ACTIVE),
            "draft": sum(1 for r in rows if r.status == ProblemStatus.DRAFT),
            "archived": sum(1 for r in rows if r.status == ProblemStatus.ARCHIVED),
            "featured": sum(1 for r in rows if r.featured),
            "totalViews": sum(r.view_count or 0 for r in rows),
        }

        return {
            "overview": overview,
            "domainDistribution": await self._distribution(ProblemStatement.domain),
            "difficultyDistribution": await self._distribution(ProblemStatement.difficulty),
        }

    async def get_public_stats(self) -> Dict[str, Any]:
        """Statistics over Active problems only"""
        result = await self.db.execute(
            select(
                func.count(ProblemStatement.id),
                func.coalesce(func.sum(case((ProblemStatement.featured.is_(True), 1), else_=0)), 0),
                func.coalesce(func.sum(ProblemStatement.view_count), 0),
            ).where(ProblemStatement.status == ProblemStatus.ACTIVE)
        )
        total, featured, views = result.one()

        return {
            "overview": {"total": total, "featured": int(featured), "totalViews": int(views)},
            "domainDistribution": await self._distribution(ProblemStatement.domain),
            "difficultyDistribution": await self._distribution(ProblemStatement.difficulty),
        }


def _value(value):
    return value.value if hasattr(value, "value") else value
