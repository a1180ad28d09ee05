"""
Analytics Service - dashboard and reporting aggregates
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.problem import ProblemStatement, ProblemStatus
from app.models.user import User


def _grouped(rows) -> List[Dict[str, Any]]:
    return [
        {"_id": key.value if hasattr(key, "value") else key, "count": count}
        for key, count in rows
    ]


class AnalyticsService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, *conditions) -> int:
        query = select(func.count(ProblemStatement.id))
        if conditions:
            query = query.where(*conditions)
        return (await self.db.execute(query)).scalar() or 0

    async def _group_problems(self, column, *conditions, order_by_count: bool = True):
        count = func.count(ProblemStatement.id)
        query = select(column, count).where(*conditions).group_by(column)
        if order_by_count:
            query = query.order_by(count.desc())
        return _grouped((await self.db.execute(query)).all())

    async def dashboard(self) -> Dict[str, Any]:
        active = ProblemStatement.status == ProblemStatus.ACTIVE
        month_ago = datetime.utcnow() - timedelta(days=30)

        return {
            "totalProblems": await self._count(),
            "activeProblems": await self._count(active),
            "draftProblems": await self._count(ProblemStatement.status == ProblemStatus.DRAFT),
            "featuredProblems": await self._count(ProblemStatement.featured.is_(True)),
            "recentProblems": await self._count(ProblemStatement.created_at >= month_ago),
            "problemsByDomain": await self._group_problems(ProblemStatement.domain, active),
            "problemsByDifficulty": await self._group_problems(ProblemStatement.difficulty, active),
        }

    async def problems(self, period: int = 30) -> Dict[str, Any]:
        """Problems created in the last `period` days"""
        since = datetime.utcnow() - timedelta(days=period)
        in_period = ProblemStatement.created_at >= since

        result = await self.db.execute(
            select(ProblemStatement).where(in_period).order_by(ProblemStatement.created_at.desc())
        )
        problems = list(result.scalars().all())

        count = func.count(ProblemStatement.id)
        creators = await self.db.execute(
            select(User.id, User.name, User.email, count)
            .select_from(ProblemStatement)
            .join(User, User.id == ProblemStatement.created_by)
            .where(in_period)
            .group_by(User.id, User.name, User.email)
            .order_by(count.desc())
            .limit(5)
        )
        top_creators = [
            {"_id": user_id, "name": name, "email": email, "count": n}
            for user_id, name, email, n in creators.all()
        ]

        return {
            "period": period,
            "totalProblems": len(problems),
            "problemsInPeriod": problems,
            "problemsByStatus": await self._group_problems(ProblemStatement.status, in_period, order_by_count=False),
            "problemsByDomain": await self._group_problems(ProblemStatement.domain, in_period),
            "problemsByDifficulty": await self._group_problems(
                ProblemStatement.difficulty, in_period, order_by_count=False
            ),
            "topCreators": top_creators,
        }

    async def users(self) -> Dict[str, Any]:
        month_ago = datetime.utcnow() - timedelta(days=30)

        async def count_users(*conditions) -> int:
            query = select(func.count(User.id))
            if conditions:
                query = query.where(*conditions)
            return (await self.db.execute(query)).scalar() or 0

        role_count = func.count(User.id)
        by_role = await self.db.execute(
            select(User.role, role_count).group_by(User.role).order_by(role_count.desc())
        )
        recent = await self.db.execute(select(User).order_by(User.created_at.desc()).limit(10))

        return {
            "totalUsers": await count_users(),
            "activeUsers": await count_users(User.last_login >= month_ago),
            "inactiveUsers": await count_users(or_(User.last_login < month_ago, User.last_login.is_(None))),
            "newUsers": await count_users(User.created_at >= month_ago),
            "usersByRole": _grouped(by_role.all()),
            "recentUsers": list(recent.scalars().all()),
        }
