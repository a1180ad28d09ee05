"""
Tests for the maintenance scripts: identifier migration and admin seeding
"""
import pytest
from sqlalchemy import select
from datetime import datetime, timedelta

from app.core.security import verify_password
from app.models.problem import ProblemStatement, ProblemDomain
from app.models.user import User, UserRole
from create_admin_user import ensure_admin
from migrate_ids import migrate_identifiers


async def add_legacy_problem(db_session, owner, custom_id: str, minutes_ago: int) -> ProblemStatement:
    problem = ProblemStatement(
        custom_id=custom_id,
        title=f"Legacy {minutes_ago}",
        abstract="Imported before identifiers were enforced.",
        domain=ProblemDomain.IOT,
        duration="8 weeks",
        created_by=owner.id,
        created_at=datetime.utcnow() - timedelta(minutes=minutes_ago),
    )
    db_session.add(problem)
    await db_session.commit()
    return problem


class TestMigrateIdentifiers:
    """Test migrate_ids.migrate_identifiers"""

    @pytest.mark.asyncio
    async def test_fixes_legacy_identifiers(self, db_session, faculty_user):
        await add_legacy_problem(db_session, faculty_user, "IOT001", 30)
        await add_legacy_problem(db_session, faculty_user, " iot007", 20)
        await add_legacy_problem(db_session, faculty_user, "", 10)

        counts = await migrate_identifiers(db_session)

        assert counts == {"valid": 1, "normalized": 1, "assigned": 1}
        result = await db_session.execute(select(ProblemStatement.custom_id))
        assert sorted(result.scalars().all()) == ["IOT001", "IOT004", "IOT007"]

    @pytest.mark.asyncio
    async def test_dry_run_changes_nothing(self, db_session, faculty_user):
        await add_legacy_problem(db_session, faculty_user, "legacy", 10)

        counts = await migrate_identifiers(db_session, dry_run=True)

        assert counts["assigned"] == 1
        result = await db_session.execute(select(ProblemStatement.custom_id))
        assert result.scalars().all() == ["legacy"]

    @pytest.mark.asyncio
    async def test_second_run_is_noop(self, db_session, faculty_user):
        await add_legacy_problem(db_session, faculty_user, "", 10)
        await migrate_identifiers(db_session)

        counts = await migrate_identifiers(db_session)

        assert counts == {"valid": 1, "normalized": 0, "assigned": 0}


class TestEnsureAdmin:
    """Test create_admin_user.ensure_admin"""

    @pytest.mark.asyncio
    async def test_creates_admin(self, db_session):
        admin = await ensure_admin(db_session, "Root@Example.com", "rootpass123", "Root Admin")

        assert admin.email == "root@example.com"
        assert admin.role == UserRole.ADMIN
        assert verify_password("rootpass123", admin.hashed_password)

    @pytest.mark.asyncio
    async def test_promotes_existing_account(self, db_session, test_user):
        test_user.is_active = False
        await db_session.commit()

        await ensure_admin(db_session, test_user.email, "ignored-password", "Ignored")

        result = await db_session.execute(select(User).where(User.email == test_user.email))
        user = result.scalar_one()
        assert user.role == UserRole.ADMIN
        assert user.is_active is True
        assert verify_password("studentpassword123", user.hashed_password)
