"""Create the system admin user (ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME)"""
import asyncio

from sqlalchemy import select

from app.core.config import settings
from app.core.database import get_session_local, init_db, close_db
from app.core.security import get_password_hash
from app.models.user import User, UserRole


async def ensure_admin(db, email: str, password: str, name: str) -> User:
    """Create the admin, or promote and reactivate an existing account with that email"""
    email = email.lower()
    result = await db.execute(select(User).where(User.email == email))
    existing = result.scalar_one_or_none()

    if existing:
        existing.role = UserRole.ADMIN
        existing.is_active = True
        await db.commit()
        print(f"Admin user already exists: {existing.email}")
        return existing

    admin = User(
        email=email,
        name=name,
        hashed_password=get_password_hash(password),
        role=UserRole.ADMIN,
        is_active=True,
    )
    db.add(admin)
    await db.commit()
    print(f"Created admin user: {email}")
    return admin


async def create_admin():
    await init_db()
    session_local = get_session_local()
    try:
        async with session_local() as db:
            await ensure_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_NAME)
    finally:
        await close_db()

    print("\nLogin credentials:")
    print(f"Email: {settings.ADMIN_EMAIL}")
    print("Password: (ADMIN_PASSWORD from environment)")


def main_entry():
    asyncio.run(create_admin())


if __name__ == "__main__":
    main_entry()
