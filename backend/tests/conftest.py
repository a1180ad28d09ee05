"""
TRIZEN CMS - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable, Dict
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''

from app.main import app
from app.core.database import Base, get_db
from app.models.user import User, UserRole
from app.models.problem import ProblemStatement
from app.core.security import get_password_hash, create_access_token
from app.services.problem_service import ProblemService

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

PASSWORDS = {
    UserRole.STUDENT: 'studentpassword123',
    UserRole.FACULTY: 'facultypassword123',
    UserRole.ADMIN: 'adminpassword123',
}


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db_session: AsyncSession, role: UserRole, **overrides) -> User:
    user = User(
        email=overrides.pop('email', fake.unique.email()).lower(),
        hashed_password=get_password_hash(PASSWORDS[role]),
        name=overrides.pop('name', fake.name()[:50]),
        role=role,
        is_active=overrides.pop('is_active', True),
        **overrides
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def _headers_for(user: User) -> Dict[str, str]:
    token = create_access_token({'sub': str(user.id), 'role': user.role.value})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a student test user"""
    return await _create_user(db_session, UserRole.STUDENT)


@pytest.fixture
async def faculty_user(db_session: AsyncSession) -> User:
    """Create a faculty test user"""
    return await _create_user(db_session, UserRole.FACULTY)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    return await _create_user(db_session, UserRole.ADMIN)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Authentication headers for the student user"""
    return _headers_for(test_user)


@pytest.fixture
def faculty_auth_headers(faculty_user: User) -> dict:
    """Authentication headers for the faculty user"""
    return _headers_for(faculty_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Authentication headers for the admin user"""
    return _headers_for(admin_user)


def problem_payload(**overrides) -> dict:
    """Field values accepted by ProblemService.create_problem"""
    data = {
        'title': 'Smart Irrigation Controller',
        'abstract': fake.text(max_nb_chars=400).ljust(60, '.'),
        'domain': 'IoT & Embedded Systems',
        'category': 'Major',
        'difficulty': 'Intermediate',
        'duration': '8-10 weeks',
        'technologies': ['Arduino', 'Python'],
        'deliverables': ['Prototype', 'Report'],
        'status': 'Active',
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_problem(db_session: AsyncSession, faculty_user: User) -> Callable:
    """Factory creating committed problem statements owned by the faculty user"""
    # faculty_user is expired after any rolled back create
    faculty_id = str(faculty_user.id)

    async def factory(**overrides) -> ProblemStatement:
        owner = overrides.pop('owner', None)
        owner_id = str(owner.id) if owner is not None else faculty_id
        return await ProblemService(db_session).create_problem(problem_payload(**overrides), created_by=owner_id)

    return factory
