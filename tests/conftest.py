"""
MentorConnect - Test Configuration and Fixtures
"""
import os
from datetime import timedelta
from typing import AsyncGenerator, Optional
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['MEDIA_ROOT'] = './test_media'

from mentorconnect.main import app
from mentorconnect.core.database import Base, get_db
from mentorconnect.core.security import get_password_hash, create_access_token
from mentorconnect.core.types import utc_now
from mentorconnect.models.user import User, UserRole

fake = Faker()

TEST_PASSWORD = 'testpassword123'
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


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


@pytest.fixture
def make_user(db_session: AsyncSession):
    """
    Factory for persisted users.

    `age_minutes` pushes created_at into the past so directory ordering is
    deterministic.
    """
    async def _make(
        role: Optional[UserRole] = UserRole.STUDENT,
        complete: bool = True,
        age_minutes: int = 0,
        **fields
    ) -> User:
        values = {
            'email': fake.unique.email(),
            'hashed_password': TEST_PASSWORD_HASH,
            'full_name': fake.name(),
            'role': role,
            'is_profile_complete': complete,
            'is_active': True,
            'my_mentors': [],
            'my_mentees': [],
            'pending_mentee_requests': [],
            'created_at': utc_now() - timedelta(minutes=age_minutes),
        }
        if complete and role == UserRole.STUDENT:
            values.update(
                university='Stanford University',
                field_of_interest='Software Engineering',
                pursuing_course='Computer Science',
            )
        elif complete and role == UserRole.ALUMNI:
            values.update(
                pass_out_university='Stanford University',
                working_field='Software Engineering',
                bio=fake.sentence(),
            )
        values.update(fields)

        user = User(**values)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
async def student(make_user) -> User:
    """Profile-complete student"""
    return await make_user(UserRole.STUDENT)


@pytest.fixture
async def alumnus(make_user) -> User:
    """Profile-complete alumnus"""
    return await make_user(UserRole.ALUMNI)


@pytest.fixture
async def new_user(make_user) -> User:
    """Signed up, profile not completed yet"""
    return await make_user(role=None, complete=False)


def headers_for(user: User) -> dict:
    """Generate authentication headers for a user"""
    token_data = {
        'sub': str(user.id),
        'email': user.email,
    }
    token = create_access_token(token_data)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def student_headers(student: User) -> dict:
    return headers_for(student)


@pytest.fixture
def alumnus_headers(alumnus: User) -> dict:
    return headers_for(alumnus)


@pytest.fixture
def auth_headers_for():
    """Headers factory for users created inside a test"""
    return headers_for


@pytest.fixture
def session_factory(db_session) -> async_sessionmaker:
    """Independent sessions on the test database, for concurrent writers and watchers"""
    return TestSessionLocal
