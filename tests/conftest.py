"""
Test fixtures for the ledger API test suite.

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client with get_db pointed at the test database
  - member / other_member / admin_user: Users inserted directly in the DB
  - *_headers: Bearer headers minted for those users
  - set_flags: Coroutine that writes feature flags through the flag store
  - open_account: Coroutine that opens an account over HTTP

Key design decisions:
  - In-memory SQLite with StaticPool: every session in a test shares one
    connection, so fixtures, the app and assertions all see the same data.
  - Users are provisioned by an external identity system in production, so
    tests insert them directly and mint tokens with create_access_token.
  - Multi-user tests pass headers per request instead of mutating the
    shared client.
"""

import os

# Must be set before bankapp.config is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from bankapp.database import Base, get_db
from bankapp.main import app
from bankapp.models.user import User
from bankapp.security import create_access_token
from bankapp.services.feature_flag_service import FeatureFlagStore


TEST_DATABASE_URL = "sqlite+aiosqlite://"


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


async def create_user(session: AsyncSession, username: str, *, is_admin: bool = False,
                      is_active: bool = True) -> User:
    user = User(
        username=username,
        full_name=username.replace("_", " ").title(),
        is_admin=is_admin,
        is_active=is_active,
    )
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Provide an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """
    Async HTTP test client with the test database injected.

    Overrides get_db so all requests hit the in-memory test database.
    """
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def member(db_session):
    return await create_user(db_session, "alice")


@pytest_asyncio.fixture
async def other_member(db_session):
    return await create_user(db_session, "bob")


@pytest_asyncio.fixture
async def admin_user(db_session):
    return await create_user(db_session, "root_admin", is_admin=True)


@pytest_asyncio.fixture
async def member_headers(member):
    return auth_headers(member)


@pytest_asyncio.fixture
async def other_headers(other_member):
    return auth_headers(other_member)


@pytest_asyncio.fixture
async def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest_asyncio.fixture
async def set_flags(session_factory):
    """
    Write feature flags, e.g. `await set_flags(allow_wire_transfer=True)`.

    Uses its own session so the write is committed independently of
    whatever the test is doing.
    """
    async def _set(**values: bool) -> dict[str, bool]:
        async with session_factory() as session:
            return await FeatureFlagStore(session).set_many(values)

    return _set


@pytest_asyncio.fixture
async def open_account(client):
    """
    Open an account over HTTP and return its JSON body.

    Usage: `acct = await open_account(member_headers, 10000, "savings")`
    """
    async def _open(headers: dict, initial_balance_cents: int = 0,
                    account_type: str = "checking") -> dict:
        response = await client.post(
            "/accounts",
            json={
                "account_type": account_type,
                "initial_balance_cents": initial_balance_cents,
            },
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _open


@pytest_asyncio.fixture
async def make_user(db_session):
    """
    Insert a user and return (user, headers).

    Usage: `user, headers = await make_user("carol", is_active=False)`
    """
    async def _make(username: str, **kwargs) -> tuple[User, dict[str, str]]:
        user = await create_user(db_session, username, **kwargs)
        return user, auth_headers(user)

    return _make
