"""
Security test fixtures.

These fixtures enable testing security scenarios like IDOR (Insecure Direct
Object Reference) by creating two users and their associated data.

FastAPI dependency overrides are global to the app, so two clients cannot be
authenticated as different users at the same time. `act_as` switches the
authenticated user of a single client between requests instead.
"""
from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.user import User
from services.bookmark_repository import bookmark_repository


@pytest.fixture
async def user_a(db_session: AsyncSession) -> User:
    """Create the first test user (User A)."""
    user = User(auth0_id="auth0|user-a", email="user-a@test.com")
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def user_b(db_session: AsyncSession) -> User:
    """Create a second test user (User B) for IDOR testing."""
    user = User(auth0_id="auth0|user-b", email="user-b@test.com")
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def user_a_bookmark(db_session: AsyncSession, user_a: User) -> Bookmark:
    """Create a bookmark belonging to User A."""
    bookmark = await bookmark_repository.create(
        db_session,
        {
            "user_id": user_a.id,
            "url": "https://user-a-bookmark.example.com/",
            "title": "User A's Private Bookmark",
            "summary": "This should only be accessible to User A",
        },
    )
    await bookmark_repository.set_tags(db_session, bookmark, ["private-a"])
    return bookmark


@pytest.fixture
async def user_b_bookmark(db_session: AsyncSession, user_b: User) -> Bookmark:
    """Create a bookmark belonging to User B."""
    return await bookmark_repository.create(
        db_session,
        {
            "user_id": user_b.id,
            "url": "https://user-b-bookmark.example.com/",
            "title": "User B's Private Bookmark",
        },
    )


@pytest.fixture
async def security_client(
    db_session: AsyncSession,
) -> AsyncGenerator[tuple[AsyncClient, Callable[[User], None]]]:
    """
    Create a test client plus a function that sets who it is authenticated as.

    Usage:
        client, act_as = security_client
        act_as(user_b)
        response = await client.get(f"/bookmarks/{bookmark_id}")
    """
    from core.config import get_settings  # noqa: PLC0415

    get_settings.cache_clear()

    from api.main import app  # noqa: PLC0415
    from core.auth import get_current_user  # noqa: PLC0415
    from db.session import get_async_session  # noqa: PLC0415

    current: dict[str, User] = {}

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    async def override_get_current_user() -> User:
        return current["user"]

    def act_as(user: User) -> None:
        current["user"] = user

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_current_user] = override_get_current_user

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client, act_as

    app.dependency_overrides.clear()


@pytest.fixture
def client_as_user_b(
    security_client: tuple[AsyncClient, Callable[[User], None]],
    user_b: User,
) -> AsyncClient:
    """The security client, authenticated as User B."""
    client, act_as = security_client
    act_as(user_b)
    return client
