"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from typing import Any

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from gameshare.config import settings
from gameshare.database import get_session
from gameshare.main import app
from gameshare.models import Game, Member, MemberRole
from gameshare.services import games as game_service
from gameshare.services.auth import create_token
from gameshare.services.games import ImageUpload
from gameshare.services.storage import storage

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 28
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        settings.database_url_test,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Each test has its own database, so fixtures commit like the services do.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def local_storage(tmp_path, monkeypatch):
    """Write uploaded blobs to a per-test directory."""
    monkeypatch.setattr(storage, "upload_dir", tmp_path)
    return tmp_path


@pytest.fixture
async def client(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def member(session: AsyncSession) -> Member:
    """Create a test member."""
    member = Member(email="test@example.com", nickname="tester")
    session.add(member)
    await session.commit()
    return member


@pytest.fixture
async def other_member(session: AsyncSession) -> Member:
    """Create a second, unrelated member."""
    member = Member(email="other@example.com", nickname="other")
    session.add(member)
    await session.commit()
    return member


@pytest.fixture
async def admin_member(session: AsyncSession) -> Member:
    """Create a test admin member."""
    member = Member(email="admin@example.com", nickname="moderator", role=MemberRole.ADMIN)
    session.add(member)
    await session.commit()
    return member


@pytest.fixture
def member_token(member: Member) -> str:
    """Create a JWT token for the test member."""
    return create_token(member)


@pytest.fixture
def auth_headers(member_token: str) -> dict[str, str]:
    """Create authorization headers for the test member."""
    return {"Authorization": f"Bearer {member_token}"}


@pytest.fixture
def other_headers(other_member: Member) -> dict[str, str]:
    """Create authorization headers for the second member."""
    return {"Authorization": f"Bearer {create_token(other_member)}"}


@pytest.fixture
def admin_headers(admin_member: Member) -> dict[str, str]:
    """Create authorization headers for the admin member."""
    return {"Authorization": f"Bearer {create_token(admin_member)}"}


@pytest.fixture
def jpeg_bytes() -> bytes:
    """Smallest byte string sniffed as a JPEG."""
    return JPEG_BYTES


@pytest.fixture
def png_bytes() -> bytes:
    """Smallest byte string sniffed as a PNG."""
    return PNG_BYTES


@pytest.fixture
async def game(session: AsyncSession, member: Member) -> Game:
    """Create a game with two images owned by the test member."""
    game_id = await game_service.create_game(
        session,
        member_id=member.id,
        title="Test Game",
        description="A test game for unit tests",
        images=[
            ImageUpload(filename="cover.jpg", content_type="image/jpeg", data=JPEG_BYTES, description="cover"),
            ImageUpload(filename="board.png", content_type="image/png", data=PNG_BYTES, description="board"),
        ],
    )
    game = await session.get(Game, game_id)
    assert game is not None
    return game


# Helper to make authenticated requests
class AuthenticatedClient:
    """Wrapper for AsyncClient with authentication."""

    def __init__(self, client: AsyncClient, headers: dict[str, str]):
        self.client = client
        self.headers = headers

    async def get(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.post(url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.put(url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.delete(url, **kwargs)


@pytest.fixture
def authenticated_client(client: AsyncClient, auth_headers: dict[str, str]) -> AuthenticatedClient:
    """Create an authenticated test client."""
    return AuthenticatedClient(client, auth_headers)


@pytest.fixture
def other_client(client: AsyncClient, other_headers: dict[str, str]) -> AuthenticatedClient:
    """Create a client authenticated as the second member."""
    return AuthenticatedClient(client, other_headers)


@pytest.fixture
def admin_client(client: AsyncClient, admin_headers: dict[str, str]) -> AuthenticatedClient:
    """Create an authenticated admin test client."""
    return AuthenticatedClient(client, admin_headers)
