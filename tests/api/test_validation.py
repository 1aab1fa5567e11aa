"""Request validation and error rendering tests."""

import pytest

from gameshare.config import settings
from gameshare.models import Game
from tests.conftest import AuthenticatedClient


@pytest.mark.asyncio
async def test_missing_title(authenticated_client: AuthenticatedClient, jpeg_bytes: bytes):
    """Test that a missing required field is a bad request."""
    response = await authenticated_client.post(
        "/api/games",
        files=[("images", ("cover.jpg", jpeg_bytes, "image/jpeg"))],
    )
    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "MISSING_FIELD"
    assert "title" in data["detail"]


@pytest.mark.asyncio
async def test_title_too_long(authenticated_client: AuthenticatedClient, jpeg_bytes: bytes):
    """Test that an over-length title is out of range."""
    response = await authenticated_client.post(
        "/api/games",
        data={"title": "x" * 101},
        files=[("images", ("cover.jpg", jpeg_bytes, "image/jpeg"))],
    )
    assert response.status_code == 414
    assert response.json()["code"] == "OUT_OF_RANGE"


@pytest.mark.asyncio
async def test_empty_title(authenticated_client: AuthenticatedClient, jpeg_bytes: bytes):
    """Test that an empty title is treated as missing."""
    response = await authenticated_client.post(
        "/api/games",
        data={"title": ""},
        files=[("images", ("cover.jpg", jpeg_bytes, "image/jpeg"))],
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_description_too_long(authenticated_client: AuthenticatedClient, game: Game):
    """Test that an over-length description is out of range."""
    response = await authenticated_client.put(
        f"/api/games/{game.id}",
        data={"title": "Fine", "description": "x" * 1001},
    )
    assert response.status_code == 414


@pytest.mark.asyncio
async def test_image_description_too_long(authenticated_client: AuthenticatedClient, jpeg_bytes: bytes):
    """Test that an over-length image description is out of range."""
    response = await authenticated_client.post(
        "/api/games",
        data={"title": "Fine", "image_descriptions": ["x" * 201]},
        files=[("images", ("cover.jpg", jpeg_bytes, "image/jpeg"))],
    )
    assert response.status_code == 414


@pytest.mark.asyncio
async def test_image_too_large(
    authenticated_client: AuthenticatedClient, jpeg_bytes: bytes, monkeypatch, local_storage
):
    """Test that oversized images are rejected with 413."""
    monkeypatch.setattr(settings, "max_image_size", 16)

    response = await authenticated_client.post(
        "/api/games",
        data={"title": "Big"},
        files=[("images", ("cover.jpg", jpeg_bytes, "image/jpeg"))],
    )
    assert response.status_code == 413
    assert response.json()["code"] == "PAYLOAD_TOO_LARGE"
    assert not (local_storage / "games").exists()


@pytest.mark.asyncio
async def test_disguised_image_rejected(authenticated_client: AuthenticatedClient):
    """Test that a declared image type must match the file's contents."""
    response = await authenticated_client.post(
        "/api/games",
        data={"title": "Sneaky"},
        files=[("images", ("cover.jpg", b"GIF89a" + b"\x00" * 20, "image/jpeg"))],
    )
    assert response.status_code == 414
