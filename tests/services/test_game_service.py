"""Game service tests."""

import logging
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select

from gameshare.errors import (
    AccessDeniedError,
    AlreadyReportedError,
    AlreadyStarredError,
    GameNotFoundError,
    InvalidInputError,
    MemberNotFoundError,
    StarredGameNotFoundError,
    UnsupportedExtensionError,
)
from gameshare.models import Game, GameImage, Member, ReportedGame, ReportType, StarredGame
from gameshare.schemas import PageCondition, Period
from gameshare.services import games as game_service
from gameshare.services.games import ImageUpdate, ImageUpload, validate_image
from gameshare.services.storage import storage
from tests.conftest import JPEG_BYTES, PNG_BYTES


def _jpeg(description: str = "") -> ImageUpload:
    return ImageUpload(filename="a.jpg", content_type="image/jpeg", data=JPEG_BYTES, description=description)


def _png(description: str = "") -> ImageUpload:
    return ImageUpload(filename="b.png", content_type="image/png", data=PNG_BYTES, description=description)


async def _count(session: AsyncSession, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_game_lifecycle(session: AsyncSession, member: Member, other_member: Member):
    """Create, star, unstar and delete a game end to end."""
    game_id = await game_service.create_game(
        session, member.id, title="Quiz A", description="d", images=[_jpeg(), _png()]
    )

    detail = await game_service.get_game(session, game_id)
    assert detail.title == "Quiz A"
    assert len(detail.images) == 2
    assert detail.starred_count == 0

    await game_service.star_game(session, other_member.id, game_id)
    assert (await game_service.get_game(session, game_id)).starred_count == 1

    with pytest.raises(AlreadyStarredError):
        await game_service.star_game(session, other_member.id, game_id)
    assert (await game_service.get_game(session, game_id)).starred_count == 1

    await game_service.unstar_game(session, other_member.id, game_id)
    assert (await game_service.get_game(session, game_id)).starred_count == 0

    with pytest.raises(StarredGameNotFoundError):
        await game_service.unstar_game(session, other_member.id, game_id)

    with pytest.raises(AccessDeniedError):
        await game_service.delete_game(session, other_member, game_id)

    await game_service.delete_game(session, member, game_id)
    with pytest.raises(GameNotFoundError):
        await game_service.get_game(session, game_id)


@pytest.mark.asyncio
async def test_thumbnail_is_first_image(session: AsyncSession, member: Member):
    """The thumbnail key is the key of the first uploaded image."""
    game_id = await game_service.create_game(
        session, member.id, title="Ordered", description="", images=[_png("first"), _jpeg("second")]
    )

    game = await session.get(Game, game_id)
    images = (
        await session.execute(select(GameImage).where(GameImage.game_id == game_id).order_by(GameImage.position))
    ).scalars().all()

    assert game.thumbnail_key == images[0].image_key
    assert game.thumbnail_key.endswith(".png")
    assert [image.description for image in images] == ["first", "second"]


@pytest.mark.asyncio
async def test_create_game_requires_images(session: AsyncSession, member: Member):
    with pytest.raises(InvalidInputError):
        await game_service.create_game(session, member.id, title="Empty", description="", images=[])


@pytest.mark.asyncio
async def test_create_game_unknown_member(session: AsyncSession):
    with pytest.raises(MemberNotFoundError):
        await game_service.create_game(session, "missing", title="Orphan", description="", images=[_jpeg()])


@pytest.mark.asyncio
async def test_create_game_rejects_before_storing(session: AsyncSession, member: Member, local_storage):
    """A bad image anywhere in the batch stores nothing."""
    bad = ImageUpload(filename="c.gif", content_type="image/gif", data=b"GIF89a" + b"\x00" * 20)

    with pytest.raises(UnsupportedExtensionError):
        await game_service.create_game(
            session, member.id, title="Mixed", description="", images=[_jpeg(), bad]
        )

    assert not (local_storage / "games").exists()
    assert await _count(session, Game) == 0


@pytest.mark.asyncio
async def test_create_game_upload_failure_logs_orphans(
    session: AsyncSession, member: Member, monkeypatch, caplog
):
    """A failed upload leaves earlier blobs behind and says which ones."""
    upload = AsyncMock(side_effect=[("/uploads/games/first.jpg", "games/first.jpg"), OSError("disk full")])
    monkeypatch.setattr(storage, "upload_file", upload)

    with caplog.at_level(logging.WARNING, logger="gameshare.services.games"):
        with pytest.raises(OSError):
            await game_service.create_game(
                session, member.id, title="Broken", description="", images=[_jpeg(), _png()]
            )

    assert "games/first.jpg" in caplog.text
    assert await _count(session, Game) == 0


@pytest.mark.asyncio
async def test_modify_game_replaces_image(session: AsyncSession, member: Member, game: Game):
    game_id = game.id
    before = await game_service.get_game(session, game_id)
    second = before.images[1]

    detail = await game_service.modify_game(
        session,
        member,
        game_id,
        title="New Title",
        description="New description",
        image_updates=[ImageUpdate(image_id=second.id, upload=_jpeg("replaced"))],
    )

    assert detail.title == "New Title"
    assert detail.images[1].description == "replaced"
    assert detail.images[1].image_url != second.image_url
    # Only the first image drives the thumbnail
    assert detail.thumbnail_url == before.thumbnail_url


@pytest.mark.asyncio
async def test_modify_game_admin_bypass(session: AsyncSession, admin_member: Member, game: Game):
    detail = await game_service.modify_game(session, admin_member, game.id, title="Moderated", description="")
    assert detail.title == "Moderated"


@pytest.mark.asyncio
async def test_modify_game_not_owner(session: AsyncSession, other_member: Member, game: Game):
    with pytest.raises(AccessDeniedError):
        await game_service.modify_game(session, other_member, game.id, title="Nope", description="")


@pytest.mark.asyncio
async def test_delete_game_removes_children(
    session: AsyncSession, member: Member, other_member: Member, game: Game
):
    game_id = game.id
    await game_service.star_game(session, other_member.id, game_id)
    await game_service.report_game(session, other_member.id, game_id, ReportType.SPAM)

    await game_service.delete_game(session, member, game_id)

    assert await _count(session, GameImage) == 0
    assert await game_service.list_starred_games(session, other_member.id) == []
    assert await game_service.list_reported_games(session) == []


@pytest.mark.asyncio
async def test_report_game_twice(session: AsyncSession, other_member: Member, game: Game):
    await game_service.report_game(session, other_member.id, game.id, ReportType.SPAM)

    with pytest.raises(AlreadyReportedError):
        await game_service.report_game(session, other_member.id, game.id, ReportType.OTHER)

    reports = await game_service.list_reported_games(session)
    assert len(reports) == 1
    assert reports[0].report_type == ReportType.SPAM


@pytest.mark.asyncio
async def test_star_game_unique_constraint(
    session: AsyncSession, other_member: Member, game: Game, monkeypatch
):
    """A duplicate star that slips past the lookup is caught by the unique constraint."""
    game_id, member_id = game.id, other_member.id
    await game_service.star_game(session, member_id, game_id)

    monkeypatch.setattr(game_service, "_find_star", AsyncMock(return_value=None))
    with pytest.raises(AlreadyStarredError):
        await game_service.star_game(session, member_id, game_id)

    assert (await game_service.get_game(session, game_id)).starred_count == 1
    assert await _count(session, StarredGame) == 1


@pytest.mark.asyncio
async def test_report_game_unique_constraint(
    session: AsyncSession, other_member: Member, game: Game, monkeypatch
):
    """A duplicate report that slips past the lookup is caught by the unique constraint."""
    game_id, member_id = game.id, other_member.id
    await game_service.report_game(session, member_id, game_id, ReportType.SPAM)

    monkeypatch.setattr(game_service, "_find_report", AsyncMock(return_value=None))
    with pytest.raises(AlreadyReportedError):
        await game_service.report_game(session, member_id, game_id, ReportType.OTHER)

    assert await _count(session, ReportedGame) == 1
    reports = await game_service.list_reported_games(session)
    assert [report.report_type for report in reports] == [ReportType.SPAM]


@pytest.mark.asyncio
async def test_report_unknown_game(session: AsyncSession, member: Member):
    with pytest.raises(GameNotFoundError):
        await game_service.report_game(session, member.id, "missing", ReportType.SPAM)


@pytest.mark.asyncio
async def test_list_games_pagination(session: AsyncSession, member: Member):
    for index in range(3):
        await game_service.create_game(
            session, member.id, title=f"Game {index}", description="", images=[_jpeg()]
        )

    page = await game_service.list_games(session, PageCondition(offset=1, limit=1))
    assert page.total == 3
    assert page.offset == 1
    assert page.limit == 1
    assert len(page.items) == 1
    assert page.has_more is True


@pytest.mark.asyncio
async def test_list_games_keyword_escapes_wildcards(session: AsyncSession, member: Member, game: Game):
    page = await game_service.list_games(session, PageCondition(keyword="%"))
    assert page.total == 0


@pytest.mark.asyncio
async def test_list_games_period(session: AsyncSession, member: Member, game: Game):
    page = await game_service.list_games(session, PageCondition(period=Period.DAY))
    assert [item.id for item in page.items] == [game.id]


@pytest.mark.asyncio
async def test_list_games_period_excludes_old_games(session: AsyncSession, member: Member, game: Game):
    """Games created before the window are filtered out."""
    game_id = game.id
    await session.execute(
        update(Game)
        .where(Game.id == game_id)  # type: ignore[arg-type]
        .values(created_at=datetime.now(UTC) - timedelta(days=40))
    )
    await session.commit()

    for period in (Period.DAY, Period.WEEK, Period.MONTH):
        page = await game_service.list_games(session, PageCondition(period=period))
        assert page.total == 0
        assert page.items == []

    page = await game_service.list_games(session, PageCondition(period=Period.ALL))
    assert [item.id for item in page.items] == [game_id]


@pytest.mark.asyncio
async def test_list_games_period_window_boundaries(session: AsyncSession, member: Member, game: Game):
    """A three day old game is outside the day window but inside the week window."""
    game_id = game.id
    await session.execute(
        update(Game)
        .where(Game.id == game_id)  # type: ignore[arg-type]
        .values(created_at=datetime.now(UTC) - timedelta(days=3))
    )
    await session.commit()

    assert (await game_service.list_games(session, PageCondition(period=Period.DAY))).total == 0
    assert (await game_service.list_games(session, PageCondition(period=Period.WEEK))).total == 1
    assert (await game_service.list_games(session, PageCondition(period=Period.MONTH))).total == 1


@pytest.mark.asyncio
async def test_list_member_games_unknown_member(session: AsyncSession):
    with pytest.raises(MemberNotFoundError):
        await game_service.list_member_games(session, "missing", PageCondition())


def test_validate_image_returns_sniffed_type():
    assert validate_image(_png()) == ("image/png", "png")
    assert validate_image(_jpeg()) == ("image/jpeg", "jpg")


def test_validate_image_accepts_content_type_parameters():
    upload = ImageUpload(filename="a.jpg", content_type="image/JPEG; charset=binary", data=JPEG_BYTES)
    assert validate_image(upload) == ("image/jpeg", "jpg")


def test_validate_image_rejects_missing_content_type():
    with pytest.raises(UnsupportedExtensionError):
        validate_image(ImageUpload(filename="a.jpg", content_type=None, data=JPEG_BYTES))
