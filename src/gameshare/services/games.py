"""Game use cases: catalog queries, CRUD, stars and reports.

Every function takes the request's ``AsyncSession`` and commits at most once.
Failures are raised as ``gameshare.errors`` exceptions and left for the API
layer to render.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import and_, delete, func, literal, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlmodel import col, select

from gameshare.config import settings
from gameshare.errors import (
    AccessDeniedError,
    AlreadyReportedError,
    AlreadyStarredError,
    GameImageNotFoundError,
    GameNotFoundError,
    InvalidInputError,
    MemberNotFoundError,
    PayloadTooLargeError,
    StarredGameNotFoundError,
    UnsupportedExtensionError,
)
from gameshare.models import Game, GameImage, Member, MemberRole, ReportedGame, ReportType, StarredGame
from gameshare.models.game import GameDetail, GameImageRead, GameSummary
from gameshare.models.reported_game import ReportedGameRead
from gameshare.models.starred_game import StarredGameRead
from gameshare.schemas import PageCondition, PaginatedResponse, Period, SearchTarget, SortOrder
from gameshare.services.storage import storage
from gameshare.utils.image import detect_mime_type_with_extension

logger = logging.getLogger(__name__)

# Storage prefix for game images
IMAGE_PREFIX = "games"

PERIOD_WINDOWS = {
    Period.DAY: timedelta(days=1),
    Period.WEEK: timedelta(weeks=1),
    Period.MONTH: timedelta(days=30),
}


@dataclass
class ImageUpload:
    """An uploaded image file with its description."""

    filename: str | None
    content_type: str | None
    data: bytes
    description: str = ""


@dataclass
class ImageUpdate:
    """Replacement of an existing game image."""

    image_id: str
    upload: ImageUpload


@dataclass
class _ValidatedImage:
    upload: ImageUpload
    mime_type: str
    extension: str


def validate_image(upload: ImageUpload) -> tuple[str, str]:
    """Check an upload is an allowed image and return its (mime_type, extension).

    Raises:
        UnsupportedExtensionError: declared or detected type is not allowed
        PayloadTooLargeError: file exceeds ``settings.max_image_size``
    """
    allowed = settings.allowed_image_types
    content_type = (upload.content_type or "").split(";", 1)[0].strip().lower()

    if content_type not in allowed:
        raise UnsupportedExtensionError(
            f"Unsupported image type: {upload.content_type or 'unknown'}. "
            f"Allowed: {', '.join(allowed)}"
        )

    if len(upload.data) > settings.max_image_size:
        raise PayloadTooLargeError(
            f"File too large. Max size: {settings.max_image_size // (1024 * 1024)}MB"
        )

    mime_type, extension = detect_mime_type_with_extension(upload.data)
    if mime_type not in allowed:
        raise UnsupportedExtensionError(
            f"File {upload.filename or ''!r} is not a valid {', '.join(allowed)} image"
        )

    return mime_type, extension


async def _store_image(image: _ValidatedImage) -> str:
    _url, key = await storage.upload_file(
        data=image.upload.data,
        prefix=IMAGE_PREFIX,
        extension=image.extension,
        content_type=image.mime_type,
    )
    return key


async def _save_or_report_orphans(
    session: AsyncSession, uploaded_keys: list[str], *, commit: bool = True
) -> None:
    """Commit (or flush), logging uploaded blobs that no row will reference if it fails."""
    try:
        if commit:
            await session.commit()
        else:
            await session.flush()
    except Exception:
        await session.rollback()
        logger.warning(f"Saving game failed; orphaned blobs left in storage: {uploaded_keys}")
        raise


async def _get_game(session: AsyncSession, game_id: str) -> Game:
    game = await session.get(Game, game_id)
    if not game:
        raise GameNotFoundError()
    return game


async def _ensure_member(session: AsyncSession, member_id: str) -> Member:
    member = await session.get(Member, member_id)
    if not member:
        raise MemberNotFoundError()
    return member


async def check_game_access(session: AsyncSession, member: Member, game_id: str) -> Game:
    """Load a game the member may modify or delete.

    Admins may act on any game; other members only on their own.

    Raises:
        GameNotFoundError: no game with this ID
        AccessDeniedError: member is neither the owner nor an admin
    """
    game = await _get_game(session, game_id)

    if member.role == MemberRole.ADMIN:
        return game

    if member.id != game.member_id:
        raise AccessDeniedError()

    return game


def _summary_statement(viewer_id: str | None) -> Any:
    """Select (Game, owner nickname, is_starred) rows."""
    if viewer_id:
        stmt = select(
            Game,
            Member.nickname,
            col(StarredGame.id).is_not(None).label("is_starred"),
        ).outerjoin(
            StarredGame,
            and_(
                StarredGame.game_id == Game.id,  # type: ignore[arg-type]
                StarredGame.member_id == viewer_id,  # type: ignore[arg-type]
            ),
        )
    else:
        stmt = select(Game, Member.nickname, literal(False).label("is_starred"))

    return stmt.join(Member, Member.id == Game.member_id)  # type: ignore[arg-type]


def _apply_condition(stmt: Any, params: PageCondition) -> Any:
    """Apply keyword and period filters."""
    if params.keyword:
        title_match = col(Game.title).icontains(params.keyword, autoescape=True)
        nickname_match = col(Member.nickname).icontains(params.keyword, autoescape=True)
        if params.search == SearchTarget.TITLE:
            stmt = stmt.where(title_match)
        elif params.search == SearchTarget.NICKNAME:
            stmt = stmt.where(nickname_match)
        else:
            stmt = stmt.where(or_(title_match, nickname_match))

    window = PERIOD_WINDOWS.get(params.period)
    if window:
        stmt = stmt.where(col(Game.created_at) >= datetime.now(UTC) - window)

    return stmt


def _to_summary(game: Game, nickname: str, is_starred: bool) -> GameSummary:
    return GameSummary(
        id=game.id,
        title=game.title,
        thumbnail_url=storage.get_url(game.thumbnail_key),
        starred_count=game.starred_count,
        member_id=game.member_id,
        nickname=nickname,
        is_starred=bool(is_starred),
        created_at=game.created_at,
    )


async def _list_summaries(
    session: AsyncSession,
    params: PageCondition,
    viewer_id: str | None,
    owner_id: str | None = None,
) -> PaginatedResponse[GameSummary]:
    stmt = _apply_condition(_summary_statement(viewer_id), params)
    count_stmt = _apply_condition(
        select(func.count())
        .select_from(Game)
        .join(Member, Member.id == Game.member_id),  # type: ignore[arg-type]
        params,
    )
    if owner_id:
        stmt = stmt.where(Game.member_id == owner_id)
        count_stmt = count_stmt.where(Game.member_id == owner_id)

    if params.order == SortOrder.POPULAR:
        stmt = stmt.order_by(col(Game.starred_count).desc(), col(Game.created_at).desc())
    else:
        stmt = stmt.order_by(col(Game.created_at).desc(), col(Game.id).desc())

    stmt = stmt.offset(params.offset).limit(params.limit).execution_options(populate_existing=True)

    total = (await session.execute(count_stmt)).scalar() or 0
    rows = (await session.execute(stmt)).all()

    return PaginatedResponse[GameSummary](
        items=[_to_summary(game, nickname, is_starred) for game, nickname, is_starred in rows],
        total=total,
        offset=params.offset,
        limit=params.limit,
    )


async def list_games(
    session: AsyncSession,
    params: PageCondition,
    viewer_id: str | None = None,
) -> PaginatedResponse[GameSummary]:
    """List the game catalog, flagging games the viewer has starred."""
    return await _list_summaries(session, params, viewer_id)


async def list_member_games(
    session: AsyncSession,
    member_id: str,
    params: PageCondition,
) -> PaginatedResponse[GameSummary]:
    """List games created by a member."""
    await _ensure_member(session, member_id)
    return await _list_summaries(session, params, viewer_id=member_id, owner_id=member_id)


async def get_game(session: AsyncSession, game_id: str) -> GameDetail:
    """Get a game with its images in position order."""
    stmt = (
        select(Game, Member.nickname)
        .join(Member, Member.id == Game.member_id)  # type: ignore[arg-type]
        .where(Game.id == game_id)
        .execution_options(populate_existing=True)
    )
    row = (await session.execute(stmt)).one_or_none()
    if not row:
        raise GameNotFoundError()

    game, nickname = row

    images_stmt = (
        select(GameImage)
        .where(GameImage.game_id == game_id)
        .order_by(col(GameImage.position))
        .execution_options(populate_existing=True)
    )
    images = (await session.execute(images_stmt)).scalars().all()

    return GameDetail(
        id=game.id,
        title=game.title,
        description=game.description,
        thumbnail_url=storage.get_url(game.thumbnail_key),
        starred_count=game.starred_count,
        member_id=game.member_id,
        nickname=nickname,
        created_at=game.created_at,
        images=[
            GameImageRead(
                id=image.id,
                image_url=storage.get_url(image.image_key),
                description=image.description,
                position=image.position,
            )
            for image in images
        ],
    )


async def create_game(
    session: AsyncSession,
    member_id: str,
    title: str,
    description: str,
    images: Sequence[ImageUpload],
) -> str:
    """Create a game from its uploaded images and return the new game ID.

    All images are validated before any is stored. The first image becomes
    the thumbnail.
    """
    if not images:
        raise InvalidInputError("At least one image is required")

    await _ensure_member(session, member_id)

    validated = [_ValidatedImage(upload, *validate_image(upload)) for upload in images]

    keys: list[str] = []
    try:
        for image in validated:
            keys.append(await _store_image(image))
    except Exception:
        if keys:
            logger.warning(f"Image upload failed; orphaned blobs left in storage: {keys}")
        raise

    game = Game(
        member_id=member_id,
        title=title,
        description=description,
        thumbnail_key=keys[0],
    )
    session.add(game)
    await _save_or_report_orphans(session, keys, commit=False)

    session.add_all(
        [
            GameImage(
                game_id=game.id,
                image_key=key,
                description=image.upload.description,
                position=position,
            )
            for position, (image, key) in enumerate(zip(validated, keys, strict=True))
        ]
    )
    await _save_or_report_orphans(session, keys)

    logger.info(f"Member {member_id} created game {game.id} with {len(keys)} images")
    return game.id


async def modify_game(
    session: AsyncSession,
    member: Member,
    game_id: str,
    title: str,
    description: str,
    image_updates: Sequence[ImageUpdate] = (),
) -> GameDetail:
    """Update a game's text and replace selected images.

    Raises:
        GameNotFoundError, AccessDeniedError: see ``check_game_access``
        GameImageNotFoundError: an update names an image not belonging to this game
        UnsupportedExtensionError, PayloadTooLargeError: an upload is rejected
    """
    game = await check_game_access(session, member, game_id)

    planned: list[tuple[GameImage, _ValidatedImage]] = []
    for image_update in image_updates:
        image = await session.get(GameImage, image_update.image_id)
        if not image or image.game_id != game.id:
            raise GameImageNotFoundError(f"Game image {image_update.image_id} not found")
        planned.append(
            (image, _ValidatedImage(image_update.upload, *validate_image(image_update.upload)))
        )

    game.title = title
    game.description = description

    keys: list[str] = []
    try:
        for image, validated in planned:
            key = await _store_image(validated)
            keys.append(key)
            image.image_key = key
            image.description = validated.upload.description
            if image.position == 0:
                game.thumbnail_key = key
    except Exception:
        await session.rollback()
        if keys:
            logger.warning(f"Image upload failed; orphaned blobs left in storage: {keys}")
        raise

    await _save_or_report_orphans(session, keys)

    logger.info(f"Member {member.id} modified game {game_id} ({len(keys)} images replaced)")
    return await get_game(session, game_id)


async def delete_game(session: AsyncSession, member: Member, game_id: str) -> None:
    """Delete a game with its images, stars and reports.

    Stored blobs are left for ``maintenance.cleanup_orphaned_blobs``.
    """
    game = await check_game_access(session, member, game_id)

    await session.execute(delete(GameImage).where(GameImage.game_id == game_id))  # type: ignore[arg-type]
    await session.execute(delete(StarredGame).where(StarredGame.game_id == game_id))  # type: ignore[arg-type]
    await session.execute(delete(ReportedGame).where(ReportedGame.game_id == game_id))  # type: ignore[arg-type]
    await session.delete(game)
    await session.commit()

    logger.info(f"Member {member.id} deleted game {game_id}")


async def _find_star(session: AsyncSession, member_id: str, game_id: str) -> StarredGame | None:
    stmt = select(StarredGame).where(
        StarredGame.member_id == member_id,
        StarredGame.game_id == game_id,
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def star_game(session: AsyncSession, member_id: str, game_id: str) -> None:
    """Add a game to a member's favorites and bump its star count."""
    await _get_game(session, game_id)

    if await _find_star(session, member_id, game_id):
        raise AlreadyStarredError()

    session.add(StarredGame(member_id=member_id, game_id=game_id))
    try:
        await session.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent star from the same member
        await session.rollback()
        raise AlreadyStarredError() from e

    await session.execute(
        update(Game)
        .where(Game.id == game_id)  # type: ignore[arg-type]
        .values(starred_count=col(Game.starred_count) + 1)
    )
    await session.commit()

    logger.info(f"Member {member_id} starred game {game_id}")


async def unstar_game(session: AsyncSession, member_id: str, game_id: str) -> None:
    """Remove a game from a member's favorites and decrement its star count."""
    await _get_game(session, game_id)

    starred = await _find_star(session, member_id, game_id)
    if not starred:
        raise StarredGameNotFoundError()

    await session.delete(starred)
    await session.execute(
        update(Game)
        .where(Game.id == game_id, col(Game.starred_count) > 0)  # type: ignore[arg-type]
        .values(starred_count=col(Game.starred_count) - 1)
    )
    await session.commit()

    logger.info(f"Member {member_id} unstarred game {game_id}")


async def _find_report(session: AsyncSession, member_id: str, game_id: str) -> ReportedGame | None:
    stmt = select(ReportedGame).where(
        ReportedGame.report_member_id == member_id,
        ReportedGame.game_id == game_id,
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def report_game(
    session: AsyncSession,
    member_id: str,
    game_id: str,
    report_type: ReportType,
) -> None:
    """File a moderation report against a game."""
    if await _find_report(session, member_id, game_id):
        raise AlreadyReportedError()

    game = await _get_game(session, game_id)

    session.add(
        ReportedGame(
            game_id=game.id,
            report_member_id=member_id,
            reported_member_id=game.member_id,
            report_type=report_type,
        )
    )
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise AlreadyReportedError() from e

    logger.info(f"Member {member_id} reported game {game_id} ({report_type.value})")


async def list_starred_games(session: AsyncSession, member_id: str) -> list[StarredGameRead]:
    """List a member's favorites, most recently starred first."""
    await _ensure_member(session, member_id)

    stmt = (
        select(Game, StarredGame.created_at)
        .join(StarredGame, StarredGame.game_id == Game.id)  # type: ignore[arg-type]
        .where(StarredGame.member_id == member_id)
        .order_by(col(StarredGame.created_at).desc())
        .execution_options(populate_existing=True)
    )
    rows = (await session.execute(stmt)).all()

    return [
        StarredGameRead(
            game_id=game.id,
            title=game.title,
            thumbnail_url=storage.get_url(game.thumbnail_key),
            starred_count=game.starred_count,
            starred_at=starred_at,
        )
        for game, starred_at in rows
    ]


async def list_reported_games(session: AsyncSession) -> list[ReportedGameRead]:
    """List every report, newest first."""
    reporter = aliased(Member)
    reported = aliased(Member)

    stmt = (
        select(
            ReportedGame,
            Game.title,
            reporter.nickname.label("reporter_nickname"),
            reported.nickname.label("reported_nickname"),
        )
        .join(Game, Game.id == ReportedGame.game_id)  # type: ignore[arg-type]
        .join(reporter, reporter.id == ReportedGame.report_member_id)  # type: ignore[arg-type]
        .join(reported, reported.id == ReportedGame.reported_member_id)  # type: ignore[arg-type]
        .order_by(col(ReportedGame.created_at).desc())
    )
    rows = (await session.execute(stmt)).all()

    return [
        ReportedGameRead(
            id=report.id,
            game_id=report.game_id,
            game_title=title,
            report_member_id=report.report_member_id,
            report_member_nickname=reporter_nickname,
            reported_member_id=report.reported_member_id,
            reported_member_nickname=reported_nickname,
            report_type=report.report_type,
            created_at=report.created_at,
        )
        for report, title, reporter_nickname, reported_nickname in rows
    ]
