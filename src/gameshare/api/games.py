"""Game endpoints: catalog, CRUD, stars and reports."""

from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile
from pydantic import Field

from gameshare.api.deps import CurrentMember, CurrentMemberOptional, PageConditionDep, SessionDep
from gameshare.errors import InvalidInputError
from gameshare.models.game import (
    DESCRIPTION_MAX_LENGTH,
    IMAGE_DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    GameCreated,
    GameDetail,
    GameSummary,
)
from gameshare.models.reported_game import ReportCreate
from gameshare.schemas import PaginatedResponse, SuccessResponse
from gameshare.services import games as game_service
from gameshare.services.games import ImageUpdate, ImageUpload

router = APIRouter()

TitleForm = Annotated[str, Form(min_length=1, max_length=TITLE_MAX_LENGTH)]
DescriptionForm = Annotated[str, Form(max_length=DESCRIPTION_MAX_LENGTH)]
ImageDescriptionsForm = Annotated[
    list[Annotated[str, Field(max_length=IMAGE_DESCRIPTION_MAX_LENGTH)]] | None,
    Form(description="One description per image, in the same order"),
]


async def read_uploads(
    files: list[UploadFile],
    descriptions: list[str] | None,
) -> list[ImageUpload]:
    """Read uploaded files into memory, pairing each with its description."""
    descriptions = descriptions or []
    if descriptions and len(descriptions) != len(files):
        raise InvalidInputError(
            f"Got {len(descriptions)} image descriptions for {len(files)} images"
        )

    uploads = []
    for index, file in enumerate(files):
        uploads.append(
            ImageUpload(
                filename=file.filename,
                content_type=file.content_type,
                data=await file.read(),
                description=descriptions[index] if descriptions else "",
            )
        )
    return uploads


@router.get("", response_model=PaginatedResponse[GameSummary])
async def list_games(
    session: SessionDep,
    member: CurrentMemberOptional,
    params: PageConditionDep,
):
    """List games with search, ordering and pagination.

    Authenticated callers get ``is_starred`` set on games they have starred.
    """
    return await game_service.list_games(session, params, viewer_id=member.id if member else None)


@router.get("/{game_id}", response_model=GameDetail)
async def get_game(game_id: str, session: SessionDep):
    """Get a game with its images."""
    return await game_service.get_game(session, game_id)


@router.post("", response_model=GameCreated)
async def create_game(
    session: SessionDep,
    member: CurrentMember,
    title: TitleForm,
    images: Annotated[list[UploadFile], File(description="Game images; the first is the thumbnail")],
    description: DescriptionForm = "",
    image_descriptions: ImageDescriptionsForm = None,
):
    """Create a game from a multipart form of metadata and images."""
    uploads = await read_uploads(images, image_descriptions)
    game_id = await game_service.create_game(
        session,
        member_id=member.id,
        title=title,
        description=description,
        images=uploads,
    )
    return GameCreated(id=game_id)


@router.put("/{game_id}", response_model=GameDetail)
async def modify_game(
    game_id: str,
    session: SessionDep,
    member: CurrentMember,
    title: TitleForm,
    description: DescriptionForm = "",
    image_ids: Annotated[list[str] | None, Form(description="IDs of the images to replace")] = None,
    images: Annotated[list[UploadFile] | None, File(description="Replacement images")] = None,
    image_descriptions: ImageDescriptionsForm = None,
):
    """Update a game's title and description, optionally replacing images.

    ``image_ids``, ``images`` and ``image_descriptions`` are parallel lists.
    """
    image_ids = image_ids or []
    images = images or []
    if len(image_ids) != len(images):
        raise InvalidInputError(f"Got {len(image_ids)} image IDs for {len(images)} images")

    uploads = await read_uploads(images, image_descriptions)
    return await game_service.modify_game(
        session,
        member,
        game_id,
        title=title,
        description=description,
        image_updates=[
            ImageUpdate(image_id=image_id, upload=upload)
            for image_id, upload in zip(image_ids, uploads, strict=True)
        ],
    )


@router.delete("/{game_id}", response_model=SuccessResponse)
async def delete_game(game_id: str, session: SessionDep, member: CurrentMember):
    """Delete a game (owner or admin)."""
    await game_service.delete_game(session, member, game_id)
    return SuccessResponse(message="Game deleted")


@router.post("/starred/{game_id}", response_model=SuccessResponse)
async def star_game(game_id: str, session: SessionDep, member: CurrentMember):
    """Add a game to the caller's favorites."""
    await game_service.star_game(session, member.id, game_id)
    return SuccessResponse(message="Game starred")


@router.delete("/unstarred/{game_id}", response_model=SuccessResponse)
async def unstar_game(game_id: str, session: SessionDep, member: CurrentMember):
    """Remove a game from the caller's favorites."""
    await game_service.unstar_game(session, member.id, game_id)
    return SuccessResponse(message="Game unstarred")


@router.post("/report/{game_id}", response_model=SuccessResponse)
async def report_game(
    game_id: str,
    report_in: ReportCreate,
    session: SessionDep,
    member: CurrentMember,
):
    """Report a game for moderation."""
    await game_service.report_game(session, member.id, game_id, report_in.report_type)
    return SuccessResponse(message="Game reported")
