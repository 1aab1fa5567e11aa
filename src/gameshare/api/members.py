"""Endpoints scoped to the authenticated member."""

from fastapi import APIRouter

from gameshare.api.deps import CurrentMember, PageConditionDep, SessionDep
from gameshare.models.game import GameSummary
from gameshare.models.member import MemberRead
from gameshare.models.starred_game import StarredGameRead
from gameshare.schemas import PaginatedResponse
from gameshare.services import games as game_service

router = APIRouter()


@router.get("/me", response_model=MemberRead)
async def get_me(member: CurrentMember):
    """Get the authenticated member."""
    return MemberRead(id=member.id, email=member.email, nickname=member.nickname, role=member.role)


@router.get("/me/games", response_model=PaginatedResponse[GameSummary])
async def list_my_games(session: SessionDep, member: CurrentMember, params: PageConditionDep):
    """List games created by the authenticated member."""
    return await game_service.list_member_games(session, member.id, params)


@router.get("/me/starred", response_model=list[StarredGameRead])
async def list_my_starred_games(session: SessionDep, member: CurrentMember):
    """List the authenticated member's favorite games."""
    return await game_service.list_starred_games(session, member.id)
