"""Admin-only moderation endpoints."""

from fastapi import APIRouter

from gameshare.api.deps import AdminMember, SessionDep
from gameshare.models.reported_game import ReportedGameRead
from gameshare.services import games as game_service

router = APIRouter()


@router.get("/reports/games", response_model=list[ReportedGameRead])
async def list_reported_games(session: SessionDep, _admin: AdminMember):
    """List every game report, newest first (admin only)."""
    return await game_service.list_reported_games(session)
