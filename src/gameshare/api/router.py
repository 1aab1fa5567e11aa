"""Main API router that aggregates all route modules."""

from fastapi import APIRouter

from gameshare.api import admin, games, health, members

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(games.router, prefix="/games", tags=["games"])
api_router.include_router(members.router, prefix="/members", tags=["members"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
