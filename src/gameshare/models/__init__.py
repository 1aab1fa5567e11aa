"""SQLModel database models."""

from gameshare.models.base import TimestampMixin
from gameshare.models.game import Game, GameImage
from gameshare.models.member import Member, MemberRole
from gameshare.models.reported_game import ReportedGame, ReportType
from gameshare.models.starred_game import StarredGame

__all__ = [
    "Game",
    "GameImage",
    "Member",
    "MemberRole",
    "ReportType",
    "ReportedGame",
    "StarredGame",
    "TimestampMixin",
]
