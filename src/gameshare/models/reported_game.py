"""Reported game model for moderation."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from gameshare.models.base import TimestampMixin, generate_nanoid


class ReportType(str, Enum):
    """Reason a game was reported."""

    SPAM = "SPAM"
    ABUSIVE = "ABUSIVE"
    SEXUAL = "SEXUAL"
    PERSONAL_INFO = "PERSONAL_INFO"
    COPYRIGHT = "COPYRIGHT"
    OTHER = "OTHER"


class ReportedGame(TimestampMixin, SQLModel, table=True):
    """A member's report of a game."""

    __tablename__ = "reported_games"
    __table_args__ = (
        UniqueConstraint("report_member_id", "game_id", name="uq_reported_games_member_game"),
    )

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    game_id: str = Field(foreign_key="games.id", index=True, ondelete="CASCADE", max_length=21)
    report_member_id: str = Field(
        foreign_key="members.id", index=True, ondelete="CASCADE", max_length=21
    )
    reported_member_id: str = Field(
        foreign_key="members.id", index=True, ondelete="CASCADE", max_length=21
    )
    report_type: ReportType


class ReportCreate(BaseModel):
    """Request body for reporting a game."""

    report_type: ReportType = PydanticField(alias="reportType")


class ReportedGameRead(SQLModel):
    """Schema for a report in the moderation queue."""

    id: str
    game_id: str
    game_title: str
    report_member_id: str
    report_member_nickname: str
    reported_member_id: str
    reported_member_nickname: str
    report_type: ReportType
    created_at: datetime
