"""Game and game image models."""

from datetime import datetime

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from gameshare.models.base import TimestampMixin, generate_nanoid

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000
IMAGE_DESCRIPTION_MAX_LENGTH = 200


class Game(TimestampMixin, SQLModel, table=True):
    """A shareable game owned by a member."""

    __tablename__ = "games"
    __table_args__ = (CheckConstraint("starred_count >= 0", name="ck_games_starred_count_non_negative"),)

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    member_id: str = Field(foreign_key="members.id", index=True, ondelete="CASCADE", max_length=21)
    title: str = Field(max_length=TITLE_MAX_LENGTH, index=True)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    # Storage key of the first image
    thumbnail_key: str = Field(max_length=500)
    starred_count: int = Field(default=0, ge=0)


class GameImage(TimestampMixin, SQLModel, table=True):
    """One image of a game, ordered by position."""

    __tablename__ = "game_images"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    game_id: str = Field(foreign_key="games.id", index=True, ondelete="CASCADE", max_length=21)
    image_key: str = Field(max_length=500)
    description: str = Field(default="", max_length=IMAGE_DESCRIPTION_MAX_LENGTH)
    position: int = Field(default=0)


class GameImageRead(SQLModel):
    """Schema for reading a game image."""

    id: str
    image_url: str
    description: str
    position: int


class GameSummary(SQLModel):
    """List view of a game."""

    id: str
    title: str
    thumbnail_url: str
    starred_count: int
    member_id: str
    nickname: str
    is_starred: bool = False
    created_at: datetime


class GameDetail(SQLModel):
    """Detail view of a game with its images."""

    id: str
    title: str
    description: str
    thumbnail_url: str
    starred_count: int
    member_id: str
    nickname: str
    created_at: datetime
    images: list[GameImageRead]


class GameCreated(SQLModel):
    """Response for a newly created game."""

    id: str
