"""Starred (favorite) game model."""

from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from gameshare.models.base import TimestampMixin, generate_nanoid


class StarredGame(TimestampMixin, SQLModel, table=True):
    """A member's bookmark of a game."""

    __tablename__ = "starred_games"
    __table_args__ = (UniqueConstraint("member_id", "game_id", name="uq_starred_games_member_game"),)

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    member_id: str = Field(foreign_key="members.id", index=True, ondelete="CASCADE", max_length=21)
    game_id: str = Field(foreign_key="games.id", index=True, ondelete="CASCADE", max_length=21)


class StarredGameRead(SQLModel):
    """Schema for a starred game in a member's favorites."""

    game_id: str
    title: str
    thumbnail_url: str
    starred_count: int
    starred_at: datetime
