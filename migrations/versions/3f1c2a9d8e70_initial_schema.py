"""initial_schema

Create members, games, game_images, starred_games and reported_games.

Revision ID: 3f1c2a9d8e70
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d8e70"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "members",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("nickname", sa.String(50), nullable=False),
        sa.Column("role", sa.Enum("USER", "ADMIN", name="memberrole"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_members_email", "members", ["email"], unique=True)

    op.create_table(
        "games",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column(
            "member_id",
            sa.VARCHAR(21),
            sa.ForeignKey("members.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(1000), nullable=False, server_default=""),
        sa.Column("thumbnail_key", sa.String(500), nullable=False),
        sa.Column("starred_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("starred_count >= 0", name="ck_games_starred_count_non_negative"),
    )
    op.create_index("ix_games_member_id", "games", ["member_id"])
    op.create_index("ix_games_title", "games", ["title"])

    op.create_table(
        "game_images",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column(
            "game_id",
            sa.VARCHAR(21),
            sa.ForeignKey("games.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("image_key", sa.String(500), nullable=False),
        sa.Column("description", sa.String(200), nullable=False, server_default=""),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_game_images_game_id", "game_images", ["game_id"])

    op.create_table(
        "starred_games",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column(
            "member_id",
            sa.VARCHAR(21),
            sa.ForeignKey("members.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "game_id",
            sa.VARCHAR(21),
            sa.ForeignKey("games.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("member_id", "game_id", name="uq_starred_games_member_game"),
    )
    op.create_index("ix_starred_games_member_id", "starred_games", ["member_id"])
    op.create_index("ix_starred_games_game_id", "starred_games", ["game_id"])

    op.create_table(
        "reported_games",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column(
            "game_id",
            sa.VARCHAR(21),
            sa.ForeignKey("games.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "report_member_id",
            sa.VARCHAR(21),
            sa.ForeignKey("members.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "reported_member_id",
            sa.VARCHAR(21),
            sa.ForeignKey("members.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "report_type",
            sa.Enum(
                "SPAM", "ABUSIVE", "SEXUAL", "PERSONAL_INFO", "COPYRIGHT", "OTHER",
                name="reporttype",
            ),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("report_member_id", "game_id", name="uq_reported_games_member_game"),
    )
    op.create_index("ix_reported_games_game_id", "reported_games", ["game_id"])
    op.create_index("ix_reported_games_report_member_id", "reported_games", ["report_member_id"])
    op.create_index("ix_reported_games_reported_member_id", "reported_games", ["reported_member_id"])


def downgrade() -> None:
    op.drop_table("reported_games")
    op.drop_table("starred_games")
    op.drop_table("game_images")
    op.drop_table("games")
    op.drop_table("members")
    sa.Enum(name="reporttype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="memberrole").drop(op.get_bind(), checkfirst=True)
