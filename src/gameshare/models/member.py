"""Member model."""

from enum import Enum

from sqlmodel import Field, SQLModel

from gameshare.models.base import TimestampMixin, generate_nanoid


class MemberRole(str, Enum):
    """Authorization role of a member."""

    USER = "USER"
    ADMIN = "ADMIN"


class Member(TimestampMixin, SQLModel, table=True):
    """Member account model."""

    __tablename__ = "members"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    email: str = Field(unique=True, index=True, max_length=255)
    nickname: str = Field(max_length=50)
    role: MemberRole = Field(default=MemberRole.USER)

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN


class MemberRead(SQLModel):
    """Schema for reading a member."""

    id: str
    email: str
    nickname: str
    role: MemberRole
