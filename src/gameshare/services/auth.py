"""Authentication service for JWT token management."""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gameshare.config import settings
from gameshare.models import Member


class AuthError(Exception):
    """Authentication error."""

    pass


def create_token(member: Member) -> str:
    """Create a JWT token for a member."""
    expires = datetime.now(UTC) + timedelta(days=settings.jwt_expiration_days)
    payload = {
        "sub": str(member.id),
        "email": member.email,
        "role": member.role.value,
        "exp": expires,
        "iat": datetime.now(UTC),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError as e:
        raise AuthError(f"Invalid token: {e}") from e


async def verify_token(session: AsyncSession, token: str) -> Member:
    """Verify a JWT token and return the associated member.

    The role is read from the database rather than the token, so role changes
    take effect without reissuing tokens.
    """
    payload = decode_token(token)

    member_id = payload.get("sub")
    if not member_id:
        raise AuthError("Invalid token: missing member ID")

    stmt = select(Member).where(Member.id == member_id)
    result = await session.execute(stmt)
    member = result.scalar_one_or_none()

    if not member:
        raise AuthError("Member not found")

    return member
