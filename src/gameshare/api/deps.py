"""FastAPI dependencies for dependency injection."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from gameshare.database import get_session
from gameshare.models import Member
from gameshare.schemas import PageCondition
from gameshare.services.auth import AuthError, verify_token

logger = logging.getLogger(__name__)

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_member_optional(
    session: SessionDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Member | None:
    """Get current member if authenticated, None otherwise."""
    if not credentials:
        return None

    try:
        return await verify_token(session, credentials.credentials)
    except AuthError:
        # Log at debug level since this is expected for invalid/expired tokens
        logger.debug("Token verification failed for optional auth")
        return None


async def get_current_member(
    session: SessionDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Member:
    """Get current authenticated member or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return await verify_token(session, credentials.credentials)
    except AuthError as e:
        logger.debug(f"Token verification failed: {e!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_admin_member(
    member: Annotated[Member, Depends(get_current_member)],
) -> Member:
    """Get current member and verify they are an admin."""
    if not member.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return member


# Type aliases for common dependencies
CurrentMember = Annotated[Member, Depends(get_current_member)]
CurrentMemberOptional = Annotated[Member | None, Depends(get_current_member_optional)]
AdminMember = Annotated[Member, Depends(get_admin_member)]
PageConditionDep = Annotated[PageCondition, Query()]
