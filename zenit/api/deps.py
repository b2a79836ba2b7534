from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from zenit.core.db import get_session
from zenit.core.security import decode_access_token
from zenit.models.profile import Profile, Role
from zenit.services.auth_service import get_profile_by_id

security = HTTPBearer(auto_error=False)


def refresh_header(x_refresh_token: str | None = Header(default=None, alias="X-Refresh-Token")) -> str | None:
    """Extract X-Refresh-Token header for logout/refresh endpoints."""
    return x_refresh_token


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_profile(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Profile:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing or invalid authorization header")
    profile_id = decode_access_token(credentials.credentials)
    if not profile_id:
        raise _unauthorized("Invalid or expired token")
    try:
        pid = int(profile_id)
    except ValueError:
        raise _unauthorized("Invalid token")
    profile = await get_profile_by_id(session, pid)
    if not profile:
        raise _unauthorized("Profile not found")
    return profile


async def get_current_therapist(profile: Profile = Depends(get_current_profile)) -> Profile:
    if profile.role != Role.THERAPIST.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only therapists can access this resource",
        )
    return profile
