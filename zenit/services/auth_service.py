import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zenit.core.config import settings
from zenit.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from zenit.models.common import to_naive_utc, utc_naive_now
from zenit.models.profile import Profile, ProfileCreate, ProfilePublic
from zenit.models.refresh_token import RefreshToken

logger = logging.getLogger(__name__)

AuthResult = tuple[Profile, str, str, int]


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_profile_by_email(session: AsyncSession, email: str) -> Profile | None:
    result = await session.execute(select(Profile).where(Profile.email == _normalize_email(email)))
    return result.scalar_one_or_none()


async def get_profile_by_id(session: AsyncSession, profile_id: int) -> Profile | None:
    result = await session.execute(select(Profile).where(Profile.id == profile_id))
    return result.scalar_one_or_none()


async def create_profile(session: AsyncSession, data: ProfileCreate) -> Profile:
    profile = Profile(
        email=_normalize_email(data.email),
        full_name=data.full_name,
        phone=data.phone,
        hashed_password=hash_password(data.password),
    )
    session.add(profile)
    await session.flush()
    await session.refresh(profile)
    return profile


def profile_to_public(profile: Profile) -> ProfilePublic:
    return ProfilePublic(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        phone=profile.phone,
        role=profile.role,
    )


def make_token_pair(profile: Profile) -> tuple[str, str, int]:
    access = create_access_token(profile.id, profile.role)
    refresh = create_refresh_token(profile.id)
    expires_in = settings.access_token_expire_minutes * 60
    return access, refresh, expires_in


async def store_refresh_token(session: AsyncSession, profile_id: int, refresh_token: str) -> None:
    profile_id_str, jti = decode_refresh_token(refresh_token)
    if not profile_id_str or not jti:
        return
    expires_at = to_naive_utc(datetime.now(UTC) + timedelta(days=settings.refresh_token_expire_days))
    session.add(RefreshToken(profile_id=profile_id, jti=jti, expires_at=expires_at))
    await session.flush()


async def _issue_tokens(session: AsyncSession, profile: Profile) -> AuthResult:
    access, refresh, expires_in = make_token_pair(profile)
    await store_refresh_token(session, profile_id=profile.id, refresh_token=refresh)
    return profile, access, refresh, expires_in


async def login(session: AsyncSession, email: str, password: str) -> AuthResult | None:
    profile = await get_profile_by_email(session, email)
    if not profile or not verify_password(password, profile.hashed_password):
        return None
    return await _issue_tokens(session, profile)


async def signup(session: AsyncSession, data: ProfileCreate) -> AuthResult | None:
    if await get_profile_by_email(session, data.email):
        return None
    profile = await create_profile(session, data)
    logger.info("Profile %s created", profile.id)
    return await _issue_tokens(session, profile)


async def revoke_refresh_token(session: AsyncSession, jti: str) -> None:
    result = await session.execute(select(RefreshToken).where(RefreshToken.jti == jti))
    row = result.scalar_one_or_none()
    if row:
        row.revoked = True
        session.add(row)


async def refresh_tokens(session: AsyncSession, refresh_token: str) -> AuthResult | None:
    profile_id_str, jti = decode_refresh_token(refresh_token)
    if not profile_id_str or not jti:
        return None
    result = await session.execute(
        select(RefreshToken).where(
            RefreshToken.jti == jti,
            RefreshToken.revoked == False,  # noqa: E712
            RefreshToken.expires_at > utc_naive_now(),
        )
    )
    token_row = result.scalar_one_or_none()
    if not token_row:
        return None
    profile = await get_profile_by_id(session, int(profile_id_str))
    if not profile:
        return None
    token_row.revoked = True
    session.add(token_row)
    return await _issue_tokens(session, profile)
