import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from zenit.api.deps import get_current_profile, refresh_header
from zenit.api.schemas.auth import LoginRequest, RefreshRequest, SignupRequest, TokenPair
from zenit.core.db import get_session
from zenit.core.security import decode_refresh_token
from zenit.models.profile import Profile, ProfileCreate, ProfilePublic
from zenit.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_pair(result: auth_service.AuthResult) -> TokenPair:
    _, access, refresh, expires_in = result
    return TokenPair(access_token=access, refresh_token=refresh, expires_in=expires_in)


@router.post("/login", response_model=TokenPair)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenPair:
    result = await auth_service.login(session, body.email, body.password)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return _token_pair(result)


@router.post("/signup", response_model=TokenPair, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    session: AsyncSession = Depends(get_session),
) -> TokenPair:
    data = ProfileCreate(
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        phone=body.phone,
    )
    result = await auth_service.signup(session, data)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists",
        )
    return _token_pair(result)


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    session: AsyncSession = Depends(get_session),
    x_refresh_token: str | None = Depends(refresh_header),
    body: RefreshRequest | None = None,
) -> TokenPair:
    token = x_refresh_token or (body.refresh_token if body else None)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token required (header X-Refresh-Token or body refresh_token)",
        )
    result = await auth_service.refresh_tokens(session, token)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )
    return _token_pair(result)


@router.post("/logout")
async def logout(
    session: AsyncSession = Depends(get_session),
    x_refresh_token: str | None = Depends(refresh_header),
    body: RefreshRequest | None = None,
) -> dict:
    token = x_refresh_token or (body.refresh_token if body else None)
    if token:
        _, jti = decode_refresh_token(token)
        if jti:
            await auth_service.revoke_refresh_token(session, jti)
    return {"message": "Logged out"}


@router.get("/me", response_model=ProfilePublic)
async def me(current_profile: Profile = Depends(get_current_profile)) -> ProfilePublic:
    return auth_service.profile_to_public(current_profile)
