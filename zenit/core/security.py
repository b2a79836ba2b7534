from datetime import UTC, datetime, timedelta
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from zenit.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(claims: dict) -> str:
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def _decode(token: str, token_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def create_access_token(profile_id: int, role: str) -> str:
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    return _encode({"sub": str(profile_id), "role": role, "exp": expire, "type": ACCESS_TOKEN_TYPE})


def create_refresh_token(profile_id: int) -> str:
    expire = datetime.now(UTC) + timedelta(days=settings.refresh_token_expire_days)
    return _encode(
        {
            "sub": str(profile_id),
            "exp": expire,
            "type": REFRESH_TOKEN_TYPE,
            "jti": str(uuid4()),
        }
    )


def decode_access_token(token: str) -> str | None:
    payload = _decode(token, ACCESS_TOKEN_TYPE)
    if not payload:
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None


def decode_refresh_token(token: str) -> tuple[str | None, str | None]:
    """Returns (profile_id_str, jti) or (None, None)."""
    payload = _decode(token, REFRESH_TOKEN_TYPE)
    if not payload:
        return None, None
    return payload.get("sub"), payload.get("jti")
