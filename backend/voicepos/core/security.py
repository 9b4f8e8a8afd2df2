"""Password hashing and signed access tokens."""

from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from voicepos.core.config import settings
from voicepos.models.role import Feature
from voicepos.schemas.auth import User

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def granted_features(permissions: dict[Feature, bool]) -> list[str]:
    return [feature.value for feature, allowed in permissions.items() if allowed]


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Sign a token for ``user``; lifetime defaults to one shift."""
    issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": user.id,
        "username": user.username,
        "role": user.role.value,
        "permissions": granted_features(user.permissions),
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry; raises ``JWTError`` when either fails."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
