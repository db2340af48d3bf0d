"""
Swipematch — Password hashing and JWT access tokens.

Tokens are HS256-signed and carry the numeric ``user_id`` claim plus the
standard ``iss`` / ``iat`` / ``nbf`` / ``exp`` claims.  A token without a
positive ``user_id`` is rejected.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import jwt
import structlog
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from app import repo
from app.config import get_settings
from app.errors import AuthenticationError
from app.utils.dates import utc_now

logger = structlog.get_logger("swipematch.auth_service")

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")
ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def _secret() -> str:
    secret = get_settings().JWT_SECRET
    if not secret:
        raise RuntimeError("JWT_SECRET is not configured")
    return secret


def create_access_token(user_id: int, now: datetime | None = None) -> str:
    settings = get_settings()
    now = now or utc_now()
    payload = {
        "user_id": user_id,
        "iss": settings.JWT_ISSUER,
        "iat": int(now.timestamp()),
        "nbf": int(now.timestamp()),
        "exp": int((now + timedelta(hours=settings.JWT_TTL_HOURS)).timestamp()),
    }
    return jwt.encode(payload, _secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> int:
    """Validate ``token`` and return the user id it was issued for.

    Raises
    ------
    AuthenticationError
        If the token is empty, malformed, expired, signed with another key
        or carries no user id.
    """
    if not token:
        raise AuthenticationError("No token given")

    try:
        payload = jwt.decode(
            token,
            _secret(),
            algorithms=[ALGORITHM],
            issuer=get_settings().JWT_ISSUER,
        )
    except jwt.PyJWTError as exc:
        logger.warning("token_rejected", reason=type(exc).__name__)
        raise AuthenticationError("Invalid token") from exc

    user_id = payload.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        logger.warning("token_rejected", reason="missing_user_id")
        raise AuthenticationError("No user ID on token")
    return user_id


async def login(db: AsyncSession, email: str, password: str) -> str:
    """Check credentials and return a fresh access token."""
    user = await repo.get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("login_failed", email=email)
        raise AuthenticationError("Invalid email or password")

    logger.info("login_succeeded", user_id=user.id)
    return create_access_token(user.id)
