import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from todo_api.config import get_settings
from todo_api.errors import UnauthenticatedError

settings = get_settings()


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> str:
    """Create a signed JWT binding the user id to an expiry."""
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(hours=settings.access_token_expire_hours))
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Verify signature, algorithm and expiry, returning the claims."""
    try:
        # Only the configured HMAC algorithm is accepted; "none" and others fail here
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise UnauthenticatedError("invalid token") from e


def subject_from_claims(claims: dict) -> uuid.UUID:
    sub = claims.get("sub")
    if not isinstance(sub, str):
        raise UnauthenticatedError("invalid subject in token")
    try:
        return uuid.UUID(sub)
    except ValueError as e:
        raise UnauthenticatedError("invalid subject in token") from e
