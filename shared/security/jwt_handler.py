"""
Bearer tokens issued by the storefront's identity provider.

Only the `sub` claim (the user id) is consumed here; the order services take
that id as an explicit parameter instead of reading per-request globals.
"""
import os
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt

from shared.config import settings  # noqa: F401 (loads .env)

SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("FATAL ERROR: JWT_SECRET_KEY is not set in the environment!")

ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Creates a JWT access token with a UTC expiration."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_access_token(token: str) -> dict | None:
    """Decodes and verifies the JWT. Returns payload if valid, None if invalid/expired."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def user_id_from_token(token: str | None) -> str | None:
    if not token:
        return None
    payload = verify_access_token(token)
    if not payload or not payload.get("sub"):
        return None
    return str(payload["sub"])
