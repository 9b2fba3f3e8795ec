from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from shared.errors import AuthError
from .jwt_handler import user_id_from_token

# Identity comes from the external auth provider as a bearer JWT
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

async def get_optional_user(request: Request, token: str | None = Depends(oauth2_scheme)) -> str | None:
    """Dependency returning the user ID (sub) of a valid JWT, or None."""
    user_id = user_id_from_token(token)
    if user_id is not None:
        request.state.user_id = user_id
    return user_id

async def get_current_user(user_id: str | None = Depends(get_optional_user)) -> str:
    """Dependency to validate the JWT and return the user ID (sub)."""
    if user_id is None:
        raise AuthError(detail="Could not validate credentials")
    return user_id
