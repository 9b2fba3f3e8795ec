from .jwt_handler import create_access_token, verify_access_token, user_id_from_token
from .webhook_secret import verify_webhook_secret, WEBHOOK_SECRET_HEADER
from .dependencies import get_current_user, get_optional_user
from .rate_limiter import limiter, user_id_or_ip

__all__ = [
    "create_access_token",
    "verify_access_token",
    "user_id_from_token",
    "verify_webhook_secret",
    "WEBHOOK_SECRET_HEADER",
    "get_current_user",
    "get_optional_user",
    "limiter",
    "user_id_or_ip"
]
