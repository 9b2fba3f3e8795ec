from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from .jwt_handler import user_id_from_token

def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Buyers are limited per user id from the bearer token; anonymous callers per client IP.
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        user_id = user_id_from_token(auth_header.split(" ", 1)[1].strip())
        if user_id:
            return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"

# Applied per-route (order creation); see ORDER_RATE_LIMIT
limiter = Limiter(key_func=user_id_or_ip)
