"""
Error taxonomy shared by every service.

Services raise these instead of HTTPException so the same failure reads the
same way whether it comes from order creation, the webhook or the verify
endpoint. `register_exception_handlers` turns them into
{"error": <code>, "detail": <message>} responses. Store errors that escape
a service unwrapped are reported as `persistence_failure`.
"""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


class StorefrontError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_server_error"

    def __init__(self, code: str | None = None, detail: str | None = None):
        if code:
            self.code = code
        self.detail = detail or self.code
        super().__init__(self.detail)


class ValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class AuthError(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ConflictError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class PersistenceError(StorefrontError):
    code = "persistence_failure"


class UpstreamUnavailable(StorefrontError):
    code = "upstream_unavailable"


async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.code, detail=exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.detail},
        headers=headers,
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("database_error", path=request.url.path, error=str(exc))
    return await storefront_error_handler(request, PersistenceError(detail="The order store is unavailable"))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    missing = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "validation_error", "detail": f"Invalid or missing fields: {', '.join(missing)}"},
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
