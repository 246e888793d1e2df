"""
API exception hierarchy and global exception handlers.
"""
import traceback
from typing import Optional

from fastapi import Request, status
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
import structlog

logger = structlog.get_logger("exceptions")


class APIException(Exception):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "Internal server error",
        headers: Optional[dict] = None
    ):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.headers = headers or {}


class AuthenticationException(APIException):
    """Missing, malformed or expired credentials."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )


class AuthorizationException(APIException):
    """Authenticated, but not allowed to touch this entity."""

    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ResourceNotFoundException(APIException):
    """Resource not found exception."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictException(APIException):
    """The operation would duplicate an existing record."""

    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidOperationException(APIException):
    """A business rule forbids the operation."""

    def __init__(self, detail: str = "Invalid operation"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class CapacityExceededException(APIException):
    """A capped collection is already full."""

    def __init__(self, detail: str = "Capacity exceeded"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class RateLimitException(APIException):
    """Rate limit exceeded exception."""

    def __init__(self, detail: str = "Rate limit exceeded", retry_after: int = 60):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            headers={"Retry-After": str(retry_after)}
        )


class AIServiceException(APIException):
    """AI provider is unconfigured or failing."""

    def __init__(self, detail: str = "AI service error", provider: Optional[str] = None):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
        self.provider = provider


def _error_body(error_type: str, message, status_code: int, **extra) -> dict:
    body = {"type": error_type, "message": message, "status_code": status_code}
    body.update(extra)
    return {"error": body}


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Handle custom API exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "API exception occurred",
        exception_type=type(exc).__name__,
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(type(exc).__name__, exc.detail, exc.status_code),
        headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions."""
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTPException", jsonable_encoder(exc.detail), exc.status_code),
        headers=exc.headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors."""
    errors = jsonable_encoder(exc.errors())
    logger.warning(
        "Validation error occurred",
        errors=errors,
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            "ValidationError",
            "Request validation failed",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=errors,
        )
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database errors without leaking statements or parameters."""
    logger.error(
        "Database error occurred",
        exception_type=type(exc).__name__,
        error_detail=str(exc),
        path=request.url.path,
        method=request.method,
    )

    if isinstance(exc, IntegrityError):
        detail = "Database constraint violation"
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        detail = "Database operation failed"
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    return JSONResponse(
        status_code=status_code,
        content=_error_body("DatabaseError", detail, status_code)
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other uncaught exceptions."""
    logger.error(
        "Unhandled exception occurred",
        exception_type=type(exc).__name__,
        error_detail=str(exc),
        traceback=traceback.format_exc(),
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            "InternalServerError",
            "An unexpected error occurred",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    )


def setup_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
