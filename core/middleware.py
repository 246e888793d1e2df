"""
Security and observability middleware.
"""
import time
import uuid

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
import structlog

logger = structlog.get_logger("middleware")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log its outcome and latency."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        start_time = time.perf_counter()

        client_host = request.client.host if request.client else "unknown"
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            client_host = forwarded_for.split(",")[0].strip()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                exception=str(e),
                process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise

        process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            "Request completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            client_host=client_host,
            process_time_ms=process_time_ms,
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time_ms)
        return response


class RequestSizeMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared Content-Length exceeds `max_size`."""

    def __init__(self, app, max_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        content_length = request.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            logger.warning(
                "Request body too large",
                content_length=int(content_length),
                max_size=self.max_size,
                path=request.url.path,
            )
            # Raising here would bypass the exception handlers
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={
                    "error": {
                        "type": "RequestTooLarge",
                        "message": f"Request body too large. Maximum size: {self.max_size} bytes",
                        "status_code": status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    }
                },
            )

        return await call_next(request)


def setup_middleware(app, config: dict = None):
    """Register middleware; the last one added runs first."""
    config = config or {}

    if config.get("enable_size_limit", True):
        app.add_middleware(RequestSizeMiddleware, max_size=config.get("max_request_size", 1024 * 1024))

    if config.get("enable_request_logging", True):
        app.add_middleware(RequestLoggingMiddleware)

    if config.get("enable_security_headers", True):
        app.add_middleware(SecurityHeadersMiddleware)
