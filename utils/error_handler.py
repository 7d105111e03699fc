"""
Global error handler middleware
"""

import traceback

import sentry_sdk
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from utils.error_codes import ErrorCode, ERROR_MESSAGES
from utils.exceptions import (
    ConfigurationError,
    PlatformError,
    AuthenticationError,
    ValidationError,
    NotFoundError,
    ExternalServiceError,
    StorageError,
    DatabaseError,
)
from utils.logging import get_logger
from utils.monitoring import track_request_metrics
from utils.response_envelope import ResponseFormatter

logger = get_logger(__name__)


def classify_exception(exc: Exception):
    """(status_code, error code, message) for an unhandled exception"""
    if isinstance(exc, ConfigurationError):
        return 500, ErrorCode.SYSTEM_CONFIGURATION_ERROR, exc.message
    if isinstance(exc, PlatformError):
        return 400, ErrorCode.PLATFORM_API_ERROR, f"Platform error: {exc.message}"
    if isinstance(exc, AuthenticationError):
        return 401, ErrorCode.AUTH_TOKEN_INVALID, ERROR_MESSAGES[ErrorCode.AUTH_TOKEN_INVALID]
    if isinstance(exc, ValidationError):
        return 422, ErrorCode.VALIDATION_INVALID_INPUT, exc.message
    if isinstance(exc, NotFoundError):
        return 404, ErrorCode.RESOURCE_NOT_FOUND, exc.message
    if isinstance(exc, StorageError):
        return 502, ErrorCode.STORAGE_UPLOAD_FAILED, exc.message
    if isinstance(exc, ExternalServiceError):
        return 502, ErrorCode.EXTERNAL_SERVICE_UNAVAILABLE, f"External service error: {exc.message}"
    if isinstance(exc, DatabaseError):
        return 500, ErrorCode.SYSTEM_DATABASE_ERROR, ERROR_MESSAGES[ErrorCode.SYSTEM_DATABASE_ERROR]
    return 500, ErrorCode.SYSTEM_INTERNAL_ERROR, "Internal server error"


class GlobalExceptionHandler(BaseHTTPMiddleware):
    """Global exception handling middleware with Sentry integration"""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException:
            # Re-raise HTTP exceptions as-is
            raise
        except Exception as e:
            return await self._handle_exception(request, e)

    async def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Handle and log exceptions with Sentry integration"""
        request_id = getattr(request.state, "request_id", "unknown")

        with sentry_sdk.new_scope() as scope:
            scope.set_tag("request_id", request_id)
            scope.set_context("request", {
                "method": request.method,
                "url": str(request.url),
            })
            sentry_sdk.capture_exception(exc)

        logger.error(
            f"Unhandled exception in {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
                "traceback": traceback.format_exc(),
            }
        )

        status_code, code, message = classify_exception(exc)

        track_request_metrics(
            method=request.method,
            endpoint=request.url.path,
            status_code=status_code,
            duration=0  # Duration not available in error case
        )

        return ResponseFormatter.error(
            message,
            code=code.value,
            details={"request_id": request_id},
            status_code=status_code
        )
