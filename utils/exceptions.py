"""
Centralized exception handling and custom exceptions
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class MultiMediaBlastException(Exception):
    """Base exception for the MultiMediaBlast application"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(MultiMediaBlastException):
    """Configuration or setup error"""
    pass


class PlatformError(MultiMediaBlastException):
    """Platform-specific error"""
    pass


class AuthenticationError(MultiMediaBlastException):
    """Authentication/authorization error"""
    pass


class ValidationError(MultiMediaBlastException):
    """Data validation error"""
    pass


class NotFoundError(MultiMediaBlastException):
    """Requested resource does not exist for this user"""
    pass


class ExternalServiceError(MultiMediaBlastException):
    """External service integration error"""
    pass


class StorageError(ExternalServiceError):
    """Object storage upload error"""
    pass


class DatabaseError(MultiMediaBlastException):
    """Database operation error"""
    pass


def create_http_exception(
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None
) -> HTTPException:
    """Create standardized HTTP exception"""
    return HTTPException(
        status_code=status_code,
        detail={
            "error": message,
            "details": details or {},
            "status_code": status_code
        }
    )


def handle_platform_error(e: Exception, platform: str) -> HTTPException:
    """Handle platform-specific errors"""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, ValidationError):
        return create_http_exception(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            e.message,
            {"platform": platform, **e.details}
        )
    elif isinstance(e, ConfigurationError):
        return create_http_exception(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            e.message,
            {"platform": platform, **e.details}
        )
    elif isinstance(e, PlatformError):
        return create_http_exception(
            status.HTTP_400_BAD_REQUEST,
            f"Platform error: {e.message}",
            {"platform": platform, **e.details}
        )
    elif isinstance(e, NotFoundError):
        return create_http_exception(
            status.HTTP_404_NOT_FOUND,
            e.message,
            {"platform": platform}
        )
    elif isinstance(e, DatabaseError):
        return handle_database_error(e)
    elif isinstance(e, ValueError):
        return create_http_exception(
            status.HTTP_400_BAD_REQUEST,
            f"Invalid {platform} configuration: {str(e)}",
            {"platform": platform}
        )
    else:
        return create_http_exception(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Unexpected error with {platform} integration",
            {"platform": platform}
        )


def handle_post_error(e: Exception) -> HTTPException:
    """Handle errors raised while submitting or editing a post"""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, ValidationError):
        return create_http_exception(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            e.message,
            e.details
        )
    elif isinstance(e, NotFoundError):
        return create_http_exception(status.HTTP_404_NOT_FOUND, e.message, e.details)
    elif isinstance(e, ExternalServiceError):
        return handle_external_service_error(e, e.details.get("service", "storage"))
    elif isinstance(e, DatabaseError):
        return handle_database_error(e)
    else:
        return create_http_exception(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "There was an error publishing your post. Please try again.",
            {}
        )


def handle_database_error(e: Exception) -> HTTPException:
    """Handle database errors"""
    if isinstance(e, DatabaseError):
        return create_http_exception(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Database operation failed: {e.message}",
            e.details
        )
    else:
        return create_http_exception(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Database error occurred",
            {}
        )


def handle_external_service_error(e: Exception, service: str) -> HTTPException:
    """Handle external service errors"""
    if isinstance(e, ExternalServiceError):
        return create_http_exception(
            status.HTTP_502_BAD_GATEWAY,
            f"External service error: {e.message}",
            {"service": service, **e.details}
        )
    else:
        return create_http_exception(
            status.HTTP_502_BAD_GATEWAY,
            f"Failed to communicate with {service}",
            {"service": service}
        )


def handle_billing_error(e: Exception) -> HTTPException:
    """Handle billing errors"""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, ConfigurationError):
        return create_http_exception(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message, e.details)
    elif isinstance(e, ValidationError):
        return create_http_exception(status.HTTP_422_UNPROCESSABLE_ENTITY, e.message, e.details)
    elif isinstance(e, NotFoundError):
        return create_http_exception(status.HTTP_404_NOT_FOUND, e.message, e.details)
    elif isinstance(e, ExternalServiceError):
        return handle_external_service_error(e, "stripe")
    elif isinstance(e, DatabaseError):
        return handle_database_error(e)
    else:
        return create_http_exception(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Billing request failed",
            {"service": "stripe"}
        )
