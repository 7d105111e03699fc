"""
Standard error code taxonomy
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes"""

    # Authentication & Authorization
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"

    # Platform Integration
    PLATFORM_AUTH_FAILED = "PLATFORM_AUTH_FAILED"
    PLATFORM_NOT_CONFIGURED = "PLATFORM_NOT_CONFIGURED"
    PLATFORM_API_ERROR = "PLATFORM_API_ERROR"
    PLATFORM_UNSUPPORTED = "PLATFORM_UNSUPPORTED"

    # Billing
    BILLING_NOT_CONFIGURED = "BILLING_NOT_CONFIGURED"
    BILLING_CUSTOMER_NOT_FOUND = "BILLING_CUSTOMER_NOT_FOUND"

    # Data Validation
    VALIDATION_INVALID_INPUT = "VALIDATION_INVALID_INPUT"
    VALIDATION_MISSING_FIELD = "VALIDATION_MISSING_FIELD"
    VALIDATION_FILE_TOO_LARGE = "VALIDATION_FILE_TOO_LARGE"

    # Resource Management
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # External Services
    EXTERNAL_SERVICE_UNAVAILABLE = "EXTERNAL_SERVICE_UNAVAILABLE"
    STORAGE_UPLOAD_FAILED = "STORAGE_UPLOAD_FAILED"

    # System Errors
    SYSTEM_DATABASE_ERROR = "SYSTEM_DATABASE_ERROR"
    SYSTEM_CONFIGURATION_ERROR = "SYSTEM_CONFIGURATION_ERROR"
    SYSTEM_INTERNAL_ERROR = "SYSTEM_INTERNAL_ERROR"


ERROR_MESSAGES = {
    ErrorCode.AUTH_TOKEN_INVALID: "Authentication token is invalid",
    ErrorCode.AUTH_TOKEN_EXPIRED: "Authentication token has expired",

    ErrorCode.PLATFORM_AUTH_FAILED: "Platform authorization failed",
    ErrorCode.PLATFORM_NOT_CONFIGURED: "Platform OAuth credentials are not configured",
    ErrorCode.PLATFORM_API_ERROR: "Platform API returned an error",
    ErrorCode.PLATFORM_UNSUPPORTED: "Platform is not supported",

    ErrorCode.BILLING_NOT_CONFIGURED: "Billing provider is not configured",
    ErrorCode.BILLING_CUSTOMER_NOT_FOUND: "No billing customer found for this user",

    ErrorCode.VALIDATION_INVALID_INPUT: "Input validation failed",
    ErrorCode.VALIDATION_MISSING_FIELD: "Required field is missing",
    ErrorCode.VALIDATION_FILE_TOO_LARGE: "Media file exceeds the size limit",

    ErrorCode.RESOURCE_NOT_FOUND: "Requested resource was not found",

    ErrorCode.EXTERNAL_SERVICE_UNAVAILABLE: "External service is unavailable",
    ErrorCode.STORAGE_UPLOAD_FAILED: "Failed to upload media file",

    ErrorCode.SYSTEM_DATABASE_ERROR: "Database operation failed",
    ErrorCode.SYSTEM_CONFIGURATION_ERROR: "System configuration error",
    ErrorCode.SYSTEM_INTERNAL_ERROR: "Internal system error"
}
