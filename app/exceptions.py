# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every failure the core can produce is one of the classes below; handlers
# match on type and render {detail, code, suggestion?, details?}.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class PortfolioException(Exception):
    """
    Base exception for the Portfolio API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PORTFOLIO_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Auth Exceptions
# =============================================================================

class UnauthorizedError(PortfolioException):
    """Raised when a mutating request lacks an authenticated session."""

    def __init__(self, message: str = "Unauthorized - Please login first"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Log in via POST /api/admin/login with the admin key",
        )


class AdminNotConfiguredError(PortfolioException):
    """Raised on login when no admin key is configured."""

    def __init__(self):
        super().__init__(
            message="Admin access is not configured",
            code="ADMIN_NOT_CONFIGURED",
            status_code=403,
            suggestion="Set the ADMIN_KEY environment variable and restart the server",
        )


class CsrfRejectedError(PortfolioException):
    """Raised when the CSRF token is missing or does not match."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"CSRF token rejected: {reason}",
            code="CSRF_REJECTED",
            status_code=403,
            suggestion="Fetch GET /api/csrf-token and echo it in the X-CSRF-Token header",
            details={"reason": reason},
        )


# =============================================================================
# Validation Exceptions
# =============================================================================

class InvalidArgumentError(PortfolioException):
    """Raised when a request value fails validation."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            code="INVALID_ARGUMENT",
            status_code=400,
            details={"field": field} if field else None,
        )


class PayloadRejectedError(PortfolioException):
    """Raised when an uploaded image violates the size or type constraint."""

    def __init__(self, constraint: str, message: str, allowed: list[str] | None = None):
        details: dict[str, Any] = {"constraint": constraint}
        if allowed:
            details["allowed"] = allowed
        super().__init__(
            message=message,
            code="PAYLOAD_REJECTED",
            status_code=413 if constraint == "size" else 415,
            suggestion=(
                "Upload a smaller image" if constraint == "size"
                else "Only JPG, PNG, GIF and WebP images are supported"
            ),
            details=details,
        )
        self.constraint = constraint


# =============================================================================
# Not Found Exceptions
# =============================================================================

class NotFoundError(PortfolioException):
    """Base class for missing entities."""


class ProjectNotFoundError(NotFoundError):
    """Raised when a project ID doesn't exist."""

    def __init__(self, project_id: str):
        super().__init__(
            message=f"Project not found: {project_id}",
            code="PROJECT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the project id is correct",
            details={"project_id": project_id},
        )


class ProfileNotFoundError(NotFoundError):
    """Raised when the profile has never been created."""

    def __init__(self):
        super().__init__(
            message="Profile not found",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion="Create the profile with POST /api/profile",
        )


# =============================================================================
# Storage Exceptions
# =============================================================================

class ConfigInvalidError(PortfolioException):
    """Raised when a document fails shape validation before save."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Invalid configuration data: {reason}",
            code="CONFIG_INVALID",
            status_code=500,
            details={"reason": reason},
        )


class StorageUnavailableError(PortfolioException):
    """Raised when the underlying storage cannot be read or written in time."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Storage unavailable during {operation}",
            code="STORAGE_UNAVAILABLE",
            status_code=503,
            suggestion="Try again later; the previous data is unchanged",
            details={"operation": operation, "error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def portfolio_exception_handler(
    request: Request,
    exc: PortfolioException
) -> JSONResponse:
    """
    Convert PortfolioException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    body = exc.to_dict()
    # Raw OS errors can carry filesystem paths
    if isinstance(exc, StorageUnavailableError):
        body["details"] = {"operation": exc.details.get("operation")}
    return JSONResponse(
        status_code=exc.status_code,
        content=body
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Missing or malformed fields are reported as INVALID_ARGUMENT with the
    offending locations only.
    """
    fields = [
        ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Invalid request data",
            "code": "INVALID_ARGUMENT",
            "details": {"fields": fields},
        }
    )
