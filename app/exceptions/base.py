# ruff: noqa: D107
"""Base exception classes.

``message`` is a translation key; the global exception handler renders it in
the language requested by the client.
"""

from typing import Any

from fastapi import HTTPException


class BaseAppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={"message": message, "error_code": error_code, "details": details},
        )


class BadRequestError(BaseAppException):
    """Exception raised when the request payload is rejected.

    ``details`` maps a field name to the translation key of its error.
    """

    def __init__(
        self,
        message: str = "data_validation_failure",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message, status_code=400, error_code="BAD_REQUEST", details=details
        )


class UnauthorizedError(BaseAppException):
    """Exception raised when the caller is not authenticated."""

    def __init__(self, message: str = "authentication_failure"):
        super().__init__(message=message, status_code=401, error_code="UNAUTHORIZED")


class AppPermissionError(BaseAppException):
    """Exception raised when user doesn't have permission to access a resource."""

    def __init__(self, message: str = "forbidden"):
        super().__init__(message=message, status_code=403, error_code="PERMISSION_DENIED")


class NotFoundError(BaseAppException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        message: str = "resource_not_found",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=404, error_code="NOT_FOUND", details=details)


class InternalServerError(BaseAppException):
    """Exception raised when the server fails to complete the operation."""

    def __init__(self, message: str = "internal_server_error"):
        super().__init__(message=message, status_code=500, error_code="INTERNAL_ERROR")


class BadGatewayError(BaseAppException):
    """Exception raised when an upstream service (mail) fails."""

    def __init__(self, message: str = "bad_gateway_error"):
        super().__init__(message=message, status_code=502, error_code="BAD_GATEWAY")
