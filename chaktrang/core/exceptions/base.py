"""
Domain error taxonomy.

Every failure the core can report is a ServiceError carrying a stable code and
the HTTP status the API layer answers with. None of them are fatal to the
process; the global handler turns them into a JSON error body.
"""

from typing import Any, Dict, Optional
from fastapi import status


class ServiceErrorCode:
    """Standard error codes for services"""

    # Validation
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_OUTCOME = "INVALID_OUTCOME"

    # Accounts
    DUPLICATE_USERNAME = "DUPLICATE_USERNAME"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    NOT_FOUND = "NOT_FOUND"
    CONCURRENT_UPDATE = "CONCURRENT_UPDATE"

    # Authentication
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    FORBIDDEN = "FORBIDDEN"

    # System
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


class ServiceError(Exception):
    """
    Standardized service error for internal use.
    Gets converted to proper HTTP response by error handler.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.context = context or {}
        super().__init__(message)


class DuplicateUsernameError(ServiceError):
    def __init__(self, username: str):
        super().__init__(
            code=ServiceErrorCode.DUPLICATE_USERNAME,
            message="Username already taken",
            status_code=status.HTTP_409_CONFLICT,
            context={"username": username},
        )


class DuplicateEmailError(ServiceError):
    def __init__(self, email: str):
        super().__init__(
            code=ServiceErrorCode.DUPLICATE_EMAIL,
            message="Email already registered",
            status_code=status.HTTP_409_CONFLICT,
            context={"email": email},
        )


class NotFoundError(ServiceError):
    def __init__(self, message: str = "User not found", context: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ServiceErrorCode.NOT_FOUND,
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            context=context,
        )


class InvalidCredentialsError(ServiceError):
    """Wrong password and unknown identity are deliberately indistinguishable."""

    def __init__(self):
        super().__init__(
            code=ServiceErrorCode.INVALID_CREDENTIALS,
            message="Invalid credentials",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class InvalidTokenError(ServiceError):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(
            code=ServiceErrorCode.INVALID_TOKEN,
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class TokenExpiredError(ServiceError):
    def __init__(self):
        super().__init__(
            code=ServiceErrorCode.TOKEN_EXPIRED,
            message="Token has expired",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class ForbiddenError(ServiceError):
    def __init__(self, message: str = "Not allowed to modify this account"):
        super().__init__(
            code=ServiceErrorCode.FORBIDDEN,
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
        )


class InvalidOutcomeError(ServiceError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ServiceErrorCode.INVALID_OUTCOME,
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class ConcurrentUpdateError(ServiceError):
    def __init__(self, account_id: str, attempts: int):
        super().__init__(
            code=ServiceErrorCode.CONCURRENT_UPDATE,
            message="Account was modified concurrently, please retry",
            status_code=status.HTTP_409_CONFLICT,
            context={"account_id": account_id, "attempts": attempts},
        )


class StorageUnavailableError(ServiceError):
    """The store could not be reached; distinct from NotFound."""

    def __init__(self, backend: str, reason: Optional[str] = None):
        super().__init__(
            code=ServiceErrorCode.STORAGE_UNAVAILABLE,
            message="Storage is temporarily unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            context={"backend": backend, "reason": reason},
        )
