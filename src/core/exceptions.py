"""Custom exceptions and error codes."""

from collections.abc import Iterable
from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Not found errors (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UPLOAD_REJECTED = "UPLOAD_REJECTED"
    PASSWORD_MISMATCH = "PASSWORD_MISMATCH"

    # Conflict errors (reported as 400)
    USERNAME_TAKEN = "USERNAME_TAKEN"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    FILE_STORE_ERROR = "FILE_STORE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationFailedError(AppException):
    """One or more profile fields were rejected.

    ``violations`` is an iterable of objects exposing ``field`` and
    ``message``; they are rendered as the ``details`` list.
    """

    def __init__(
        self,
        violations: Iterable[Any],
        message: str = "Validation failed",
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ) -> None:
        self.violations = list(violations)
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=400,
            details=[{"field": v.field, "message": v.message} for v in self.violations],
        )


class UploadRejectedError(ValidationFailedError):
    """Uploaded profile photo has a disallowed type or is too large."""

    def __init__(self, violation: Any) -> None:
        super().__init__(
            [violation],
            message=violation.message,
            error_code=ErrorCode.UPLOAD_REJECTED,
        )


class UsernameTakenError(AppException):
    """Username is already registered."""

    def __init__(self, username: str) -> None:
        super().__init__(
            error_code=ErrorCode.USERNAME_TAKEN,
            message="Username already taken",
            status_code=400,
            details={"username": username},
        )


class ProfileNotFoundError(AppException):
    """No profile with the given username."""

    def __init__(self, username: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message="User not found",
            status_code=404,
            details={"username": username},
        )


class PasswordMismatchError(AppException):
    """Supplied current password does not match the stored credential."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.PASSWORD_MISMATCH,
            message="Current password is incorrect",
            status_code=400,
        )


class ServerFailureError(AppException):
    """Repository or file store fault. Carries no internal detail."""

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            error_code=ErrorCode.INTERNAL_ERROR,
            message=message,
            status_code=500,
        )


class FileStoreError(AppException):
    """A staged file could not be written or confirmed."""

    def __init__(self, message: str = "Profile photo could not be stored") -> None:
        super().__init__(
            error_code=ErrorCode.FILE_STORE_ERROR,
            message=message,
            status_code=500,
        )
