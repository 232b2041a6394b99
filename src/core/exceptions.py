"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    SERVICE_NOT_FOUND = "SERVICE_NOT_FOUND"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Conflict errors (409)
    USERNAME_TAKEN = "USERNAME_TAKEN"
    ROOM_ALREADY_EXISTS = "ROOM_ALREADY_EXISTS"

    # Write failures surfaced to the user
    MESSAGE_SEND_FAILED = "MESSAGE_SEND_FAILED"
    REVIEW_SUBMIT_FAILED = "REVIEW_SUBMIT_FAILED"
    PROFILE_UNAVAILABLE = "PROFILE_UNAVAILABLE"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"


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


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class ValidationError(AppException):
    """Input rejected by a service before reaching the store."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            details={"field": field} if field else None,
        )


class ServiceNotFoundError(AppException):
    """AI service listing not found."""

    def __init__(self, service_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.SERVICE_NOT_FOUND,
            message=f"Service not found: {service_id}",
            status_code=404,
            details={"service_id": service_id},
        )


class RoomNotFoundError(AppException):
    """Chat room not found."""

    def __init__(self, room_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ROOM_NOT_FOUND,
            message=f"Room not found: {room_id}",
            status_code=404,
            details={"room_id": room_id},
        )


class RoomAlreadyExistsError(AppException):
    """Chat room slug is already taken."""

    def __init__(self, room_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ROOM_ALREADY_EXISTS,
            message=f"Room already exists: {room_id}",
            status_code=409,
            details={"room_id": room_id},
        )


class UsernameTakenError(AppException):
    """Username is already used by another profile."""

    def __init__(self, username: str) -> None:
        super().__init__(
            error_code=ErrorCode.USERNAME_TAKEN,
            message=f"Username already taken: {username}",
            status_code=409,
            details={"username": username},
        )


class ProfileUnavailableError(AppException):
    """No profile row exists and one could not be provisioned."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_UNAVAILABLE,
            message="Your profile could not be loaded, please try again",
            status_code=503,
            details={"user_id": user_id},
        )


class MessageSendError(AppException):
    """Message insert failed; the draft is returned so the client can restore it."""

    def __init__(self, room_id: str, draft: str, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.MESSAGE_SEND_FAILED,
            message=f"Failed to send message: {reason}",
            status_code=502,
            details={"room_id": room_id, "draft": draft},
        )


class ReviewSubmitError(AppException):
    """Review upsert failed; the submitted rating and comment are returned."""

    def __init__(self, service_id: str, rating: int, comment: str, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.REVIEW_SUBMIT_FAILED,
            message=f"Failed to submit review: {reason}",
            status_code=502,
            details={"service_id": service_id, "rating": rating, "comment": comment},
        )
