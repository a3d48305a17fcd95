"""Domain error codes for the scheduling module."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_REFERENCE = "INVALID_REFERENCE"
    BLOCKED_TIME_CONFLICT = "BLOCKED_TIME_CONFLICT"
    SCHEDULE_CONFLICT = "SCHEDULE_CONFLICT"
    NO_VALID_OCCURRENCES = "NO_VALID_OCCURRENCES"
    SESSIONS_HAVE_BOOKINGS = "SESSIONS_HAVE_BOOKINGS"
    SESSIONS_NOT_FOUND = "SESSIONS_NOT_FOUND"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code, user-safe message and structured detail."""

    code: ErrorCode
    message: str
    details: tuple[Any, ...] = ()

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidRequestError(DomainError):
    """Raised when a request is well-formed JSON but semantically invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class InvalidReferenceError(DomainError):
    """Raised when a referenced teacher, location or class type is not owned by the studio."""

    def __init__(self, fields: tuple[str, ...]) -> None:
        super().__init__(
            code=ErrorCode.INVALID_REFERENCE,
            message="Invalid class type, teacher, or location",
            details=fields,
        )


class BlockedTimeConflictError(DomainError):
    """Raised when a session would fall inside a teacher's blocked time."""

    def __init__(self, conflicts: tuple) -> None:
        super().__init__(
            code=ErrorCode.BLOCKED_TIME_CONFLICT,
            message="Teacher is unavailable during this time",
            details=conflicts,
        )


class ScheduleConflictError(DomainError):
    """Raised when a session would double-book a teacher or location."""

    def __init__(self, conflicts: tuple) -> None:
        super().__init__(
            code=ErrorCode.SCHEDULE_CONFLICT,
            message="Teacher or location is already booked during this time",
            details=conflicts,
        )


class NoValidOccurrencesError(DomainError):
    """Raised when every occurrence of a recurring request was skipped."""

    def __init__(self, skipped: tuple) -> None:
        super().__init__(
            code=ErrorCode.NO_VALID_OCCURRENCES,
            message="No sessions could be created for this recurring schedule",
            details=skipped,
        )


class SessionsHaveBookingsError(DomainError):
    """Raised when a bulk delete targets sessions that still carry bookings."""

    def __init__(self, count: int) -> None:
        super().__init__(
            code=ErrorCode.SESSIONS_HAVE_BOOKINGS,
            message=f"{count} session(s) have active bookings and cannot be deleted",
            details=(count,),
        )


class SessionsNotFoundError(DomainError):
    """Raised when a bulk target matches no sessions in the studio."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.SESSIONS_NOT_FOUND,
            message="No matching sessions found",
        )
