"""Domain models representing persisted scheduling state.

These are pure domain objects with no API input rules.
Django ORM models are in scheduling/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from scheduling.domain.value_objects import (
    Capacity,
    ClassTypeId,
    LocationId,
    RecurringGroupId,
    SessionId,
    StudioId,
    TeacherId,
    TimeRange,
)


class BookingStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class ClassSession:
    """Domain representation of a scheduled class."""

    id: SessionId
    studio_id: StudioId
    class_type_id: ClassTypeId
    teacher_id: TeacherId
    location_id: LocationId
    start_time: datetime
    end_time: datetime
    capacity: Capacity
    recurring_group_id: RecurringGroupId | None = None
    active_bookings: int = 0

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)


@dataclass(frozen=True)
class BlockedTime:
    """Domain representation of a teacher's declared unavailability."""

    id: str
    teacher_id: TeacherId
    start_time: datetime
    end_time: datetime
    reason: str

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)


@dataclass(frozen=True)
class SessionSpec:
    """Validated request to place one class on the calendar."""

    class_type_id: ClassTypeId
    teacher_id: TeacherId
    location_id: LocationId
    start_time: datetime
    end_time: datetime
    capacity: Capacity


@dataclass(frozen=True)
class NewSession:
    """A session that passed conflict checks and is ready to persist."""

    studio_id: StudioId
    class_type_id: ClassTypeId
    teacher_id: TeacherId
    location_id: LocationId
    time_range: TimeRange
    capacity: Capacity
    recurring_group_id: RecurringGroupId | None = None


class ConflictKind(Enum):
    TEACHER = "teacher"
    LOCATION = "location"
    BLOCKED_TIME = "blocked_time"
    SERIES_OVERLAP = "series_overlap"


@dataclass(frozen=True)
class Conflict:
    """One reason a proposed interval cannot be scheduled."""

    kind: ConflictKind
    start_time: datetime
    end_time: datetime
    session_id: SessionId | None = None
    blocked_time_id: str | None = None
    reason: str = ""
    # Set when the conflict belongs to an existing session being moved.
    target_session_id: SessionId | None = None


@dataclass(frozen=True)
class SkippedOccurrence:
    """A recurring occurrence that was not created, with its conflicts."""

    date: date
    start_time: datetime
    end_time: datetime
    conflicts: tuple[Conflict, ...]


@dataclass(frozen=True)
class RecurringSeriesResult:
    recurring_group_id: RecurringGroupId
    created: tuple[ClassSession, ...]
    skipped_blocked: tuple[SkippedOccurrence, ...] = ()
    skipped_conflict: tuple[SkippedOccurrence, ...] = ()


@dataclass(frozen=True)
class BulkTarget:
    """Selects sessions for a bulk mutation: explicit ids or a recurring group."""

    session_ids: tuple[SessionId, ...] = ()
    recurring_group_id: RecurringGroupId | None = None
    future_only: bool = False

    def __post_init__(self) -> None:
        if bool(self.session_ids) == (self.recurring_group_id is not None):
            raise ValueError("Provide either session ids or a recurring group id")


@dataclass(frozen=True)
class BulkReassignResult:
    updated: int
    sessions_with_bookings: int = 0
    session_ids: tuple[SessionId, ...] = field(default=())
