from scheduling.domain.models import (
    BlockedTime,
    BookingStatus,
    BulkReassignResult,
    BulkTarget,
    ClassSession,
    Conflict,
    ConflictKind,
    NewSession,
    RecurringSeriesResult,
    SessionSpec,
    SkippedOccurrence,
)
from scheduling.domain.recurrence import RecurrenceRule
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

__all__ = [
    "BlockedTime",
    "BookingStatus",
    "BulkReassignResult",
    "BulkTarget",
    "ClassSession",
    "Conflict",
    "ConflictKind",
    "NewSession",
    "RecurringSeriesResult",
    "SessionSpec",
    "SkippedOccurrence",
    "RecurrenceRule",
    "Capacity",
    "ClassTypeId",
    "LocationId",
    "RecurringGroupId",
    "SessionId",
    "StudioId",
    "TeacherId",
    "TimeRange",
]
