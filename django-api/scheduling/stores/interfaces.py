"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager
from datetime import datetime

from scheduling.domain import (
    BlockedTime,
    BulkTarget,
    ClassSession,
    ClassTypeId,
    LocationId,
    NewSession,
    SessionId,
    StudioId,
    TeacherId,
    TimeRange,
)


class ScheduleStore(ABC):
    """Interface for class session persistence operations."""

    @abstractmethod
    def studio_timezone(self, studio_id: StudioId) -> str:
        """Return the IANA timezone name the studio schedules in."""
        ...

    @abstractmethod
    def invalid_references(
        self,
        studio_id: StudioId,
        *,
        class_type_id: ClassTypeId | None = None,
        teacher_id: TeacherId | None = None,
        location_id: LocationId | None = None,
    ) -> tuple[str, ...]:
        """Return the names of the given references that the studio does not own."""
        ...

    @abstractmethod
    def scheduling_lock(
        self,
        *,
        teacher_ids: Iterable[TeacherId] = (),
        location_ids: Iterable[LocationId] = (),
        session_ids: Iterable[SessionId] = (),
    ) -> AbstractContextManager[None]:
        """Open a transaction holding row locks on the given teachers, locations and sessions.

        Conflict checks and the writes they guard must run inside this block.
        """
        ...

    @abstractmethod
    def list_sessions(
        self, studio_id: StudioId, start: datetime | None = None, end: datetime | None = None
    ) -> list[ClassSession]:
        """Return sessions starting within the range, ordered by start_time ascending."""
        ...

    @abstractmethod
    def sessions_overlapping(
        self,
        studio_id: StudioId,
        window: TimeRange,
        *,
        teacher_ids: Iterable[TeacherId],
        location_ids: Iterable[LocationId],
    ) -> list[ClassSession]:
        """Return sessions overlapping the window that use any of the teachers or locations."""
        ...

    @abstractmethod
    def blocked_times_overlapping(
        self,
        studio_id: StudioId,
        window: TimeRange | None = None,
        *,
        teacher_ids: Iterable[TeacherId] | None = None,
    ) -> list[BlockedTime]:
        """Return blocked times intersecting the window, ordered by start_time ascending."""
        ...

    @abstractmethod
    def create_sessions(self, sessions: list[NewSession]) -> list[ClassSession]:
        """Insert the sessions in one operation and return them."""
        ...

    @abstractmethod
    def sessions_for_target(
        self, studio_id: StudioId, target: BulkTarget, now: datetime
    ) -> list[ClassSession]:
        """Resolve a bulk target to the studio's matching sessions."""
        ...

    @abstractmethod
    def count_sessions_with_active_bookings(self, session_ids: Iterable[SessionId]) -> int:
        """Count sessions carrying at least one booking that is not cancelled."""
        ...

    @abstractmethod
    def delete_sessions(self, session_ids: Iterable[SessionId]) -> int:
        """Delete the sessions and return how many were removed."""
        ...

    @abstractmethod
    def reassign_sessions(
        self,
        session_ids: Iterable[SessionId],
        *,
        teacher_id: TeacherId | None = None,
        location_id: LocationId | None = None,
    ) -> int:
        """Point the sessions at a new teacher and/or location; return rows updated."""
        ...
