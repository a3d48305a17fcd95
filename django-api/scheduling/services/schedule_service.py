"""Schedule service - all scheduling business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

The invariant guarded here: within a studio no two sessions sharing a teacher
or a location overlap, and no session overlaps its teacher's blocked time.
Every check and the write it guards run inside ``store.scheduling_lock`` so
concurrent requests for the same teacher or location are serialised.
"""

import logging
from dataclasses import replace
from datetime import UTC, datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

from scheduling.domain import (
    BlockedTime,
    BulkReassignResult,
    BulkTarget,
    ClassSession,
    Conflict,
    LocationId,
    NewSession,
    RecurrenceRule,
    RecurringGroupId,
    RecurringSeriesResult,
    SessionSpec,
    SkippedOccurrence,
    StudioId,
    TeacherId,
    TimeRange,
)
from scheduling.domain.conflicts import blocked_time_conflicts, series_overlap_conflicts, session_conflicts
from scheduling.domain.errors import (
    BlockedTimeConflictError,
    InvalidReferenceError,
    InvalidRequestError,
    NoValidOccurrencesError,
    ScheduleConflictError,
    SessionsHaveBookingsError,
    SessionsNotFoundError,
)
from scheduling.stores.interfaces import ScheduleStore

logger = logging.getLogger(__name__)


def _span(ranges: list[TimeRange]) -> TimeRange:
    return TimeRange(start=min(r.start for r in ranges), end=max(r.end for r in ranges))


class ScheduleService:
    """Service for class session scheduling operations."""

    def __init__(self, store: ScheduleStore) -> None:
        self._store = store

    def list_sessions(
        self, studio_id: StudioId, start: datetime | None = None, end: datetime | None = None
    ) -> list[ClassSession]:
        """Return the studio's sessions starting within the optional range."""
        return self._store.list_sessions(studio_id, start, end)

    def list_blocked_times(
        self,
        studio_id: StudioId,
        start: datetime | None = None,
        end: datetime | None = None,
        teacher_id: TeacherId | None = None,
    ) -> list[BlockedTime]:
        """Return blocked times for the studio's teachers, optionally limited to a range.

        Raises:
            InvalidRequestError: If the range ends before it starts.
        """
        window = None
        if start is not None and end is not None:
            try:
                window = TimeRange(start=start, end=end)
            except ValueError as exc:
                raise InvalidRequestError(str(exc)) from exc
        teacher_ids = [teacher_id] if teacher_id is not None else None
        return self._store.blocked_times_overlapping(studio_id, window, teacher_ids=teacher_ids)

    def create_session(self, studio_id: StudioId, spec: SessionSpec) -> ClassSession:
        """Create one session after tenant and conflict checks.

        Raises:
            InvalidReferenceError: If a referenced entity belongs to another studio.
            InvalidRequestError: If the session does not end after it starts.
            BlockedTimeConflictError: If the teacher has blocked the interval.
            ScheduleConflictError: If the teacher or location is already booked.
        """
        self._check_references(studio_id, spec)
        try:
            proposed = TimeRange(start=spec.start_time, end=spec.end_time)
        except ValueError as exc:
            raise InvalidRequestError(str(exc)) from exc

        with self._store.scheduling_lock(
            teacher_ids=[spec.teacher_id], location_ids=[spec.location_id]
        ):
            blocks = self._store.blocked_times_overlapping(
                studio_id, proposed, teacher_ids=[spec.teacher_id]
            )
            blocked = blocked_time_conflicts(proposed, spec.teacher_id, blocks)
            if blocked:
                logger.warning(
                    "Rejected session for teacher %s: %d blocked time conflict(s)",
                    spec.teacher_id,
                    len(blocked),
                )
                raise BlockedTimeConflictError(tuple(blocked))

            existing = self._store.sessions_overlapping(
                studio_id,
                proposed,
                teacher_ids=[spec.teacher_id],
                location_ids=[spec.location_id],
            )
            conflicts = session_conflicts(proposed, spec.teacher_id, spec.location_id, existing)
            if conflicts:
                logger.warning(
                    "Rejected session for teacher %s at location %s: %d conflict(s)",
                    spec.teacher_id,
                    spec.location_id,
                    len(conflicts),
                )
                raise ScheduleConflictError(tuple(conflicts))

            [session] = self._store.create_sessions([self._new_session(studio_id, spec, proposed)])

        logger.info("Created session %s for studio %s", session.id, studio_id)
        return session

    def create_recurring_series(
        self, studio_id: StudioId, spec: SessionSpec, rule: RecurrenceRule
    ) -> RecurringSeriesResult:
        """Expand a weekly rule and create every occurrence that does not conflict.

        Each occurrence is checked against pre-existing sessions and blocked
        times. An occurrence overlapping one already accepted into the same
        series is skipped as a series overlap.

        Raises:
            InvalidReferenceError: If a referenced entity belongs to another studio.
            InvalidRequestError: If the rule yields no dates.
            NoValidOccurrencesError: If every occurrence was skipped.
        """
        self._check_references(studio_id, spec)
        tz = ZoneInfo(self._store.studio_timezone(studio_id))
        occurrences = rule.expand(spec.start_time, tz)
        if not occurrences:
            raise InvalidRequestError("Recurring schedule does not produce any dates")

        group_id = RecurringGroupId(uuid4())
        ranges = [occurrence.time_range for occurrence in occurrences]

        valid: list[NewSession] = []
        skipped_blocked: list[SkippedOccurrence] = []
        skipped_conflict: list[SkippedOccurrence] = []

        with self._store.scheduling_lock(
            teacher_ids=[spec.teacher_id], location_ids=[spec.location_id]
        ):
            window = _span(ranges)
            blocks = self._store.blocked_times_overlapping(
                studio_id, window, teacher_ids=[spec.teacher_id]
            )
            existing = self._store.sessions_overlapping(
                studio_id,
                window,
                teacher_ids=[spec.teacher_id],
                location_ids=[spec.location_id],
            )

            for occurrence in occurrences:
                proposed = occurrence.time_range
                blocked = blocked_time_conflicts(proposed, spec.teacher_id, blocks)
                if blocked:
                    skipped_blocked.append(self._skipped(occurrence.date, proposed, blocked))
                    continue

                conflicts = session_conflicts(proposed, spec.teacher_id, spec.location_id, existing)
                conflicts.extend(
                    series_overlap_conflicts(proposed, [session.time_range for session in valid])
                )
                if conflicts:
                    skipped_conflict.append(self._skipped(occurrence.date, proposed, conflicts))
                    continue

                valid.append(self._new_session(studio_id, spec, proposed, group_id))

            if not valid:
                logger.warning(
                    "Recurring schedule for studio %s produced no valid sessions (%d blocked, %d conflicting)",
                    studio_id,
                    len(skipped_blocked),
                    len(skipped_conflict),
                )
                raise NoValidOccurrencesError(tuple(skipped_blocked + skipped_conflict))

            created = self._store.create_sessions(valid)

        logger.info(
            "Created recurring group %s for studio %s: %d created, %d blocked, %d conflicting",
            group_id,
            studio_id,
            len(created),
            len(skipped_blocked),
            len(skipped_conflict),
        )
        return RecurringSeriesResult(
            recurring_group_id=group_id,
            created=tuple(created),
            skipped_blocked=tuple(skipped_blocked),
            skipped_conflict=tuple(skipped_conflict),
        )

    def bulk_delete(self, studio_id: StudioId, target: BulkTarget, now: datetime | None = None) -> int:
        """Delete every targeted session, or none if any carries an active booking.

        Raises:
            SessionsNotFoundError: If the target matches no sessions.
            SessionsHaveBookingsError: If any targeted session has an active booking.
        """
        now = now or datetime.now(UTC)
        sessions = self._store.sessions_for_target(studio_id, target, now)
        if not sessions:
            raise SessionsNotFoundError()

        session_ids = [session.id for session in sessions]
        with self._store.scheduling_lock(session_ids=session_ids):
            booked = self._store.count_sessions_with_active_bookings(session_ids)
            if booked:
                logger.warning(
                    "Refused bulk delete in studio %s: %d of %d session(s) have bookings",
                    studio_id,
                    booked,
                    len(session_ids),
                )
                raise SessionsHaveBookingsError(booked)
            deleted = self._store.delete_sessions(session_ids)

        logger.info("Deleted %d session(s) in studio %s", deleted, studio_id)
        return deleted

    def bulk_reassign(
        self,
        studio_id: StudioId,
        target: BulkTarget,
        *,
        teacher_id: TeacherId | None = None,
        location_id: LocationId | None = None,
        now: datetime | None = None,
    ) -> BulkReassignResult:
        """Move targeted sessions to a new teacher and/or location.

        The moved sessions are re-checked against blocked times (when the
        teacher changes), against every other session, and against each other.

        Raises:
            InvalidRequestError: If neither a teacher nor a location is given.
            InvalidReferenceError: If the new teacher or location belongs to another studio.
            SessionsNotFoundError: If the target matches no sessions.
            BlockedTimeConflictError: If the new teacher has blocked a moved session's time.
            ScheduleConflictError: If a moved session would double-book.
        """
        if teacher_id is None and location_id is None:
            raise InvalidRequestError("Provide a teacher or location to reassign to")
        invalid = self._store.invalid_references(
            studio_id, teacher_id=teacher_id, location_id=location_id
        )
        if invalid:
            raise InvalidReferenceError(invalid)

        now = now or datetime.now(UTC)
        sessions = self._store.sessions_for_target(studio_id, target, now)
        if not sessions:
            raise SessionsNotFoundError()

        target_ids = {session.id for session in sessions}
        moved = [
            replace(
                session,
                teacher_id=teacher_id or session.teacher_id,
                location_id=location_id or session.location_id,
            )
            for session in sessions
        ]
        teacher_ids = sorted({session.teacher_id for session in moved}, key=str)
        location_ids = sorted({session.location_id for session in moved}, key=str)

        with self._store.scheduling_lock(
            teacher_ids=teacher_ids, location_ids=location_ids, session_ids=list(target_ids)
        ):
            window = _span([session.time_range for session in moved])

            blocked: list[Conflict] = []
            if teacher_id is not None:
                blocks = self._store.blocked_times_overlapping(
                    studio_id, window, teacher_ids=[teacher_id]
                )
                for session in moved:
                    blocked.extend(
                        replace(conflict, target_session_id=session.id)
                        for conflict in blocked_time_conflicts(session.time_range, teacher_id, blocks)
                    )
            if blocked:
                raise BlockedTimeConflictError(tuple(blocked))

            others = [
                session
                for session in self._store.sessions_overlapping(
                    studio_id, window, teacher_ids=teacher_ids, location_ids=location_ids
                )
                if session.id not in target_ids
            ]
            conflicts: list[Conflict] = []
            for index, session in enumerate(moved):
                found = session_conflicts(
                    session.time_range,
                    session.teacher_id,
                    session.location_id,
                    others + moved[:index],
                )
                conflicts.extend(replace(conflict, target_session_id=session.id) for conflict in found)
            if conflicts:
                logger.warning(
                    "Refused reassignment in studio %s: %d conflict(s)", studio_id, len(conflicts)
                )
                raise ScheduleConflictError(tuple(conflicts))

            updated = self._store.reassign_sessions(
                [session.id for session in sessions], teacher_id=teacher_id, location_id=location_id
            )

        with_bookings = sum(1 for session in sessions if session.active_bookings)
        logger.info(
            "Reassigned %d session(s) in studio %s (%d with bookings)", updated, studio_id, with_bookings
        )
        return BulkReassignResult(
            updated=updated,
            sessions_with_bookings=with_bookings,
            session_ids=tuple(session.id for session in sessions),
        )

    def _check_references(self, studio_id: StudioId, spec: SessionSpec) -> None:
        invalid = self._store.invalid_references(
            studio_id,
            class_type_id=spec.class_type_id,
            teacher_id=spec.teacher_id,
            location_id=spec.location_id,
        )
        if invalid:
            logger.warning("Rejected cross-tenant references %s for studio %s", invalid, studio_id)
            raise InvalidReferenceError(invalid)

    @staticmethod
    def _new_session(
        studio_id: StudioId,
        spec: SessionSpec,
        time_range: TimeRange,
        group_id: RecurringGroupId | None = None,
    ) -> NewSession:
        return NewSession(
            studio_id=studio_id,
            class_type_id=spec.class_type_id,
            teacher_id=spec.teacher_id,
            location_id=spec.location_id,
            time_range=time_range,
            capacity=spec.capacity,
            recurring_group_id=group_id,
        )

    @staticmethod
    def _skipped(day, time_range: TimeRange, conflicts: list[Conflict]) -> SkippedOccurrence:
        return SkippedOccurrence(
            date=day,
            start_time=time_range.start,
            end_time=time_range.end,
            conflicts=tuple(conflicts),
        )
