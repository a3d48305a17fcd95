"""Pure conflict detection over already-loaded sessions and blocked times."""

from collections.abc import Iterable

from scheduling.domain.models import BlockedTime, ClassSession, Conflict, ConflictKind
from scheduling.domain.value_objects import LocationId, TeacherId, TimeRange


def blocked_time_conflicts(
    proposed: TimeRange, teacher_id: TeacherId, blocks: Iterable[BlockedTime]
) -> list[Conflict]:
    return [
        Conflict(
            kind=ConflictKind.BLOCKED_TIME,
            start_time=block.start_time,
            end_time=block.end_time,
            blocked_time_id=block.id,
            reason=block.reason,
        )
        for block in blocks
        if block.teacher_id == teacher_id and block.time_range.overlaps(proposed)
    ]


def session_conflicts(
    proposed: TimeRange,
    teacher_id: TeacherId,
    location_id: LocationId,
    sessions: Iterable[ClassSession],
) -> list[Conflict]:
    """Existing sessions that would double-book the teacher or the location.

    A session sharing both teacher and location is reported once, as a teacher conflict.
    """
    conflicts = []
    for session in sessions:
        if not session.time_range.overlaps(proposed):
            continue
        if session.teacher_id == teacher_id:
            kind = ConflictKind.TEACHER
        elif session.location_id == location_id:
            kind = ConflictKind.LOCATION
        else:
            continue
        conflicts.append(
            Conflict(
                kind=kind,
                start_time=session.start_time,
                end_time=session.end_time,
                session_id=session.id,
            )
        )
    return conflicts


def series_overlap_conflicts(proposed: TimeRange, accepted: Iterable[TimeRange]) -> list[Conflict]:
    """Occurrences already accepted into the same series that overlap ``proposed``."""
    return [
        Conflict(
            kind=ConflictKind.SERIES_OVERLAP,
            start_time=kept.start,
            end_time=kept.end,
            reason="Overlaps an earlier occurrence of this series",
        )
        for kept in accepted
        if kept.overlaps(proposed)
    ]
