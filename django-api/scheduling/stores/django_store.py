"""Django ORM implementation of the ScheduleStore."""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime

from django.db import transaction
from django.db.models import Count, Q

from scheduling import models
from scheduling.domain import (
    BlockedTime,
    BookingStatus,
    BulkTarget,
    Capacity,
    ClassSession,
    ClassTypeId,
    LocationId,
    NewSession,
    RecurringGroupId,
    SessionId,
    StudioId,
    TeacherId,
    TimeRange,
)
from scheduling.stores.interfaces import ScheduleStore
from studios.models import ClassType, Location, Studio, Teacher

_ACTIVE_BOOKINGS = Count(
    "bookings", filter=~Q(bookings__status=BookingStatus.CANCELLED.value), distinct=True
)


def _to_session(row: models.ClassSession) -> ClassSession:
    return ClassSession(
        id=SessionId(row.id),
        studio_id=StudioId(row.studio_id),
        class_type_id=ClassTypeId(row.class_type_id),
        teacher_id=TeacherId(row.teacher_id),
        location_id=LocationId(row.location_id),
        start_time=row.start_time,
        end_time=row.end_time,
        capacity=Capacity(row.capacity),
        recurring_group_id=RecurringGroupId(row.recurring_group_id) if row.recurring_group_id else None,
        active_bookings=getattr(row, "active_bookings", 0),
    )


def _to_blocked_time(row: models.TeacherBlockedTime) -> BlockedTime:
    return BlockedTime(
        id=str(row.id),
        teacher_id=TeacherId(row.teacher_id),
        start_time=row.start_time,
        end_time=row.end_time,
        reason=row.reason,
    )


def _values(ids: Iterable) -> list:
    return [item.value for item in ids]


class DjangoScheduleStore(ScheduleStore):
    """PostgreSQL-backed schedule store using Django ORM."""

    def studio_timezone(self, studio_id: StudioId) -> str:
        return Studio.objects.values_list("timezone", flat=True).get(id=studio_id.value)

    def invalid_references(
        self,
        studio_id: StudioId,
        *,
        class_type_id: ClassTypeId | None = None,
        teacher_id: TeacherId | None = None,
        location_id: LocationId | None = None,
    ) -> tuple[str, ...]:
        checks = (
            ("classTypeId", ClassType, class_type_id),
            ("teacherId", Teacher, teacher_id),
            ("locationId", Location, location_id),
        )
        return tuple(
            name
            for name, model, ref in checks
            if ref is not None and not model.objects.filter(id=ref.value, studio_id=studio_id.value).exists()
        )

    @contextmanager
    def scheduling_lock(
        self,
        *,
        teacher_ids: Iterable[TeacherId] = (),
        location_ids: Iterable[LocationId] = (),
        session_ids: Iterable[SessionId] = (),
    ) -> Iterator[None]:
        with transaction.atomic():
            # Lock in a fixed order so concurrent schedulers cannot deadlock.
            for model, ids in (
                (Teacher, _values(teacher_ids)),
                (Location, _values(location_ids)),
                (models.ClassSession, _values(session_ids)),
            ):
                if ids:
                    list(
                        model.objects.select_for_update()
                        .filter(id__in=ids)
                        .order_by("id")
                        .values_list("id", flat=True)
                    )
            yield

    def list_sessions(
        self, studio_id: StudioId, start: datetime | None = None, end: datetime | None = None
    ) -> list[ClassSession]:
        queryset = models.ClassSession.objects.filter(studio_id=studio_id.value)
        if start is not None:
            queryset = queryset.filter(start_time__gte=start)
        if end is not None:
            queryset = queryset.filter(start_time__lte=end)
        queryset = queryset.annotate(active_bookings=_ACTIVE_BOOKINGS).order_by("start_time")
        return [_to_session(row) for row in queryset]

    def sessions_overlapping(
        self,
        studio_id: StudioId,
        window: TimeRange,
        *,
        teacher_ids: Iterable[TeacherId],
        location_ids: Iterable[LocationId],
    ) -> list[ClassSession]:
        queryset = models.ClassSession.objects.filter(
            Q(teacher_id__in=_values(teacher_ids)) | Q(location_id__in=_values(location_ids)),
            studio_id=studio_id.value,
            start_time__lt=window.end,
            end_time__gt=window.start,
        ).order_by("start_time")
        return [_to_session(row) for row in queryset]

    def blocked_times_overlapping(
        self,
        studio_id: StudioId,
        window: TimeRange | None = None,
        *,
        teacher_ids: Iterable[TeacherId] | None = None,
    ) -> list[BlockedTime]:
        queryset = models.TeacherBlockedTime.objects.filter(teacher__studio_id=studio_id.value)
        if teacher_ids is not None:
            queryset = queryset.filter(teacher_id__in=_values(teacher_ids))
        if window is not None:
            queryset = queryset.filter(start_time__lt=window.end, end_time__gt=window.start)
        return [_to_blocked_time(row) for row in queryset.order_by("start_time")]

    def create_sessions(self, sessions: list[NewSession]) -> list[ClassSession]:
        rows = models.ClassSession.objects.bulk_create(
            [
                models.ClassSession(
                    studio_id=new.studio_id.value,
                    class_type_id=new.class_type_id.value,
                    teacher_id=new.teacher_id.value,
                    location_id=new.location_id.value,
                    start_time=new.time_range.start,
                    end_time=new.time_range.end,
                    capacity=new.capacity.value,
                    recurring_group_id=new.recurring_group_id.value if new.recurring_group_id else None,
                )
                for new in sessions
            ]
        )
        return [_to_session(row) for row in rows]

    def sessions_for_target(
        self, studio_id: StudioId, target: BulkTarget, now: datetime
    ) -> list[ClassSession]:
        queryset = models.ClassSession.objects.filter(studio_id=studio_id.value)
        if target.recurring_group_id is not None:
            queryset = queryset.filter(recurring_group_id=target.recurring_group_id.value)
        else:
            queryset = queryset.filter(id__in=_values(target.session_ids))
        if target.future_only:
            queryset = queryset.filter(start_time__gt=now)
        queryset = queryset.annotate(active_bookings=_ACTIVE_BOOKINGS).order_by("start_time")
        return [_to_session(row) for row in queryset]

    def count_sessions_with_active_bookings(self, session_ids: Iterable[SessionId]) -> int:
        return (
            models.Booking.objects.filter(class_session_id__in=_values(session_ids))
            .exclude(status=BookingStatus.CANCELLED.value)
            .values("class_session_id")
            .distinct()
            .count()
        )

    def delete_sessions(self, session_ids: Iterable[SessionId]) -> int:
        _, per_model = models.ClassSession.objects.filter(id__in=_values(session_ids)).delete()
        return per_model.get(models.ClassSession._meta.label, 0)

    def reassign_sessions(
        self,
        session_ids: Iterable[SessionId],
        *,
        teacher_id: TeacherId | None = None,
        location_id: LocationId | None = None,
    ) -> int:
        changes = {}
        if teacher_id is not None:
            changes["teacher_id"] = teacher_id.value
        if location_id is not None:
            changes["location_id"] = location_id.value
        if not changes:
            return 0
        return models.ClassSession.objects.filter(id__in=_values(session_ids)).update(**changes)
