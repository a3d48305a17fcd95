"""Serializers for request parsing and for rendering domain models as API responses.

Field names follow the public camelCase API; ``source`` maps them onto the
snake_case domain attributes.
"""

from rest_framework import serializers

from scheduling.domain import (
    BulkTarget,
    Capacity,
    ClassTypeId,
    LocationId,
    RecurrenceRule,
    RecurringGroupId,
    SessionId,
    SessionSpec,
    TeacherId,
)
from scheduling.domain.recurrence import parse_clock_time

FLEXIBLE_DATE_FORMATS = ["iso-8601", "%Y-%m-%dT%H:%M:%S.%fZ", "%Y-%m-%dT%H:%M:%SZ"]


def rule_from_data(data: dict) -> RecurrenceRule:
    return RecurrenceRule(
        days=tuple(sorted(set(data["days"]))),
        end_date=data["end_date"],
        start_at=parse_clock_time(data["time"]),
        duration_minutes=data["duration"],
        skip_first=data.get("skip_first", False),
    )


class RecurringSerializer(serializers.Serializer):
    days = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=6), allow_empty=False
    )
    endDate = serializers.DateField(source="end_date", input_formats=FLEXIBLE_DATE_FORMATS)
    time = serializers.RegexField(r"^([01]?\d|2[0-3]):[0-5]\d$")
    duration = serializers.IntegerField(min_value=1)
    skipFirst = serializers.BooleanField(source="skip_first", required=False, default=False)


class SessionCreateSerializer(serializers.Serializer):
    """Body of ``POST /api/studio/schedule``; ``recurring`` selects series creation."""

    classTypeId = serializers.UUIDField(source="class_type_id")
    teacherId = serializers.UUIDField(source="teacher_id")
    locationId = serializers.UUIDField(source="location_id")
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time", required=False)
    capacity = serializers.IntegerField(min_value=0)
    recurring = RecurringSerializer(required=False)

    def validate(self, attrs):
        if "recurring" not in attrs and "end_time" not in attrs:
            raise serializers.ValidationError({"endTime": "This field is required."})
        return attrs

    @property
    def is_recurring(self) -> bool:
        return "recurring" in self.validated_data

    def to_spec(self) -> SessionSpec:
        data = self.validated_data
        start_time = data["start_time"]
        return SessionSpec(
            class_type_id=ClassTypeId(data["class_type_id"]),
            teacher_id=TeacherId(data["teacher_id"]),
            location_id=LocationId(data["location_id"]),
            start_time=start_time,
            end_time=data.get("end_time", start_time),
            capacity=Capacity(data["capacity"]),
        )

    def to_rule(self) -> RecurrenceRule:
        return rule_from_data(self.validated_data["recurring"])


class BulkTargetSerializer(serializers.Serializer):
    sessionIds = serializers.ListField(
        child=serializers.UUIDField(), source="session_ids", required=False, default=list
    )
    recurringGroupId = serializers.UUIDField(source="recurring_group_id", required=False)
    futureOnly = serializers.BooleanField(source="future_only", required=False, default=False)

    def validate(self, attrs):
        has_ids = bool(attrs.get("session_ids"))
        has_group = attrs.get("recurring_group_id") is not None
        if has_ids == has_group:
            raise serializers.ValidationError("Provide either sessionIds or recurringGroupId")
        return attrs

    def to_target(self) -> BulkTarget:
        data = self.validated_data
        group_id = data.get("recurring_group_id")
        return BulkTarget(
            session_ids=tuple(SessionId(value) for value in data.get("session_ids", [])),
            recurring_group_id=RecurringGroupId(group_id) if group_id else None,
            future_only=data["future_only"],
        )


class BulkReassignSerializer(BulkTargetSerializer):
    teacherId = serializers.UUIDField(source="teacher_id", required=False)
    locationId = serializers.UUIDField(source="location_id", required=False)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if attrs.get("teacher_id") is None and attrs.get("location_id") is None:
            raise serializers.ValidationError("Provide teacherId and/or locationId")
        return attrs

    @property
    def teacher_id(self) -> TeacherId | None:
        value = self.validated_data.get("teacher_id")
        return TeacherId(value) if value else None

    @property
    def location_id(self) -> LocationId | None:
        value = self.validated_data.get("location_id")
        return LocationId(value) if value else None


class RangeQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField(required=False)
    end = serializers.DateTimeField(required=False)
    teacherId = serializers.UUIDField(source="teacher_id", required=False)


class ClassSessionSerializer(serializers.Serializer):
    """Serializer for the ClassSession domain model."""

    id = serializers.CharField()
    classTypeId = serializers.CharField(source="class_type_id")
    teacherId = serializers.CharField(source="teacher_id")
    locationId = serializers.CharField(source="location_id")
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time")
    capacity = serializers.IntegerField(source="capacity.value")
    recurringGroupId = serializers.CharField(source="recurring_group_id", allow_null=True)
    activeBookings = serializers.IntegerField(source="active_bookings")


class BlockedTimeSerializer(serializers.Serializer):
    id = serializers.CharField()
    teacherId = serializers.CharField(source="teacher_id")
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time")
    reason = serializers.CharField()


class ConflictSerializer(serializers.Serializer):
    type = serializers.CharField(source="kind.value")
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time")
    sessionId = serializers.CharField(source="session_id", allow_null=True)
    blockedTimeId = serializers.CharField(source="blocked_time_id", allow_null=True)
    targetSessionId = serializers.CharField(source="target_session_id", allow_null=True)
    reason = serializers.CharField()


class SkippedOccurrenceSerializer(serializers.Serializer):
    date = serializers.DateField()
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time")
    conflicts = ConflictSerializer(many=True)


class RecurringSeriesResultSerializer(serializers.Serializer):
    recurringGroupId = serializers.CharField(source="recurring_group_id")
    created = serializers.SerializerMethodField()
    skippedBlocked = serializers.SerializerMethodField()
    skippedConflicts = serializers.SerializerMethodField()
    sessions = ClassSessionSerializer(source="created", many=True)
    blockedDates = SkippedOccurrenceSerializer(source="skipped_blocked", many=True)
    conflictDates = SkippedOccurrenceSerializer(source="skipped_conflict", many=True)

    def get_created(self, result) -> int:
        return len(result.created)

    def get_skippedBlocked(self, result) -> int:
        return len(result.skipped_blocked)

    def get_skippedConflicts(self, result) -> int:
        return len(result.skipped_conflict)


class BulkReassignResultSerializer(serializers.Serializer):
    updated = serializers.IntegerField()
    sessionsWithBookings = serializers.IntegerField(source="sessions_with_bookings")
    sessionIds = serializers.ListField(child=serializers.CharField(), source="session_ids")
