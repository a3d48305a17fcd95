"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from studios.models import ClassType, Client, Location, Studio, Teacher


class ClassSession(models.Model):
    """Persistence model for a scheduled class."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="class_sessions")
    class_type = models.ForeignKey(ClassType, on_delete=models.PROTECT, related_name="sessions")
    teacher = models.ForeignKey(Teacher, on_delete=models.PROTECT, related_name="sessions")
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name="sessions")
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    capacity = models.PositiveIntegerField()
    recurring_group_id = models.UUIDField(blank=True, null=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["studio", "start_time"], name="session_studio_start_idx"),
            models.Index(fields=["teacher", "start_time"], name="session_teacher_start_idx"),
            models.Index(fields=["location", "start_time"], name="session_location_start_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")),
                name="session_ends_after_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.class_type.name} - {self.start_time}"


class TeacherBlockedTime(models.Model):
    """Persistence model for a teacher's declared unavailability."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    teacher = models.ForeignKey(Teacher, on_delete=models.CASCADE, related_name="blocked_times")
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["teacher", "start_time"], name="blocked_teacher_start_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.teacher} blocked {self.start_time} - {self.end_time}"


class Booking(models.Model):
    """Persistence model linking a client to a class session."""

    class Status(models.TextChoices):
        PENDING = "PENDING"
        CONFIRMED = "CONFIRMED"
        COMPLETED = "COMPLETED"
        NO_SHOW = "NO_SHOW"
        CANCELLED = "CANCELLED"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="bookings")
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name="bookings")
    class_session = models.ForeignKey(ClassSession, on_delete=models.CASCADE, related_name="bookings")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.CONFIRMED)
    created_at = models.DateTimeField(default=timezone.now)
    cancelled_at = models.DateTimeField(blank=True, null=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["studio", "status", "created_at"], name="booking_studio_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.client} - {self.class_session_id} ({self.status})"
