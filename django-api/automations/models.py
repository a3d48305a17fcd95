"""Django ORM models (persistence layer) for automations and the message outbox."""

import uuid

from django.db import models

from studios.models import Client, Location, Studio


class Automation(models.Model):
    """Persistence model for a studio's automation rule."""

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE"
        PAUSED = "PAUSED"
        DRAFT = "DRAFT"

    class Trigger(models.TextChoices):
        WELCOME = "WELCOME"
        BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
        BOOKING_CANCELLED = "BOOKING_CANCELLED"
        CLASS_REMINDER = "CLASS_REMINDER"
        CLASS_FOLLOWUP = "CLASS_FOLLOWUP"
        CLIENT_INACTIVE = "CLIENT_INACTIVE"
        BIRTHDAY = "BIRTHDAY"
        MEMBERSHIP_EXPIRING = "MEMBERSHIP_EXPIRING"

    class Channel(models.TextChoices):
        EMAIL = "EMAIL"
        SMS = "SMS"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="automations")
    name = models.CharField(max_length=255)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.DRAFT)
    trigger = models.CharField(max_length=32, choices=Trigger.choices)
    channel = models.CharField(max_length=10, choices=Channel.choices, default=Channel.EMAIL)
    subject = models.CharField(max_length=255, blank=True, null=True)
    body = models.TextField()
    html_body = models.TextField(blank=True, null=True)
    reminder_hours = models.PositiveIntegerField(blank=True, null=True)
    trigger_delay = models.PositiveIntegerField(blank=True, null=True, help_text="Minutes")
    trigger_days = models.PositiveIntegerField(blank=True, null=True)
    location = models.ForeignKey(
        Location, on_delete=models.SET_NULL, blank=True, null=True, related_name="automations"
    )
    stop_on_booking = models.BooleanField(default=False)
    total_sent = models.PositiveIntegerField(default=0)
    total_delivered = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["status"], name="automation_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.trigger})"


class Message(models.Model):
    """Persistence model for one outbound message attempt.

    ``thread_id`` carries the idempotency key; the unique constraint makes the
    insert itself the duplicate check.
    """

    class Direction(models.TextChoices):
        OUTBOUND = "OUTBOUND"
        INBOUND = "INBOUND"

    class Status(models.TextChoices):
        QUEUED = "QUEUED"
        SENT = "SENT"
        FAILED = "FAILED"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="messages")
    automation = models.ForeignKey(
        Automation, on_delete=models.SET_NULL, blank=True, null=True, related_name="messages"
    )
    client = models.ForeignKey(
        Client, on_delete=models.SET_NULL, blank=True, null=True, related_name="messages"
    )
    channel = models.CharField(max_length=10, choices=Automation.Channel.choices)
    direction = models.CharField(max_length=10, choices=Direction.choices, default=Direction.OUTBOUND)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.QUEUED)
    subject = models.CharField(max_length=255, blank=True, null=True)
    body = models.TextField()
    html_body = models.TextField(blank=True, null=True)
    from_address = models.CharField(max_length=255)
    from_name = models.CharField(max_length=255, blank=True)
    to_address = models.CharField(max_length=255)
    to_name = models.CharField(max_length=255, blank=True)
    thread_id = models.CharField(max_length=255)
    external_id = models.CharField(max_length=255, blank=True, null=True)
    failed_reason = models.TextField(blank=True, null=True)
    sent_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["studio", "automation", "thread_id"],
                name="message_unique_automation_thread",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.channel} to {self.to_address} ({self.status})"
