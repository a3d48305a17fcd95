"""Django ORM models for tenant-owned entities.

Every row here is scoped by a studio. The scheduling and automation apps
reference these models but never mutate them.
"""

import uuid

from django.db import models
from django.utils import timezone


class Studio(models.Model):
    """Persistence model for a tenant."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    timezone = models.CharField(max_length=64, default="UTC")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Teacher(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="teachers")
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return self.full_name


class Location(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="locations")
    name = models.CharField(max_length=255)

    def __str__(self) -> str:
        return self.name


class ClassType(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="class_types")
    name = models.CharField(max_length=255)
    duration_minutes = models.PositiveIntegerField(default=60)

    def __str__(self) -> str:
        return self.name


class Client(models.Model):
    """Persistence model for a studio's customer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="clients")
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=32, blank=True, null=True)
    birthday = models.DateField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["studio", "created_at"], name="client_studio_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class MembershipSubscription(models.Model):
    """Persistence model for a client's recurring membership."""

    class Status(models.TextChoices):
        ACTIVE = "active"
        CANCELLED = "cancelled"
        PAST_DUE = "past_due"
        EXPIRED = "expired"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="subscriptions")
    client = models.ForeignKey(
        Client, on_delete=models.SET_NULL, null=True, blank=True, related_name="subscriptions"
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    current_period_end = models.DateTimeField()

    class Meta:
        indexes = [
            models.Index(fields=["studio", "current_period_end"], name="subscription_period_end_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.client} - {self.status}"
