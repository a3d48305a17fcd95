import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("studios", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Automation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("PAUSED", "Paused"), ("DRAFT", "Draft")],
                        default="DRAFT",
                        max_length=10,
                    ),
                ),
                (
                    "trigger",
                    models.CharField(
                        choices=[
                            ("WELCOME", "Welcome"),
                            ("BOOKING_CONFIRMED", "Booking Confirmed"),
                            ("BOOKING_CANCELLED", "Booking Cancelled"),
                            ("CLASS_REMINDER", "Class Reminder"),
                            ("CLASS_FOLLOWUP", "Class Followup"),
                            ("CLIENT_INACTIVE", "Client Inactive"),
                            ("BIRTHDAY", "Birthday"),
                            ("MEMBERSHIP_EXPIRING", "Membership Expiring"),
                        ],
                        max_length=32,
                    ),
                ),
                (
                    "channel",
                    models.CharField(
                        choices=[("EMAIL", "Email"), ("SMS", "Sms")], default="EMAIL", max_length=10
                    ),
                ),
                ("subject", models.CharField(blank=True, max_length=255, null=True)),
                ("body", models.TextField()),
                ("html_body", models.TextField(blank=True, null=True)),
                ("reminder_hours", models.PositiveIntegerField(blank=True, null=True)),
                ("trigger_delay", models.PositiveIntegerField(blank=True, help_text="Minutes", null=True)),
                ("trigger_days", models.PositiveIntegerField(blank=True, null=True)),
                ("stop_on_booking", models.BooleanField(default=False)),
                ("total_sent", models.PositiveIntegerField(default=0)),
                ("total_delivered", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="automations",
                        to="studios.location",
                    ),
                ),
                (
                    "studio",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="automations",
                        to="studios.studio",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["status"], name="automation_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "channel",
                    models.CharField(choices=[("EMAIL", "Email"), ("SMS", "Sms")], max_length=10),
                ),
                (
                    "direction",
                    models.CharField(
                        choices=[("OUTBOUND", "Outbound"), ("INBOUND", "Inbound")],
                        default="OUTBOUND",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("QUEUED", "Queued"), ("SENT", "Sent"), ("FAILED", "Failed")],
                        default="QUEUED",
                        max_length=10,
                    ),
                ),
                ("subject", models.CharField(blank=True, max_length=255, null=True)),
                ("body", models.TextField()),
                ("html_body", models.TextField(blank=True, null=True)),
                ("from_address", models.CharField(max_length=255)),
                ("from_name", models.CharField(blank=True, max_length=255)),
                ("to_address", models.CharField(max_length=255)),
                ("to_name", models.CharField(blank=True, max_length=255)),
                ("thread_id", models.CharField(max_length=255)),
                ("external_id", models.CharField(blank=True, max_length=255, null=True)),
                ("failed_reason", models.TextField(blank=True, null=True)),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "automation",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="messages",
                        to="automations.automation",
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="messages",
                        to="studios.client",
                    ),
                ),
                (
                    "studio",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="studios.studio",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("studio", "automation", "thread_id"),
                        name="message_unique_automation_thread",
                    ),
                ],
            },
        ),
    ]
