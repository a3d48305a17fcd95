"""Domain models for automation rules, trigger candidates and run results.

Django ORM models are in automations/models.py (persistence layer).
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from uuid import UUID


class Trigger(Enum):
    WELCOME = "WELCOME"
    BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"
    CLASS_REMINDER = "CLASS_REMINDER"
    CLASS_FOLLOWUP = "CLASS_FOLLOWUP"
    CLIENT_INACTIVE = "CLIENT_INACTIVE"
    BIRTHDAY = "BIRTHDAY"
    MEMBERSHIP_EXPIRING = "MEMBERSHIP_EXPIRING"


class Channel(Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"


class DedupePolicy(Enum):
    """Which outbox rows block a re-send of the same idempotency key."""

    ANY = "any"
    SENT_ONLY = "sent_only"


class SendOutcome(Enum):
    SENT = "ok"
    DUPLICATE = "duplicate"
    NO_EMAIL = "no_email"
    NO_PHONE = "no_phone"
    SEND_FAILED = "send_failed"
    STOPPED_BY_BOOKING = "stopped_by_booking"
    ERROR = "error"


@dataclass(frozen=True)
class EngineSettings:
    """Tuning shared by every trigger evaluation in a run."""

    window: timedelta = timedelta(minutes=30)
    lookback: timedelta = timedelta(days=30)
    reminder_horizon: timedelta = timedelta(hours=72)
    dedupe_policy: DedupePolicy = DedupePolicy.ANY


@dataclass(frozen=True)
class Automation:
    """Domain representation of an active automation rule."""

    id: UUID
    studio_id: UUID
    studio_name: str
    studio_timezone: str
    name: str
    trigger: Trigger
    channel: Channel
    subject: str | None
    body: str
    html_body: str | None = None
    reminder_hours: int | None = None
    trigger_delay: int | None = None
    trigger_days: int | None = None
    location_id: UUID | None = None
    stop_on_booking: bool = False


@dataclass(frozen=True)
class Recipient:
    """A client as seen by the automation engine."""

    id: UUID
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    created_at: datetime | None = None
    birthday: date | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class BookingRecord:
    """A booking joined with the class details templates can reference."""

    id: UUID
    client: Recipient
    location_id: UUID
    location_name: str
    class_name: str
    teacher_name: str
    start_time: datetime
    end_time: datetime
    created_at: datetime
    cancelled_at: datetime | None = None


@dataclass(frozen=True)
class SubscriptionRecord:
    id: UUID
    client: Recipient
    current_period_end: datetime


@dataclass(frozen=True)
class Candidate:
    """One potential notification produced by evaluating a trigger."""

    client: Recipient
    vars: Mapping[str, str]
    idempotency_key: str
    triggered_at: datetime


@dataclass(frozen=True)
class OutboundMessage:
    """A rendered message about to be claimed in the outbox."""

    studio_id: UUID
    automation_id: UUID
    client_id: UUID
    channel: Channel
    subject: str | None
    body: str
    html_body: str | None
    from_address: str
    from_name: str
    to_address: str
    to_name: str
    thread_id: str


@dataclass(frozen=True)
class DeliveryResult:
    """What a channel sender reports back."""

    success: bool
    message_id: str | None = None
    error: str | None = None


@dataclass
class AutomationRunResult:
    automation_id: UUID
    trigger: Trigger
    channel: Channel
    processed: int = 0
    sent: int = 0
    skipped: int = 0
    duplicates: int = 0

    def record(self, outcome: SendOutcome) -> None:
        self.processed += 1
        if outcome is SendOutcome.SENT:
            self.sent += 1
            return
        self.skipped += 1
        if outcome is SendOutcome.DUPLICATE:
            self.duplicates += 1


@dataclass
class RunSummary:
    ran_at: datetime
    total_automations: int = 0
    summary: list[AutomationRunResult] = field(default_factory=list)
