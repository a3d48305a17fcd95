"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from automations.domain.models import (
    Automation,
    BookingRecord,
    DedupePolicy,
    OutboundMessage,
    Recipient,
    SubscriptionRecord,
)


class AutomationStore(ABC):
    """Interface for the reads and outbox writes the automation engine performs."""

    @abstractmethod
    def list_active_automations(self) -> list[Automation]:
        """Return every ACTIVE automation across all studios."""
        ...

    @abstractmethod
    def clients_created_since(self, studio_id: UUID, since: datetime) -> list[Recipient]:
        ...

    @abstractmethod
    def find_bookings(
        self,
        studio_id: UUID,
        *,
        statuses: Iterable[str],
        created_since: datetime | None = None,
        cancelled_since: datetime | None = None,
        starting_between: tuple[datetime, datetime] | None = None,
        ending_between: tuple[datetime, datetime] | None = None,
        location_id: UUID | None = None,
    ) -> list[BookingRecord]:
        """Return bookings matching every given filter, with class details joined."""
        ...

    @abstractmethod
    def clients_without_bookings_since(self, studio_id: UUID, cutoff: datetime) -> list[Recipient]:
        """Return clients with no booking created at or after the cutoff."""
        ...

    @abstractmethod
    def clients_with_birthday(self, studio_id: UUID, month: int, days: Iterable[int]) -> list[Recipient]:
        ...

    @abstractmethod
    def expiring_subscriptions(
        self, studio_id: UUID, start: datetime, end: datetime
    ) -> list[SubscriptionRecord]:
        """Return active or cancelled subscriptions with a client whose period ends in ``[start, end]``."""
        ...

    @abstractmethod
    def client_booked_since(self, studio_id: UUID, client_id: UUID, since: datetime) -> bool:
        """Whether the client made a confirmed or completed booking after ``since``."""
        ...

    @abstractmethod
    def message_exists(
        self, studio_id: UUID, automation_id: UUID, thread_id: str, policy: DedupePolicy
    ) -> bool:
        """Whether an outbox row blocks sending under this idempotency key."""
        ...

    @abstractmethod
    def claim_message(self, message: OutboundMessage, policy: DedupePolicy) -> UUID | None:
        """Record a QUEUED outbox row for the message's idempotency key.

        Returns the row id, or None when the key is already taken. The store's
        uniqueness guarantee, not a prior read, decides the outcome.
        """
        ...

    @abstractmethod
    def mark_sent(self, message_id: UUID, external_id: str | None, sent_at: datetime) -> None:
        ...

    @abstractmethod
    def mark_failed(self, message_id: UUID, reason: str) -> None:
        ...

    @abstractmethod
    def increment_counters(self, automation_id: UUID) -> None:
        """Atomically bump the automation's sent and delivered totals."""
        ...
