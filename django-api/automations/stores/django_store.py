"""Django ORM implementation of the AutomationStore."""

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import F

from automations import models
from automations.domain.models import (
    Automation,
    BookingRecord,
    Channel,
    DedupePolicy,
    OutboundMessage,
    Recipient,
    SubscriptionRecord,
    Trigger,
)
from automations.stores.interfaces import AutomationStore
from scheduling.models import Booking
from studios.models import Client, MembershipSubscription

_BOOKED_STATUSES = (Booking.Status.CONFIRMED, Booking.Status.COMPLETED)
_EXPIRING_STATUSES = (MembershipSubscription.Status.ACTIVE, MembershipSubscription.Status.CANCELLED)


def _to_recipient(row: Client) -> Recipient:
    return Recipient(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        phone=row.phone,
        created_at=row.created_at,
        birthday=row.birthday,
    )


def _to_automation(row: models.Automation) -> Automation:
    return Automation(
        id=row.id,
        studio_id=row.studio_id,
        studio_name=row.studio.name,
        studio_timezone=row.studio.timezone,
        name=row.name,
        trigger=Trigger(row.trigger),
        channel=Channel(row.channel),
        subject=row.subject,
        body=row.body,
        html_body=row.html_body,
        reminder_hours=row.reminder_hours,
        trigger_delay=row.trigger_delay,
        trigger_days=row.trigger_days,
        location_id=row.location_id,
        stop_on_booking=row.stop_on_booking,
    )


def _to_booking(row: Booking) -> BookingRecord:
    session = row.class_session
    return BookingRecord(
        id=row.id,
        client=_to_recipient(row.client),
        location_id=session.location_id,
        location_name=session.location.name,
        class_name=session.class_type.name,
        teacher_name=session.teacher.full_name,
        start_time=session.start_time,
        end_time=session.end_time,
        created_at=row.created_at,
        cancelled_at=row.cancelled_at,
    )


class DjangoAutomationStore(AutomationStore):
    """PostgreSQL-backed automation store using Django ORM."""

    def list_active_automations(self) -> list[Automation]:
        queryset = (
            models.Automation.objects.filter(status=models.Automation.Status.ACTIVE)
            .select_related("studio")
            .order_by("created_at")
        )
        return [_to_automation(row) for row in queryset]

    def clients_created_since(self, studio_id: UUID, since: datetime) -> list[Recipient]:
        queryset = Client.objects.filter(studio_id=studio_id, created_at__gte=since).order_by("created_at")
        return [_to_recipient(row) for row in queryset]

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
        queryset = Booking.objects.filter(studio_id=studio_id, status__in=list(statuses))
        if created_since is not None:
            queryset = queryset.filter(created_at__gte=created_since)
        if cancelled_since is not None:
            queryset = queryset.filter(cancelled_at__isnull=False, cancelled_at__gte=cancelled_since)
        if starting_between is not None:
            queryset = queryset.filter(class_session__start_time__range=starting_between)
        if ending_between is not None:
            queryset = queryset.filter(class_session__end_time__range=ending_between)
        if location_id is not None:
            queryset = queryset.filter(class_session__location_id=location_id)
        queryset = queryset.select_related(
            "client",
            "class_session__class_type",
            "class_session__teacher",
            "class_session__location",
        ).order_by("created_at")
        return [_to_booking(row) for row in queryset]

    def clients_without_bookings_since(self, studio_id: UUID, cutoff: datetime) -> list[Recipient]:
        queryset = (
            Client.objects.filter(studio_id=studio_id)
            .exclude(bookings__created_at__gte=cutoff)
            .order_by("created_at")
        )
        return [_to_recipient(row) for row in queryset]

    def clients_with_birthday(self, studio_id: UUID, month: int, days: Iterable[int]) -> list[Recipient]:
        queryset = Client.objects.filter(
            studio_id=studio_id, birthday__month=month, birthday__day__in=list(days)
        ).order_by("created_at")
        return [_to_recipient(row) for row in queryset]

    def expiring_subscriptions(
        self, studio_id: UUID, start: datetime, end: datetime
    ) -> list[SubscriptionRecord]:
        queryset = (
            MembershipSubscription.objects.filter(
                studio_id=studio_id,
                status__in=_EXPIRING_STATUSES,
                client__isnull=False,
                current_period_end__range=(start, end),
            )
            .select_related("client")
            .order_by("current_period_end")
        )
        return [
            SubscriptionRecord(
                id=row.id,
                client=_to_recipient(row.client),
                current_period_end=row.current_period_end,
            )
            for row in queryset
        ]

    def client_booked_since(self, studio_id: UUID, client_id: UUID, since: datetime) -> bool:
        return Booking.objects.filter(
            studio_id=studio_id,
            client_id=client_id,
            status__in=_BOOKED_STATUSES,
            created_at__gt=since,
        ).exists()

    def message_exists(
        self, studio_id: UUID, automation_id: UUID, thread_id: str, policy: DedupePolicy
    ) -> bool:
        queryset = models.Message.objects.filter(
            studio_id=studio_id, automation_id=automation_id, thread_id=thread_id
        )
        if policy is DedupePolicy.SENT_ONLY:
            queryset = queryset.exclude(status=models.Message.Status.FAILED)
        return queryset.exists()

    def claim_message(self, message: OutboundMessage, policy: DedupePolicy) -> UUID | None:
        fields = {
            "channel": message.channel.value,
            "direction": models.Message.Direction.OUTBOUND,
            "status": models.Message.Status.QUEUED,
            "subject": message.subject,
            "body": message.body,
            "html_body": message.html_body,
            "from_address": message.from_address,
            "from_name": message.from_name,
            "to_address": message.to_address,
            "to_name": message.to_name,
            "client_id": message.client_id,
        }
        try:
            with transaction.atomic():
                row = models.Message.objects.create(
                    studio_id=message.studio_id,
                    automation_id=message.automation_id,
                    thread_id=message.thread_id,
                    **fields,
                )
            return row.id
        except IntegrityError:
            if policy is not DedupePolicy.SENT_ONLY:
                return None

        failed = models.Message.objects.filter(
            studio_id=message.studio_id,
            automation_id=message.automation_id,
            thread_id=message.thread_id,
            status=models.Message.Status.FAILED,
        )
        message_id = failed.values_list("id", flat=True).first()
        if message_id is None:
            return None
        # Conditional update: only one concurrent run can move the row out of FAILED.
        reclaimed = failed.filter(id=message_id).update(failed_reason=None, **fields)
        return message_id if reclaimed else None

    def mark_sent(self, message_id: UUID, external_id: str | None, sent_at: datetime) -> None:
        models.Message.objects.filter(id=message_id).update(
            status=models.Message.Status.SENT,
            external_id=external_id,
            sent_at=sent_at,
        )

    def mark_failed(self, message_id: UUID, reason: str) -> None:
        models.Message.objects.filter(id=message_id).update(
            status=models.Message.Status.FAILED,
            failed_reason=reason,
        )

    def increment_counters(self, automation_id: UUID) -> None:
        models.Automation.objects.filter(id=automation_id).update(
            total_sent=F("total_sent") + 1,
            total_delivered=F("total_delivered") + 1,
        )
