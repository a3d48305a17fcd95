"""Candidate selection, one function per automation trigger.

Each selector returns the notifications an automation would send right now.
Whether they are actually sent is decided by the engine (dedupe, contact
method, stop-on-booking).
"""

import calendar
from collections.abc import Callable
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from automations.domain.models import (
    Automation,
    BookingRecord,
    Candidate,
    EngineSettings,
    Recipient,
    Trigger,
)
from automations.domain.templates import date_label, time_label
from automations.stores.interfaces import AutomationStore
from scheduling.domain.models import BookingStatus

DEFAULT_REMINDER_HOURS = 24
DEFAULT_FOLLOWUP_DELAY_MINUTES = 60
DEFAULT_INACTIVE_DAYS = 30
DEFAULT_MEMBERSHIP_DAYS = 7

Selector = Callable[[Automation, AutomationStore, datetime, EngineSettings], list[Candidate]]


def idempotency_key(automation: Automation, *parts: object) -> str:
    return ":".join(["automation", str(automation.id), *(str(part) for part in parts)])


def is_due(due_at: datetime, now: datetime, window: timedelta) -> bool:
    """Whether ``due_at`` falls in the half-open window ``(now - window, now]``."""
    return now - window < due_at <= now


def _studio_zone(automation: Automation) -> ZoneInfo:
    return ZoneInfo(automation.studio_timezone)


def client_vars(automation: Automation, client: Recipient) -> dict[str, str]:
    return {
        "firstName": client.first_name,
        "lastName": client.last_name,
        "studioName": automation.studio_name,
    }


def booking_vars(automation: Automation, booking: BookingRecord) -> dict[str, str]:
    local_start = booking.start_time.astimezone(_studio_zone(automation))
    return {
        **client_vars(automation, booking.client),
        "className": booking.class_name,
        "classDate": date_label(local_start),
        "classTime": time_label(local_start),
        "locationName": booking.location_name,
        "teacherName": booking.teacher_name,
    }


def select_welcome(
    automation: Automation, store: AutomationStore, now: datetime, settings: EngineSettings
) -> list[Candidate]:
    clients = store.clients_created_since(automation.studio_id, now - settings.lookback)
    return [
        Candidate(
            client=client,
            vars=client_vars(automation, client),
            idempotency_key=idempotency_key(automation, "welcome", client.id),
            triggered_at=client.created_at or now,
        )
        for client in clients
    ]


def select_booking_confirmed(
    automation: Automation, store: AutomationStore, now: datetime, settings: EngineSettings
) -> list[Candidate]:
    bookings = store.find_bookings(
        automation.studio_id,
        statuses=[BookingStatus.CONFIRMED.value],
        created_since=now - settings.lookback,
        location_id=automation.location_id,
    )
    return [
        Candidate(
            client=booking.client,
            vars=booking_vars(automation, booking),
            idempotency_key=idempotency_key(automation, "booking_confirmed", booking.id),
            triggered_at=booking.created_at,
        )
        for booking in bookings
    ]


def select_booking_cancelled(
    automation: Automation, store: AutomationStore, now: datetime, settings: EngineSettings
) -> list[Candidate]:
    bookings = store.find_bookings(
        automation.studio_id,
        statuses=[BookingStatus.CANCELLED.value],
        cancelled_since=now - settings.lookback,
        location_id=automation.location_id,
    )
    return [
        Candidate(
            client=booking.client,
            vars=booking_vars(automation, booking),
            idempotency_key=idempotency_key(automation, "booking_cancelled", booking.id),
            triggered_at=booking.cancelled_at or booking.created_at,
        )
        for booking in bookings
    ]


def select_class_reminder(
    automation: Automation, store: AutomationStore, now: datetime, settings: EngineSettings
) -> list[Candidate]:
    hours = automation.reminder_hours
    if hours is None:
        hours = DEFAULT_REMINDER_HOURS
    lead = timedelta(hours=hours)
    bookings = store.find_bookings(
        automation.studio_id,
        statuses=[BookingStatus.CONFIRMED.value],
        starting_between=(now, now + settings.reminder_horizon),
        location_id=automation.location_id,
    )
    candidates = []
    for booking in bookings:
        due_at = booking.start_time - lead
        if not is_due(due_at, now, settings.window):
            continue
        candidates.append(
            Candidate(
                client=booking.client,
                vars=booking_vars(automation, booking),
                idempotency_key=idempotency_key(automation, "class_reminder", booking.id, hours),
                triggered_at=due_at,
            )
        )
    return candidates


def select_class_followup(
    automation: Automation, store: AutomationStore, now: datetime, settings: EngineSettings
) -> list[Candidate]:
    delay_minutes = automation.trigger_delay
    if delay_minutes is None:
        delay_minutes = DEFAULT_FOLLOWUP_DELAY_MINUTES
    delay = timedelta(minutes=delay_minutes)
    bookings = store.find_bookings(
        automation.studio_id,
        statuses=[BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value],
        ending_between=(now - delay - settings.window, now),
        location_id=automation.location_id,
    )
    candidates = []
    for booking in bookings:
        due_at = booking.end_time + delay
        if not is_due(due_at, now, settings.window):
            continue
        candidates.append(
            Candidate(
                client=booking.client,
                vars=booking_vars(automation, booking),
                idempotency_key=idempotency_key(
                    automation, "class_followup", booking.id, delay_minutes
                ),
                triggered_at=due_at,
            )
        )
    return candidates


def select_client_inactive(
    automation: Automation, store: AutomationStore, now: datetime, settings: EngineSettings
) -> list[Candidate]:
    days = automation.trigger_days
    if days is None:
        days = DEFAULT_INACTIVE_DAYS
    cutoff = now - timedelta(days=days)
    # One message per client per cutoff day, however often the engine runs.
    bucket = cutoff.date()
    triggered_at = datetime.combine(bucket, time.min, tzinfo=cutoff.tzinfo)
    return [
        Candidate(
            client=client,
            vars=client_vars(automation, client),
            idempotency_key=idempotency_key(
                automation, "client_inactive", client.id, bucket.isoformat()
            ),
            triggered_at=triggered_at,
        )
        for client in store.clients_without_bookings_since(automation.studio_id, cutoff)
    ]


def birthday_days(month: int, day: int, year: int) -> list[int]:
    """Birthday days of month to celebrate on the given date.

    Feb 29 birthdays are celebrated on Feb 28 in non-leap years.
    """
    if month == 2 and day == 28 and not calendar.isleap(year):
        return [28, 29]
    return [day]


def select_birthday(
    automation: Automation, store: AutomationStore, now: datetime, settings: EngineSettings
) -> list[Candidate]:
    zone = _studio_zone(automation)
    today = now.astimezone(zone).date()
    clients = store.clients_with_birthday(
        automation.studio_id, today.month, birthday_days(today.month, today.day, today.year)
    )
    triggered_at = datetime.combine(today, time.min, tzinfo=zone)
    return [
        Candidate(
            client=client,
            vars=client_vars(automation, client),
            idempotency_key=idempotency_key(automation, "birthday", client.id, today.year),
            triggered_at=triggered_at,
        )
        for client in clients
    ]


def select_membership_expiring(
    automation: Automation, store: AutomationStore, now: datetime, settings: EngineSettings
) -> list[Candidate]:
    days = automation.trigger_days
    if days is None:
        days = DEFAULT_MEMBERSHIP_DAYS
    notice = timedelta(days=days)
    zone = _studio_zone(automation)
    candidates = []
    for subscription in store.expiring_subscriptions(automation.studio_id, now, now + notice):
        period_end = subscription.current_period_end
        candidates.append(
            Candidate(
                client=subscription.client,
                vars={
                    **client_vars(automation, subscription.client),
                    "membershipEndDate": date_label(period_end.astimezone(zone)),
                },
                idempotency_key=idempotency_key(
                    automation,
                    "membership_expiring",
                    subscription.id,
                    period_end.date().isoformat(),
                ),
                triggered_at=period_end - notice,
            )
        )
    return candidates


TRIGGER_SELECTORS: dict[Trigger, Selector] = {
    Trigger.WELCOME: select_welcome,
    Trigger.BOOKING_CONFIRMED: select_booking_confirmed,
    Trigger.BOOKING_CANCELLED: select_booking_cancelled,
    Trigger.CLASS_REMINDER: select_class_reminder,
    Trigger.CLASS_FOLLOWUP: select_class_followup,
    Trigger.CLIENT_INACTIVE: select_client_inactive,
    Trigger.BIRTHDAY: select_birthday,
    Trigger.MEMBERSHIP_EXPIRING: select_membership_expiring,
}
