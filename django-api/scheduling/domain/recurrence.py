"""Recurring schedule rules and their expansion into concrete occurrences."""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

from scheduling.domain.value_objects import TimeRange

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

# Weekday numbering follows the client calendar widgets: 0 = Sunday ... 6 = Saturday.
SUNDAY_FIRST_WEEKDAYS = range(7)


def parse_clock_time(value: str) -> time:
    """Parse an ``HH:MM`` 24-hour clock string."""
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def sunday_first_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class Occurrence:
    date: date
    time_range: TimeRange


@dataclass(frozen=True)
class RecurrenceRule:
    """Weekly recurrence: the given weekdays at a fixed local time until an end date."""

    days: tuple[int, ...]
    end_date: date
    start_at: time
    duration_minutes: int
    skip_first: bool = False

    def __post_init__(self) -> None:
        if not self.days:
            raise ValueError("At least one weekday is required")
        if any(day not in SUNDAY_FIRST_WEEKDAYS for day in self.days):
            raise ValueError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
        if self.duration_minutes <= 0:
            raise ValueError("Duration must be positive")

    def dates(self, first_day: date) -> list[date]:
        """Every matching calendar date from ``first_day`` through ``end_date`` inclusive."""
        current = first_day + timedelta(days=1) if self.skip_first else first_day
        wanted = set(self.days)
        matched = []
        while current <= self.end_date:
            if sunday_first_weekday(current) in wanted:
                matched.append(current)
            current += timedelta(days=1)
        return matched

    def expand(self, first_start: datetime, tz: tzinfo) -> list[Occurrence]:
        """Expand into occurrences anchored at ``first_start``'s local date in ``tz``."""
        first_day = first_start.astimezone(tz).date()
        occurrences = []
        for day in self.dates(first_day):
            # Local wall-clock start; starting_at adds the duration in UTC.
            start = datetime.combine(day, self.start_at, tzinfo=tz)
            occurrences.append(
                Occurrence(date=day, time_range=TimeRange.starting_at(start, self.duration_minutes))
            )
        return occurrences
