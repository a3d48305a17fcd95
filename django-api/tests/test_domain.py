"""Unit tests for domain primitives.

These test invariants that must hold at construction time and the pure
scheduling and templating helpers.
Run with: pytest tests/test_domain.py -v
"""

from datetime import UTC, date, datetime, time, timedelta
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from automations.domain.templates import date_label, render_template, text_to_html, time_label
from scheduling.domain import (
    BlockedTime,
    BulkTarget,
    Capacity,
    ClassSession,
    ClassTypeId,
    ConflictKind,
    LocationId,
    RecurrenceRule,
    RecurringGroupId,
    SessionId,
    StudioId,
    TeacherId,
    TimeRange,
)
from scheduling.domain.conflicts import blocked_time_conflicts, series_overlap_conflicts, session_conflicts
from scheduling.domain.recurrence import parse_clock_time, sunday_first_weekday


def at(hour: int, minute: int = 0, day: int = 1) -> datetime:
    return datetime(2024, 1, day, hour, minute, tzinfo=UTC)


def make_session(start: datetime, end: datetime, teacher: TeacherId, location: LocationId) -> ClassSession:
    return ClassSession(
        id=SessionId(uuid4()),
        studio_id=StudioId(uuid4()),
        class_type_id=ClassTypeId(uuid4()),
        teacher_id=teacher,
        location_id=location,
        start_time=start,
        end_time=end,
        capacity=Capacity(10),
    )


class TestCapacity:
    """Tests for Capacity value object."""

    def test_capacity_accepts_zero(self):
        assert Capacity(0).value == 0

    def test_capacity_rejects_negative(self):
        """Capacity raises ValueError for negative values."""
        with pytest.raises(ValueError):
            Capacity(-1)


class TestIdentifiers:
    def test_from_string_round_trips(self):
        raw = str(uuid4())
        assert str(TeacherId.from_string(raw)) == raw

    def test_from_string_rejects_garbage(self):
        with pytest.raises(ValueError):
            StudioId.from_string("not-a-uuid")


class TestTimeRange:
    """Tests for the half-open TimeRange."""

    def test_rejects_end_before_start(self):
        with pytest.raises(ValueError):
            TimeRange(start=at(10), end=at(9))

    def test_rejects_empty_range(self):
        with pytest.raises(ValueError):
            TimeRange(start=at(10), end=at(10))

    def test_rejects_naive_datetimes(self):
        with pytest.raises(ValueError):
            TimeRange(start=datetime(2024, 1, 1, 9), end=datetime(2024, 1, 1, 10))

    def test_back_to_back_ranges_do_not_overlap(self):
        """A class ending at 10:00 does not clash with one starting at 10:00."""
        assert not TimeRange(at(9), at(10)).overlaps(TimeRange(at(10), at(11)))

    def test_partial_overlap(self):
        assert TimeRange(at(9), at(10)).overlaps(TimeRange(at(9, 30), at(10, 30)))

    def test_containment_overlaps(self):
        assert TimeRange(at(8), at(12)).overlaps(TimeRange(at(9), at(10)))

    def test_starting_at(self):
        assert TimeRange.starting_at(at(9), 45).end == at(9, 45)


class TestBulkTarget:
    def test_requires_exactly_one_selector(self):
        with pytest.raises(ValueError):
            BulkTarget()
        with pytest.raises(ValueError):
            BulkTarget(session_ids=(SessionId(uuid4()),), recurring_group_id=RecurringGroupId(uuid4()))

    def test_accepts_group(self):
        target = BulkTarget(recurring_group_id=RecurringGroupId(uuid4()), future_only=True)
        assert target.future_only


class TestRecurrenceRule:
    """Tests for weekly recurrence expansion (0 = Sunday ... 6 = Saturday)."""

    def test_parse_clock_time(self):
        assert parse_clock_time("07:05") == time(7, 5)
        with pytest.raises(ValueError):
            parse_clock_time("25:00")

    def test_sunday_is_zero(self):
        assert sunday_first_weekday(date(2024, 1, 7)) == 0
        assert sunday_first_weekday(date(2024, 1, 6)) == 6

    def test_rejects_invalid_weekday(self):
        with pytest.raises(ValueError):
            RecurrenceRule(days=(7,), end_date=date(2024, 1, 31), start_at=time(9), duration_minutes=60)

    def test_rejects_empty_days(self):
        with pytest.raises(ValueError):
            RecurrenceRule(days=(), end_date=date(2024, 1, 31), start_at=time(9), duration_minutes=60)

    def test_rejects_non_positive_duration(self):
        with pytest.raises(ValueError):
            RecurrenceRule(days=(1,), end_date=date(2024, 1, 31), start_at=time(9), duration_minutes=0)

    def test_dates_include_end_date(self):
        """Mondays and Wednesdays from Mon Jan 1 through Wed Jan 10 inclusive."""
        rule = RecurrenceRule(days=(1, 3), end_date=date(2024, 1, 10), start_at=time(9), duration_minutes=60)
        assert rule.dates(date(2024, 1, 1)) == [
            date(2024, 1, 1),
            date(2024, 1, 3),
            date(2024, 1, 8),
            date(2024, 1, 10),
        ]

    def test_skip_first_starts_next_day(self):
        rule = RecurrenceRule(
            days=(1, 3), end_date=date(2024, 1, 10), start_at=time(9), duration_minutes=60, skip_first=True
        )
        assert rule.dates(date(2024, 1, 1))[0] == date(2024, 1, 3)

    def test_end_before_start_yields_nothing(self):
        rule = RecurrenceRule(days=(1,), end_date=date(2023, 12, 1), start_at=time(9), duration_minutes=60)
        assert rule.dates(date(2024, 1, 1)) == []

    def test_expand_uses_local_wall_clock(self):
        """Occurrences keep 09:00 local time across a DST change."""
        tz = ZoneInfo("America/New_York")
        rule = RecurrenceRule(days=(1,), end_date=date(2024, 3, 11), start_at=time(9), duration_minutes=60)
        occurrences = rule.expand(datetime(2024, 3, 4, 14, 0, tzinfo=UTC), tz)
        assert [o.time_range.start.astimezone(tz).hour for o in occurrences] == [9, 9]
        assert occurrences[0].time_range.start.astimezone(UTC).hour == 14
        assert occurrences[1].time_range.start.astimezone(UTC).hour == 13
        assert occurrences[0].time_range.duration == timedelta(minutes=60)

    def test_fall_back_occurrence_keeps_real_duration(self):
        """A 60 minute class at 01:30 on the fall-back day lasts 60 real minutes."""
        tz = ZoneInfo("America/New_York")
        rule = RecurrenceRule(days=(0,), end_date=date(2024, 11, 3), start_at=time(1, 30), duration_minutes=60)
        [occurrence] = rule.expand(datetime(2024, 11, 3, 4, 0, tzinfo=UTC), tz)
        start, end = occurrence.time_range.start, occurrence.time_range.end
        assert start.astimezone(UTC) == datetime(2024, 11, 3, 5, 30, tzinfo=UTC)
        assert end.astimezone(UTC) - start.astimezone(UTC) == timedelta(minutes=60)

    def test_spring_forward_occurrence_keeps_real_duration(self):
        tz = ZoneInfo("America/New_York")
        rule = RecurrenceRule(days=(0,), end_date=date(2024, 3, 10), start_at=time(1, 30), duration_minutes=60)
        [occurrence] = rule.expand(datetime(2024, 3, 10, 5, 0, tzinfo=UTC), tz)
        assert occurrence.time_range.end.astimezone(UTC) == datetime(2024, 3, 10, 7, 30, tzinfo=UTC)


class TestConflictDetection:
    """Tests for pure conflict detection."""

    def setup_method(self):
        self.teacher = TeacherId(uuid4())
        self.location = LocationId(uuid4())

    def test_teacher_conflict(self):
        existing = make_session(at(9), at(10), self.teacher, LocationId(uuid4()))
        [conflict] = session_conflicts(TimeRange(at(9, 30), at(10, 30)), self.teacher, self.location, [existing])
        assert conflict.kind is ConflictKind.TEACHER
        assert conflict.session_id == existing.id

    def test_location_conflict(self):
        existing = make_session(at(9), at(10), TeacherId(uuid4()), self.location)
        [conflict] = session_conflicts(TimeRange(at(9), at(10)), self.teacher, self.location, [existing])
        assert conflict.kind is ConflictKind.LOCATION

    def test_unrelated_session_is_ignored(self):
        existing = make_session(at(9), at(10), TeacherId(uuid4()), LocationId(uuid4()))
        assert session_conflicts(TimeRange(at(9), at(10)), self.teacher, self.location, [existing]) == []

    def test_adjacent_session_is_not_a_conflict(self):
        existing = make_session(at(9), at(10), self.teacher, self.location)
        assert session_conflicts(TimeRange(at(10), at(11)), self.teacher, self.location, [existing]) == []

    def test_blocked_time_conflict(self):
        block = BlockedTime(id="b1", teacher_id=self.teacher, start_time=at(12), end_time=at(14), reason="Dentist")
        [conflict] = blocked_time_conflicts(TimeRange(at(13), at(15)), self.teacher, [block])
        assert conflict.kind is ConflictKind.BLOCKED_TIME
        assert conflict.blocked_time_id == "b1"
        assert conflict.reason == "Dentist"

    def test_blocked_time_for_other_teacher_is_ignored(self):
        block = BlockedTime(id="b1", teacher_id=TeacherId(uuid4()), start_time=at(12), end_time=at(14), reason="")
        assert blocked_time_conflicts(TimeRange(at(13), at(15)), self.teacher, [block]) == []

    def test_series_overlap_against_accepted_occurrences(self):
        accepted = [TimeRange(at(9), at(11)), TimeRange(at(12), at(13))]
        [conflict] = series_overlap_conflicts(TimeRange(at(10), at(12)), accepted)
        assert conflict.kind is ConflictKind.SERIES_OVERLAP
        assert conflict.start_time == at(9)
        assert series_overlap_conflicts(TimeRange(at(11), at(12)), accepted) == []


class TestTemplates:
    """Tests for message template rendering."""

    def test_renders_known_and_blanks_unknown_variables(self):
        rendered = render_template("Hi {{firstName}}, see you at {{className}}", {"firstName": "Ana"})
        assert rendered == "Hi Ana, see you at "

    def test_leaves_text_without_placeholders(self):
        assert render_template("Hello there", {"firstName": "Ana"}) == "Hello there"

    def test_text_to_html_escapes_and_breaks_lines(self):
        assert text_to_html("a < b\nnext") == "<p>a &lt; b<br>next</p>"

    def test_labels(self):
        value = datetime(2024, 1, 1, 9, 5, tzinfo=UTC)
        assert date_label(value) == "Monday, January 1, 2024"
        assert time_label(value) == "9:05 AM"
        assert time_label(value.replace(hour=0)) == "12:05 AM"
        assert time_label(value.replace(hour=12)) == "12:05 PM"
        assert time_label(value.replace(hour=17)) == "5:05 PM"
