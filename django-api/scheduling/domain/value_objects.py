"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class _Identifier:
    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StudioId(_Identifier):
    """Unique identifier for a Studio (tenant)."""


@dataclass(frozen=True)
class SessionId(_Identifier):
    """Unique identifier for a ClassSession."""


@dataclass(frozen=True)
class TeacherId(_Identifier):
    """Unique identifier for a Teacher."""


@dataclass(frozen=True)
class LocationId(_Identifier):
    """Unique identifier for a Location."""


@dataclass(frozen=True)
class ClassTypeId(_Identifier):
    """Unique identifier for a ClassType."""


@dataclass(frozen=True)
class RecurringGroupId(_Identifier):
    """Identifier shared by every session expanded from one recurring request."""


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval ``[start, end)`` of aware datetimes."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeRange requires timezone-aware datetimes")
        if self.end <= self.start:
            raise ValueError("TimeRange end must be after start")

    @classmethod
    def starting_at(cls, start: datetime, minutes: int) -> Self:
        start = start.astimezone(UTC)
        return cls(start=start, end=start + timedelta(minutes=minutes))

    def overlaps(self, other: "TimeRange") -> bool:
        return self.start < other.end and self.end > other.start

    @property
    def duration(self) -> timedelta:
        return self.end.astimezone(UTC) - self.start.astimezone(UTC)
