"""Data models for stored anchor rows and generated occurrences."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, NamedTuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.parser import isoparse

from ._serialization import row_fields
from .const import DEFAULT_TIMEZONE

_LOGGER = logging.getLogger(__name__)

DateOrDatetime = Union[date, datetime]


class Frequency(enum.Enum):
    """Recurrence frequencies offered by the event form."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class SourceType(enum.Enum):
    """Kind of stored anchor an occurrence was generated from."""

    STANDALONE = "STANDALONE"
    TASK = "TASK"
    REMINDER = "REMINDER"


@dataclass(frozen=True)
class Rule:
    """A parsed recurrence rule. Only the bare frequency is supported."""

    frequency: Frequency


# --------------------------------------------------------------------------- #
#  Instant helpers
# --------------------------------------------------------------------------- #


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def as_instant(value: DateOrDatetime) -> datetime:
    """Normalise a span boundary to a comparable UTC instant.

    All-day boundaries are calendar dates; they are pinned to UTC midnight
    so they can be ordered against timed occurrences and window bounds.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    return datetime.combine(value, datetime.min.time(), tzinfo=timezone.utc)


def resolve_zone(name: str | None) -> ZoneInfo:
    """Look up an IANA zone, falling back to UTC for unknown names."""
    if not name:
        return ZoneInfo(DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        _LOGGER.debug("Unknown timezone %r, using %s", name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def parse_instant(value: Any) -> datetime | None:
    """Parse a stored instant (datetime, date or ISO-8601 string).

    Returns None for missing or unparseable values so callers can treat the
    row as having no schedulable date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return as_instant(value)
    if isinstance(value, str):
        try:
            return to_utc(isoparse(value))
        except (ValueError, OverflowError):
            _LOGGER.debug("Ignoring unparseable instant: %r", value)
            return None
    _LOGGER.debug("Ignoring instant of unsupported type %s", type(value).__name__)
    return None


# --------------------------------------------------------------------------- #
#  Stored rows
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class StandaloneEventRow:
    """A calendar event created directly by the user."""

    id: str
    title: str = ""
    description: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    is_all_day: bool = False
    color: str | None = None
    recurrence_rule: str | None = None
    recurrence_end_date: datetime | None = None
    timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_row(cls, data: Mapping[str, Any]) -> StandaloneEventRow:
        """Construct from a storage row with camelCase or snake_case keys."""
        fields = row_fields(data)
        return cls(
            id=str(fields["id"]),
            title=fields.get("title") or "",
            description=fields.get("description"),
            start_at=parse_instant(fields.get("start_at")),
            end_at=parse_instant(fields.get("end_at")),
            is_all_day=bool(fields.get("is_all_day", False)),
            color=fields.get("color") or None,
            recurrence_rule=fields.get("recurrence_rule"),
            recurrence_end_date=parse_instant(fields.get("recurrence_end_date")),
            timezone=fields.get("timezone") or DEFAULT_TIMEZONE,
        )


@dataclass(frozen=True)
class TaskRow:
    """A task; it reaches the calendar through its deadline."""

    id: str
    title: str = ""
    deadline: datetime | None = None
    status: str | None = None
    description: str | None = None

    @classmethod
    def from_row(cls, data: Mapping[str, Any]) -> TaskRow:
        """Construct from a storage row with camelCase or snake_case keys."""
        fields = row_fields(data)
        return cls(
            id=str(fields["id"]),
            title=fields.get("title") or "",
            deadline=parse_instant(fields.get("deadline")),
            status=fields.get("status"),
            description=fields.get("description"),
        )


@dataclass(frozen=True)
class ReminderRow:
    """A reminder; it reaches the calendar through its remind-at instant."""

    id: str
    title: str = ""
    remind_at: datetime | None = None
    description: str | None = None
    status: str | None = None

    @classmethod
    def from_row(cls, data: Mapping[str, Any]) -> ReminderRow:
        """Construct from a storage row with camelCase or snake_case keys."""
        fields = row_fields(data)
        return cls(
            id=str(fields["id"]),
            title=fields.get("title") or "",
            remind_at=parse_instant(fields.get("remind_at")),
            description=fields.get("description"),
            status=fields.get("status"),
        )


@dataclass(frozen=True)
class SourceRows:
    """Owner-scoped rows fetched for one range query."""

    events: tuple[StandaloneEventRow | Mapping[str, Any], ...] = field(default_factory=tuple)
    tasks: tuple[TaskRow | Mapping[str, Any], ...] = field(default_factory=tuple)
    reminders: tuple[ReminderRow | Mapping[str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def of(
        cls,
        *,
        events: Iterable[Any] = (),
        tasks: Iterable[Any] = (),
        reminders: Iterable[Any] = (),
    ) -> SourceRows:
        """Build from any iterables of rows or row mappings."""
        return cls(events=tuple(events), tasks=tuple(tasks), reminders=tuple(reminders))


# --------------------------------------------------------------------------- #
#  Engine shapes
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class BaseRecurringEntity:
    """The generator's only input shape.

    For all-day entities ``start_at``/``end_at`` carry the calendar date as
    UTC midnight; the time-of-day is ignored.
    """

    start_at: datetime
    end_at: datetime | None = None
    is_all_day: bool = False
    recurrence_rule: Rule | None = None
    recurrence_end_date: datetime | None = None
    timezone: str = DEFAULT_TIMEZONE

    @property
    def is_recurring(self) -> bool:
        """Whether this entity expands into more than one occurrence."""
        return self.recurrence_rule is not None

    @property
    def duration(self) -> timedelta:
        """Length of each occurrence; zero when the anchor has no end."""
        if self.end_at is None:
            return timedelta(0)
        return self.end_at - self.start_at


class Span(NamedTuple):
    """One generated ``(start, end)`` pair.

    Both bounds are ``date`` for all-day entities and UTC-aware ``datetime``
    otherwise.
    """

    start: DateOrDatetime
    end: DateOrDatetime


@dataclass(frozen=True)
class Occurrence:
    """One concrete, dated instance of an anchor inside a query window."""

    anchor_id: str
    occurrence_id: str
    start: DateOrDatetime
    end: DateOrDatetime
    title: str
    description: str | None
    source_type: SourceType
    calendar_id: str
    source_task_id: str | None = None
    is_all_day: bool = False

    @property
    def original_event_id(self) -> str:
        """Alias of ``anchor_id`` used by clients to address the anchor."""
        return self.anchor_id
