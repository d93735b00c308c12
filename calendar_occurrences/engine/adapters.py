"""Adapters between stored anchor rows and the generator's common shapes.

Each source kind is one variant of a closed set. A variant knows how to turn
its row into a :class:`BaseRecurringEntity` and how to turn a generated
:class:`Span` back into an :class:`Occurrence`. Nothing downstream of the
adapters looks at the variant itself.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Protocol

from .const import (
    CALENDAR_REMINDER,
    CALENDAR_STANDALONE,
    CALENDAR_TASK,
    DEFAULT_EXCLUDED_STATUSES,
)
from .models import (
    BaseRecurringEntity,
    DateOrDatetime,
    Occurrence,
    ReminderRow,
    SourceType,
    Span,
    StandaloneEventRow,
    TaskRow,
    as_instant,
)
from .rules import parse_rule

_LOGGER = logging.getLogger(__name__)


class SourceAdapter(Protocol):
    """Two-function contract shared by every source variant."""

    source_type: ClassVar[SourceType]
    row_type: ClassVar[type]

    def to_entity(self, row: Any) -> BaseRecurringEntity | None:
        """Map a row to the generator input, or None if it is not schedulable."""

    def to_occurrence(self, row: Any, entity: BaseRecurringEntity, span: Span) -> Occurrence:
        """Map one generated span of ``row`` to an occurrence."""


def epoch_millis(value: DateOrDatetime) -> int:
    """Milliseconds since the Unix epoch; dates count from UTC midnight."""
    return int(as_instant(value).timestamp() * 1000)


def occurrence_id(anchor_id: str, entity: BaseRecurringEntity, span: Span) -> str:
    """Stable identity of one generated instance.

    Single occurrences reuse the anchor id; recurring ones append the
    instance's start so repeated range queries agree on ids.
    """
    if not entity.is_recurring:
        return anchor_id
    return f"{anchor_id}_{epoch_millis(span.start)}"


@dataclass(frozen=True)
class StandaloneSource:
    """Events the user put on the calendar directly."""

    source_type: ClassVar[SourceType] = SourceType.STANDALONE
    row_type: ClassVar[type] = StandaloneEventRow

    def to_entity(self, row: StandaloneEventRow) -> BaseRecurringEntity | None:
        if row.start_at is None:
            _LOGGER.debug("Event %s has no start, skipping", row.id)
            return None
        return BaseRecurringEntity(
            start_at=row.start_at,
            end_at=row.end_at,
            is_all_day=row.is_all_day,
            recurrence_rule=parse_rule(row.recurrence_rule),
            recurrence_end_date=row.recurrence_end_date,
            timezone=row.timezone,
        )

    def to_occurrence(
        self, row: StandaloneEventRow, entity: BaseRecurringEntity, span: Span
    ) -> Occurrence:
        return Occurrence(
            anchor_id=row.id,
            occurrence_id=occurrence_id(row.id, entity, span),
            start=span.start,
            end=span.end,
            title=row.title,
            description=row.description,
            source_type=self.source_type,
            calendar_id=row.color or CALENDAR_STANDALONE,
            is_all_day=entity.is_all_day,
        )


@dataclass(frozen=True)
class _PointInTimeSource(ABC):
    """Shared behaviour of anchors scheduled by a single instant."""

    excluded_statuses: frozenset[str] = DEFAULT_EXCLUDED_STATUSES

    source_type: ClassVar[SourceType]
    calendar_id: ClassVar[str]

    @abstractmethod
    def _when(self, row: Any) -> datetime | None:
        """The instant this row is scheduled at, if any."""

    def _source_task_id(self, row: Any) -> str | None:
        return None

    def to_entity(self, row: Any) -> BaseRecurringEntity | None:
        when = self._when(row)
        if when is None:
            _LOGGER.debug("%s %s has no date, skipping", self.source_type.value, row.id)
            return None
        if row.status is not None and row.status in self.excluded_statuses:
            _LOGGER.debug(
                "%s %s excluded by status %s", self.source_type.value, row.id, row.status
            )
            return None
        return BaseRecurringEntity(start_at=when, end_at=when)

    def to_occurrence(self, row: Any, entity: BaseRecurringEntity, span: Span) -> Occurrence:
        return Occurrence(
            anchor_id=row.id,
            occurrence_id=occurrence_id(row.id, entity, span),
            start=span.start,
            end=span.end,
            title=row.title,
            description=row.description,
            source_type=self.source_type,
            calendar_id=self.calendar_id,
            source_task_id=self._source_task_id(row),
        )


@dataclass(frozen=True)
class TaskSource(_PointInTimeSource):
    """Tasks appear on their deadline and never recur."""

    source_type: ClassVar[SourceType] = SourceType.TASK
    row_type: ClassVar[type] = TaskRow
    calendar_id: ClassVar[str] = CALENDAR_TASK

    def _when(self, row: TaskRow) -> datetime | None:
        return row.deadline

    def _source_task_id(self, row: TaskRow) -> str | None:
        return row.id


@dataclass(frozen=True)
class ReminderSource(_PointInTimeSource):
    """Reminders appear at their remind-at instant and never recur."""

    source_type: ClassVar[SourceType] = SourceType.REMINDER
    row_type: ClassVar[type] = ReminderRow
    calendar_id: ClassVar[str] = CALENDAR_REMINDER

    def _when(self, row: ReminderRow) -> datetime | None:
        return row.remind_at
