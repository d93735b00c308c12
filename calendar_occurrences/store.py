"""Owner-scoped access to stored anchor rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Protocol

from .engine import ReminderRow, SourceRows, StandaloneEventRow, TaskRow
from .engine.models import as_instant

_LOGGER = logging.getLogger(__name__)


class RowStore(Protocol):
    """Read-only storage collaborator consumed by the range query."""

    async def async_fetch_rows(
        self, owner_id: str, window_start: datetime, window_end: datetime
    ) -> SourceRows:
        """Return the owner's rows that could produce an occurrence in the window."""

    async def async_get_timezone(self, owner_id: str) -> str | None:
        """Return the owner's configured display timezone, if any."""


def event_may_occur(row: StandaloneEventRow, window_start: datetime, window_end: datetime) -> bool:
    """Storage-level prefilter for standalone events.

    Deliberately wider than the generator: any anchor starting before the
    window end is kept if it recurs, unless its rule end date (plus one
    occurrence length) lies before the window. Open-ended recurring anchors
    are kept however old they are.
    """
    if row.start_at is None:
        return False
    start = as_instant(row.start_at.date()) if row.is_all_day else row.start_at
    if start >= window_end:
        return False
    length = _occurrence_length(row)
    if row.recurrence_rule:
        if row.recurrence_end_date is None:
            return True
        last_start = row.recurrence_end_date
        if row.is_all_day:
            last_start = as_instant(last_start.date())
        return last_start + length >= window_start
    return start + length >= window_start


def _occurrence_length(row: StandaloneEventRow) -> timedelta:
    """Length of one occurrence, measured the way the generator measures it."""
    if row.end_at is None or row.start_at is None:
        return timedelta(0)
    if row.is_all_day:
        return timedelta(days=max((row.end_at.date() - row.start_at.date()).days, 0))
    return max(row.end_at - row.start_at, timedelta(0))


def _instant_in_window(when: datetime | None, window_start: datetime, window_end: datetime) -> bool:
    return when is not None and window_start <= when < window_end


@dataclass
class _OwnerRows:
    events: dict[str, StandaloneEventRow] = field(default_factory=dict)
    tasks: dict[str, TaskRow] = field(default_factory=dict)
    reminders: dict[str, ReminderRow] = field(default_factory=dict)
    timezone: str | None = None


class InMemoryRowStore:
    """A :class:`RowStore` holding rows in process memory.

    Rows are kept per owner and keyed by id, so adding a row with an existing
    id replaces the previous snapshot.
    """

    def __init__(self) -> None:
        self._owners: dict[str, _OwnerRows] = {}

    def add_rows(
        self,
        owner_id: str,
        *,
        events: Iterable[StandaloneEventRow | Mapping[str, Any]] = (),
        tasks: Iterable[TaskRow | Mapping[str, Any]] = (),
        reminders: Iterable[ReminderRow | Mapping[str, Any]] = (),
    ) -> None:
        """Store rows for ``owner_id``; mappings are read with ``from_row``."""
        owner = self._owners.setdefault(owner_id, _OwnerRows())
        for row in events:
            event = row if isinstance(row, StandaloneEventRow) else StandaloneEventRow.from_row(row)
            owner.events[event.id] = event
        for row in tasks:
            task = row if isinstance(row, TaskRow) else TaskRow.from_row(row)
            owner.tasks[task.id] = task
        for row in reminders:
            reminder = row if isinstance(row, ReminderRow) else ReminderRow.from_row(row)
            owner.reminders[reminder.id] = reminder

    def set_timezone(self, owner_id: str, timezone: str | None) -> None:
        """Set the display timezone configured by ``owner_id``."""
        self._owners.setdefault(owner_id, _OwnerRows()).timezone = timezone

    async def async_fetch_rows(
        self, owner_id: str, window_start: datetime, window_end: datetime
    ) -> SourceRows:
        owner = self._owners.get(owner_id)
        if owner is None:
            return SourceRows()

        rows = SourceRows.of(
            events=(
                ev for ev in owner.events.values()
                if event_may_occur(ev, window_start, window_end)
            ),
            tasks=(
                task for task in owner.tasks.values()
                if _instant_in_window(task.deadline, window_start, window_end)
            ),
            reminders=(
                rem for rem in owner.reminders.values()
                if _instant_in_window(rem.remind_at, window_start, window_end)
            ),
        )
        _LOGGER.debug(
            "Fetched %d events, %d tasks, %d reminders for %s",
            len(rows.events), len(rows.tasks), len(rows.reminders), owner_id,
        )
        return rows

    async def async_get_timezone(self, owner_id: str) -> str | None:
        owner = self._owners.get(owner_id)
        return owner.timezone if owner else None
