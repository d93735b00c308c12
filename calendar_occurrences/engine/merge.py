"""Merging of all sources into one sorted, wire-formatted occurrence list."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any

from ._serialization import wire_fields
from .adapters import ReminderSource, SourceAdapter, StandaloneSource, TaskSource
from .const import (
    ALL_DAY_FORMAT,
    DEFAULT_EXCLUDED_STATUSES,
    MAX_OCCURRENCES_PER_ENTITY,
    STATUS_COMPLETED,
    TIMED_FORMAT,
)
from .generator import generate
from .models import DateOrDatetime, Occurrence, SourceRows, resolve_zone

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpansionOptions:
    """Policy knobs for one expansion run."""

    excluded_statuses: frozenset[str] = DEFAULT_EXCLUDED_STATUSES
    include_completed: bool = True
    max_occurrences: int = MAX_OCCURRENCES_PER_ENTITY
    timezone: str | None = None

    @property
    def effective_excluded_statuses(self) -> frozenset[str]:
        """Statuses kept off the calendar once the completed flag is applied."""
        if self.include_completed:
            return self.excluded_statuses
        return self.excluded_statuses | {STATUS_COMPLETED}


DEFAULT_OPTIONS = ExpansionOptions()


def adapters_for(options: ExpansionOptions) -> dict[str, SourceAdapter]:
    """The closed set of source variants keyed by their row category."""
    excluded = options.effective_excluded_statuses
    return {
        "events": StandaloneSource(),
        "tasks": TaskSource(excluded_statuses=excluded),
        "reminders": ReminderSource(excluded_statuses=excluded),
    }


def expand_rows(
    rows: SourceRows,
    window_start: datetime,
    window_end: datetime,
    *,
    options: ExpansionOptions = DEFAULT_OPTIONS,
) -> list[Occurrence]:
    """Expand every row of every category into occurrences, sorted by start.

    All-day dates sort at midnight in the viewer's zone (``options.timezone``)
    so they lead the day they are displayed on. Ties on start are broken by
    anchor id so the output order is fully deterministic.
    """
    occurrences: list[Occurrence] = []
    for category, adapter in adapters_for(options).items():
        for raw in getattr(rows, category):
            row = _coerce_row(adapter, raw)
            if row is None:
                continue
            entity = adapter.to_entity(row)
            if entity is None:
                continue
            for span in generate(
                entity, window_start, window_end, max_occurrences=options.max_occurrences
            ):
                occurrences.append(adapter.to_occurrence(row, entity, span))

    tz = resolve_zone(options.timezone)
    occurrences.sort(key=lambda occ: _sort_key(occ, tz))
    return occurrences


def build_occurrences(
    rows: SourceRows,
    window_start: datetime,
    window_end: datetime,
    *,
    options: ExpansionOptions = DEFAULT_OPTIONS,
) -> list[dict[str, Any]]:
    """Expand ``rows`` and serialise each occurrence for the read endpoint."""
    tz = resolve_zone(options.timezone)
    return [
        serialize_occurrence(occ, tz)
        for occ in expand_rows(rows, window_start, window_end, options=options)
    ]


def format_instant(value: DateOrDatetime, tz: tzinfo | None = None) -> str:
    """Wire representation of one occurrence boundary.

    All-day dates are written as ``YYYY-MM-DD`` untouched by any timezone;
    timed instants as ``YYYY-MM-DD HH:mm`` in the viewer's zone.
    """
    if not isinstance(value, datetime):
        return value.strftime(ALL_DAY_FORMAT)
    return value.astimezone(tz or resolve_zone(None)).strftime(TIMED_FORMAT)


def serialize_occurrence(occurrence: Occurrence, tz: tzinfo | None = None) -> dict[str, Any]:
    """JSON-ready dict with the camelCase field names clients expect."""
    return wire_fields(
        {
            "anchor_id": occurrence.anchor_id,
            "occurrence_id": occurrence.occurrence_id,
            "start": format_instant(occurrence.start, tz),
            "end": format_instant(occurrence.end, tz),
            "title": occurrence.title,
            "description": occurrence.description,
            "source_type": occurrence.source_type.value,
            "calendar_id": occurrence.calendar_id,
            "source_task_id": occurrence.source_task_id,
            "original_event_id": occurrence.original_event_id,
            "is_all_day": occurrence.is_all_day,
        }
    )


def _sort_key(occurrence: Occurrence, tz: tzinfo) -> tuple[datetime, str]:
    """Order by start, all-day dates taken as midnight in ``tz``."""
    start = occurrence.start
    if not isinstance(start, datetime):
        start = datetime.combine(start, datetime.min.time(), tzinfo=tz)
    return (start, occurrence.anchor_id)


def _coerce_row(adapter: SourceAdapter, raw: Any) -> Any | None:
    """Accept either a row dataclass or a storage mapping for ``adapter``."""
    if isinstance(raw, adapter.row_type):
        return raw
    if isinstance(raw, Mapping):
        try:
            return adapter.row_type.from_row(raw)
        except (KeyError, TypeError, ValueError):
            _LOGGER.warning(
                "Failed to read %s row %r",
                adapter.source_type.value,
                raw.get("id"),
                exc_info=True,
            )
            return None
    _LOGGER.warning(
        "Ignoring %s row of unexpected type %s",
        adapter.source_type.value,
        type(raw).__name__,
    )
    return None
