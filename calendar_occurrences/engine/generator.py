"""Expansion of a single anchor into the spans that fall inside a window."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable

from dateutil.relativedelta import relativedelta

from .const import MAX_OCCURRENCES_PER_ENTITY
from .models import (
    BaseRecurringEntity,
    DateOrDatetime,
    Frequency,
    Span,
    as_instant,
    resolve_zone,
    to_utc,
)

_LOGGER = logging.getLogger(__name__)

_STEP_UNITS: dict[Frequency, str] = {
    Frequency.DAILY: "days",
    Frequency.WEEKLY: "weeks",
    Frequency.MONTHLY: "months",
    Frequency.YEARLY: "years",
}


def generate(
    entity: BaseRecurringEntity,
    window_start: datetime,
    window_end: datetime,
    *,
    max_occurrences: int = MAX_OCCURRENCES_PER_ENTITY,
) -> list[Span]:
    """Return the spans of ``entity`` overlapping ``[window_start, window_end)``.

    A span overlaps when ``start < window_end`` and ``end >= window_start``.
    Recurring entities are stepped from their anchor by whole periods; the
    first candidate is located arithmetically so the work done is
    proportional to the spans emitted, not to how long ago the anchor
    started.

    Monthly and yearly steps are always taken from the anchor, and a day
    that does not exist in the target month is clamped to that month's last
    day: an anchor on Jan 31 yields Feb 29 (leap year), Mar 31, Apr 30, ...

    All-day entities are stepped as calendar dates and produce ``date``
    spans. Timed entities are stepped in their own timezone's wall clock,
    so a 10:00 meeting stays at 10:00 across DST changes, and produce UTC
    ``datetime`` spans.
    """
    window_start = to_utc(window_start)
    window_end = to_utc(window_end)
    if window_start >= window_end:
        return []

    origin: DateOrDatetime
    to_instant: Callable[[DateOrDatetime], datetime]
    if entity.is_all_day:
        origin = entity.start_at.date()
        length = _all_day_length(entity)
        to_instant = as_instant
    else:
        origin = entity.start_at.astimezone(resolve_zone(entity.timezone))
        length = max(entity.duration, timedelta(0))
        to_instant = to_utc

    def overlaps(span: Span) -> bool:
        return to_instant(span.start) < window_end and to_instant(span.end) >= window_start

    if entity.recurrence_rule is None:
        span = _make_span(origin, length, entity.is_all_day)
        return [span] if overlaps(span) else []

    frequency = entity.recurrence_rule.frequency
    until = entity.recurrence_end_date
    index = _first_index(origin, window_start - length, frequency, entity.is_all_day)

    spans: list[Span] = []
    while True:
        try:
            candidate = _step(origin, frequency, index)
        except (OverflowError, ValueError):
            _LOGGER.debug("Recurrence of %s left the supported date range", origin)
            break

        candidate_start = to_instant(candidate)
        if candidate_start >= window_end:
            break
        if until is not None and candidate_start > until:
            break

        try:
            span = _make_span(candidate, length, entity.is_all_day)
        except OverflowError:
            break
        if overlaps(span):
            if len(spans) >= max_occurrences:
                _LOGGER.debug(
                    "Truncated expansion of %s at %d occurrences", origin, max_occurrences
                )
                break
            spans.append(span)
        index += 1

    return spans


def _all_day_length(entity: BaseRecurringEntity) -> timedelta:
    """Whole days between the all-day start and end dates."""
    if entity.end_at is None:
        return timedelta(0)
    days = (entity.end_at.date() - entity.start_at.date()).days
    return timedelta(days=max(days, 0))


def _step(origin: DateOrDatetime, frequency: Frequency, index: int) -> DateOrDatetime:
    """The ``index``-th candidate start, measured from the anchor."""
    return origin + relativedelta(**{_STEP_UNITS[frequency]: index})


def _make_span(start: DateOrDatetime, length: timedelta, is_all_day: bool) -> Span:
    if is_all_day:
        return Span(start, start + length)
    start_utc = to_utc(start)  # type: ignore[arg-type]
    return Span(start_utc, start_utc + length)


def _first_index(
    origin: DateOrDatetime,
    lower: datetime,
    frequency: Frequency,
    is_all_day: bool,
) -> int:
    """Estimate the first candidate index whose start can reach ``lower``.

    The estimate is backed off by one step; the caller walks forward past any
    candidate that still ends before the window.
    """
    reference: date | datetime
    if is_all_day:
        reference = lower.date()
    else:
        reference = lower.astimezone(origin.tzinfo)  # type: ignore[union-attr]

    if reference <= origin:
        return 0

    if frequency is Frequency.DAILY:
        estimate = (reference - origin).days
    elif frequency is Frequency.WEEKLY:
        estimate = (reference - origin).days // 7
    elif frequency is Frequency.MONTHLY:
        estimate = (reference.year - origin.year) * 12 + reference.month - origin.month
    else:
        estimate = reference.year - origin.year

    return max(estimate - 1, 0)
