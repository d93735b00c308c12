"""Tests for mapping stored rows to and from the generator's shapes."""

from __future__ import annotations

from dataclasses import replace

import pytest

from calendar_occurrences.engine import (
    Frequency,
    ReminderRow,
    ReminderSource,
    SourceType,
    StandaloneEventRow,
    StandaloneSource,
    TaskRow,
    TaskSource,
)
from calendar_occurrences.engine.adapters import _PointInTimeSource, epoch_millis, occurrence_id
from calendar_occurrences.engine.models import Span

from factories import make_allday_event, make_event, make_reminder, make_task, utc


# =========================================================================== #
#  1. Standalone events
# =========================================================================== #


class TestStandaloneSource:
    adapter = StandaloneSource()

    def test_fields_taken_from_row(self):
        row = make_event(recurrence_rule="FREQ=WEEKLY", timezone="Europe/Berlin")
        entity = self.adapter.to_entity(row)
        assert entity.start_at == row.start_at
        assert entity.end_at == row.end_at
        assert entity.recurrence_rule.frequency is Frequency.WEEKLY
        assert entity.timezone == "Europe/Berlin"
        assert entity.is_all_day is False

    def test_malformed_rule_is_not_recurring(self):
        entity = self.adapter.to_entity(make_event(recurrence_rule="FOO=BAR"))
        assert entity.recurrence_rule is None
        assert not entity.is_recurring

    def test_row_without_start_is_skipped(self):
        row = StandaloneEventRow(id="evt-x", title="No start")
        assert self.adapter.to_entity(row) is None

    def test_default_calendar_id(self):
        row = make_event()
        entity = self.adapter.to_entity(row)
        occ = self.adapter.to_occurrence(row, entity, Span(row.start_at, row.end_at))
        assert occ.calendar_id == "standalone"
        assert occ.source_type is SourceType.STANDALONE
        assert occ.source_task_id is None

    def test_color_token_becomes_calendar_id(self):
        row = make_event(color="#ff0000")
        entity = self.adapter.to_entity(row)
        occ = self.adapter.to_occurrence(row, entity, Span(row.start_at, row.end_at))
        assert occ.calendar_id == "#ff0000"

    def test_occurrence_copies_anchor_fields(self):
        row = make_event(title="Dinner", description="Table for two")
        entity = self.adapter.to_entity(row)
        occ = self.adapter.to_occurrence(row, entity, Span(row.start_at, row.end_at))
        assert occ.title == "Dinner"
        assert occ.description == "Table for two"
        assert occ.anchor_id == occ.original_event_id == "evt-1"
        assert occ.occurrence_id == "evt-1"

    def test_all_day_flag_carried(self):
        row = make_allday_event()
        entity = self.adapter.to_entity(row)
        occ = self.adapter.to_occurrence(
            row, entity, Span(row.start_at.date(), row.end_at.date())
        )
        assert occ.is_all_day is True

    def test_row_not_mutated(self):
        row = make_event(recurrence_rule="FREQ=DAILY")
        snapshot = replace(row)
        entity = self.adapter.to_entity(row)
        self.adapter.to_occurrence(row, entity, Span(row.start_at, row.end_at))
        assert row == snapshot


# =========================================================================== #
#  2. Tasks
# =========================================================================== #


class TestTaskSource:
    def test_deadline_becomes_point_in_time(self):
        row = make_task(deadline=utc(2024, 6, 20, 17))
        entity = TaskSource().to_entity(row)
        assert entity.start_at == entity.end_at == utc(2024, 6, 20, 17)
        assert entity.is_all_day is False
        assert entity.recurrence_rule is None

    def test_task_without_deadline_is_skipped(self):
        assert TaskSource().to_entity(make_task(deadline=None)) is None

    def test_archived_task_is_excluded_by_default(self):
        row = make_task(deadline=utc(2024, 6, 20), status="ARCHIVED")
        assert TaskSource().to_entity(row) is None

    def test_completed_task_included_by_default(self):
        row = make_task(deadline=utc(2024, 6, 20), status="COMPLETED")
        assert TaskSource().to_entity(row) is not None

    def test_completed_task_excluded_when_configured(self):
        adapter = TaskSource(excluded_statuses=frozenset({"ARCHIVED", "COMPLETED"}))
        row = make_task(deadline=utc(2024, 6, 20), status="COMPLETED")
        assert adapter.to_entity(row) is None

    def test_task_without_status_participates(self):
        row = make_task(deadline=utc(2024, 6, 20), status=None)
        assert TaskSource().to_entity(row) is not None

    def test_occurrence_fields(self):
        adapter = TaskSource()
        row = make_task(task_id="task-42", deadline=utc(2024, 6, 20, 17))
        entity = adapter.to_entity(row)
        occ = adapter.to_occurrence(row, entity, Span(row.deadline, row.deadline))
        assert occ.source_type is SourceType.TASK
        assert occ.calendar_id == "task"
        assert occ.source_task_id == "task-42"
        assert occ.occurrence_id == "task-42"
        assert occ.start == occ.end


# =========================================================================== #
#  3. Reminders
# =========================================================================== #


class TestReminderSource:
    def test_remind_at_becomes_point_in_time(self):
        row = make_reminder(remind_at=utc(2024, 6, 5, 8))
        entity = ReminderSource().to_entity(row)
        assert entity.start_at == entity.end_at == utc(2024, 6, 5, 8)

    def test_reminder_without_date_is_skipped(self):
        assert ReminderSource().to_entity(ReminderRow(id="rem-x")) is None

    def test_occurrence_fields(self):
        adapter = ReminderSource()
        row = make_reminder(remind_at=utc(2024, 6, 5, 8))
        entity = adapter.to_entity(row)
        occ = adapter.to_occurrence(row, entity, Span(row.remind_at, row.remind_at))
        assert occ.source_type is SourceType.REMINDER
        assert occ.calendar_id == "reminder"
        assert occ.source_task_id is None

    def test_archived_reminder_excluded(self):
        row = make_reminder(remind_at=utc(2024, 6, 5), status="ARCHIVED")
        assert ReminderSource().to_entity(row) is None


class TestPointInTimeBase:
    def test_base_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            _PointInTimeSource()

    def test_subclass_must_say_when(self):
        class NoDate(_PointInTimeSource):
            pass

        with pytest.raises(TypeError):
            NoDate()


# =========================================================================== #
#  4. Occurrence identity
# =========================================================================== #


class TestOccurrenceId:
    def test_recurring_id_combines_anchor_and_start(self):
        row = make_event(event_id="parent_123", recurrence_rule="FREQ=DAILY")
        entity = StandaloneSource().to_entity(row)
        start = utc(2024, 6, 12, 10)
        expected = f"parent_123_{int(start.timestamp() * 1000)}"
        assert occurrence_id(row.id, entity, Span(start, start)) == expected

    def test_all_day_id_uses_utc_midnight(self):
        row = make_allday_event(recurrence_rule="FREQ=WEEKLY")
        entity = StandaloneSource().to_entity(row)
        span = Span(utc(2024, 6, 22).date(), utc(2024, 6, 22).date())
        assert occurrence_id(row.id, entity, span) == f"evt-allday_{epoch_millis(utc(2024, 6, 22))}"

    def test_single_occurrence_reuses_anchor_id(self):
        row = make_event(event_id="evt-9")
        entity = StandaloneSource().to_entity(row)
        assert occurrence_id(row.id, entity, Span(row.start_at, row.end_at)) == "evt-9"

    def test_epoch_millis_of_known_instant(self):
        assert epoch_millis(utc(2024, 1, 1)) == 1704067200000


class TestRowConstruction:
    """Rows built from storage mappings with either key spelling."""

    def test_camel_case_event(self):
        row = StandaloneEventRow.from_row(
            {
                "id": 7,
                "title": "Review",
                "startAt": "2024-06-10T10:00:00Z",
                "endAt": "2024-06-10T11:00:00+00:00",
                "isAllDay": False,
                "recurrenceRule": "FREQ=MONTHLY",
                "recurrenceEndDate": None,
            }
        )
        assert row.id == "7"
        assert row.start_at == utc(2024, 6, 10, 10)
        assert row.end_at == utc(2024, 6, 10, 11)
        assert row.recurrence_rule == "FREQ=MONTHLY"
        assert row.timezone == "UTC"

    def test_snake_case_task_with_naive_deadline(self):
        row = TaskRow.from_row({"id": "t1", "deadline": "2024-06-20T17:00:00", "status": "IN_PROGRESS"})
        assert row.deadline == utc(2024, 6, 20, 17)
        assert row.deadline.tzinfo is not None

    def test_unparseable_date_treated_as_missing(self):
        row = ReminderRow.from_row({"id": "r1", "remindAt": "next tuesday-ish"})
        assert row.remind_at is None

    def test_missing_optional_fields_get_defaults(self):
        row = StandaloneEventRow.from_row({"id": "e1", "startAt": "2024-06-10"})
        assert row.title == ""
        assert row.description is None
        assert row.is_all_day is False
        assert row.color is None
