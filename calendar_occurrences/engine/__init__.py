"""Pure, synchronous expansion of calendar anchors into occurrences."""

from .const import MAX_OCCURRENCES_PER_ENTITY, __version__
from .adapters import ReminderSource, StandaloneSource, TaskSource, occurrence_id
from .exceptions import ConfigError, InvalidRange, OccurrenceEngineError, RowStoreError
from .generator import generate
from .merge import (
    ExpansionOptions,
    build_occurrences,
    expand_rows,
    format_instant,
    serialize_occurrence,
)
from .models import (
    BaseRecurringEntity,
    Frequency,
    Occurrence,
    ReminderRow,
    Rule,
    SourceRows,
    SourceType,
    Span,
    StandaloneEventRow,
    TaskRow,
)
from .rules import parse_rule

__all__ = [
    "__version__",
    "MAX_OCCURRENCES_PER_ENTITY",
    "BaseRecurringEntity",
    "ConfigError",
    "ExpansionOptions",
    "Frequency",
    "InvalidRange",
    "Occurrence",
    "OccurrenceEngineError",
    "ReminderRow",
    "ReminderSource",
    "RowStoreError",
    "Rule",
    "SourceRows",
    "SourceType",
    "Span",
    "StandaloneEventRow",
    "StandaloneSource",
    "TaskRow",
    "TaskSource",
    "build_occurrences",
    "expand_rows",
    "format_instant",
    "generate",
    "occurrence_id",
    "parse_rule",
    "serialize_occurrence",
]
