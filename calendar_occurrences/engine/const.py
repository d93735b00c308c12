"""Constants for the calendar occurrence engine."""

from typing import Final

__version__ = "0.1.0"

CALENDAR_STANDALONE: Final = "standalone"
CALENDAR_TASK: Final = "task"
CALENDAR_REMINDER: Final = "reminder"

STATUS_COMPLETED: Final = "COMPLETED"
STATUS_ARCHIVED: Final = "ARCHIVED"
DEFAULT_EXCLUDED_STATUSES: Final = frozenset({STATUS_ARCHIVED})

DEFAULT_TIMEZONE: Final = "UTC"

# Upper bound on spans generated for a single anchor per call. Generation
# stops silently once reached.
MAX_OCCURRENCES_PER_ENTITY: Final = 2000

ALL_DAY_FORMAT: Final = "%Y-%m-%d"
TIMED_FORMAT: Final = "%Y-%m-%d %H:%M"
