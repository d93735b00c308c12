"""Constants for the calendar occurrences service."""

from typing import Final

DOMAIN: Final = "calendar_occurrences"

CONF_TIMEZONE: Final = "timezone"
CONF_INCLUDE_COMPLETED_TASKS: Final = "include_completed_tasks"
CONF_EXCLUDED_STATUSES: Final = "excluded_statuses"
CONF_MAX_OCCURRENCES: Final = "max_occurrences"

EVENTS_ROUTE: Final = "/api/calendar/events"

QUERY_START: Final = "start"
QUERY_END: Final = "end"

# Request key an upstream auth middleware stores the owner id under.
REQUEST_OWNER_KEY: Final = "owner_id"
