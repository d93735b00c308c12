"""Configuration schema for the calendar occurrences service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import voluptuous as vol

from .const import (
    CONF_EXCLUDED_STATUSES,
    CONF_INCLUDE_COMPLETED_TASKS,
    CONF_MAX_OCCURRENCES,
    CONF_TIMEZONE,
)
from .engine import ConfigError, ExpansionOptions
from .engine.const import (
    DEFAULT_EXCLUDED_STATUSES,
    DEFAULT_TIMEZONE,
    MAX_OCCURRENCES_PER_ENTITY,
)

_LOGGER = logging.getLogger(__name__)


def _timezone_name(value: Any) -> str:
    """Validate an IANA timezone name."""
    name = vol.Coerce(str)(value)
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise vol.Invalid(f"unknown timezone: {name}") from err
    return name


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_TIMEZONE, default=DEFAULT_TIMEZONE): _timezone_name,
        vol.Optional(CONF_INCLUDE_COMPLETED_TASKS, default=True): vol.Boolean(),
        vol.Optional(
            CONF_EXCLUDED_STATUSES, default=sorted(DEFAULT_EXCLUDED_STATUSES)
        ): vol.All(
            vol.Any(list, tuple, set, frozenset),
            vol.Coerce(list),
            [vol.All(str, vol.Upper)],
        ),
        vol.Optional(CONF_MAX_OCCURRENCES, default=MAX_OCCURRENCES_PER_ENTITY): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)


@dataclass(frozen=True)
class EngineConfig:
    """Validated service configuration."""

    timezone: str = DEFAULT_TIMEZONE
    include_completed_tasks: bool = True
    excluded_statuses: frozenset[str] = DEFAULT_EXCLUDED_STATUSES
    max_occurrences: int = MAX_OCCURRENCES_PER_ENTITY

    def expansion_options(self, timezone: str | None = None) -> ExpansionOptions:
        """Options for one expansion, optionally for a specific viewer zone."""
        return ExpansionOptions(
            excluded_statuses=self.excluded_statuses,
            include_completed=self.include_completed_tasks,
            max_occurrences=self.max_occurrences,
            timezone=timezone or self.timezone,
        )


def load_config(data: Mapping[str, Any] | None = None) -> EngineConfig:
    """Validate ``data`` against :data:`CONFIG_SCHEMA`.

    Raises:
        ConfigError: If any option is invalid.
    """
    try:
        validated = CONFIG_SCHEMA(dict(data or {}))
    except vol.Invalid as err:
        raise ConfigError(f"Invalid configuration: {err}") from err

    config = EngineConfig(
        timezone=validated[CONF_TIMEZONE],
        include_completed_tasks=validated[CONF_INCLUDE_COMPLETED_TASKS],
        excluded_statuses=frozenset(validated[CONF_EXCLUDED_STATUSES]),
        max_occurrences=validated[CONF_MAX_OCCURRENCES],
    )
    _LOGGER.debug("Loaded configuration: %s", config)
    return config
