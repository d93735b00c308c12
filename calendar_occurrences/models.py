"""Runtime data models for the calendar occurrences service."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Optional

from aiohttp import web

from .const import DOMAIN
from .coordinator import OccurrenceCoordinator

OwnerResolver = Callable[[web.Request], Awaitable[Optional[str]]]


@dataclass
class CalendarRuntimeData:
    """Data stored on the aiohttp application."""

    coordinator: OccurrenceCoordinator
    resolve_owner: OwnerResolver


RUNTIME_KEY = web.AppKey(f"{DOMAIN}_runtime", CalendarRuntimeData)
