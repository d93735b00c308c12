"""Calendar occurrences service: expands stored anchors for the calendar view."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from aiohttp import web

from .api import register_routes, request_owner
from .config import EngineConfig, load_config
from .coordinator import OccurrenceCoordinator
from .models import RUNTIME_KEY, CalendarRuntimeData, OwnerResolver
from .store import InMemoryRowStore, RowStore

__all__ = [
    "EngineConfig",
    "InMemoryRowStore",
    "OccurrenceCoordinator",
    "RowStore",
    "create_app",
    "load_config",
]

_LOGGER = logging.getLogger(__name__)


def create_app(
    store: RowStore,
    config: EngineConfig | Mapping[str, Any] | None = None,
    *,
    resolve_owner: OwnerResolver = request_owner,
    app: web.Application | None = None,
) -> web.Application:
    """Set up the calendar read endpoint on an aiohttp application.

    Args:
        store: Owner-scoped source of anchor rows.
        config: An :class:`EngineConfig` or a raw mapping validated with
            :func:`load_config`.
        resolve_owner: Coroutine returning the authenticated owner id for a
            request, or None when the request is anonymous.
        app: Existing application to register on; a new one is created
            when omitted.

    Raises:
        ConfigError: If ``config`` is a mapping that fails validation.
    """
    if not isinstance(config, EngineConfig):
        config = load_config(config)

    app = app if app is not None else web.Application()
    app[RUNTIME_KEY] = CalendarRuntimeData(
        coordinator=OccurrenceCoordinator(store, config),
        resolve_owner=resolve_owner,
    )
    register_routes(app)
    _LOGGER.debug("Calendar occurrences endpoint registered (timezone=%s)", config.timezone)
    return app
