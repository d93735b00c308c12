"""HTTP read endpoint for calendar occurrences."""

from __future__ import annotations

import logging

from aiohttp import web

from .const import EVENTS_ROUTE, QUERY_END, QUERY_START, REQUEST_OWNER_KEY
from .engine import InvalidRange, RowStoreError
from .models import RUNTIME_KEY, CalendarRuntimeData

_LOGGER = logging.getLogger(__name__)


async def request_owner(request: web.Request) -> str | None:
    """Default owner resolver: the id an upstream auth middleware stored."""
    owner_id = request.get(REQUEST_OWNER_KEY)
    return str(owner_id) if owner_id is not None else None


async def list_events(request: web.Request) -> web.Response:
    """Return the caller's occurrences for ``?start=...&end=...``."""
    runtime: CalendarRuntimeData = request.app[RUNTIME_KEY]

    owner_id = await runtime.resolve_owner(request)
    if not owner_id:
        return web.json_response({"error": "Unauthorized"}, status=401)

    start = request.query.get(QUERY_START)
    end = request.query.get(QUERY_END)
    if not start or not end:
        return web.json_response(
            {"error": "start and end query parameters are required"}, status=400
        )

    try:
        occurrences = await runtime.coordinator.async_list_occurrences(owner_id, start, end)
    except InvalidRange as err:
        return web.json_response({"error": str(err)}, status=400)
    except RowStoreError:
        _LOGGER.exception("Error listing calendar events for %s", owner_id)
        return web.json_response({"error": "Internal server error"}, status=500)

    return web.json_response(occurrences)


def register_routes(app: web.Application) -> None:
    """Attach the read endpoint to ``app``."""
    app.router.add_get(EVENTS_ROUTE, list_events)
