"""Range query over one owner's calendar."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from dateutil.parser import isoparse

from .config import EngineConfig
from .engine import InvalidRange, RowStoreError, build_occurrences
from .engine.models import to_utc
from .store import RowStore

_LOGGER = logging.getLogger(__name__)


def parse_window(start: Any, end: Any) -> tuple[datetime, datetime]:
    """Validate a caller-supplied ``[start, end)`` window.

    Both bounds may be datetimes or ISO-8601 strings; naive values are taken
    as UTC.

    Raises:
        InvalidRange: If a bound is missing or unparseable, or if
            ``start`` is not strictly before ``end``.
    """
    window_start = _parse_bound(start, "start", start, end)
    window_end = _parse_bound(end, "end", start, end)
    if window_start >= window_end:
        raise InvalidRange("start must be before end", start=start, end=end)
    return window_start, window_end


def _parse_bound(value: Any, name: str, start: Any, end: Any) -> datetime:
    if isinstance(value, datetime):
        return to_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidRange(f"{name} is required", start=start, end=end)
    try:
        return to_utc(isoparse(value.strip()))
    except (ValueError, OverflowError) as err:
        raise InvalidRange(
            f"Invalid date format for {name}: {value!r}", start=start, end=end
        ) from err


class OccurrenceCoordinator:
    """Serves occurrence lists for range queries against a :class:`RowStore`.

    The coordinator holds no state between calls; every query re-reads the
    owner's rows and expands them from scratch.
    """

    def __init__(self, store: RowStore, config: EngineConfig | None = None) -> None:
        self._store = store
        self._config = config or EngineConfig()

    @property
    def config(self) -> EngineConfig:
        return self._config

    async def async_list_occurrences(
        self, owner_id: str, window_start: Any, window_end: Any
    ) -> list[dict[str, Any]]:
        """Return the owner's formatted occurrences inside the window.

        Raises:
            InvalidRange: If the window is invalid; nothing is fetched then.
            RowStoreError: If the store fails.
        """
        start, end = parse_window(window_start, window_end)

        try:
            rows = await self._store.async_fetch_rows(owner_id, start, end)
            viewer_tz = await self._store.async_get_timezone(owner_id)
        except RowStoreError:
            raise
        except Exception as err:  # noqa: BLE001
            raise RowStoreError(f"Failed to fetch rows for {owner_id}: {err}") from err

        occurrences = build_occurrences(
            rows, start, end, options=self._config.expansion_options(viewer_tz)
        )
        _LOGGER.debug(
            "Expanded %d occurrences for %s in [%s, %s)",
            len(occurrences), owner_id, start.isoformat(), end.isoformat(),
        )
        return occurrences
