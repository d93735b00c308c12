"""Parsing of the compact ``FREQ=...`` recurrence rule strings."""

from __future__ import annotations

import logging

from .models import Frequency, Rule

_LOGGER = logging.getLogger(__name__)

_RRULE_PREFIX = "RRULE:"


def parse_rule(raw: str | None) -> Rule | None:
    """Parse a ``;``-separated ``KEY=VALUE`` rule string.

    Only ``FREQ`` is interpreted and only the four bare frequencies the event
    form writes are recognised (case-sensitive). Anything else yields None,
    meaning the anchor does not recur. This never raises.
    """
    if not raw or not isinstance(raw, str):
        return None

    body = raw.strip()
    if body.startswith(_RRULE_PREFIX):
        body = body[len(_RRULE_PREFIX):]

    for part in body.split(";"):
        key, sep, value = part.partition("=")
        if not sep or key.strip() != "FREQ":
            continue
        try:
            return Rule(frequency=Frequency(value.strip()))
        except ValueError:
            _LOGGER.debug("Unsupported recurrence frequency in %r", raw)
            return None

    _LOGGER.debug("Recurrence rule without FREQ: %r", raw)
    return None
