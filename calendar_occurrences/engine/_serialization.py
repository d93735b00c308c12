"""Key transformation between stored camelCase rows and snake_case fields."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_CAMEL_TO_SNAKE = re.compile(r"(?<=[a-z0-9])([A-Z])")
_SNAKE_TO_CAMEL = re.compile(r"_([a-z])")


def to_snake(name: str) -> str:
    """``recurrenceEndDate`` -> ``recurrence_end_date``."""
    return _CAMEL_TO_SNAKE.sub(r"_\1", name).lower()


def to_camel(name: str) -> str:
    """``source_task_id`` -> ``sourceTaskId``."""
    return _SNAKE_TO_CAMEL.sub(lambda m: m.group(1).upper(), name)


def row_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Normalise a stored row's keys to snake_case.

    Rows come from storage either with the camelCase column names of the
    web application or already in snake_case; both spellings map onto the
    same dataclass field. Values are left untouched.
    """
    return {to_snake(key): value for key, value in data.items()}


def wire_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Rename snake_case occurrence fields to their camelCase JSON names."""
    return {to_camel(key): value for key, value in data.items()}
