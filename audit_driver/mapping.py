# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Index mapping for audit documents.

Every date field of the mapping shares the configured date format. Changing
the format later does not reformat documents that are already stored.
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional

from .config import DEFAULT_DATE_FORMAT
from .errors import ConfigurationError

# Nested date fields carried by old_values / new_values
VALUE_DATE_FIELDS = ("created_at", "updated_at", "deleted_at")

KEYWORD_FIELDS = ("event", "auditable_type", "ip_address", "url", "user_agent")

# Named engine formats and how to render a datetime for them
_NAMED_FORMATS = {
    "epoch_millis": lambda v: int(_aware(v).timestamp() * 1000),
    "epoch_second": lambda v: int(_aware(v).timestamp()),
    "date_optional_time": lambda v: v.isoformat(),
    "strict_date_optional_time": lambda v: v.isoformat(),
    "date_time": lambda v: v.isoformat(timespec="milliseconds"),
    "strict_date_time": lambda v: v.isoformat(timespec="milliseconds"),
}

_PATTERN_TOKEN = re.compile(r"'[^']*'|y+|M+|d+|H+|m+|s+|S+|X+|Z+")


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _render_token(token: str, value: datetime) -> str:
    if token.startswith("'"):
        return token[1:-1]
    letter = token[0]
    if letter == "y":
        return value.strftime("%y") if len(token) == 2 else f"{value.year:04d}"
    if letter == "M":
        if len(token) >= 4:
            return value.strftime("%B")
        if len(token) == 3:
            return value.strftime("%b")
        return f"{value.month:02d}"
    if letter == "d":
        return f"{value.day:02d}"
    if letter == "H":
        return f"{value.hour:02d}"
    if letter == "m":
        return f"{value.minute:02d}"
    if letter == "s":
        return f"{value.second:02d}"
    if letter == "S":
        return f"{value.microsecond:06d}"[: len(token)].ljust(len(token), "0")
    # X / Z: values reach here in UTC or naive, naive counts as UTC
    offset = _aware(value).strftime("%z")
    if letter == "X" and len(token) >= 3:
        return "Z" if offset == "+0000" else f"{offset[:3]}:{offset[3:]}"
    return offset


def format_date(value: datetime, date_format: str = DEFAULT_DATE_FORMAT) -> Any:
    """Render ``value`` the way the engine expects for ``date_format``.

    Supports the named engine formats listed in _NAMED_FORMATS and Java-style
    patterns such as ``yyyy-MM-dd HH:mm:ss`` or ``yyyy-MM-dd'T'HH:mm:ss.SSSXXX``.
    Letters outside the supported set are copied verbatim.
    """
    named = _NAMED_FORMATS.get(date_format)
    if named is not None:
        return named(value)

    # Patterns without a zone field are read as UTC by the engine
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)

    parts = []
    position = 0
    for match in _PATTERN_TOKEN.finditer(date_format):
        parts.append(date_format[position:match.start()])
        parts.append(_render_token(match.group(0), value))
        position = match.end()
    parts.append(date_format[position:])
    return "".join(parts)


class MappingModel:
    """Builds the field mapping used when an audit index is provisioned."""

    def __init__(self, date_format: Optional[str] = None):
        if date_format is None:
            date_format = DEFAULT_DATE_FORMAT
        if not date_format.strip():
            raise ConfigurationError("date_format must not be empty")
        self.date_format = date_format

    def get_model(self) -> dict[str, dict[str, Any]]:
        """Return the field-to-type mapping."""
        model: dict[str, dict[str, Any]] = {
            field: {"type": "keyword"} for field in KEYWORD_FIELDS
        }
        model["created_at"] = self._date_field()
        for values_field in ("new_values", "old_values"):
            model[values_field] = {
                "properties": {field: self._date_field() for field in VALUE_DATE_FIELDS}
            }
        return model

    def get_index_body(self) -> dict[str, Any]:
        """Request body for index creation."""
        return {"mappings": {"properties": self.get_model()}}

    def _date_field(self) -> dict[str, str]:
        return {"type": "date", "format": self.date_format}
