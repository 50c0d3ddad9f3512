# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Audit driver models.

AuditRecord is the document written to the search engine, SearchResult
wraps one search response. The producer and user resolver protocols
describe what the host application plugs into the driver.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Protocol, Union

from pydantic import BaseModel, Field, field_validator

from .mapping import format_date


class AuditEvent(str, Enum):
    """Built-in audit events. Any other non-empty name is a custom event."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    RESTORED = "restored"


AuditKey = Union[int, str]


def _format_values(values: Any, date_format: str) -> Any:
    if isinstance(values, datetime):
        return format_date(values, date_format)
    if isinstance(values, dict):
        return {key: _format_values(value, date_format) for key, value in values.items()}
    if isinstance(values, list):
        return [_format_values(value, date_format) for value in values]
    return values


class AuditUser(BaseModel):
    """User a change is attributed to."""

    id: AuditKey
    type: str


class AuditRecord(BaseModel):
    """One change event of an auditable entity."""

    id: AuditKey
    event: str
    auditable_type: str
    auditable_id: AuditKey
    old_values: dict[str, Any] = Field(default_factory=dict)
    new_values: dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    url: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    user_type: Optional[str] = None
    user_id: Optional[AuditKey] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("event", mode="before")
    @classmethod
    def normalize_event(cls, v: Any) -> str:
        if isinstance(v, AuditEvent):
            return v.value
        if not isinstance(v, str) or not v.strip():
            raise ValueError("event must be a non-empty string")
        return v

    @property
    def is_custom_event(self) -> bool:
        return self.event not in {e.value for e in AuditEvent}

    @property
    def document_id(self) -> str:
        return str(self.id)

    def to_document(self, date_format: str) -> dict[str, Any]:
        """Render the stored document with every date in ``date_format``."""
        document = self.model_dump(exclude_none=True)
        return _format_values(document, date_format)


class Auditable(Protocol):
    """Anything that identifies an audited entity."""

    auditable_type: str
    auditable_id: AuditKey


class AuditProducer(Protocol):
    """Converts a tracked entity into the record to store."""

    def to_record(self, entity: Any) -> AuditRecord:
        ...


class UserResolver(Protocol):
    """Resolves the user responsible for the current change."""

    def resolve(self) -> Optional[AuditUser]:
        ...


class SearchResult:
    """Outcome of one executed search.

    Values are read once from the response captured at construction, so
    repeated calls return identical results without querying again.
    """

    def __init__(self, response: Optional[dict[str, Any]] = None):
        hits = (response or {}).get("hits") or {}
        total = hits.get("total", 0)
        # Older engines report a bare integer
        if isinstance(total, dict):
            total = total.get("value", 0)
        documents = [hit.get("_source", {}) for hit in hits.get("hits", [])]

        self._total: int = max(int(total or 0), len(documents))
        self._documents: tuple[dict[str, Any], ...] = tuple(documents)
        self.took_ms: Optional[int] = (response or {}).get("took")

    @property
    def total(self) -> int:
        return self._total

    def as_bool(self) -> bool:
        """Whether at least one document matched."""
        return self._total > 0

    def as_array(self) -> list[dict[str, Any]]:
        """Matched document bodies."""
        return list(self._documents)

    def __bool__(self) -> bool:
        return self.as_bool()

    def __repr__(self) -> str:
        return f"SearchResult(total={self._total}, returned={len(self._documents)})"
