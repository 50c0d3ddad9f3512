# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Structured audit queries.

QueryBuilder is immutable: set_date_range() and set_term() return a new
builder, so a chain never changes a builder another caller holds.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .errors import TransportFailure
from .logging_config import get_logger
from .mapping import format_date
from .models import SearchResult
from .transport import Transport

logger = get_logger(__name__)

DATE_FIELD = "created_at"


@dataclass(frozen=True)
class QueryCriteria:
    """Date range and term filters of one query."""

    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    terms: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def has_date_range(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    @property
    def is_empty(self) -> bool:
        return not self.has_date_range and not self.terms

    def with_date_range(
        self, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None
    ) -> "QueryCriteria":
        return replace(self, date_from=date_from, date_to=date_to)

    def with_term(self, name: str, value: Any) -> "QueryCriteria":
        terms = dict(self.terms)
        if value is None:
            terms.pop(name, None)
        else:
            terms[name] = value
        return replace(self, terms=MappingProxyType(terms))

    def to_query(self, date_format: str) -> dict[str, Any]:
        """Render the criteria as a query clause."""
        if self.is_empty:
            return {"match_all": {}}

        must: list[dict[str, Any]] = []
        if self.has_date_range:
            bounds: dict[str, Any] = {"format": date_format}
            if self.date_from is not None:
                bounds["gte"] = format_date(self.date_from, date_format)
            if self.date_to is not None:
                bounds["lte"] = format_date(self.date_to, date_format)
            must.append({"range": {DATE_FIELD: bounds}})
        for name, value in self.terms.items():
            must.append({"term": {name: value}})
        return {"bool": {"must": must}}


class QueryBuilder:
    """Builds and runs one audit search against an index."""

    def __init__(
        self,
        transport: Transport,
        index: str,
        date_format: str,
        criteria: Optional[QueryCriteria] = None,
        size: Optional[int] = None,
    ):
        self.transport = transport
        self.index = index
        self.date_format = date_format
        self.criteria = criteria or QueryCriteria()
        self.size = size

    def _with(self, criteria: QueryCriteria) -> "QueryBuilder":
        return QueryBuilder(
            self.transport, self.index, self.date_format, criteria=criteria, size=self.size
        )

    def set_date_range(
        self, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None
    ) -> "QueryBuilder":
        """Filter on created_at, both bounds inclusive. No bounds clears the filter."""
        return self._with(self.criteria.with_date_range(date_from, date_to))

    def set_term(self, name: str, value: Any) -> "QueryBuilder":
        """Exact match on ``name``. A None value clears the filter."""
        return self._with(self.criteria.with_term(name, value))

    def build(self) -> dict[str, Any]:
        body: dict[str, Any] = {"query": self.criteria.to_query(self.date_format)}
        if self.size is not None:
            body["size"] = self.size
        return body

    def search(self) -> SearchResult:
        """Run the query.

        Without any filter this matches every document of the index.
        """
        path = f"/{self.index}/_search"
        response = self.transport.execute("POST", path, body=self.build())
        if response.status == 404:
            logger.info("audit_search_index_missing", index=self.index)
            return SearchResult()
        if not response.ok:
            raise TransportFailure.from_response("POST", path, response)
        return SearchResult(response.body)
