# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Transport between the audit driver and the search engine.

The services only need ``execute(method, path, body, params)`` returning a
status code and a decoded body. OpenSearchTransport provides it on top of
an opensearch-py client; tests plug in their own implementation.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from opensearchpy import OpenSearch
from opensearchpy.exceptions import ConnectionError as OpenSearchConnectionError
from opensearchpy.exceptions import TransportError

from .errors import TransportFailure
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Status code and decoded body of one engine request."""

    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def error_type(self) -> Optional[str]:
        """Engine error type, e.g. ``resource_already_exists_exception``."""
        if not isinstance(self.body, dict):
            return None
        error = self.body.get("error")
        if isinstance(error, dict):
            return error.get("type")
        return error if isinstance(error, str) else None


class Transport(Protocol):
    """Single capability the services consume from the engine connection."""

    def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> TransportResponse:
        ...


class OpenSearchTransport:
    """Transport backed by an ``opensearchpy.OpenSearch`` client.

    Engine error statuses are returned as responses so callers can decide
    which of them are acceptable. Failures without a status (connection
    refused, timeouts) raise TransportFailure.
    """

    def __init__(self, client: OpenSearch):
        self.client = client

    def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> TransportResponse:
        try:
            result = self.client.transport.perform_request(
                method, path, params=params or None, body=body
            )
        except OpenSearchConnectionError as e:
            logger.error("search_engine_unreachable", method=method, path=path, error=str(e))
            raise TransportFailure(
                f"{method} {path} failed: {e}", method=method, path=path
            ) from e
        except TransportError as e:
            if not isinstance(e.status_code, int):
                raise TransportFailure(
                    f"{method} {path} failed: {e}", method=method, path=path
                ) from e
            logger.debug("search_engine_error_status", method=method, path=path, status=e.status_code)
            return TransportResponse(status=e.status_code, body=e.info)

        # HEAD requests come back as a boolean instead of a body
        if isinstance(result, bool):
            return TransportResponse(status=200 if result else 404)
        return TransportResponse(status=200, body=result)
