# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Audit driver exceptions."""

from typing import Any, Optional


class AuditDriverError(Exception):
    """Base exception for audit driver errors."""
    pass


class ConfigurationError(AuditDriverError):
    """Invalid or missing configuration value."""
    pass


class TransportFailure(AuditDriverError):
    """The search engine answered with a status the driver does not accept.

    Also raised when the engine could not be reached at all, in which case
    ``status`` is None.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Any = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ):
        self.status = status
        self.body = body
        self.method = method
        self.path = path
        super().__init__(message)

    @classmethod
    def from_response(cls, method: str, path: str, response) -> "TransportFailure":
        """Build a failure from a rejected TransportResponse."""
        return cls(
            f"{method} {path} failed with status {response.status}: {response.error_type or 'unknown'}",
            status=response.status,
            body=response.body,
            method=method,
            path=path,
        )
