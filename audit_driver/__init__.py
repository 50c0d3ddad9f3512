# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""
Audit Driver
============

Stores audit-trail records in an OpenSearch / Elasticsearch index and
prunes them according to a retention threshold.

Components:
- mapping: index mapping shared by every audit index
- query: immutable query builder (date range and term filters)
- index_service: idempotent index provisioning
- document_service: document write, search, delete and prune
- driver: entry point called by the change-tracking layer
- integration: opensearch-py client and driver wiring

Usage:
    from audit_driver import create_audit_driver

    driver = create_audit_driver(producer=my_producer)
    record = driver.audit(changed_entity)
"""

from .config import AuditSettings, get_settings, load_settings
from .document_service import AuditDocumentService
from .driver import AuditDriver
from .errors import AuditDriverError, ConfigurationError, TransportFailure
from .index_service import AuditIndexService
from .integration import build_client, create_audit_driver, health_check
from .logging_config import configure_logging, get_logger
from .mapping import MappingModel, format_date
from .models import (
    Auditable,
    AuditEvent,
    AuditProducer,
    AuditRecord,
    AuditUser,
    SearchResult,
    UserResolver,
)
from .query import QueryBuilder, QueryCriteria
from .transport import OpenSearchTransport, Transport, TransportResponse

__all__ = [
    # Config
    "AuditSettings",
    "get_settings",
    "load_settings",
    # Errors
    "AuditDriverError",
    "ConfigurationError",
    "TransportFailure",
    # Models
    "Auditable",
    "AuditEvent",
    "AuditProducer",
    "AuditRecord",
    "AuditUser",
    "SearchResult",
    "UserResolver",
    # Mapping and queries
    "MappingModel",
    "format_date",
    "QueryBuilder",
    "QueryCriteria",
    # Transport
    "OpenSearchTransport",
    "Transport",
    "TransportResponse",
    # Services
    "AuditIndexService",
    "AuditDocumentService",
    "AuditDriver",
    # Integration
    "build_client",
    "create_audit_driver",
    "health_check",
    "configure_logging",
    "get_logger",
]
