# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Wiring of the audit driver.

Provides:
- opensearch-py client construction from AuditSettings
- AuditDriver assembly for a host application
- Cluster health check
"""

from typing import Any, Optional

from opensearchpy import OpenSearch

from .config import AuditSettings, get_settings
from .document_service import AuditDocumentService
from .driver import AuditDriver
from .index_service import AuditIndexService
from .logging_config import get_logger
from .models import AuditProducer, UserResolver
from .transport import OpenSearchTransport

logger = get_logger(__name__)


def build_client(settings: Optional[AuditSettings] = None) -> OpenSearch:
    """Create an opensearch-py client for the configured cluster."""
    settings = settings or get_settings()

    client_config: dict[str, Any] = {
        "hosts": settings.hosts_list,
        "verify_certs": settings.verify_certs,
        "ssl_show_warn": settings.verify_certs,
        "timeout": settings.timeout,
    }
    if settings.use_basic_auth:
        client_config["http_auth"] = (settings.username, settings.password)
    if settings.use_ca_cert:
        client_config["ca_certs"] = settings.ca_cert_path

    logger.info(
        "search_engine_client_created",
        hosts=settings.hosts_list,
        basic_auth=settings.use_basic_auth,
        ca_certs=settings.ca_cert_path if settings.use_ca_cert else None,
    )
    return OpenSearch(**client_config)


def create_audit_driver(
    producer: AuditProducer,
    settings: Optional[AuditSettings] = None,
    user_resolver: Optional[UserResolver] = None,
    client: Optional[OpenSearch] = None,
) -> AuditDriver:
    """Assemble an AuditDriver backed by an opensearch-py client."""
    settings = settings or get_settings()
    transport = OpenSearchTransport(client or build_client(settings))

    return AuditDriver(
        producer=producer,
        index_service=AuditIndexService(transport, settings),
        document_service=AuditDocumentService(transport, settings),
        user_resolver=user_resolver,
    )


def health_check(client: OpenSearch) -> dict:
    """Check cluster health."""
    try:
        health = client.cluster.health()
        return {
            "status": health["status"],
            "cluster_name": health["cluster_name"],
            "number_of_nodes": health["number_of_nodes"],
        }
    except Exception as e:
        return {
            "status": "error",
            "error": str(e),
        }
