"""Tests for client construction and driver wiring."""

import os
import uuid
from unittest.mock import MagicMock, patch

import pytest
from opensearchpy import OpenSearch

from audit_driver.config import load_settings
from audit_driver.document_service import AuditDocumentService
from audit_driver.driver import AuditDriver
from audit_driver.index_service import AuditIndexService
from audit_driver.integration import build_client, create_audit_driver, health_check
from audit_driver.models import AuditRecord
from audit_driver.transport import OpenSearchTransport


class TestBuildClient:
    """Tests for build_client."""

    def test_basic_auth(self):
        settings = load_settings(_env_file=None, username="auditor", password="s3cret")

        with patch("audit_driver.integration.OpenSearch") as client_cls:
            build_client(settings)

        kwargs = client_cls.call_args.kwargs
        assert kwargs["hosts"] == ["https://localhost:9200"]
        assert kwargs["http_auth"] == ("auditor", "s3cret")
        assert kwargs["timeout"] == 30
        assert "ca_certs" not in kwargs

    def test_without_basic_auth(self):
        settings = load_settings(_env_file=None, use_basic_auth=False)

        with patch("audit_driver.integration.OpenSearch") as client_cls:
            build_client(settings)

        assert "http_auth" not in client_cls.call_args.kwargs

    def test_ca_bundle(self):
        settings = load_settings(_env_file=None, use_ca_cert=True, ca_cert_path="/find-me")

        with patch("audit_driver.integration.OpenSearch") as client_cls:
            build_client(settings)

        assert client_cls.call_args.kwargs["ca_certs"] == "/find-me"

    def test_real_client_instance(self):
        client = build_client(load_settings(_env_file=None, verify_certs=False))

        assert isinstance(client, OpenSearch)


class TestCreateAuditDriver:
    """Tests for create_audit_driver."""

    def test_wires_services(self, settings):
        client = MagicMock()
        producer = MagicMock()

        driver = create_audit_driver(producer, settings=settings, client=client)

        assert isinstance(driver, AuditDriver)
        assert isinstance(driver.index_service, AuditIndexService)
        assert isinstance(driver.document_service, AuditDocumentService)
        assert isinstance(driver.document_service.transport, OpenSearchTransport)
        assert driver.document_service.transport.client is client
        assert driver.producer is producer
        assert driver.is_async() is False


class TestHealthCheck:
    """Tests for health_check."""

    def test_healthy(self):
        client = MagicMock()
        client.cluster.health.return_value = {
            "status": "green",
            "cluster_name": "audit-cluster",
            "number_of_nodes": 3,
        }

        assert health_check(client) == {
            "status": "green",
            "cluster_name": "audit-cluster",
            "number_of_nodes": 3,
        }

    def test_unreachable(self):
        client = MagicMock()
        client.cluster.health.side_effect = Exception("connection refused")

        health = health_check(client)

        assert health["status"] == "error"
        assert "connection refused" in health["error"]


# =============================================================================
# Integration Tests
# =============================================================================

@pytest.mark.integration
@pytest.mark.skipif(
    "AUDIT_INTEGRATION_HOSTS" not in os.environ,
    reason="requires a running cluster (set AUDIT_INTEGRATION_HOSTS)",
)
class TestLiveCluster:
    """Integration tests (require running OpenSearch)."""

    @pytest.fixture
    def live_settings(self):
        return load_settings(
            _env_file=None,
            hosts=os.environ["AUDIT_INTEGRATION_HOSTS"],
            username=os.environ.get("AUDIT_INTEGRATION_USER", "admin"),
            password=os.environ.get("AUDIT_INTEGRATION_PASSWORD", "admin"),
            verify_certs=False,
            index=f"audits-it-{uuid.uuid4().hex[:8]}",
        )

    def test_index_search_delete(self, live_settings):
        transport = OpenSearchTransport(build_client(live_settings))
        indices = AuditIndexService(transport, live_settings)
        documents = AuditDocumentService(transport, live_settings)
        record = AuditRecord(id=1, event="created", auditable_type="User", auditable_id=42)

        try:
            assert indices.create_index() is True
            assert indices.create_index() is True
            assert documents.index_document(record, should_return_result=True) is True
            transport.execute("POST", f"/{live_settings.index}/_refresh")

            assert documents.query().set_term("auditable_id", 42).search().as_bool() is True
            assert documents.query().set_term("auditable_id", 999).search().as_bool() is False

            assert documents.delete_audit_document(42, refresh=True) is True
            assert documents.query().set_term("auditable_id", 42).search().as_bool() is False
        finally:
            assert indices.delete_index() is True
            assert indices.delete_index() is True
