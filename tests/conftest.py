"""
Pytest configuration and fixtures for the audit driver tests.
"""

from datetime import datetime

import pytest
import structlog

from audit_driver.config import AuditSettings, load_settings
from audit_driver.document_service import AuditDocumentService
from audit_driver.index_service import AuditIndexService
from audit_driver.models import AuditRecord

from .fakes import FIXED_NOW, FakeEngine


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True, scope="session")
def structlog_to_stdlib():
    """Send driver logs through stdlib logging so pytest captures them."""
    structlog.configure(
        processors=[structlog.stdlib.add_log_level, structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def settings() -> AuditSettings:
    """Settings isolated from the environment and any .env file."""
    return load_settings(_env_file=None)


@pytest.fixture
def index_service(engine, settings) -> AuditIndexService:
    return AuditIndexService(engine, settings)


@pytest.fixture
def document_service(engine, settings) -> AuditDocumentService:
    return AuditDocumentService(engine, settings, clock=lambda: FIXED_NOW)


@pytest.fixture
def sample_record() -> AuditRecord:
    """Audit record of an updated user."""
    return AuditRecord(
        id=1,
        event="updated",
        auditable_type="App\\Models\\User",
        auditable_id=42,
        old_values={"name": "John Doe", "updated_at": datetime(2026, 10, 1, 8, 30, 0)},
        new_values={"name": "Jane Doe", "updated_at": datetime(2026, 10, 19, 11, 59, 0)},
        ip_address="127.0.0.1",
        url="http://localhost/users/42",
        user_agent="pytest",
        created_at=datetime(2026, 10, 19, 11, 59, 0),
    )
