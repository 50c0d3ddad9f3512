# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Audit driver entry point.

The host application's change tracking calls AuditDriver.audit() for every
tracked change. Each call blocks on the search engine; nothing is queued.
"""

from typing import Any, Optional

from .document_service import AuditDocumentService, document_path
from .errors import TransportFailure
from .index_service import AuditIndexService
from .logging_config import get_logger
from .models import AuditProducer, AuditRecord, UserResolver

logger = get_logger(__name__)


class AuditDriver:
    """Stores audit records of tracked entities and applies retention."""

    def __init__(
        self,
        producer: AuditProducer,
        index_service: AuditIndexService,
        document_service: AuditDocumentService,
        user_resolver: Optional[UserResolver] = None,
    ):
        self.producer = producer
        self.index_service = index_service
        self.document_service = document_service
        self.user_resolver = user_resolver
        self.settings = document_service.settings

    def audit(self, entity: Any) -> AuditRecord:
        """Record a change of ``entity``.

        Raises:
            TransportFailure: the engine rejected the index or the document
        """
        record = self.producer.to_record(entity)
        record = self._attribute(record)

        self.index_service.create_index(self.settings.index_for(record.auditable_type))

        if not self.document_service.index_document(record, should_return_result=True):
            raise TransportFailure(
                f"Audit record {record.document_id} of {record.auditable_type} "
                f"{record.auditable_id} was not stored",
                method="PUT",
                path=document_path(self.settings.index_for(record.auditable_type), record.document_id),
            )

        self.document_service.prune(record, should_delete=True)

        logger.info(
            "audit_recorded",
            audit_event=record.event,
            auditable_type=record.auditable_type,
            auditable_id=record.auditable_id,
            document_id=record.document_id,
        )
        return record

    def _attribute(self, record: AuditRecord) -> AuditRecord:
        if self.user_resolver is None or record.user_id is not None:
            return record
        user = self.user_resolver.resolve()
        if user is None:
            return record
        return record.model_copy(update={"user_id": user.id, "user_type": user.type})

    def is_async(self) -> bool:
        """Always False: every call talks to the engine synchronously."""
        return False
