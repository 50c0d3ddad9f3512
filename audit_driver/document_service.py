# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Audit document writes, searches, deletes and retention pruning.

Writes are not refreshed: a search issued right after index_document() may
not see the new document yet. Only delete_audit_document() can force a
refresh.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Union
from urllib.parse import quote

from .config import AuditSettings
from .errors import TransportFailure
from .logging_config import get_logger
from .models import Auditable, AuditKey, AuditRecord, SearchResult
from .query import QueryBuilder
from .transport import Transport

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def document_path(index: str, document_id: str) -> str:
    """Path of one document, with the id escaped as a single path segment."""
    return f"/{index}/_doc/{quote(document_id, safe='')}"


class AuditDocumentService:
    """Document level operations on audit indices."""

    def __init__(
        self,
        transport: Transport,
        settings: AuditSettings,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.transport = transport
        self.settings = settings
        self.clock = clock

    def query(self, auditable_type: Optional[str] = None) -> QueryBuilder:
        """Fresh query builder over the index holding ``auditable_type``."""
        return QueryBuilder(
            self.transport,
            self.settings.index_for(auditable_type),
            self.settings.date_format,
        )

    def index_document(self, record: AuditRecord, should_return_result: bool = False) -> bool:
        """Write ``record``, replacing any document with the same id.

        With should_return_result the call reports whether the engine
        acknowledged the write. Without it the write is still performed but
        the call always returns False and never raises, even on failure.
        """
        index = self.settings.index_for(record.auditable_type)
        path = document_path(index, record.document_id)
        body = record.to_document(self.settings.date_format)

        if not should_return_result:
            try:
                response = self.transport.execute("PUT", path, body=body)
            except TransportFailure as e:
                logger.warning(
                    "audit_document_write_failed",
                    index=index,
                    document_id=record.document_id,
                    error=str(e),
                )
                return False
            if not response.ok:
                logger.warning(
                    "audit_document_write_rejected",
                    index=index,
                    document_id=record.document_id,
                    status=response.status,
                )
            return False

        response = self.transport.execute("PUT", path, body=body)
        if not response.ok:
            logger.warning(
                "audit_document_write_rejected",
                index=index,
                document_id=record.document_id,
                status=response.status,
                error=response.error_type,
            )
            return False
        logger.debug("audit_document_indexed", index=index, document_id=record.document_id)
        return True

    def search_audit_document(self, target: Union[Auditable, AuditRecord]) -> SearchResult:
        """All audit documents of the entity ``target`` refers to."""
        return (
            self.query(target.auditable_type)
            .set_term("auditable_type", target.auditable_type)
            .set_term("auditable_id", target.auditable_id)
            .search()
        )

    def delete_audit_document(
        self,
        auditable_id: AuditKey,
        refresh: bool = False,
        auditable_type: Optional[str] = None,
    ) -> bool:
        """Delete every document of ``auditable_id``.

        refresh makes the deletion visible to the next search at once.
        The result says whether the request succeeded, not whether any
        document was removed.
        """
        builder = self.query(auditable_type).set_term("auditable_id", auditable_id)
        if auditable_type is not None:
            builder = builder.set_term("auditable_type", auditable_type)
        return self._delete_by_query(builder, refresh=refresh)

    def prune(self, record: AuditRecord, should_delete: bool = False) -> bool:
        """Apply the retention threshold to the entity of ``record``.

        Returns True only when pruning is enabled, stale documents were found
        and should_delete removed them.
        """
        threshold = self.settings.threshold
        if threshold <= 0:
            return False

        cutoff = self.clock() - timedelta(days=threshold)
        builder = (
            self.query(record.auditable_type)
            .set_term("auditable_type", record.auditable_type)
            .set_term("auditable_id", record.auditable_id)
            .set_date_range(date_to=cutoff)
        )
        stale = builder.search()
        if not stale.as_bool():
            return False
        if not should_delete:
            logger.debug("audit_prune_skipped", auditable_type=record.auditable_type, stale=stale.total)
            return False

        pruned = self._delete_by_query(builder)
        if pruned:
            logger.info(
                "audit_documents_pruned",
                auditable_type=record.auditable_type,
                auditable_id=record.auditable_id,
                threshold_days=threshold,
                stale=stale.total,
            )
        return pruned

    def _delete_by_query(self, builder: QueryBuilder, refresh: bool = False) -> bool:
        path = f"/{builder.index}/_delete_by_query"
        params: dict[str, Any] = {"refresh": "true"} if refresh else {}
        response = self.transport.execute("POST", path, body=builder.build(), params=params)

        if response.status == 404:
            logger.info("audit_index_not_found_ignored", index=builder.index)
            return True
        if not response.ok:
            logger.warning(
                "audit_delete_by_query_rejected",
                index=builder.index,
                status=response.status,
                error=response.error_type,
            )
            return False

        deleted = response.body.get("deleted") if isinstance(response.body, dict) else None
        logger.debug("audit_documents_deleted", index=builder.index, deleted=deleted, refresh=refresh)
        return True
