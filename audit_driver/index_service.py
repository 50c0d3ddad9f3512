# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Audit index provisioning.

Creation and deletion are idempotent: an index that already exists counts
as created, an index that is missing counts as deleted.
"""

from typing import Optional

from .config import AuditSettings
from .errors import TransportFailure
from .logging_config import get_logger
from .mapping import MappingModel
from .transport import Transport

logger = get_logger(__name__)

ALREADY_EXISTS_STATUS = 400
ALREADY_EXISTS_ERROR = "resource_already_exists_exception"
NOT_FOUND_STATUS = 404


class AuditIndexService:
    """Creates, deletes and checks audit indices."""

    def __init__(
        self,
        transport: Transport,
        settings: AuditSettings,
        mapping: Optional[MappingModel] = None,
    ):
        self.transport = transport
        self.settings = settings
        self.mapping = mapping or MappingModel(settings.date_format)

    def create_index(self, index: Optional[str] = None) -> bool:
        index = index or self.settings.index
        path = f"/{index}"
        response = self.transport.execute("PUT", path, body=self.mapping.get_index_body())

        if response.ok:
            logger.info("audit_index_created", index=index)
            return True
        if response.status == ALREADY_EXISTS_STATUS and response.error_type == ALREADY_EXISTS_ERROR:
            logger.debug("audit_index_already_exists", index=index)
            return True
        raise TransportFailure.from_response("PUT", path, response)

    def delete_index(self, index: Optional[str] = None) -> bool:
        index = index or self.settings.index
        path = f"/{index}"
        response = self.transport.execute("DELETE", path)

        if response.ok:
            logger.info("audit_index_deleted", index=index)
            return True
        if response.status == NOT_FOUND_STATUS:
            logger.info("audit_index_not_found_ignored", index=index)
            return True
        raise TransportFailure.from_response("DELETE", path, response)

    def index_exists(self, index: Optional[str] = None) -> bool:
        index = index or self.settings.index
        path = f"/{index}"
        response = self.transport.execute("HEAD", path)

        if response.ok:
            return True
        if response.status == NOT_FOUND_STATUS:
            return False
        raise TransportFailure.from_response("HEAD", path, response)
