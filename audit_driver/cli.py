# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Audit index administration.

Usage:
    # Provision the audit index (no-op when it exists)
    audit-driver create-index

    # Drop it (no-op when it is missing)
    audit-driver delete-index --index audits

    # Remove every audit document of an entity
    audit-driver delete-documents 42 --type App.Models.User --refresh

    # Cluster health
    audit-driver health
"""

import argparse
import json
import sys
from typing import Optional, Sequence

from .config import load_settings
from .document_service import AuditDocumentService
from .errors import AuditDriverError
from .index_service import AuditIndexService
from .integration import build_client, health_check
from .logging_config import configure_logging, get_logger
from .transport import OpenSearchTransport

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="audit-driver", description="Audit index administration")
    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("create-index", "Create the audit index with its mapping"),
        ("delete-index", "Delete the audit index"),
        ("index-exists", "Check whether the audit index exists"),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("--index", help="Index name (defaults to AUDIT_INDEX)")

    delete_documents = commands.add_parser(
        "delete-documents", help="Delete all audit documents of one auditable entity"
    )
    delete_documents.add_argument("auditable_id", help="Identifier of the audited entity")
    delete_documents.add_argument("--type", dest="auditable_type", help="Auditable type")
    delete_documents.add_argument(
        "--refresh", action="store_true", help="Make the deletion visible immediately"
    )

    commands.add_parser("health", help="Show cluster health")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        configure_logging(settings.log_level, settings.log_format)
        client = build_client(settings)
        transport = OpenSearchTransport(client)

        if args.command == "health":
            result = health_check(client)
            print(json.dumps(result, indent=2))
            return 0 if result["status"] in ("green", "yellow") else 1

        if args.command == "delete-documents":
            service = AuditDocumentService(transport, settings)
            ok = service.delete_audit_document(
                args.auditable_id, refresh=args.refresh, auditable_type=args.auditable_type
            )
            print(json.dumps({"auditable_id": args.auditable_id, "deleted": ok}, indent=2))
            return 0 if ok else 1

        indices = AuditIndexService(transport, settings)
        index = args.index or settings.index
        if args.command == "create-index":
            result = {"index": index, "created": indices.create_index(index)}
        elif args.command == "delete-index":
            result = {"index": index, "deleted": indices.delete_index(index)}
        else:
            exists = indices.index_exists(index)
            print(json.dumps({"index": index, "exists": exists}, indent=2))
            return 0 if exists else 1
        print(json.dumps(result, indent=2))
        return 0

    except AuditDriverError as e:
        logger.error("audit_cli_failed", command=args.command, error=str(e))
        print(json.dumps({"error": str(e)}, indent=2), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
