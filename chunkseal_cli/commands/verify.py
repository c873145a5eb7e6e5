"""
CLI Verify Command

Run the verification protocol over the stored chunks of a document:
- Hash layer: current content against the sealed digest
- Proof layer: sealed digest and proof against the sealed root
- Anchor layer: sealed root against the ledger

Usage:
    chunkseal verify <document_id> [--chunk N ...] [--json] [--debug]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from core.schemas.errors import ChunkSealException
from core.schemas.verification import BatchVerification
from core.services import build_services
from core.verification import sources_for_document


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of document verification for CLI output."""
    document_id: str = ""
    merkle_root: str = ""
    all_verified: bool = False
    verified_count: int = 0
    failed_count: int = 0
    chunks: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_summary(
    document_id: str,
    merkle_root: str,
    batch: BatchVerification,
    debug: bool = False,
) -> VerifySummary:
    """Build a VerifySummary from a batch verification."""
    rows = []
    for verdict in batch.verdicts:
        row: dict[str, Any] = {
            "chunk_id": verdict.chunk_id,
            "verified": verdict.verified,
            "detail": verdict.detail,
        }
        if verdict.failed_layer:
            row["failed_layer"] = verdict.failed_layer
        if verdict.anchor_failure:
            row["anchor_failure"] = verdict.anchor_failure
        if debug:
            row["stages"] = [s.value for s in verdict.stage_trail]
            row["timings_ms"] = verdict.timings_ms
        rows.append(row)

    return VerifySummary(
        document_id=document_id,
        merkle_root=merkle_root,
        all_verified=batch.all_verified,
        verified_count=batch.verified_count,
        failed_count=batch.failed_count,
        chunks=rows,
    )


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"document_id: {summary.document_id}")
    print(f"merkle_root: {summary.merkle_root}")
    print(f"all_verified: {str(summary.all_verified).lower()}")
    print(f"chunks: {summary.verified_count} verified, {summary.failed_count} failed")

    for row in summary.chunks:
        status = "✓" if row["verified"] else "✗"
        layer = f" [{row['failed_layer']}]" if "failed_layer" in row else ""
        print(f"  {status} {row['chunk_id']}{layer} {row['detail']}")
        if "stages" in row:
            print(f"      stages: {' -> '.join(row['stages'])}")


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Returns:
        Exit code (2 if any chunk fails verification)
    """
    services = build_services(args.runtime_config)
    try:
        document = services.store.get_document(args.document_id)
        sources = sources_for_document(services.store, args.document_id, indexes=args.chunk)
        if not sources:
            print(f"Error: No matching chunks in document {args.document_id}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        batch = services.verifier.verify_many(sources)
    except ChunkSealException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    finally:
        services.close()

    summary = build_summary(document.document_id, document.merkle_root, batch, debug=args.debug)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    if summary.all_verified:
        logger.info("Verification passed")
        return EXIT_SUCCESS

    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
