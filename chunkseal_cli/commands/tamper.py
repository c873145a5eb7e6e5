"""
CLI Tamper Commands

Demonstration helpers that corrupt and restore stored chunks so the
verification failures can be observed.

Usage:
    chunkseal tamper <chunk_id>
    chunkseal restore <chunk_id>
    chunkseal status <document_id> [--json]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from typing import Any

from core.schemas.errors import ChunkSealException
from core.services import build_services


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def tamper_cmd(args: Namespace) -> int:
    services = build_services(args.runtime_config)
    try:
        chunk = services.tamper.tamper(args.chunk_id)
    except ChunkSealException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    finally:
        services.close()

    print(f"tampered: {chunk.id}")
    print(f"tampered_at: {chunk.tampered_at.isoformat()}")
    return EXIT_SUCCESS


def restore_cmd(args: Namespace) -> int:
    services = build_services(args.runtime_config)
    try:
        chunk = services.tamper.restore(args.chunk_id)
    except ChunkSealException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    finally:
        services.close()

    print(f"restored: {chunk.id}")
    return EXIT_SUCCESS


def status_cmd(args: Namespace) -> int:
    """List the tamper status of each chunk in a document."""
    services = build_services(args.runtime_config)
    try:
        status = services.tamper.status(args.document_id)
    except ChunkSealException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    finally:
        services.close()

    if args.json:
        data: dict[str, Any] = {
            "document_id": status.document_id,
            "tampered_count": status.tampered_count,
            "chunks": [
                {
                    "chunk_id": c.chunk_id,
                    "index": c.index,
                    "is_tampered": c.is_tampered,
                    "tampered_at": c.tampered_at.isoformat() if c.tampered_at else None,
                    "content_preview": c.content_preview,
                }
                for c in status.chunks
            ],
        }
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return EXIT_SUCCESS

    print(f"document_id: {status.document_id}")
    print(f"tampered: {status.tampered_count} of {len(status.chunks)}")
    for c in status.chunks:
        marker = "!" if c.is_tampered else " "
        preview = c.content_preview.replace("\n", " ")[:60]
        print(f"  {marker} {c.chunk_id}  {preview}")
    return EXIT_SUCCESS
