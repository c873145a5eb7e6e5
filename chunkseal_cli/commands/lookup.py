"""
CLI Lookup Command

Ask the configured ledger whether a Merkle root is anchored.

Usage:
    chunkseal lookup <root_hex> [--json]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from core.schemas.errors import ChunkSealException
from core.services import build_services


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def lookup_cmd(args: Namespace) -> int:
    """
    Execute the lookup command.

    Returns:
        Exit code (2 if the root is not anchored)
    """
    services = build_services(args.runtime_config)
    try:
        lookup = services.anchor.lookup(args.root)
        tx_ref = services.ledger.find_anchor_tx(args.root) if lookup.exists else None
    except ChunkSealException as e:
        print(f"Error: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    finally:
        services.close()

    if args.json:
        print(json.dumps({
            "root": args.root,
            "exists": lookup.exists,
            "document_id": lookup.document_id,
            "timestamp": lookup.timestamp,
            "tx_ref": tx_ref,
        }, indent=2))
    else:
        print(f"root: {args.root}")
        print(f"exists: {str(lookup.exists).lower()}")
        if lookup.exists:
            print(f"document_id: {lookup.document_id}")
            print(f"timestamp: {lookup.timestamp}")
            print(f"tx_ref: {tx_ref or '(unknown)'}")

    return EXIT_SUCCESS if lookup.exists else EXIT_VERIFICATION_FAILED
