"""
CLI Seal Command

Seal a document: hash its chunks, build the Merkle tree, anchor the root
and store the sealed records.

Input is either a JSON file holding a list of chunk strings, or a plain
text file whose chunks are separated by blank lines.

Usage:
    chunkseal seal chunks.json [--document-id ID] [--source NAME] [--json]
    chunkseal seal report.txt
"""

from __future__ import annotations

import json
import logging
import re
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from core.schemas.errors import ChunkSealException
from core.services import build_services


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1

_BLANK_LINES = re.compile(r"\n\s*\n")


@dataclass
class SealSummary:
    """Summary of a sealed document for CLI output."""
    document_id: str = ""
    file_name: str = ""
    chunk_count: int = 0
    merkle_root: str = ""
    tree_depth: int = 0
    tx_ref: str = ""
    already_anchored: bool = False
    explorer_link: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["explorer_link"] is None:
            del d["explorer_link"]
        return d


def load_chunks(path: Path) -> list[str]:
    """
    Read chunk texts from a file.

    Raises:
        ValueError: If a JSON file does not hold a list of strings
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        data = json.loads(text)
        if not isinstance(data, list) or not all(isinstance(c, str) for c in data):
            raise ValueError(f"{path} must contain a JSON list of strings")
        return data
    return [part.strip() for part in _BLANK_LINES.split(text) if part.strip()]


def print_summary_human(summary: SealSummary) -> None:
    """Print summary in human-readable format."""
    print(f"document_id: {summary.document_id}")
    print(f"file: {summary.file_name}")
    print(f"chunks: {summary.chunk_count}")
    print(f"merkle_root: {summary.merkle_root}")
    print(f"tree_depth: {summary.tree_depth}")
    print(f"tx_ref: {summary.tx_ref or '(unknown)'}")
    if summary.already_anchored:
        print("note: root was already anchored, reusing the earlier publication")
    if summary.explorer_link:
        print(f"explorer: {summary.explorer_link}")


def seal_cmd(args: Namespace) -> int:
    """
    Execute the seal command.

    Returns:
        Exit code
    """
    path = Path(args.path)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        texts = load_chunks(path)
    except ValueError as e:
        print(f"Error reading chunks: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    services = build_services(args.runtime_config)
    try:
        result = services.sealer.seal(
            texts,
            document_id=args.document_id,
            file_name=path.name,
            source=args.source or "",
        )
    except ChunkSealException as e:
        print(f"Error sealing document: [{e.code}] {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    finally:
        services.close()

    summary = SealSummary(
        document_id=result.document.document_id,
        file_name=result.document.file_name,
        chunk_count=result.document.chunk_count,
        merkle_root=result.merkle_root,
        tree_depth=result.tree.depth,
        tx_ref=result.receipt.tx_ref,
        already_anchored=result.receipt.already_anchored,
        explorer_link=services.anchor.explorer_link(result.receipt.tx_ref),
    )

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    logger.info(f"Sealed {summary.chunk_count} chunks as document {summary.document_id}")
    return EXIT_SUCCESS
