"""
chunkseal CLI

Command-line interface for sealing documents and verifying their chunks.

Usage:
    python -m chunkseal_cli seal report.txt --source "Annual report"
    python -m chunkseal_cli verify <document_id>
    python -m chunkseal_cli tamper <chunk_id>
    python -m chunkseal_cli lookup <root_hex>
"""

__version__ = "0.1.0"
