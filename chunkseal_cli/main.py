"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m chunkseal_cli seal <file> [--document-id ID] [--source NAME] [--json]
    python -m chunkseal_cli verify <document_id> [--chunk N ...] [--json] [--debug]
    python -m chunkseal_cli tamper <chunk_id>
    python -m chunkseal_cli restore <chunk_id>
    python -m chunkseal_cli status <document_id> [--json]
    python -m chunkseal_cli lookup <root_hex> [--json]
    python -m chunkseal_cli config --init

Environment Variables:
    CHUNKSEAL_LEDGER_BACKEND    Ledger backend: local, http (default: local)
    CHUNKSEAL_LEDGER_PATH       JSON file for the local ledger
    CHUNKSEAL_LEDGER_URL        Ledger gateway URL (http backend)
    CHUNKSEAL_STORAGE_BACKEND   Chunk store: memory, json (default: memory)
    CHUNKSEAL_STORAGE_PATH      JSON file for the chunk store
    CHUNKSEAL_ANCHOR_TIMEOUT    Anchor lookup timeout in seconds (default: 10)
    CHUNKSEAL_LOG_LEVEL         Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from chunkseal_cli.commands import lookup, seal, tamper, verify
from core.config import get_default_config_template, load_runtime_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="chunkseal",
        description="chunkseal CLI - Seal document chunks, anchor their Merkle roots, and verify them.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./chunkseal.json or ~/.config/chunkseal/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- seal command ---
    seal_parser = subparsers.add_parser(
        "seal",
        help="Seal a document and anchor its Merkle root",
        description="Hash chunks, build the Merkle tree, anchor the root and store the sealed chunks.",
    )
    seal_parser.add_argument(
        "path",
        type=str,
        help="JSON list of chunk strings, or a text file with chunks separated by blank lines",
    )
    seal_parser.add_argument(
        "--document-id",
        type=str,
        default=None,
        help="Document id (default: random UUID)",
    )
    seal_parser.add_argument(
        "--source",
        type=str,
        default=None,
        help="Source description stored with the document",
    )
    seal_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    seal_parser.set_defaults(func=seal.seal_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify the stored chunks of a document",
        description="Check chunk hashes, Merkle proofs and the anchored root.",
    )
    verify_parser.add_argument(
        "document_id",
        type=str,
        help="Document to verify",
    )
    verify_parser.add_argument(
        "--chunk",
        type=int,
        action="append",
        default=None,
        help="Only verify the chunk at this index (repeatable)",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Include visited stages and timings",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- tamper / restore / status commands ---
    tamper_parser = subparsers.add_parser(
        "tamper",
        help="Corrupt a stored chunk (demonstration)",
    )
    tamper_parser.add_argument("chunk_id", type=str, help="Chunk to tamper")
    tamper_parser.set_defaults(func=tamper.tamper_cmd)

    restore_parser = subparsers.add_parser(
        "restore",
        help="Restore a tampered chunk",
    )
    restore_parser.add_argument("chunk_id", type=str, help="Chunk to restore")
    restore_parser.set_defaults(func=tamper.restore_cmd)

    status_parser = subparsers.add_parser(
        "status",
        help="Show the tamper status of a document's chunks",
    )
    status_parser.add_argument("document_id", type=str, help="Document to inspect")
    status_parser.add_argument("--json", action="store_true", help="JSON output")
    status_parser.set_defaults(func=tamper.status_cmd)

    # --- lookup command ---
    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Check whether a Merkle root is anchored",
    )
    lookup_parser.add_argument("root", type=str, help="Hex Merkle root")
    lookup_parser.add_argument("--json", action="store_true", help="JSON output")
    lookup_parser.set_defaults(func=lookup.lookup_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="chunkseal.json",
        help="Path for config file (default: chunkseal.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (CHUNKSEAL_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: chunkseal config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_runtime_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    if config.storage.backend == "memory" and args.command not in ("config", "lookup"):
        logging.getLogger(__name__).warning(
            "Storage backend is 'memory': sealed chunks are lost when the command exits"
        )

    # Attach config to args for commands to use
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
