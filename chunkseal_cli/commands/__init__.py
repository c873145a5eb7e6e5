"""
CLI command modules.
"""

from chunkseal_cli.commands import lookup, seal, tamper, verify

__all__ = ["lookup", "seal", "tamper", "verify"]
