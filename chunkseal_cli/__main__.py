"""
Module execution entry point.

Allows running with: python -m chunkseal_cli
"""

import sys
from chunkseal_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
