"""
Module execution entry point.

Allows running with: python -m ordmerkle_cli
"""

import sys
from ordmerkle_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
