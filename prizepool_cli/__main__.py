"""
Module execution entry point.

Allows running with: python -m prizepool_cli
"""

import sys
from prizepool_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
