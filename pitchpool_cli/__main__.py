"""
Module execution entry point.

Allows running with: python -m pitchpool_cli
"""

import sys
from pitchpool_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
