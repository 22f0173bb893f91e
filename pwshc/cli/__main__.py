"""
Entry point for ``python -m pwshc.cli``.
"""

import sys

from . import main

if __name__ == "__main__":
    sys.exit(main())
