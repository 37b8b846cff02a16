"""Entry point for ``python -m welder``."""

import sys

from welder.cli import main

if __name__ == "__main__":
    sys.exit(main())
