"""Entry point for ``python -m arxivlens``."""

import sys

from arxivlens.cli import main

if __name__ == "__main__":
    sys.exit(main())
