"""Entry point for running aluopt as a module: python -m aluopt."""

import sys

from aluopt.cli import main

if __name__ == "__main__":
    sys.exit(main())
