"""Entry Point - Root Module.

Runs the earthquake push alert service. It imports from the src package.
"""

import sys

from src.main import main

__all__ = [
    "main",
]


if __name__ == "__main__":
    sys.exit(main())
