"""Main entry point for unbackre package.

This module allows the package to be executed as:
    python -m unbackre [args...]
"""

from .cli import main

if __name__ == "__main__":
    main()
