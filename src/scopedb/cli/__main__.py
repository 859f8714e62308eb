"""Main entry point for the scopedb CLI when run as a module."""

import sys

from scopedb.cli import main

if __name__ == "__main__":
    sys.exit(main())
