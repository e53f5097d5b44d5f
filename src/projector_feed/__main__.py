"""Make package runnable with python -m projector_feed.

This module provides the entry point for running the package as a module
(python -m projector_feed) and for the installed console script (projector-feed).
"""

import sys

from projector_feed.cli import main

if __name__ == "__main__":
    sys.exit(main())
