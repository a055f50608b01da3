"""
Main entry point for the Bodymovin frame renderer with CLI support
"""

import sys

from .main import main


if __name__ == "__main__":
    sys.exit(main())
