#!/usr/bin/env python3
"""
Main entry point for the pipeline package.

    uv run -m offstream.pipeline --help
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
