#!/usr/bin/env python3
"""
Main entry point for the ingestion package.

Runs the catalog sync only, without downloading anything:
    uv run -m offstream.ingestion
    uv run -m offstream.ingestion --dry-run --verbose
"""

import sys
from typing import Optional, Sequence

from offstream.pipeline.cli import build_parser, run_cli


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the catalog sync CLI."""
    parser = build_parser("Sync the offstream.dk film catalog into the local database")
    args = parser.parse_args(argv)
    return run_cli(args, ["sync"], logger_name="sync")


if __name__ == "__main__":
    sys.exit(main())
