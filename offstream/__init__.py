"""offstream: mirror the offstream.dk film catalog and download its films."""

__version__ = "0.1.0"
