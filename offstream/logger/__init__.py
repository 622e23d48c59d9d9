"""Logging utilities for the offstream project."""

from .logging_decorator import (
    setup_logging,
    log_function,
    log_with_timer,
    resolve_log_path,
)

__all__ = ["setup_logging", "log_function", "log_with_timer", "resolve_log_path"]
