"""
Centralized Logging Utilities and Decorators

Provides the logging setup and function decorators shared by the catalog sync
and download stages.

Usage:
    from offstream.logger import setup_logging, log_function

    # Setup logging for a module
    logger = setup_logging(
        logger_name="sync_films",
        log_file="sync_films.log",
        verbose=True
    )

    # Decorate functions for automatic logging
    @log_function(logger_name="sync_films", log_args=True)
    def fetch_films(client, films):
        ...

Log files are written below the directory named by the LOG_DIR environment
variable (default: "logs").
"""

import functools
import logging
import os
import time
from pathlib import Path
from typing import Optional, Callable, Any


DEFAULT_LOG_FILE = "offstream.log"


def resolve_log_path(log_file: str) -> Path:
    """Place relative log file names below LOG_DIR."""
    log_path = Path(log_file)
    if log_path.is_absolute():
        return log_path
    return Path(os.getenv("LOG_DIR", "logs")) / log_path


def setup_logging(
    logger_name: str,
    log_file: str = DEFAULT_LOG_FILE,
    verbose: bool = False,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Set up logging with file and optional console handlers.

    Args:
        logger_name: Name for the logger (e.g., "film_download")
        log_file: Log file name, relative to LOG_DIR unless absolute
        verbose: If True, add console handler with DEBUG level (default: False)
        level: Base logging level (default: logging.INFO)

    Returns:
        Configured logger instance

    Example:
        logger = setup_logging("film_download", "film_download.log", verbose=True)
        logger.info("Module started")
    """
    logger = logging.getLogger(logger_name)

    if verbose and not any(
        getattr(handler, "_offstream_console", False) for handler in logger.handlers
    ):
        _add_console_handler(logger)
        logger.setLevel(logging.DEBUG)

    # Avoid adding multiple file handlers if already configured
    if any(isinstance(handler, logging.FileHandler) for handler in logger.handlers):
        return logger

    if not verbose:
        logger.setLevel(level)

    log_path = resolve_log_path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # File handler for detailed logging
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(level)
    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    return logger


def _add_console_handler(logger: logging.Logger) -> None:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    console_handler._offstream_console = True
    logger.addHandler(console_handler)


def log_function(
    logger_name: Optional[str] = None,
    level: int = logging.INFO,
    log_args: bool = False,
    log_result: bool = False,
    log_execution_time: bool = True,
) -> Callable:
    """
    Decorator to automatically log function entry, exit, execution time, and exceptions.

    Args:
        logger_name: Custom logger name (if None, uses the decorated function's module name)
        level: Log level for entry/exit messages (default: logging.INFO)
        log_args: If True, log function arguments (default: False)
        log_result: If True, log return value (default: False)
        log_execution_time: If True, log execution duration (default: True)

    Returns:
        Decorated function with logging

    Example:
        @log_function(logger_name="film_download", log_args=True)
        def download_film(session, film, executor):
            ...
    """

    def decorator(func: Callable) -> Callable:
        name = logger_name or func.__module__

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger = logging.getLogger(name)
            if not logger.handlers:
                logger = setup_logging(name, level=level)

            func_name = func.__name__
            log_msg = f"Calling {func_name}"

            if log_args and (args or kwargs):
                args_repr = [repr(a) for a in args]
                kwargs_repr = [f"{k}={v!r}" for k, v in kwargs.items()]
                all_args = ", ".join(args_repr + kwargs_repr)
                log_msg += f" with args: {all_args}"

            logger.log(level, log_msg)

            start_time = time.time()

            try:
                result = func(*args, **kwargs)

                execution_time = time.time() - start_time

                completion_msg = f"Completed {func_name}"

                if log_execution_time:
                    completion_msg += f" in {execution_time:.2f}s"

                if log_result:
                    completion_msg += f" with result: {result!r}"

                logger.log(level, completion_msg)

                return result

            except Exception as e:
                execution_time = time.time() - start_time
                logger.error(
                    f"Exception in {func_name} after {execution_time:.2f}s: {type(e).__name__}: {e}",
                    exc_info=True,
                )
                raise

        return wrapper

    return decorator


def log_with_timer(logger_name: Optional[str] = None) -> Callable:
    """
    Simple decorator that logs function entry/exit with execution time.

    Example:
        @log_with_timer("sync_films")
        def film_ids_not_in_db(session, film_ids):
            ...
    """
    return log_function(
        logger_name=logger_name,
        log_args=False,
        log_result=False,
        log_execution_time=True,
    )
