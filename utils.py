#!/usr/bin/env python3
"""
===========================
= AWS IAM USER EXPORTER =
===========================

Title: IAMExport Utilities Module
Version: v0.1.0
Date: OCT-18-2026

Description:
Shared utility functions for the IAMExport script. This module provides
logging setup (console plus rotating-by-run log files), standardized log
helpers, interactive confirmation, and AWS error formatting. Library code
lives in iamxlib/ and never imports this module.
"""

import sys
import datetime
import logging
from pathlib import Path
from typing import Optional

from iamxlib.aws_client import describe_aws_error
from iamxlib.config import get_log_retention_days, is_auto_run

__all__ = [
    'setup_logging',
    'get_logger',
    'log_error',
    'log_warning',
    'log_info',
    'log_debug',
    'log_success',
    'log_section',
    'log_script_start',
    'log_script_end',
    'log_export_summary',
    'prompt_for_confirmation',
    'describe_aws_error',
    'is_auto_run',
]

LOGGER_NAME = 'iamexport'
# Library loggers share the script's handlers
_LIBRARY_LOGGER_NAME = 'iamxlib'

# Global logger instance
logger = None
# Tracks whether setup_logging() has been explicitly called
_logging_configured = False


def _logs_dir() -> Path:
    return Path(__file__).parent / "logs"


def _cleanup_old_logs(logs_dir: Path, log_retention_days: int = 14) -> None:
    """
    Remove log files older than log_retention_days from the logs directory.

    Args:
        logs_dir: Path to the logs directory
        log_retention_days: Number of days to retain log files (default: 14)
    """
    cutoff = datetime.datetime.now() - datetime.timedelta(days=log_retention_days)
    cutoff_timestamp = cutoff.timestamp()
    removed = 0
    for log_file in logs_dir.glob("*.log"):
        try:
            if log_file.stat().st_mtime < cutoff_timestamp:
                log_file.unlink()
                removed += 1
        except OSError:
            continue
    if removed:
        logging.getLogger(LOGGER_NAME).debug(
            f"Cleaned up {removed} log file(s) older than {log_retention_days} days"
        )


def setup_logging(script_name: str = "iamexport", log_to_file: bool = True) -> logging.Logger:
    """
    Setup logging for IAMExport with both console and file output.

    Args:
        script_name (str): Name of the script for log file naming
        log_to_file (bool): Whether to log to file in addition to console

    Returns:
        logging.Logger: Configured logger instance
    """
    global logger, _logging_configured

    logger = logging.getLogger(LOGGER_NAME)
    library_logger = logging.getLogger(_LIBRARY_LOGGER_NAME)

    for configured in (logger, library_logger):
        configured.setLevel(logging.DEBUG)
        configured.handlers = []
        configured.propagate = False

    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler (always enabled)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)
    library_logger.addHandler(console_handler)

    if log_to_file:
        try:
            logs_dir = _logs_dir()
            logs_dir.mkdir(exist_ok=True)

            # Remove stale log files before creating the new one
            _cleanup_old_logs(logs_dir, get_log_retention_days())

            # Timestamp for log filename: MM.DD.YYYY-HHMM
            timestamp = datetime.datetime.now().strftime("%m.%d.%Y-%H%M")
            log_filepath = logs_dir / f"logs-{script_name}-{timestamp}.log"

            file_handler = logging.FileHandler(log_filepath, mode='w', encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)
            library_logger.addHandler(file_handler)

            logger.info(f"IAMExport logging initialized - Log file: {log_filepath}")
            logger.info(f"Script: {script_name}")
            logger.info("=" * 80)

        except OSError as e:
            # If file logging fails, continue with console only
            logger.error(f"Failed to setup file logging: {e}")
            logger.warning("Continuing with console logging only")

    _logging_configured = True
    return logger


def get_logger() -> logging.Logger:
    """
    Get the current logger instance.
    If setup_logging() has not yet been called, returns a logger with a
    NullHandler so that library usage does not emit spurious output.

    Returns:
        logging.Logger: Logger instance
    """
    global logger
    if logger is None:
        if _logging_configured:
            logger = setup_logging()
        else:
            null_logger = logging.getLogger(LOGGER_NAME)
            if not null_logger.handlers:
                null_logger.addHandler(logging.NullHandler())
            return null_logger
    return logger

# Do NOT call setup_logging() at module import time.
# The script calls utils.setup_logging() explicitly to activate logging.


def log_error(error_message: str, error_obj: Optional[BaseException] = None) -> None:
    """
    Log an error message to both console and file.

    Args:
        error_message: The error message to display
        error_obj: Optional exception object
    """
    current_logger = get_logger()
    if error_obj:
        current_logger.error(f"{error_message}: {describe_aws_error(error_obj)}")
        # Stack trace goes to the file handler only
        current_logger.debug(f"Exception details: {error_obj}", exc_info=error_obj)
    else:
        current_logger.error(error_message)


def log_warning(warning_message: str) -> None:
    get_logger().warning(warning_message)


def log_info(info_message: str) -> None:
    get_logger().info(info_message)


def log_debug(debug_message: str) -> None:
    """Log a debug message (file only, not console)."""
    get_logger().debug(debug_message)


def log_success(success_message: str) -> None:
    get_logger().info(f"SUCCESS: {success_message}")


def log_script_start(script_name: str, description: str = "") -> None:
    """
    Log the start of a script execution with standardized format.

    Args:
        script_name: Name of the script being executed
        description: Optional description of the script's purpose
    """
    current_logger = get_logger()
    current_logger.info("=" * 80)
    current_logger.info(f"SCRIPT START: {script_name}")
    if description:
        current_logger.info(f"DESCRIPTION: {description}")
    current_logger.info(f"START TIME: {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    current_logger.info("=" * 80)


def log_script_end(script_name: str, start_time: Optional[datetime.datetime] = None) -> None:
    """
    Log the end of a script execution with standardized format.

    Args:
        script_name: Name of the script that was executed
        start_time: Optional start time to calculate duration
    """
    current_logger = get_logger()
    end_time = datetime.datetime.now()

    current_logger.info("=" * 80)
    current_logger.info(f"SCRIPT END: {script_name}")
    current_logger.info(f"END TIME: {end_time.strftime('%Y-%m-%d %H:%M:%S')}")

    if start_time:
        current_logger.info(f"DURATION: {end_time - start_time}")

    current_logger.info("=" * 80)


def log_section(section_name: str) -> None:
    current_logger = get_logger()
    current_logger.info("-" * 50)
    current_logger.info(f"SECTION: {section_name}")
    current_logger.info("-" * 50)


def log_export_summary(resource_type: str, count: int, output_path: str, failures: int = 0) -> None:
    """
    Log export operation summary.

    Args:
        resource_type: Type of resource exported
        count: Number of resources exported
        output_path: Export directory
        failures: Number of failed sub-exports
    """
    current_logger = get_logger()
    current_logger.info(f"EXPORT SUMMARY: {resource_type}")
    current_logger.info(f"  Resources exported: {count}")
    current_logger.info(f"  Output directory: {output_path}")
    if failures:
        current_logger.warning(f"  Failed sub-exports: {failures}")


def prompt_for_confirmation(message: str = "Do you want to continue?", default: bool = False) -> bool:
    """
    Prompt the user for confirmation.

    Any answer starting with "y" confirms. In automation mode
    (IAMEXPORT_AUTO_RUN) the prompt is not shown and default is returned.

    Args:
        message: Message to display
        default: Response used for an empty answer or in automation mode

    Returns:
        bool: True if confirmed, False otherwise
    """
    if is_auto_run():
        log_info(f"{message} -> auto-run mode, answering {'yes' if default else 'no'}")
        return default

    default_prompt = " (Y/n): " if default else " (y/N): "
    try:
        response = input(f"{message}{default_prompt}").strip().lower()
    except EOFError:
        return default

    if not response:
        return default

    return response.startswith('y')
