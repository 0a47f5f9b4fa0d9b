"""
iamxlib.config — Configuration singleton and the explicit export context.

Provides thread-safe lazy loading of config.json, value lookups, the default
export location, and the ExportContext value that carries the profile,
destination and IAM client into every export call.

Zero dependency on utils.py — uses only stdlib.
"""

import json
import logging
import os
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"
DEFAULT_LOG_RETENTION_DAYS = 14

# ---------------------------------------------------------------------------
# Module-level state (config singleton)
# ---------------------------------------------------------------------------

CONFIG_DATA: Dict[str, Any] = {}
_CONFIG_LOADED: bool = False
_CONFIG_LOCK: threading.Lock = threading.Lock()


# ---------------------------------------------------------------------------
# Export context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExportContext:
    """
    Everything an export pass needs, resolved once at startup.

    Attributes:
        profile: Named AWS profile used for every remote call
        export_path: Destination directory for all artifacts
        iam_client: boto3 IAM client bound to ``profile``
        tags_supported: Whether the IAM API surface offers ListUserTags
    """

    profile: str
    export_path: Path
    iam_client: Any
    tags_supported: bool = True


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _config_path() -> Path:
    """Return the absolute path to config.json (sibling of utils.py)."""
    # iamxlib/config.py lives one level below the project root
    return Path(__file__).parent.parent / "config.json"


def is_auto_run() -> bool:
    """
    Check if IAMExport is running in non-interactive automation mode.

    Returns:
        bool: True if IAMEXPORT_AUTO_RUN environment variable is set to 1/true/yes
    """
    return os.environ.get("IAMEXPORT_AUTO_RUN", "").lower() in ("1", "true", "yes")


def default_export_path() -> Path:
    """
    Get the platform default export directory.

    Returns:
        Path: ``C:\\IAMExport`` on Windows, ``~/IAMExport`` elsewhere
    """
    if sys.platform.startswith("win"):
        return Path("C:\\IAMExport")
    return Path.home() / "IAMExport"


def _default_config() -> Dict[str, Any]:
    return {
        "__comment": "IAMExport Configuration - Customize this file for your environment",
        "default_profile": DEFAULT_PROFILE,
        "export_path": None,
        "log_retention_days": DEFAULT_LOG_RETENTION_DAYS,
        "aws_sdk_config": {
            "retries": {"max_attempts": 5, "mode": "adaptive"},
            "connect_timeout": 10,
            "read_timeout": 60,
        },
    }


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_config() -> Dict[str, Any]:
    """
    Load configuration from config.json, creating a default file if missing.

    Returns:
        dict: CONFIG_DATA
    """
    global CONFIG_DATA

    try:
        config_file = _config_path()

        if config_file.exists():
            with open(config_file, "r", encoding="utf-8") as f:
                CONFIG_DATA = json.load(f)
            logger.debug("Configuration loaded successfully")
        else:
            logger.warning("config.json not found. Using default configuration.")
            default_config = _default_config()

            try:
                # Atomic write: serialize to .tmp then os.replace for crash safety
                tmp_path = config_file.with_suffix(".json.tmp")
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(default_config, f, indent=2)
                os.replace(tmp_path, config_file)
                logger.info("Created default config.json at %s", config_file)
            except OSError as e:
                logger.error("Failed to create default config.json: %s", e)

            CONFIG_DATA = default_config

    except (OSError, ValueError) as e:
        logger.error("Error loading configuration: %s", e)

    return CONFIG_DATA


def get_config() -> Dict[str, Any]:
    """
    Lazy-load configuration. First call loads from disk; subsequent calls return cached values.
    Thread-safe: uses _CONFIG_LOCK to prevent concurrent initialization.

    Returns:
        dict: CONFIG_DATA
    """
    global _CONFIG_LOADED, CONFIG_DATA
    with _CONFIG_LOCK:
        if not _CONFIG_LOADED:
            CONFIG_DATA = load_config()
            _CONFIG_LOADED = True
    return CONFIG_DATA


# ---------------------------------------------------------------------------
# Config value accessors
# ---------------------------------------------------------------------------


def config_value(key: str, default: Any = None, section: Optional[str] = None) -> Any:
    """
    Get a value from the configuration.

    Args:
        key: Configuration key
        default: Default value if key is not found
        section: Optional section in the configuration

    Returns:
        The configuration value or default
    """
    cfg = get_config()
    if not cfg:
        return default

    if section:
        section_data = cfg.get(section)
        if isinstance(section_data, dict) and key in section_data:
            return section_data[key]
    elif key in cfg:
        return cfg[key]

    return default


def get_default_profile() -> str:
    """Profile used when --source-profile is not given."""
    return config_value("default_profile") or DEFAULT_PROFILE


def get_export_path() -> Path:
    """Export directory used when --export-path is not given."""
    configured = config_value("export_path")
    if configured:
        return Path(configured).expanduser()
    return default_export_path()


def get_log_retention_days() -> int:
    """Number of days log files are kept in logs/."""
    value = config_value("log_retention_days", default=DEFAULT_LOG_RETENTION_DAYS)
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid log_retention_days %r, using %d", value, DEFAULT_LOG_RETENTION_DAYS)
        return DEFAULT_LOG_RETENTION_DAYS
