from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of user settings as JSON in the user data
directory, with default fallback and forward-compatible merging.
"""

import json
import logging
import os
from typing import Any, Dict

from geopath.domain.constants import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_HIERARCHY_MODE,
    DEFAULT_MIN_LEVEL,
)
from geopath.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")
DEFAULT_BASE_URL = "http://localhost:3000"


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Hierarchy
        "hierarchy_mode": DEFAULT_HIERARCHY_MODE,
        "min_level": DEFAULT_MIN_LEVEL,

        # Provider
        "base_url": DEFAULT_BASE_URL,
        "request_timeout": 10,
        "max_workers": 4,

        # Folder index cache
        "cache_ttl_seconds": 300,
        "cache_max_entries": 16,

        # Diagnostics
        "log_level": "INFO",
        "log_file": "",
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Load the saved configuration merged over the defaults.

    Unknown keys are kept so newer files survive older readers.

    Returns:
        Dict[str, Any]: The loaded configuration, or defaults on failure.
    """
    config = get_default_config()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    data.pop("version", None)
    config.update(data)
    return config


def save_config(config: Dict[str, Any]) -> None:
    """
    Persist the configuration to disk.

    Args:
        config: The configuration dictionary to save.
    """
    payload = dict(config)
    payload["version"] = CURRENT_CONFIG_VERSION
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {CONFIG_FILE}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
