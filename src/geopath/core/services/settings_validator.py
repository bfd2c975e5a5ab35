from __future__ import annotations

"""
Configuration Validation Service.

Gatekeeper between untrusted settings (config file, CLI overrides) and the
services that consume them. Coerces types, checks the hierarchy mode against
the mode table and injects defaults, collecting warnings instead of failing
unless asked to be strict.
"""

import logging
from typing import Any, Dict, List, Tuple

from geopath.domain.config import get_default_config
from geopath.domain.hierarchy import HIERARCHY_MODES
from geopath.infra.logging.config import _LEVEL_MAP

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and a
                                          list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    string_fields = ["hierarchy_mode", "base_url", "log_level"]
    int_fields = [
        "min_level", "max_workers",
        "cache_ttl_seconds", "cache_max_entries",
    ]

    for field in string_fields:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    # log_file may legitimately be empty (console only)
    log_file = merged.get("log_file")
    merged["log_file"] = log_file.strip() if isinstance(log_file, str) else _as_str(
        log_file, defaults["log_file"], "log_file", warnings, strict
    )

    for field in int_fields:
        merged[field] = _as_non_negative_int(
            merged.get(field), defaults[field], field, warnings, strict
        )

    merged["request_timeout"] = _as_positive_number(
        merged.get("request_timeout"), defaults["request_timeout"], "request_timeout", warnings, strict
    )

    if merged["max_workers"] < 1:
        _reject("Field 'max_workers' must be at least 1.", warnings, strict)
        merged["max_workers"] = defaults["max_workers"]

    merged["hierarchy_mode"] = _normalize_mode(
        merged["hierarchy_mode"], defaults["hierarchy_mode"], warnings, strict
    )
    merged["log_level"] = _normalize_log_level(
        merged["log_level"], defaults["log_level"], warnings, strict
    )
    merged["base_url"] = merged["base_url"].rstrip("/")

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _reject(msg: str, warnings: List[str], strict: bool, exc: type = ValueError) -> None:
    if strict:
        raise exc(msg)
    warnings.append(f"{msg} Using fallback.")


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    _reject(
        f"Invalid field '{field}': expected str, received {type(value).__name__}.",
        warnings, strict, TypeError,
    )
    return fallback


def _as_non_negative_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce ints, integral floats and numeric strings; reject negatives."""
    if value is None:
        return fallback

    result = None
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif not strict:
        if isinstance(value, float) and value.is_integer():
            result = int(value)
        elif isinstance(value, str) and value.strip().isdigit():
            warnings.append(f"Field '{field}' converted from '{value}' to int.")
            result = int(value.strip())

    if result is None:
        _reject(
            f"Invalid field '{field}': expected int, received {type(value).__name__}.",
            warnings, strict, TypeError,
        )
        return fallback

    if result < 0:
        _reject(f"Invalid field '{field}': {result} is negative.", warnings, strict)
        return fallback
    return result


def _as_positive_number(value: Any, fallback: float, field: str, warnings: List[str], strict: bool) -> float:
    """Coerce a strictly positive int or float."""
    if value is None:
        return fallback

    result = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        result = value
    elif isinstance(value, str) and not strict:
        try:
            result = float(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to number.")
        except ValueError:
            result = None

    if result is None:
        _reject(
            f"Invalid field '{field}': expected number, received {type(value).__name__}.",
            warnings, strict, TypeError,
        )
        return fallback

    if result <= 0:
        _reject(f"Invalid field '{field}': {result} must be positive.", warnings, strict)
        return fallback
    return result


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _normalize_mode(mode: str, fallback: str, warnings: List[str], strict: bool) -> str:
    code = mode.strip().upper()
    if code in HIERARCHY_MODES:
        return code
    _reject(
        f"Unknown hierarchy mode '{mode}'. Supported: {', '.join(HIERARCHY_MODES)}.",
        warnings, strict,
    )
    return fallback


def _normalize_log_level(level: str, fallback: str, warnings: List[str], strict: bool) -> str:
    name = level.strip().upper()
    if name in _LEVEL_MAP:
        return name
    _reject(f"Unknown log level '{level}'.", warnings, strict)
    return fallback
