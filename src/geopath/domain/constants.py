from __future__ import annotations

"""
Global Domain Constants.

Separators, sentinels and character rules shared by the path codec, the
folder grouping layer and the interface modules.
"""

import re
from typing import Pattern

# -----------------------------------------------------------------------------
# APPLICATION METADATA
# -----------------------------------------------------------------------------
APP_NAME = "GeoPath"
CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# FLAT IDENTIFIER FORMAT
# -----------------------------------------------------------------------------
SEGMENT_SEPARATOR = ":"
STORAGE_SEPARATOR = "/"
SPACE_SUBSTITUTE = "_"

# Key of the root entry in every grouped folder index
ROOT_FOLDER_KEY = ""

# Returned by display helpers when the identifier is unusable
UNKNOWN_NAME = "Unknown"

# Accepted character set for external image identifiers
IDENTIFIER_PATTERN: Pattern[str] = re.compile(r"^[A-Za-z0-9_.:%-]+$")

# Mapping key used by the recognition API for flat identifiers
EXTERNAL_ID_FIELD = "ExternalImageId"

# -----------------------------------------------------------------------------
# SELECTION DEFAULTS
# -----------------------------------------------------------------------------
DEFAULT_HIERARCHY_MODE = "PNG"
# Depth counts from the first fetched level (PNG: province = 0, district = 1)
DEFAULT_MIN_LEVEL = 1
