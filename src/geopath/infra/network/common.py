from __future__ import annotations

USER_AGENT = "GeoPath-Client/1.0.0"
DEFAULT_TIMEOUT = 10
