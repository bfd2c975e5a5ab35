from __future__ import annotations

"""
Network Communication Infrastructure.

Facade over the HTTP clients used to reach external collaborators.
"""

from geopath.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT
from geopath.infra.network.hierarchy_client import HttpHierarchyProvider

__all__ = [
    "HttpHierarchyProvider",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
]
