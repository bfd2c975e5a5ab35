from __future__ import annotations

"""
Domain Exception Hierarchy.

Every error raised by the codec, the hierarchy tables and the selection
engine derives from GeoPathError so interface layers can catch the whole
family with a single clause.
"""

from typing import Optional


class GeoPathError(Exception):
    """Base class for all geopath domain errors."""


# -----------------------------------------------------------------------------
# CODEC ERRORS
# -----------------------------------------------------------------------------

class MalformedIdentifierError(GeoPathError, ValueError):
    """
    Raised when a flat identifier or structured path cannot be processed.

    Attributes:
        identifier: The offending raw value (as received).
    """

    def __init__(self, message: str, identifier: object = None) -> None:
        super().__init__(message)
        self.identifier = identifier


# -----------------------------------------------------------------------------
# CONFIGURATION ERRORS
# -----------------------------------------------------------------------------

class HierarchyConfigError(GeoPathError):
    """Base class for misconfigured hierarchy modes or level tables."""


class UnknownHierarchyModeError(HierarchyConfigError, KeyError):
    """Raised when a hierarchy mode is not present in the mode table."""

    def __init__(self, mode: str) -> None:
        super().__init__(mode)
        self.mode = mode

    def __str__(self) -> str:
        return f"Unknown hierarchy mode: {self.mode!r}"


class HierarchyLevelError(HierarchyConfigError, IndexError):
    """Raised when a depth falls outside the level table of a mode."""

    def __init__(self, mode: str, depth: int, max_depth: int) -> None:
        super().__init__(
            f"Mode {mode!r} defines levels 0..{max_depth}; depth {depth} is out of range."
        )
        self.mode = mode
        self.depth = depth
        self.max_depth = max_depth


# -----------------------------------------------------------------------------
# SELECTION TREE ERRORS
# -----------------------------------------------------------------------------

class UnknownNodeError(GeoPathError, KeyError):
    """Raised when an operation targets a node id absent from the tree."""

    def __init__(self, node_id: str) -> None:
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Unknown node: {self.node_id!r}"


class ChildrenFetchError(GeoPathError):
    """
    Retryable failure while fetching the children of a node.

    Attributes:
        node_id: Node whose expansion failed.
        cause: Underlying exception, when available.
    """

    def __init__(self, message: str, node_id: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.node_id = node_id
        self.cause = cause


class FetchDiscardedError(ChildrenFetchError):
    """Raised on pending expansions invalidated by a hierarchy mode switch."""
