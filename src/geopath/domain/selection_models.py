from __future__ import annotations

"""
Selection Tree Data Models.

Defines the boundary shapes exchanged with hierarchy providers, the
tagged per-node load status, and the read-only snapshots handed to
presentation layers.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple, Union

# -----------------------------------------------------------------------------
# SELECTION STATE
# -----------------------------------------------------------------------------

class SelectionState(str, Enum):
    """Tri-state checkbox value. INDETERMINATE is always derived."""
    UNCHECKED = "unchecked"
    CHECKED = "checked"
    INDETERMINATE = "indeterminate"


# -----------------------------------------------------------------------------
# PROVIDER BOUNDARY
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ChildrenRequest:
    """
    Children-fetch request sent to a hierarchy provider.

    Attributes:
        hierarchy_mode: Collection code (e.g. 'PNG').
        level_name: API level of the requested children (e.g. 'districts').
        parent_id: Id of the parent node, None for the top level.
    """
    hierarchy_mode: str
    level_name: str
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class ChildRecord:
    """
    One node returned by a hierarchy provider, already sorted by order.

    Attributes:
        id: Provider-unique node id.
        name: Display name.
        path: Slash-joined path as stored by the provider ('' if absent).
        level: Provider level value (informational).
        order: Sort position among siblings.
        code: Optional administrative code.
    """
    id: str
    name: str
    path: str = ""
    level: Any = None
    order: int = 0
    code: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ChildRecord":
        """
        Build a record from a raw provider payload entry.

        Raises:
            ValueError: If the entry has no usable id or name.
        """
        node_id = data.get("id")
        name = data.get("name")
        if node_id in (None, "") or not name:
            raise ValueError(f"Hierarchy node is missing id or name: {dict(data)!r}")
        order = data.get("order")
        code = data.get("code")
        return cls(
            id=str(node_id),
            name=str(name),
            path=str(data.get("path") or ""),
            level=data.get("level"),
            order=int(order) if isinstance(order, (int, float)) else 0,
            code=str(code) if code not in (None, "") else None,
        )


# -----------------------------------------------------------------------------
# TAGGED LOAD STATUS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Unloaded:
    """Children have never been fetched (or the last fetch failed)."""


@dataclass(frozen=True)
class Loading:
    """
    A fetch is in flight.

    Attributes:
        future: Resolves with the child ids once they are stored in the tree.
        generation: Tree generation the fetch belongs to.
    """
    future: "Future[List[str]]"
    generation: int


@dataclass
class Loaded:
    """
    Children are stored in the tree.

    Attributes:
        children: Child ids in provider order.
        expanded: Whether the node is currently shown open.
    """
    children: List[str] = field(default_factory=list)
    expanded: bool = False


LoadStatus = Union[Unloaded, Loading, Loaded]


# -----------------------------------------------------------------------------
# PRESENTATION SNAPSHOT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SelectionNodeView:
    """
    Immutable snapshot of a selection node.

    Attributes:
        id: Node id.
        name: Display name.
        path: Slash-joined ancestor-to-self path.
        depth: Zero-based depth (top level is 0).
        level_label: Display label of the node's level.
        state: Current tri-state value.
        status: 'unloaded', 'loading' or 'loaded'.
        expanded: Whether the node is open.
        too_shallow: Checked (or partially checked) above the minimum level.
        children: Child ids, empty until loaded.
    """
    id: str
    name: str
    path: str
    depth: int
    level_label: str
    state: SelectionState
    status: str
    expanded: bool
    too_shallow: bool
    children: Tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# PROVIDER CONTRACT
# -----------------------------------------------------------------------------

class HierarchyProvider(ABC):
    """
    Abstract source of hierarchy pages consumed by the selection tree.
    """

    @abstractmethod
    def fetch_children(self, request: ChildrenRequest) -> List[ChildRecord]:
        """
        Fetch the immediate children of a node.

        Args:
            request: Mode, level name and parent id (None for the top level).

        Returns:
            List[ChildRecord]: Children sorted by `order` ascending.

        Raises:
            ChildrenFetchError: On any retryable failure.
        """
        pass

    def close(self) -> None:
        """Release resources held by the provider (no-op by default)."""
        pass
