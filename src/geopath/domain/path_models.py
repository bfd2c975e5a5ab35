from __future__ import annotations

"""
Path and Folder Tree Data Models.

Provides the value types exchanged by the path codec and the structural
nodes used to rebuild a navigable folder hierarchy from flat identifiers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from geopath.domain.constants import STORAGE_SEPARATOR

# -----------------------------------------------------------------------------
# CODEC VALUE TYPES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class StructuredPath:
    """
    Ordered path segments; every segment but the last is a folder.

    Attributes:
        segments: Human-readable segments, leaf name last.
    """
    segments: Tuple[str, ...]

    @classmethod
    def of(cls, *segments: str) -> "StructuredPath":
        return cls(tuple(segments))

    @property
    def folders(self) -> Tuple[str, ...]:
        return self.segments[:-1]

    @property
    def leaf(self) -> str:
        return self.segments[-1]

    def as_storage_path(self) -> str:
        return STORAGE_SEPARATOR.join(self.segments)


@dataclass(frozen=True)
class ParsedIdentifier:
    """
    Lock-step decomposition of a flat identifier.

    Attributes:
        folders: Encoded folder segments (underscores preserved).
        display_folders: Same segments with underscores read as spaces.
        filename: Leaf segment, verbatim.
        full_path: Slash-joined storage path.
    """
    folders: Tuple[str, ...] = ()
    display_folders: Tuple[str, ...] = ()
    filename: str = ""
    full_path: str = ""


# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass
class FolderNode:
    """
    One folder of a rebuilt hierarchy.

    Attributes:
        encoded_path: Colon-joined encoded prefix; '' for the root.
        display_path: Slash-joined human-readable prefix.
        name: Display name of this folder's own segment.
        items: Identifiers stored directly in this folder.
        children: Child folders keyed by their encoded path.
    """
    encoded_path: str
    display_path: str
    name: str = ""
    items: List[str] = field(default_factory=list)
    children: Dict[str, "FolderNode"] = field(default_factory=dict)

    @property
    def child_keys(self) -> List[str]:
        return sorted(self.children)

    @property
    def depth(self) -> int:
        return self.encoded_path.count(":") + 1 if self.encoded_path else 0


@dataclass
class FolderTree:
    """
    Result of a hierarchy build.

    Attributes:
        root: Root folder node (encoded path '').
        accepted: Number of identifiers placed in the tree.
        skipped: Number of identifiers rejected as malformed.
    """
    root: FolderNode = field(default_factory=lambda: FolderNode("", ""))
    accepted: int = 0
    skipped: int = 0

    def walk(self) -> List[FolderNode]:
        """Return every folder node, parents before children, siblings by key."""
        ordered: List[FolderNode] = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            ordered.append(node)
            stack.extend(node.children[k] for k in reversed(node.child_keys))
        return ordered


# -----------------------------------------------------------------------------
# FLATTENED LOOKUP ROWS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class GroupedItem:
    """
    A record placed in a folder entry.

    Attributes:
        identifier: Flat identifier of the record.
        storage_path: Slash-joined decoded path.
        display_name: Best-effort label extracted from the leaf.
        record: Original record as supplied by the caller.
    """
    identifier: str
    storage_path: str
    display_name: str
    record: Any = None


@dataclass
class FolderEntry:
    """
    Flattened view of one folder for O(1) navigation lookups.

    Attributes:
        folder: Encoded path of the folder ('' for the root).
        display_path: Human-readable path.
        items: Records stored directly in the folder.
        subfolders: Encoded keys of the immediate child folders.
    """
    folder: str
    display_path: str
    items: List[GroupedItem] = field(default_factory=list)
    subfolders: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Breadcrumb:
    """Single navigation step from the root to a folder."""
    name: str
    key: str
