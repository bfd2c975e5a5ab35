from __future__ import annotations

"""
Folder Hierarchy Builder.

Rebuilds a navigable folder tree from a flat collection of identifiers.
Folders are keyed by their encoded cumulative prefix (e.g. 'PNG:CENTRAL')
so two folders never collide even if their display names would after
decoding. Malformed identifiers are skipped instead of failing the build.
"""

import logging
from typing import Iterable, Optional

from geopath.core.codec.path_codec import parse_identifier
from geopath.domain.constants import ROOT_FOLDER_KEY, SEGMENT_SEPARATOR, STORAGE_SEPARATOR
from geopath.domain.errors import MalformedIdentifierError
from geopath.domain.path_models import FolderNode, FolderTree, ParsedIdentifier

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build_folder_hierarchy(identifiers: Iterable[str]) -> FolderTree:
    """
    Build a folder tree from flat identifiers.

    Each identifier is attached to the deepest folder of its path; folders
    along the way are created on demand. Input order does not affect the
    resulting keys or item membership.

    Args:
        identifiers: Flat identifiers, in any order. Duplicates are kept.

    Returns:
        FolderTree: Root node plus accepted/skipped counters.
    """
    tree = FolderTree()

    for identifier in identifiers:
        parsed = _safe_parse(identifier)
        if parsed is None:
            tree.skipped += 1
            continue

        node = tree.root
        for depth in range(len(parsed.folders)):
            node = _get_or_create_child(node, parsed, depth)

        node.items.append(identifier)
        tree.accepted += 1

    logger.info(
        f"Folder hierarchy built: {tree.accepted} items accepted, {tree.skipped} skipped."
    )
    return tree


def find_folder(tree: FolderTree, key: str) -> Optional[FolderNode]:
    """
    Locate a folder node by its encoded path.

    Args:
        tree: Tree returned by build_folder_hierarchy.
        key: Encoded folder key ('' for the root).

    Returns:
        Optional[FolderNode]: The node, or None if absent.
    """
    if key == ROOT_FOLDER_KEY:
        return tree.root

    node = tree.root
    segments = key.split(SEGMENT_SEPARATOR)
    for depth in range(len(segments)):
        prefix = SEGMENT_SEPARATOR.join(segments[:depth + 1])
        child = node.children.get(prefix)
        if child is None:
            return None
        node = child
    return node


# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _safe_parse(identifier: object) -> Optional[ParsedIdentifier]:
    """Parse an identifier, returning None for anything unusable."""
    if not isinstance(identifier, str):
        logger.debug(f"Skipping non-string identifier: {identifier!r}")
        return None
    try:
        parsed = parse_identifier(identifier)
    except MalformedIdentifierError as e:
        logger.debug(f"Skipping malformed identifier: {e}")
        return None
    if not parsed.filename:
        logger.debug("Skipping blank identifier.")
        return None
    return parsed


def _get_or_create_child(parent: FolderNode, parsed: ParsedIdentifier, depth: int) -> FolderNode:
    """Return the child folder at `depth` along the parsed path, creating it if needed."""
    key = SEGMENT_SEPARATOR.join(parsed.folders[:depth + 1])
    child = parent.children.get(key)
    if child is None:
        child = FolderNode(
            encoded_path=key,
            display_path=STORAGE_SEPARATOR.join(parsed.display_folders[:depth + 1]),
            name=parsed.display_folders[depth],
        )
        parent.children[key] = child
    return child
