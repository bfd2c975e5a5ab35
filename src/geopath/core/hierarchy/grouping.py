from __future__ import annotations

"""
Folder Grouping Facade.

Flattens a rebuilt folder hierarchy into a lookup table keyed by encoded
folder path, so "what is in this folder" and "what are its subfolders" are
single dictionary lookups during breadcrumb navigation.
"""

import logging
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Mapping, Optional

from geopath.core.codec.path_codec import decode_to_storage_path, extract_leaf_display_name
from geopath.core.hierarchy.builder import build_folder_hierarchy
from geopath.domain.constants import (
    EXTERNAL_ID_FIELD,
    ROOT_FOLDER_KEY,
    SEGMENT_SEPARATOR,
    SPACE_SUBSTITUTE,
)
from geopath.domain.path_models import Breadcrumb, FolderEntry, GroupedItem

logger = logging.getLogger(__name__)

FolderIndex = Dict[str, FolderEntry]
KeyFunc = Callable[[Any], Optional[str]]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def group_by_folder(items: Iterable[Any], key: Optional[KeyFunc] = None) -> FolderIndex:
    """
    Group records by the folder encoded in their flat identifier.

    Args:
        items: Identifier strings, mappings carrying 'ExternalImageId', or any
            record understood by `key`.
        key: Callable extracting the identifier from a record.

    Returns:
        FolderIndex: Encoded folder path -> FolderEntry. The root entry ('')
        is always present.
    """
    key = key or default_identifier
    pending: Dict[str, Deque[Any]] = defaultdict(deque)
    identifiers: List[str] = []

    for record in items:
        identifier = key(record)
        if not identifier:
            continue
        pending[identifier].append(record)
        identifiers.append(identifier)

    tree = build_folder_hierarchy(identifiers)
    index: FolderIndex = {}

    for node in tree.walk():
        entry = FolderEntry(
            folder=node.encoded_path,
            display_path=node.display_path,
            subfolders=node.child_keys,
        )
        for identifier in node.items:
            entry.items.append(GroupedItem(
                identifier=identifier,
                storage_path=decode_to_storage_path(identifier),
                display_name=extract_leaf_display_name(identifier),
                record=pending[identifier].popleft(),
            ))
        index[node.encoded_path] = entry

    logger.debug(f"Folder index ready: {len(index)} folders.")
    return index


def default_identifier(record: Any) -> Optional[str]:
    """
    Extract a flat identifier from common record shapes.

    Supports plain strings, mappings with an 'ExternalImageId' key and
    objects exposing an `external_id` attribute.
    """
    if isinstance(record, str):
        return record
    if isinstance(record, Mapping):
        value = record.get(EXTERNAL_ID_FIELD)
    else:
        value = getattr(record, "external_id", None)
    return value if isinstance(value, str) else None


def parent_key(folder_key: str) -> str:
    """Return the encoded key of a folder's parent ('' for top-level folders)."""
    if SEGMENT_SEPARATOR not in folder_key:
        return ROOT_FOLDER_KEY
    return folder_key.rsplit(SEGMENT_SEPARATOR, 1)[0]


def breadcrumbs(folder_key: str) -> List[Breadcrumb]:
    """
    Build the root-to-folder navigation trail for an encoded folder key.

    Example:
        'PNG:CENTRAL_PROVINCE' -> [('PNG', 'PNG'), ('CENTRAL PROVINCE', 'PNG:CENTRAL_PROVINCE')]
    """
    if not folder_key:
        return []

    trail: List[Breadcrumb] = []
    segments = folder_key.split(SEGMENT_SEPARATOR)
    for depth, segment in enumerate(segments):
        trail.append(Breadcrumb(
            name=segment.replace(SPACE_SUBSTITUTE, " "),
            key=SEGMENT_SEPARATOR.join(segments[:depth + 1]),
        ))
    return trail
