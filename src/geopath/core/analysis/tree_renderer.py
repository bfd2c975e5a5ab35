from __future__ import annotations

"""
Tree Renderer.

Converts folder trees and selection tree snapshots into ASCII
representations using standard connectors (├──, └──).
"""

from typing import Dict, List, Sequence

from geopath.core.codec.path_codec import extract_leaf_display_name
from geopath.domain.path_models import FolderNode
from geopath.domain.selection_models import SelectionNodeView, SelectionState

_MARKS: Dict[SelectionState, str] = {
    SelectionState.CHECKED: "[x]",
    SelectionState.UNCHECKED: "[ ]",
    SelectionState.INDETERMINATE: "[-]",
}

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_folder_tree(
        node: FolderNode,
        lines: List[str],
        prefix: str = "",
        show_items: bool = False,
) -> None:
    """
    Recursively transform a FolderNode into a list of strings.

    Folders are listed by encoded key; items (when enabled) follow the
    subfolders of their folder, labelled with their extracted display name.

    Args:
        node: Current folder to process.
        lines: Accumulator list for output strings.
        prefix: Indentation prefix for the current recursion level.
        show_items: Also list the identifiers stored in each folder.
    """
    keys = node.child_keys
    items = sorted(node.items) if show_items else []
    total = len(keys) + len(items)

    for i, key in enumerate(keys):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "
        child = node.children[key]

        lines.append(f"{prefix}{connector}{child.name}")
        new_prefix = prefix + ("    " if is_last else "│   ")
        render_folder_tree(child, lines, prefix=new_prefix, show_items=show_items)

    for j, identifier in enumerate(items, start=len(keys)):
        connector = "└── " if j == total - 1 else "├── "
        lines.append(f"{prefix}{connector}{extract_leaf_display_name(identifier)} <{identifier}>")


def render_selection(views: Sequence[SelectionNodeView]) -> List[str]:
    """
    Render selection snapshots (as returned by SelectionTree.views()).

    Each line carries the checkbox mark, the node name and its level label;
    nodes selected above the minimum level get a 'too shallow' badge.

    Args:
        views: Snapshots in tree order.

    Returns:
        List[str]: One line per node.
    """
    by_id = {v.id: v for v in views}
    known = set(by_id)
    top = [v for v in views if v.depth == 0]

    lines: List[str] = []

    def _walk(items: List[SelectionNodeView], prefix: str) -> None:
        for i, view in enumerate(items):
            is_last = (i == len(items) - 1)
            connector = "└── " if is_last else "├── "
            badge = " (too shallow)" if view.too_shallow else ""
            lines.append(
                f"{prefix}{connector}{_MARKS[view.state]} {view.name} [{view.level_label}]{badge}"
            )
            children = [by_id[c] for c in view.children if c in known]
            _walk(children, prefix + ("    " if is_last else "│   "))

    _walk(top, "")
    return lines
