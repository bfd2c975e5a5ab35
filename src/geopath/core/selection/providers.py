from __future__ import annotations

"""
In-Memory Hierarchy Provider.

Answers children-fetch requests from a nested JSON document, for offline
use and tests. The HTTP provider lives in the network infrastructure layer.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from geopath.domain.errors import ChildrenFetchError, HierarchyLevelError
from geopath.domain.hierarchy import HIERARCHY_MODES, get_mode
from geopath.domain.selection_models import ChildRecord, ChildrenRequest, HierarchyProvider

logger = logging.getLogger(__name__)


class InMemoryHierarchyProvider(HierarchyProvider):
    """
    Serves children from a nested document.

    Document shape::

        {"PNG": [{"id": "...", "name": "...", "code": "...", "children": [...]}, ...],
         "ABG": [...]}

    Node paths default to '<MODE>/<ancestor names>/<name>' and order
    defaults to document position.
    """

    def __init__(self, document: Mapping[str, Sequence[Mapping[str, Any]]]) -> None:
        # (mode, parent id) -> (depth of children, records)
        self._pages: Dict[Tuple[str, Optional[str]], Tuple[int, List[ChildRecord]]] = {}
        for mode_code, nodes in document.items():
            mode = get_mode(mode_code)
            self._index(mode.code, None, mode.code, nodes, depth=0)
        logger.debug(f"InMemoryHierarchyProvider: {len(self._pages)} pages indexed.")

    def fetch_children(self, request: ChildrenRequest) -> List[ChildRecord]:
        mode_code = request.hierarchy_mode.strip().upper()
        if mode_code not in HIERARCHY_MODES:
            raise ChildrenFetchError(f"Unknown hierarchy mode: {request.hierarchy_mode!r}")

        page = self._pages.get((mode_code, request.parent_id))
        if page is None:
            return []

        depth, records = page
        expected = get_mode(mode_code).level_at(depth).name
        if request.level_name != expected:
            raise ChildrenFetchError(
                f"Invalid level {request.level_name!r} for {mode_code}; expected {expected!r}.",
                node_id=request.parent_id,
            )
        return list(records)

    def _index(
            self,
            mode_code: str,
            parent_id: Optional[str],
            parent_path: str,
            nodes: Sequence[Mapping[str, Any]],
            depth: int,
    ) -> None:
        """Recursively register one page of nodes and their descendants."""
        records: List[ChildRecord] = []
        mode = HIERARCHY_MODES[mode_code]

        for position, raw in enumerate(nodes):
            data = dict(raw)
            data.setdefault("order", position)
            data.setdefault("level", depth)
            if not data.get("path") and data.get("name"):
                data["path"] = f"{parent_path}/{data['name']}"
            record = ChildRecord.from_mapping(data)
            records.append(record)

            children = raw.get("children") or []
            if children:
                if mode.is_terminal(depth):
                    raise HierarchyLevelError(mode_code, depth + 1, mode.max_depth)
                self._index(mode_code, record.id, record.path, children, depth + 1)

        records.sort(key=lambda r: r.order)
        self._pages[(mode_code, parent_id)] = (depth, records)
