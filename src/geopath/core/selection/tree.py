from __future__ import annotations

"""
Lazy Tri-State Selection Tree.

Drives a multi-level, lazily loaded selection tree over an externally
paginated hierarchy (province -> district -> LLG -> ward, ...).

Nodes live in an arena keyed by provider id; each node carries exactly one
tagged load status (Unloaded | Loading | Loaded) plus an explicit boolean
intent and a derived tri-state value. A toggle pushes the new intent down
to every loaded descendant, then recomputes every ancestor from its loaded
children. Children fetched later inherit their parent's intent, so a
collapsed node that was selected stays selected once it is expanded.

Fetches run on a thread pool. At most one fetch is in flight per node, and
all arena mutations happen under a single re-entrant lock so a completing
fetch never observes a half-propagated toggle.
"""

import logging
import threading
from concurrent.futures import Executor, Future, InvalidStateError, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Dict, Iterable, List, Optional, Set

from geopath.core.selection.validation import find_too_shallow, is_deep_enough
from geopath.domain.constants import DEFAULT_HIERARCHY_MODE, DEFAULT_MIN_LEVEL, STORAGE_SEPARATOR
from geopath.domain.errors import ChildrenFetchError, FetchDiscardedError, UnknownNodeError
from geopath.domain.hierarchy import HierarchyMode, get_mode
from geopath.domain.selection_models import (
    ChildRecord,
    ChildrenRequest,
    HierarchyProvider,
    Loaded,
    Loading,
    LoadStatus,
    SelectionNodeView,
    SelectionState,
    Unloaded,
)

logger = logging.getLogger(__name__)

# Id of the virtual node whose children are the top level of the mode
ROOT_ID = ""


@dataclass
class _Node:
    id: str
    name: str
    path: str
    depth: int
    parent_id: Optional[str]
    code: Optional[str] = None
    order: int = 0
    intent: bool = False
    state: SelectionState = SelectionState.UNCHECKED
    status: LoadStatus = field(default_factory=Unloaded)

    @property
    def child_ids(self) -> List[str]:
        return self.status.children if isinstance(self.status, Loaded) else []


class SelectionTree:
    """
    Stateful selection tree over a hierarchy provider.

    Args:
        provider: Source of children pages.
        mode: Hierarchy mode code (e.g. 'PNG').
        min_level: Minimum depth accepted by collect_selected_paths().
        executor: Executor running fetches; a private pool is created if None.
        max_workers: Size of the private pool.
    """

    def __init__(
            self,
            provider: HierarchyProvider,
            mode: str = DEFAULT_HIERARCHY_MODE,
            min_level: int = DEFAULT_MIN_LEVEL,
            executor: Optional[Executor] = None,
            max_workers: int = 4,
    ) -> None:
        self._provider = provider
        self._mode: HierarchyMode = get_mode(mode)
        self._min_level = int(min_level)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)),
            thread_name_prefix="geopath-fetch",
        )
        self._lock = threading.RLock()
        self._generation = 0
        self._nodes: Dict[str, _Node] = {}
        self._pending_paths: Set[str] = set()
        self._reset_arena()

    # -------------------------------------------------------------------------
    # PROPERTIES & LIFECYCLE
    # -------------------------------------------------------------------------

    @property
    def mode(self) -> str:
        return self._mode.code

    @property
    def min_level(self) -> int:
        return self._min_level

    @property
    def generation(self) -> int:
        return self._generation

    def close(self) -> None:
        """Shut down the private fetch pool, if this tree owns one."""
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "SelectionTree":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # LAZY LOADING
    # -------------------------------------------------------------------------

    def load_roots(self) -> "Future[List[str]]":
        """Fetch the top level of the current mode."""
        return self.expand(ROOT_ID)

    def expand(self, node_id: str) -> "Future[List[str]]":
        """
        Expand a node, fetching its children on first use.

        Re-expanding a node whose fetch is still running returns the same
        future instead of issuing a second request.

        Args:
            node_id: Id of the node to open.

        Returns:
            Future[List[str]]: Resolves with the child ids once they are
            stored in the tree; fails with ChildrenFetchError (retryable) or
            FetchDiscardedError if the mode changes meanwhile.

        Raises:
            UnknownNodeError: If the id is not in the tree.
        """
        with self._lock:
            node = self._require(node_id)
            status = node.status

            if isinstance(status, Loaded):
                status.expanded = True
                return _completed(list(status.children))

            if isinstance(status, Loading):
                return status.future

            if self._mode.is_terminal(node.depth):
                logger.debug(
                    f"'{node.path}' is at the deepest {self._mode.code} level; "
                    f"marked loaded without fetching."
                )
                node.status = Loaded(children=[], expanded=True)
                return _completed([])

            request = ChildrenRequest(
                hierarchy_mode=self._mode.code,
                level_name=self._mode.level_at(node.depth + 1).name,
                parent_id=None if node_id == ROOT_ID else node_id,
            )
            outcome: Future[List[str]] = Future()
            generation = self._generation
            node.status = Loading(outcome, generation)

        logger.debug(
            f"Fetching {request.level_name} of {request.hierarchy_mode} "
            f"under {request.parent_id or '<top>'}."
        )
        try:
            fetch = self._executor.submit(self._provider.fetch_children, request)
        except RuntimeError as e:
            self._rollback(node_id, outcome)
            _settle(outcome, error=ChildrenFetchError(
                f"Fetch executor unavailable: {e}", node_id=node_id, cause=e
            ))
            return outcome

        fetch.add_done_callback(partial(self._on_fetch_done, node_id, generation, outcome))
        return outcome

    def collapse(self, node_id: str) -> None:
        """Close a loaded node; children and selection are kept."""
        with self._lock:
            status = self._require(node_id).status
            if isinstance(status, Loaded):
                status.expanded = False

    def refresh(self, node_id: str) -> "Future[List[str]]":
        """
        Discard a node's loaded subtree and fetch its children again.

        Children fetched by the refresh inherit the node's current intent.
        """
        with self._lock:
            node = self._require(node_id)
            if isinstance(node.status, Loading):
                return node.status.future
            self._drop_descendants(node)
            node.status = Unloaded()
            self._recompute_upwards(node)
        return self.expand(node_id)

    def reveal(self, path: str, timeout: Optional[float] = None) -> Optional[str]:
        """
        Expand every ancestor of `path`, waiting for each fetch.

        Args:
            path: Slash-joined node path.
            timeout: Per-fetch timeout in seconds.

        Returns:
            Optional[str]: Id of the node at `path`, or None if it does not exist.
        """
        target = _normalize_path(path)
        current = ROOT_ID
        while True:
            children = self.expand(current).result(timeout=timeout)
            with self._lock:
                match = None
                for child_id in children:
                    child = self._nodes.get(child_id)
                    if child and (target == child.path or target.startswith(child.path + STORAGE_SEPARATOR)):
                        match = child
                        break
            if match is None:
                return None
            if match.path == target:
                return match.id
            current = match.id

    def switch_mode(self, mode: str, min_level: Optional[int] = None) -> None:
        """
        Replace the tree with an empty tree for another hierarchy mode.

        In-flight fetches of the previous tree are failed with
        FetchDiscardedError and their results are never merged.
        """
        new_mode = get_mode(mode)
        with self._lock:
            pending = [n.status.future for n in self._nodes.values() if isinstance(n.status, Loading)]
            self._generation += 1
            self._mode = new_mode
            if min_level is not None:
                self._min_level = int(min_level)
            self._pending_paths.clear()
            self._reset_arena()

        for future in pending:
            _settle(future, error=FetchDiscardedError("Hierarchy mode switched."))
        logger.info(f"Selection tree switched to mode {new_mode.code} ({len(pending)} fetches discarded).")

    # -------------------------------------------------------------------------
    # SELECTION
    # -------------------------------------------------------------------------

    def toggle(self, node_id: str) -> SelectionState:
        """
        Flip a node's selection and propagate it.

        Checked nodes become unchecked; unchecked and indeterminate nodes
        become checked. The value is pushed to every loaded descendant and
        every ancestor is recomputed from its loaded children.

        Returns:
            SelectionState: The node's state after the toggle.
        """
        with self._lock:
            node = self._require(node_id)
            intent = node.state is not SelectionState.CHECKED

            if intent and node.id != ROOT_ID and not is_deep_enough(node.depth, self._min_level):
                logger.info(
                    f"'{node.path}' is above the minimum level {self._min_level}; "
                    f"it will not be submitted on its own."
                )

            self._apply_down(node, intent)
            self._recompute_upwards(node)
            return node.state

    def restore_selection(self, paths: Iterable[str]) -> None:
        """
        Re-apply previously submitted selections.

        Paths of loaded nodes are checked immediately; the rest are
        remembered and checked as soon as a node with that path loads.
        """
        with self._lock:
            by_path = self._path_index()
            for raw in paths:
                path = _normalize_path(raw)
                if not path:
                    continue
                node = by_path.get(path)
                if node is None:
                    self._pending_paths.add(path)
                elif node.state is not SelectionState.CHECKED:
                    self._apply_down(node, True)
                    self._recompute_upwards(node)

    def state_of(self, node_id: str) -> SelectionState:
        with self._lock:
            return self._require(node_id).state

    def collect_selected_paths(self, min_level: Optional[int] = None, compact: bool = False) -> List[str]:
        """
        Return the paths of checked nodes deep enough to be submitted.

        Args:
            min_level: Override of the tree's minimum level.
            compact: Return only the shallowest qualifying node of each
                checked subtree instead of every checked node.

        Returns:
            List[str]: Paths in tree order.
        """
        level = self._min_level if min_level is None else int(min_level)
        selected: List[str] = []
        with self._lock:
            stack = list(reversed(self._nodes[ROOT_ID].child_ids))
            while stack:
                node = self._nodes[stack.pop()]
                qualifies = node.state is SelectionState.CHECKED and is_deep_enough(node.depth, level)
                if qualifies:
                    selected.append(node.path)
                    if compact:
                        continue
                stack.extend(reversed(node.child_ids))
        return selected

    def checked_paths(self) -> List[str]:
        """Return the paths of every checked node regardless of depth."""
        return self.collect_selected_paths(min_level=0)

    def validate(self, selected_paths: Iterable[str], min_level: Optional[int] = None) -> List[str]:
        """
        Return the selected paths that are too shallow or unknown to the tree.
        """
        level = self._min_level if min_level is None else int(min_level)
        with self._lock:
            depths = {path: node.depth for path, node in self._path_index().items()}
        return find_too_shallow(selected_paths, depths, level)

    # -------------------------------------------------------------------------
    # PRESENTATION
    # -------------------------------------------------------------------------

    def view(self, node_id: str) -> SelectionNodeView:
        """Return an immutable snapshot of a node."""
        with self._lock:
            return self._view(self._require(node_id))

    def children_of(self, node_id: str) -> List[SelectionNodeView]:
        """Return snapshots of a node's loaded children, in provider order."""
        with self._lock:
            node = self._require(node_id)
            return [self._view(self._nodes[c]) for c in node.child_ids]

    def roots(self) -> List[SelectionNodeView]:
        """Return snapshots of the loaded top level."""
        return self.children_of(ROOT_ID)

    def views(self) -> List[SelectionNodeView]:
        """Return snapshots of every node in the tree, in tree order."""
        out: List[SelectionNodeView] = []
        with self._lock:
            stack = list(reversed(self._nodes[ROOT_ID].child_ids))
            while stack:
                node = self._nodes[stack.pop()]
                out.append(self._view(node))
                stack.extend(reversed(node.child_ids))
        return out

    # -------------------------------------------------------------------------
    # INTERNAL: ARENA MAINTENANCE
    # -------------------------------------------------------------------------

    def _reset_arena(self) -> None:
        self._nodes = {
            ROOT_ID: _Node(
                id=ROOT_ID,
                name=self._mode.code,
                path=self._mode.code,
                depth=-1,
                parent_id=None,
            )
        }

    def _require(self, node_id: str) -> _Node:
        node = self._nodes.get(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        return node

    def _path_index(self) -> Dict[str, _Node]:
        return {n.path: n for n in self._nodes.values() if n.id != ROOT_ID}

    def _drop_descendants(self, node: _Node) -> None:
        stack = list(node.child_ids)
        while stack:
            child = self._nodes.pop(stack.pop(), None)
            if child is not None:
                stack.extend(child.child_ids)

    def _rollback(self, node_id: str, outcome: "Future[List[str]]") -> None:
        """Return a node to Unloaded if it is still waiting on `outcome`."""
        with self._lock:
            node = self._nodes.get(node_id)
            if node and isinstance(node.status, Loading) and node.status.future is outcome:
                node.status = Unloaded()

    def _on_fetch_done(
            self,
            node_id: str,
            generation: int,
            outcome: "Future[List[str]]",
            fetch: "Future[List[ChildRecord]]",
    ) -> None:
        """Store fetched children, or roll the node back on failure."""
        error: Optional[BaseException] = None
        records: List[ChildRecord] = []
        try:
            records = list(fetch.result())
        except Exception as e:
            error = e

        child_ids: List[str] = []
        with self._lock:
            node = self._nodes.get(node_id)
            current = (
                generation == self._generation
                and node is not None
                and isinstance(node.status, Loading)
                and node.status.future is outcome
            )
            if current and error is not None:
                node.status = Unloaded()
            elif current:
                child_ids = self._attach_children(node, records)
                node.status = Loaded(children=child_ids, expanded=True)
                self._recompute_upwards(node)

        if not current:
            logger.debug(f"Discarding stale fetch result for node '{node_id}'.")
            _settle(outcome, error=FetchDiscardedError("Fetch result discarded.", node_id=node_id))
        elif error is not None:
            logger.warning(f"Failed to load children of '{node_id or '<top>'}': {error}")
            if isinstance(error, ChildrenFetchError):
                _settle(outcome, error=error)
            else:
                _settle(outcome, error=ChildrenFetchError(str(error), node_id=node_id, cause=error))
        else:
            _settle(outcome, result=child_ids)

    def _attach_children(self, parent: _Node, records: List[ChildRecord]) -> List[str]:
        """Create arena entries for fetched records; returns accepted ids."""
        child_ids: List[str] = []
        for record in records:
            if record.id == ROOT_ID or record.id in self._nodes:
                logger.warning(f"Ignoring duplicate node id '{record.id}' under '{parent.path}'.")
                continue

            path = _normalize_path(record.path) or f"{parent.path}{STORAGE_SEPARATOR}{record.name}"
            intent = parent.intent
            if path in self._pending_paths:
                self._pending_paths.discard(path)
                intent = True

            self._nodes[record.id] = _Node(
                id=record.id,
                name=record.name,
                path=path,
                depth=parent.depth + 1,
                parent_id=parent.id,
                code=record.code,
                order=record.order,
                intent=intent,
                state=SelectionState.CHECKED if intent else SelectionState.UNCHECKED,
            )
            child_ids.append(record.id)
        return child_ids

    # -------------------------------------------------------------------------
    # INTERNAL: TRI-STATE PROPAGATION
    # -------------------------------------------------------------------------

    def _apply_down(self, node: _Node, intent: bool) -> None:
        """Set `intent` on a node and all of its loaded descendants."""
        state = SelectionState.CHECKED if intent else SelectionState.UNCHECKED
        prefix = node.path + STORAGE_SEPARATOR
        self._pending_paths = {p for p in self._pending_paths if not p.startswith(prefix)}

        stack = [node]
        while stack:
            current = stack.pop()
            current.intent = intent
            current.state = state
            stack.extend(self._nodes[c] for c in current.child_ids)

    def _recompute_upwards(self, node: _Node) -> None:
        """Recompute `node` and every ancestor from their loaded children."""
        current: Optional[_Node] = node
        while current is not None:
            current.state = self._derive_state(current)
            current.intent = current.state is SelectionState.CHECKED
            current = self._nodes.get(current.parent_id) if current.parent_id is not None else None

    def _derive_state(self, node: _Node) -> SelectionState:
        children = node.child_ids
        if not children:
            return SelectionState.CHECKED if node.intent else SelectionState.UNCHECKED

        states = [self._nodes[c].state for c in children]
        if all(s is SelectionState.CHECKED for s in states):
            return SelectionState.CHECKED
        if all(s is SelectionState.UNCHECKED for s in states):
            return SelectionState.UNCHECKED
        return SelectionState.INDETERMINATE

    def _view(self, node: _Node) -> SelectionNodeView:
        status = node.status
        if isinstance(status, Loaded):
            status_name, expanded = "loaded", status.expanded
        elif isinstance(status, Loading):
            status_name, expanded = "loading", False
        else:
            status_name, expanded = "unloaded", False

        label = self._mode.code if node.id == ROOT_ID else self._mode.level_at(node.depth).label
        return SelectionNodeView(
            id=node.id,
            name=node.name,
            path=node.path,
            depth=node.depth,
            level_label=label,
            state=node.state,
            status=status_name,
            expanded=expanded,
            too_shallow=(
                node.state is not SelectionState.UNCHECKED
                and not is_deep_enough(node.depth, self._min_level)
            ),
            children=tuple(node.child_ids),
        )


# -----------------------------------------------------------------------------
# MODULE HELPERS
# -----------------------------------------------------------------------------

def _completed(result: List[str]) -> "Future[List[str]]":
    future: Future[List[str]] = Future()
    future.set_result(result)
    return future


def _settle(
        future: "Future[List[str]]",
        result: Optional[List[str]] = None,
        error: Optional[BaseException] = None,
) -> None:
    """Resolve a future unless another party already did."""
    try:
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result if result is not None else [])
    except InvalidStateError:
        pass


def _normalize_path(path: str) -> str:
    return (path or "").strip().strip(STORAGE_SEPARATOR)
