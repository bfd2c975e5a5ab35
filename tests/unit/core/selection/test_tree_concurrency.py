from __future__ import annotations

"""
Concurrency tests for the Selection Tree.

Uses a real thread pool and a gated provider to verify:
1. At most one fetch per node is in flight; repeated expands share it.
2. Failed fetches roll the node back so the user can retry.
3. A mode switch discards in-flight fetches and never merges their results.
4. Toggles issued while a fetch is running are honoured by the loaded children.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, List, Optional

import pytest

from geopath.core.selection.providers import InMemoryHierarchyProvider
from geopath.core.selection.tree import ROOT_ID, SelectionTree
from geopath.domain.errors import ChildrenFetchError, FetchDiscardedError
from geopath.domain.selection_models import ChildRecord, ChildrenRequest, HierarchyProvider, SelectionState

TIMEOUT = 5


class _GatedProvider(HierarchyProvider):
    """Delegates to an inner provider, blocking requests for one parent until released."""

    def __init__(self, inner: HierarchyProvider, gated_parent: Optional[str]) -> None:
        self.inner = inner
        self.gated_parent = gated_parent
        self.gate = threading.Event()
        self.started = threading.Event()
        self.calls: List[ChildrenRequest] = []
        self._lock = threading.Lock()

    def fetch_children(self, request: ChildrenRequest) -> List[ChildRecord]:
        with self._lock:
            self.calls.append(request)
        if request.parent_id == self.gated_parent:
            self.started.set()
            if not self.gate.wait(TIMEOUT):
                raise RuntimeError("gate never opened")
        return self.inner.fetch_children(request)


class _FailingOnceProvider(HierarchyProvider):
    def __init__(self, inner: HierarchyProvider, error: Exception) -> None:
        self.inner = inner
        self.error: Optional[Exception] = error

    def fetch_children(self, request: ChildrenRequest) -> List[ChildRecord]:
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        return self.inner.fetch_children(request)


@pytest.fixture
def pool() -> Iterator[ThreadPoolExecutor]:
    executor = ThreadPoolExecutor(max_workers=4)
    yield executor
    executor.shutdown(wait=True)


# -----------------------------------------------------------------------------
# DEDUPLICATION
# -----------------------------------------------------------------------------

def test_concurrent_expands_share_one_fetch(provider: InMemoryHierarchyProvider, pool: ThreadPoolExecutor) -> None:
    gated = _GatedProvider(provider, gated_parent=None)
    tree = SelectionTree(gated, mode="PNG", executor=pool)

    futures = []
    threads = [threading.Thread(target=lambda: futures.append(tree.load_roots())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(TIMEOUT)

    assert gated.started.wait(TIMEOUT)
    assert tree.view(ROOT_ID).status == "loading"
    assert len({id(f) for f in futures}) == 1

    gated.gate.set()
    assert futures[0].result(TIMEOUT) == ["p1", "p2"]
    assert len(gated.calls) == 1
    assert tree.view(ROOT_ID).status == "loaded"


# -----------------------------------------------------------------------------
# FAILURE AND RETRY
# -----------------------------------------------------------------------------

def test_failed_fetch_rolls_back_and_retry_succeeds(provider: InMemoryHierarchyProvider, pool: ThreadPoolExecutor) -> None:
    failing = _FailingOnceProvider(provider, ChildrenFetchError("backend down"))
    tree = SelectionTree(failing, mode="PNG", executor=pool)

    with pytest.raises(ChildrenFetchError, match="backend down"):
        tree.load_roots().result(TIMEOUT)
    assert tree.view(ROOT_ID).status == "unloaded"

    assert tree.load_roots().result(TIMEOUT) == ["p1", "p2"]


def test_unexpected_provider_error_is_wrapped(provider: InMemoryHierarchyProvider, pool: ThreadPoolExecutor) -> None:
    boom = RuntimeError("socket closed")
    tree = SelectionTree(_FailingOnceProvider(provider, boom), mode="PNG", executor=pool)

    with pytest.raises(ChildrenFetchError) as exc_info:
        tree.load_roots().result(TIMEOUT)
    assert exc_info.value.cause is boom
    assert exc_info.value.node_id == ROOT_ID


def test_fetch_after_executor_shutdown_fails_cleanly(provider: InMemoryHierarchyProvider) -> None:
    tree = SelectionTree(provider, mode="PNG")
    tree.close()

    with pytest.raises(ChildrenFetchError):
        tree.load_roots().result(TIMEOUT)
    assert tree.view(ROOT_ID).status == "unloaded"


# -----------------------------------------------------------------------------
# MODE SWITCH
# -----------------------------------------------------------------------------

def test_switch_mode_discards_in_flight_fetch(provider: InMemoryHierarchyProvider) -> None:
    pool = ThreadPoolExecutor(max_workers=2)
    gated = _GatedProvider(provider, gated_parent=None)
    tree = SelectionTree(gated, mode="PNG", executor=pool)

    pending = tree.load_roots()
    assert gated.started.wait(TIMEOUT)

    tree.switch_mode("MKA")
    with pytest.raises(FetchDiscardedError):
        pending.result(TIMEOUT)

    gated.gate.set()
    pool.shutdown(wait=True)

    assert tree.mode == "MKA"
    assert tree.roots() == []
    assert tree.view(ROOT_ID).status == "unloaded"


# -----------------------------------------------------------------------------
# TOGGLE DURING LOAD
# -----------------------------------------------------------------------------

def test_toggle_while_loading_is_inherited(provider: InMemoryHierarchyProvider, pool: ThreadPoolExecutor) -> None:
    gated = _GatedProvider(provider, gated_parent="p1")
    tree = SelectionTree(gated, mode="PNG", executor=pool)
    tree.load_roots().result(TIMEOUT)

    pending = tree.expand("p1")
    assert gated.started.wait(TIMEOUT)
    assert tree.toggle("p1") is SelectionState.CHECKED

    gated.gate.set()
    assert pending.result(TIMEOUT) == ["d1", "d2", "d3"]
    assert [c.state for c in tree.children_of("p1")] == [SelectionState.CHECKED] * 3
    assert tree.state_of("p1") is SelectionState.CHECKED


# -----------------------------------------------------------------------------
# SIBLING FETCHES
# -----------------------------------------------------------------------------

class _PerParentGateProvider(HierarchyProvider):
    """Blocks each listed parent on its own event so completions can be reordered."""

    def __init__(self, inner: HierarchyProvider, parents: List[str]) -> None:
        self.inner = inner
        self.gates = {p: threading.Event() for p in parents}
        self.started = {p: threading.Event() for p in parents}

    def fetch_children(self, request: ChildrenRequest) -> List[ChildRecord]:
        gate = self.gates.get(request.parent_id or "")
        if gate is not None:
            self.started[request.parent_id].set()
            if not gate.wait(TIMEOUT):
                raise RuntimeError("gate never opened")
        return self.inner.fetch_children(request)


def test_sibling_fetches_complete_out_of_order(provider: InMemoryHierarchyProvider, pool: ThreadPoolExecutor) -> None:
    gated = _PerParentGateProvider(provider, ["p1", "p2"])
    tree = SelectionTree(gated, mode="PNG", executor=pool)
    tree.load_roots().result(TIMEOUT)

    first = tree.expand("p1")
    second = tree.expand("p2")
    assert gated.started["p1"].wait(TIMEOUT)
    assert gated.started["p2"].wait(TIMEOUT)

    assert tree.toggle("p2") is SelectionState.CHECKED

    gated.gates["p2"].set()
    assert second.result(TIMEOUT) == ["d4"]
    assert tree.view("p1").status == "loading"

    gated.gates["p1"].set()
    assert first.result(TIMEOUT) == ["d1", "d2", "d3"]

    assert tree.view("p1").children == ("d1", "d2", "d3")
    assert tree.view("p2").children == ("d4",)
    assert [c.state for c in tree.children_of("p1")] == [SelectionState.UNCHECKED] * 3
    assert tree.state_of("d4") is SelectionState.CHECKED
    assert tree.state_of("p1") is SelectionState.UNCHECKED
    assert tree.state_of("p2") is SelectionState.CHECKED
    assert tree.state_of(ROOT_ID) is SelectionState.INDETERMINATE
