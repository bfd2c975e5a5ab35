from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared hierarchy documents, identifier lists and selection trees.
"""

import os
import sys
from concurrent.futures import Executor, Future
from typing import Any, Callable, Dict, Iterator, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from geopath.core.selection.providers import InMemoryHierarchyProvider  # noqa: E402
from geopath.core.selection.tree import SelectionTree  # noqa: E402


# -----------------------------------------------------------------------------
# Test Doubles
# -----------------------------------------------------------------------------
class InlineExecutor(Executor):
    """Runs submitted callables immediately in the calling thread."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def hierarchy_document() -> Dict[str, List[Dict[str, Any]]]:
    """
    Return a small nested hierarchy covering two modes.

    PNG: Central (Abau, Goilala, Rigo) and National Capital (Moresby North-East).
    ABG: North (Buka).
    """
    return {
        "PNG": [
            {
                "id": "p1", "name": "Central", "code": "03",
                "children": [
                    {
                        "id": "d1", "name": "Abau",
                        "children": [
                            {"id": "l1", "name": "Cloudy Bay"},
                            {"id": "l2", "name": "Aroma"},
                        ],
                    },
                    {
                        "id": "d2", "name": "Goilala",
                        "children": [{"id": "l3", "name": "Tapini"}],
                    },
                    {"id": "d3", "name": "Rigo"},
                ],
            },
            {
                "id": "p2", "name": "National Capital", "code": "01",
                "children": [{"id": "d4", "name": "Moresby North-East"}],
            },
        ],
        "ABG": [
            {"id": "r1", "name": "North", "children": [{"id": "ad1", "name": "Buka"}]},
        ],
    }


@pytest.fixture
def provider(hierarchy_document: Dict[str, Any]) -> InMemoryHierarchyProvider:
    return InMemoryHierarchyProvider(hierarchy_document)


@pytest.fixture
def inline_executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def tree(provider: InMemoryHierarchyProvider, inline_executor: InlineExecutor) -> Iterator[SelectionTree]:
    """PNG selection tree with min_level 2 and synchronous fetches."""
    with SelectionTree(provider, mode="PNG", min_level=2, executor=inline_executor) as t:
        yield t


@pytest.fixture
def sample_identifiers() -> List[str]:
    return [
        "PNG:NATIONAL_CAPITAL_DISTRICT:MORESBY_NORTH-EAST:130168379_Soare_Nuana_F.jpg",
        "PNG:NATIONAL_CAPITAL_DISTRICT:MORESBY_NORTH-EAST:130168380_Kila_Morea_M.jpg",
        "PNG:NATIONAL_CAPITAL_DISTRICT:MORESBY_SOUTH:Vagi_Tau.jpg",
        "PNG:CENTRAL:ABAU:130170001_Aua_Gari_F.png",
        "ABG:NORTH:Buka_Person.jpg",
    ]
