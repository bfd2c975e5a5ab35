from __future__ import annotations

"""
Hierarchy Mode Tables.

Each hierarchy mode (a geographic collection such as PNG or ABG) defines an
ordered list of levels. Depth 0 is the first level below the collection
itself; the table maps every supported depth to the level name used by the
children-fetch API and to a human-readable label.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from geopath.domain.errors import HierarchyLevelError, UnknownHierarchyModeError

# -----------------------------------------------------------------------------
# MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class HierarchyLevel:
    """
    One level of a hierarchy mode.

    Attributes:
        name: Level identifier sent to the children-fetch API (e.g. 'districts').
        label: Singular display label (e.g. 'District').
    """
    name: str
    label: str


@dataclass(frozen=True)
class HierarchyMode:
    """
    Ordered level table of a hierarchy mode.

    Attributes:
        code: Collection code (e.g. 'PNG').
        levels: Levels indexed by depth.
    """
    code: str
    levels: Tuple[HierarchyLevel, ...]

    @property
    def max_depth(self) -> int:
        return len(self.levels) - 1

    def level_at(self, depth: int) -> HierarchyLevel:
        """
        Resolve the level defined for a depth.

        Raises:
            HierarchyLevelError: If the depth is negative or deeper than the table.
        """
        if depth < 0 or depth > self.max_depth:
            raise HierarchyLevelError(self.code, depth, self.max_depth)
        return self.levels[depth]

    def is_terminal(self, depth: int) -> bool:
        """Return True when nodes at this depth cannot have children."""
        return depth >= self.max_depth


# -----------------------------------------------------------------------------
# MODE TABLE
# -----------------------------------------------------------------------------

HIERARCHY_MODES: Dict[str, HierarchyMode] = {
    "PNG": HierarchyMode(
        code="PNG",
        levels=(
            HierarchyLevel("provinces", "Province"),
            HierarchyLevel("districts", "District"),
            HierarchyLevel("llgs", "LLG"),
            HierarchyLevel("wards", "Ward"),
            HierarchyLevel("locations", "Location"),
        ),
    ),
    "ABG": HierarchyMode(
        code="ABG",
        levels=(
            HierarchyLevel("regions", "Region"),
            HierarchyLevel("districts", "District"),
            HierarchyLevel("constituencies", "COE"),
        ),
    ),
    "MKA": HierarchyMode(
        code="MKA",
        levels=(
            HierarchyLevel("regions", "Region"),
            HierarchyLevel("wards", "Ward"),
        ),
    ),
}


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def supported_modes() -> List[str]:
    """Return the codes of every configured hierarchy mode."""
    return list(HIERARCHY_MODES)


def get_mode(code: str) -> HierarchyMode:
    """
    Look up a hierarchy mode by code (case-insensitive).

    Raises:
        UnknownHierarchyModeError: If the code is not configured.
    """
    key = (code or "").strip().upper()
    try:
        return HIERARCHY_MODES[key]
    except KeyError:
        raise UnknownHierarchyModeError(code) from None


def level_name_for(code: str, depth: int) -> str:
    """Return the API level name for a depth of a mode."""
    return get_mode(code).level_at(depth).name


def level_label_for(code: str, depth: int) -> str:
    """Return the display label for a depth of a mode."""
    return get_mode(code).level_at(depth).label
