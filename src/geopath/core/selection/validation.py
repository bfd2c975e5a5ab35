from __future__ import annotations

"""
Selection Depth Validation.

Pure helpers deciding whether selected paths are deep enough to be a
valid final answer (e.g. "district or deeper").
"""

from typing import Iterable, List, Mapping


def is_deep_enough(depth: int, min_level: int) -> bool:
    """Return True when a node at `depth` satisfies `min_level`."""
    return depth >= min_level


def find_too_shallow(
        paths: Iterable[str],
        depths: Mapping[str, int],
        min_level: int,
) -> List[str]:
    """
    Return the paths that cannot be submitted.

    A path is invalid when its resolved depth is below `min_level` or when
    it cannot be resolved at all.

    Args:
        paths: Selected slash-joined paths, in caller order.
        depths: Known path -> depth mapping.
        min_level: Minimum accepted depth.

    Returns:
        List[str]: Invalid paths, preserving input order.
    """
    invalid: List[str] = []
    for path in paths:
        depth = depths.get(path)
        if depth is None or not is_deep_enough(depth, min_level):
            invalid.append(path)
    return invalid
