"""Breadth-first reachability over the maze grid.

Used by the generator to keep the goal solvable while walls are added and by
the hint system to compute the region a stuck player can still walk.
"""

from __future__ import annotations

from collections import deque
from typing import AbstractSet, Set

from .grid import Coord2D, Grid
from .tiles import WALL

DEFAULT_BLOCKED = frozenset({WALL})


def flood(grid: Grid, start: Coord2D, blocked: AbstractSet[str] = DEFAULT_BLOCKED) -> Set[Coord2D]:
    """Return every cell 4-connected to ``start`` through non-blocked tiles.

    The start cell is always included, whatever its own tile kind.
    """
    visited = {start}
    q = deque([start])
    while q:
        cur = q.popleft()
        for nxt in grid.neighbors(cur):
            if nxt not in visited and grid.get(nxt) not in blocked:
                visited.add(nxt)
                q.append(nxt)
    return visited


def reachable(
    grid: Grid,
    start: Coord2D,
    goal: Coord2D,
    blocked: AbstractSet[str] = DEFAULT_BLOCKED,
) -> bool:
    if start == goal:
        return True
    visited = {start}
    q = deque([start])
    while q:
        cur = q.popleft()
        for nxt in grid.neighbors(cur):
            if nxt in visited or grid.get(nxt) in blocked:
                continue
            if nxt == goal:
                return True
            visited.add(nxt)
            q.append(nxt)
    return False


__all__ = ["flood", "reachable", "DEFAULT_BLOCKED"]
