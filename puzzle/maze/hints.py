"""Hint pathfinder.

``find_hint`` runs a breadth-first search from the player to the goal under
the key/door rule and reports the first step of the shortest path. When the
goal cannot be reached it falls back to the player's walkable neighbours, and
finally to "no moves available". The grid is never mutated.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .connectivity import flood
from .grid import Coord2D, Grid
from .tiles import DOOR, EMPTY, GOAL, KEY, TRAP, WALL

HINT_STEP = "step"
HINT_ADJACENT = "adjacent"
HINT_NONE = "none"

NOTICE_NO_PATH = "no_path"
NOTICE_NO_MOVES = "no_moves"
NOTICE_NO_GOAL = "no_goal"

_OPEN_TILES = frozenset({EMPTY, KEY, GOAL})


@dataclass
class HintResult:
    kind: str
    step: Optional[Coord2D] = None
    cells: List[Coord2D] = field(default_factory=list)
    region: List[Coord2D] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "step": list(self.step) if self.step else None,
            "cells": [list(c) for c in self.cells],
            "region": [list(c) for c in self.region],
            "notices": list(self.notices),
        }


def is_traversable(tile: str, keys_collected: int) -> bool:
    if tile in _OPEN_TILES:
        return True
    return tile == DOOR and keys_collected > 0


def shortest_path(grid: Grid, start: Coord2D, goal: Coord2D, keys_collected: int) -> Optional[List[Coord2D]]:
    """Cells from start (exclusive) to goal (inclusive), or None if unreachable."""
    if start == goal:
        return []
    parents: Dict[Coord2D, Coord2D] = {}
    seen = {start}
    q = deque([start])
    while q:
        cur = q.popleft()
        for nxt in grid.neighbors(cur):
            if nxt in seen or not is_traversable(grid.get(nxt), keys_collected):
                continue
            seen.add(nxt)
            parents[nxt] = cur
            if nxt == goal:
                path = [nxt]
                while path[-1] in parents and parents[path[-1]] != start:
                    path.append(parents[path[-1]])
                path.reverse()
                return path
            q.append(nxt)
    return None


def walkable_region(grid: Grid, player: Coord2D, keys_collected: int) -> List[Coord2D]:
    """Cells the player can walk to without touching a wall, trap or locked door."""
    blocked = {WALL, TRAP} if keys_collected > 0 else {WALL, TRAP, DOOR}
    return sorted(flood(grid, player, blocked))


def find_hint(grid: Grid, player: Coord2D, keys_collected: int) -> HintResult:
    notices: List[str] = []
    goal = grid.first(GOAL)
    if goal is None:
        notices.append(NOTICE_NO_GOAL)
    else:
        path = shortest_path(grid, player, goal, keys_collected)
        if path is not None:
            # Standing on the goal already: the goal itself is the hint
            step = path[0] if path else goal
            return HintResult(HINT_STEP, step=step, cells=[step], notices=notices)
        notices.append(NOTICE_NO_PATH)

    adjacent = [p for p in grid.neighbors(player) if is_traversable(grid.get(p), keys_collected)]
    if adjacent:
        return HintResult(
            HINT_ADJACENT,
            cells=adjacent,
            region=walkable_region(grid, player, keys_collected),
            notices=notices,
        )
    notices.append(NOTICE_NO_MOVES)
    return HintResult(HINT_NONE, notices=notices)


__all__ = [
    "HintResult",
    "find_hint",
    "shortest_path",
    "is_traversable",
    "walkable_region",
    "HINT_STEP",
    "HINT_ADJACENT",
    "HINT_NONE",
]
