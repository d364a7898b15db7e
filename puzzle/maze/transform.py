"""Grid-wide mutations driven by the clock or the move counter.

``board_transform`` is the hard-mode rotation: turn the board 90 degrees
clockwise, carry the player along, then scatter keys and the goal again.
``relocate_traps`` is the ambient trap shuffle the host runs every few
seconds on non-easy difficulties.
"""

from __future__ import annotations

import random
from typing import NamedTuple, Optional

from ..logging_utils import get_logger
from .grid import Coord2D, Grid
from .tiles import EMPTY, GOAL, KEY, TRAP, WALL

log = get_logger("maze.transform")


class TransformOutcome(NamedTuple):
    grid: Grid
    player: Coord2D
    keys_placed: int
    goal: Optional[Coord2D]


def rotate_position(pos: Coord2D, size: int) -> Coord2D:
    """Clockwise quarter turn: (x, y) -> (N-1-y, x)."""
    x, y = pos
    return (size - 1 - y, x)


def rotate_grid(grid: Grid) -> Grid:
    rotated = Grid(grid.size)
    for x, y in grid.positions():
        nx, ny = rotate_position((x, y), grid.size)
        rotated[nx][ny] = grid[x][y]
    return rotated


def board_transform(grid: Grid, player: Coord2D, total_keys: int, rng: random.Random) -> TransformOutcome:
    """Rotate the board and re-scatter keys plus one goal.

    Keys and goal land on EMPTY cells other than the player's. When no empty
    cell is left for the goal it overwrites any non-wall cell instead.
    """
    rotated = rotate_grid(grid)
    player = rotate_position(player, grid.size)

    for pos in rotated.positions():
        if rotated.get(pos) in (KEY, GOAL):
            rotated.set(pos, EMPTY)

    empties = [p for p in rotated.find(EMPTY) if p != player]
    rng.shuffle(empties)
    keys_placed = min(max(0, total_keys), len(empties))
    for pos in empties[:keys_placed]:
        rotated.set(pos, KEY)
    remaining = empties[keys_placed:]

    goal: Optional[Coord2D] = None
    if remaining:
        goal = remaining[0]
    else:
        fallback = [p for p in rotated.positions() if p != player and rotated.get(p) != WALL]
        if not fallback:
            fallback = [p for p in rotated.positions() if rotated.get(p) != WALL]
        if fallback:
            goal = rng.choice(fallback)
    if goal is not None:
        rotated.set(goal, GOAL)
    log.info(event="board_rotated", size=grid.size, keys=keys_placed, goal_placed=goal is not None)
    return TransformOutcome(rotated, player, keys_placed, goal)


def relocate_traps(grid: Grid, player: Coord2D, rng: random.Random) -> int:
    """Move every trap to a random empty cell not under the player (in place).

    Returns the number of traps placed, equal to the prior count unless the
    board has run out of empty cells.
    """
    traps = grid.find(TRAP)
    if not traps:
        return 0
    for pos in traps:
        grid.set(pos, EMPTY)
    candidates = [p for p in grid.find(EMPTY) if p != player]
    chosen = rng.sample(candidates, min(len(traps), len(candidates)))
    for pos in chosen:
        grid.set(pos, TRAP)
    log.debug(event="traps_relocated", count=len(chosen))
    return len(chosen)


__all__ = ["rotate_position", "rotate_grid", "board_transform", "relocate_traps", "TransformOutcome"]
