"""Level generator: constrained random placement on a bordered square grid.

Generation phases:
    * Border ring of WALL, start at (1,1), GOAL at (N-2,N-2).
    * Carve the main path (x first, then y) from start to goal. Cells on it are
      never eligible for walls or traps.
    * Walls on random interior cells, each kept only while the goal stays
      reachable from start.
    * Keys on empty cells reachable from start.
    * Doors (one fewer than keys) on empty cells. Doors are not re-checked for
      solvability.
    * Traps on empty cells off the main path.
    * Goal repair if no GOAL survived.

Every placement loop has an attempt cap (see ``PlacementCaps``); running out of
attempts yields fewer decorations, never an error and never an unreachable
goal. Pass a seeded ``random.Random`` for reproducible levels.
"""

from __future__ import annotations

import math
import random
import time
from typing import Any, Dict, FrozenSet, List, NamedTuple, Optional

from ..logging_utils import get_logger
from .config import DifficultyProfile, PlacementCaps
from .connectivity import reachable
from .grid import Coord2D, Grid
from .metrics import RunMetrics, init_metrics
from .tiles import DOOR, EMPTY, GOAL, KEY, TRAP, WALL

log = get_logger("maze.generator")

START: Coord2D = (1, 1)
MIN_DIFFICULTY = 0.5
MAX_DIFFICULTY = 4.0


class GeneratedLevel(NamedTuple):
    grid: Grid
    total_keys: int
    difficulty: float
    start: Coord2D
    goal: Coord2D
    main_path: FrozenSet[Coord2D]
    metrics: Dict[str, Any]


def compute_difficulty(level: int, previous: Optional[RunMetrics] = None) -> float:
    """Scalar in [0.5, 4] driving obstacle density.

    Only the immediately preceding level's metrics adjust the base value.
    """
    difficulty = min(level * 0.3, MAX_DIFFICULTY)
    if previous is not None:
        if previous.elapsed_ms < 30_000:
            difficulty += 0.3
        if previous.moves < 25:
            difficulty += 0.2
        if previous.retries > 2:
            difficulty -= 0.4
        if previous.hints_used > 1:
            difficulty -= 0.3
    return max(MIN_DIFFICULTY, min(difficulty, MAX_DIFFICULTY))


def carve_main_path(grid: Grid, start: Coord2D, goal: Coord2D) -> List[Coord2D]:
    """Walk x-then-y from start to goal, clearing walls; returns visited cells."""
    cx, cy = start
    path = [(cx, cy)]
    while cx != goal[0]:
        cx += 1 if goal[0] > cx else -1
        path.append((cx, cy))
        if grid[cx][cy] == WALL:
            grid[cx][cy] = EMPTY
    while cy != goal[1]:
        cy += 1 if goal[1] > cy else -1
        path.append((cx, cy))
        if grid[cx][cy] == WALL:
            grid[cx][cy] = EMPTY
    return path


class LevelGenerator:
    def __init__(
        self,
        profile: DifficultyProfile,
        *,
        rng: Optional[random.Random] = None,
        caps: Optional[PlacementCaps] = None,
        seed: Optional[int] = None,
    ):
        self.profile = profile
        # Local RNG so unrelated random usage does not perturb generation
        self.rng = rng if rng is not None else random.Random(seed)
        self.caps = caps or PlacementCaps()

    def _random_interior(self, size: int) -> Coord2D:
        return (self.rng.randrange(1, size - 1), self.rng.randrange(1, size - 1))

    def generate(self, previous: Optional[RunMetrics] = None, level: int = 1) -> GeneratedLevel:
        started = time.perf_counter()
        size = self.profile.grid_size
        difficulty = compute_difficulty(level, previous)
        metrics = init_metrics()

        grid = Grid(size)
        grid.fill_border(WALL)
        start = START
        goal = (size - 2, size - 2)
        grid.set(goal, GOAL)

        main_path = frozenset(carve_main_path(grid, start, goal))

        wall_count = math.floor(difficulty * self.profile.wall_multiplier)
        key_count = max(1, math.floor(difficulty / 2))
        door_count = max(0, key_count - 1)
        trap_count = math.floor(difficulty * self.profile.trap_multiplier * size)
        metrics.update(
            walls_requested=wall_count,
            keys_requested=key_count,
            doors_requested=door_count,
            traps_requested=trap_count,
        )

        self._place_walls(grid, start, goal, main_path, wall_count, metrics)
        self._place_keys(grid, start, key_count, metrics)
        self._place_doors(grid, start, goal, door_count, metrics)
        self._place_traps(grid, start, goal, main_path, trap_count, metrics)
        goal = self._ensure_goal(grid, start, goal, metrics)

        metrics["runtime_ms"] = round((time.perf_counter() - started) * 1000, 3)
        log.info(
            event="level_generated",
            difficulty_name=self.profile.name,
            game_level=level,
            difficulty=round(difficulty, 2),
            size=size,
            walls=metrics["walls_placed"],
            keys=metrics["keys_placed"],
            doors=metrics["doors_placed"],
            traps=metrics["traps_placed"],
            runtime_ms=metrics["runtime_ms"],
        )
        return GeneratedLevel(grid, key_count, difficulty, start, goal, main_path, metrics)

    # ------------------------------------------------------------------
    # Placement phases
    # ------------------------------------------------------------------
    def _place_walls(self, grid, start, goal, main_path, count, metrics):
        placed = attempts = 0
        while placed < count and attempts < self.caps.wall_attempts:
            attempts += 1
            pos = self._random_interior(grid.size)
            if pos in main_path or grid.get(pos) != EMPTY:
                continue
            grid.set(pos, WALL)
            if reachable(grid, start, goal):
                placed += 1
            else:
                grid.set(pos, EMPTY)
                metrics["walls_rejected"] += 1
        metrics["walls_placed"] = placed

    def _place_keys(self, grid, start, count, metrics):
        placed = attempts = 0
        while placed < count and attempts < self.caps.key_attempts:
            attempts += 1
            pos = self._random_interior(grid.size)
            if pos == start or grid.get(pos) != EMPTY:
                continue
            if reachable(grid, start, pos):
                grid.set(pos, KEY)
                placed += 1
        metrics["keys_placed"] = placed

    def _place_doors(self, grid, start, goal, count, metrics):
        # A door may cut the only route to the goal; levels are not re-checked after doors.
        placed = attempts = 0
        while placed < count and attempts < self.caps.door_attempts:
            attempts += 1
            pos = self._random_interior(grid.size)
            if pos in (start, goal) or grid.get(pos) != EMPTY:
                continue
            grid.set(pos, DOOR)
            placed += 1
        metrics["doors_placed"] = placed

    def _place_traps(self, grid, start, goal, main_path, count, metrics):
        placed = 0
        for _ in range(count):
            for _attempt in range(self.caps.trap_attempts_per_trap):
                pos = self._random_interior(grid.size)
                if pos in (start, goal) or pos in main_path or grid.get(pos) != EMPTY:
                    continue
                grid.set(pos, TRAP)
                placed += 1
                break
        metrics["traps_placed"] = placed

    def _ensure_goal(self, grid, start, goal, metrics) -> Coord2D:
        found = grid.first(GOAL)
        if found is not None:
            return found
        candidates = [p for p in grid.positions() if p != start and grid.get(p) != WALL]
        repaired = self.rng.choice(candidates)
        grid.set(repaired, GOAL)
        metrics["goal_repairs"] += 1
        log.warn(event="goal_repaired", x=repaired[0], y=repaired[1])
        return repaired


def generate(
    profile: DifficultyProfile,
    previous: Optional[RunMetrics] = None,
    level: int = 1,
    *,
    rng: Optional[random.Random] = None,
    caps: Optional[PlacementCaps] = None,
) -> GeneratedLevel:
    """Convenience wrapper around ``LevelGenerator(...).generate``."""
    return LevelGenerator(profile, rng=rng, caps=caps).generate(previous, level)


__all__ = ["LevelGenerator", "GeneratedLevel", "compute_difficulty", "carve_main_path", "generate", "START"]
