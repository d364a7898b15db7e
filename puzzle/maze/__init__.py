"""Public maze package interface: tiles, grid, generation, search and transforms."""

from .config import PROFILES, DifficultyProfile, PlacementCaps, resolve_profile  # noqa: F401
from .connectivity import flood, reachable  # noqa: F401
from .generator import GeneratedLevel, LevelGenerator, compute_difficulty, generate  # noqa: F401
from .grid import Coord2D, Grid  # noqa: F401
from .hints import HintResult, find_hint  # noqa: F401
from .metrics import RunMetrics  # noqa: F401
from .tiles import DOOR, EMPTY, GOAL, KEY, TRAP, WALL  # noqa: F401
from .transform import board_transform, relocate_traps, rotate_grid, rotate_position  # noqa: F401

__all__ = [
    "Grid",
    "Coord2D",
    "EMPTY",
    "WALL",
    "KEY",
    "DOOR",
    "GOAL",
    "TRAP",
    "DifficultyProfile",
    "PlacementCaps",
    "PROFILES",
    "resolve_profile",
    "flood",
    "reachable",
    "LevelGenerator",
    "GeneratedLevel",
    "compute_difficulty",
    "generate",
    "HintResult",
    "find_hint",
    "RunMetrics",
    "board_transform",
    "relocate_traps",
    "rotate_grid",
    "rotate_position",
]
