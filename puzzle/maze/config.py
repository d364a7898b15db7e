from dataclasses import dataclass
from typing import Optional

MIN_GRID_SIZE = 8
MAX_GRID_SIZE = 20
DEFAULT_DIFFICULTY = "medium"


@dataclass(frozen=True)
class DifficultyProfile:
    name: str
    grid_size: int
    wall_multiplier: float
    trap_multiplier: float
    dynamic_traps: bool = False
    board_rotation: bool = False

    def __post_init__(self):
        if not MIN_GRID_SIZE <= self.grid_size <= MAX_GRID_SIZE:
            raise ValueError(f"grid_size must be within {MIN_GRID_SIZE}..{MAX_GRID_SIZE}, got {self.grid_size}")


@dataclass(frozen=True)
class PlacementCaps:
    """Attempt caps for the random placement loops."""

    wall_attempts: int = 50
    key_attempts: int = 30
    door_attempts: int = 30
    trap_attempts_per_trap: int = 20


EASY = DifficultyProfile("easy", grid_size=8, wall_multiplier=4, trap_multiplier=0.3)
MEDIUM = DifficultyProfile("medium", grid_size=12, wall_multiplier=7, trap_multiplier=0.7, dynamic_traps=True)
HARD = DifficultyProfile(
    "hard", grid_size=16, wall_multiplier=10, trap_multiplier=1.2, dynamic_traps=True, board_rotation=True
)

PROFILES = {p.name: p for p in (EASY, MEDIUM, HARD)}


def resolve_profile(name: Optional[str]) -> DifficultyProfile:
    """Map a difficulty name to its profile; unknown or empty names give medium."""
    key = (name or "").strip().lower()
    return PROFILES.get(key, PROFILES[DEFAULT_DIFFICULTY])


__all__ = [
    "DifficultyProfile",
    "PlacementCaps",
    "PROFILES",
    "EASY",
    "MEDIUM",
    "HARD",
    "DEFAULT_DIFFICULTY",
    "resolve_profile",
]
