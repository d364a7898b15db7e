from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict


def init_metrics() -> Dict[str, int | float]:
    return {
        "walls_requested": 0,
        "walls_placed": 0,
        "walls_rejected": 0,
        "keys_requested": 0,
        "keys_placed": 0,
        "doors_requested": 0,
        "doors_placed": 0,
        "traps_requested": 0,
        "traps_placed": 0,
        "goal_repairs": 0,
        "runtime_ms": 0.0,
    }


@dataclass(frozen=True)
class RunMetrics:
    """Summary of one completed level; input to the next level's difficulty."""

    elapsed_ms: int
    moves: int
    retries: int
    hints_used: int
    difficulty_score: float

    def to_dict(self) -> Dict[str, int | float]:
        return asdict(self)


__all__ = ["init_metrics", "RunMetrics"]
