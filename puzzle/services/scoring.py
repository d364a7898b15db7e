"""Score, XP and coin rules for tile effects and level completion.

Numbers here are the whole reward economy; the session applies them and the
tests pin them down. Completion rewards:

    time_bonus    = max(0, floor((120000 - elapsed_ms) / 1000))   (par time 120 s)
    move_bonus    = max(0, (100 - moves) * 5)
    level_bonus   = level * 100
    perfect_bonus = level * 50 when retries == 0 else 0

Score gains the sum of all four; XP gains ``level * 50 + perfect_bonus``;
coins gain ``level * 20``.

Milestones are one-off coin/XP rewards a profile claims once a stat
(level, score or coins) reaches its requirement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from puzzle.maze.metrics import RunMetrics

KEY_COINS = 10
DOOR_SCORE = 50
TRAP_PENALTY = 25

PAR_TIME_MS = 120_000
MOVE_PAR = 100

PERFECT_RUN = "Perfect Run"
SPEED_RUNNER = "Speed Runner"
EFFICIENT_NAVIGATOR = "Efficient Navigator"

SPEED_RUN_MS = 30_000
EFFICIENT_MOVES = 25


@dataclass(frozen=True)
class CompletionRewards:
    time_bonus: int
    move_bonus: int
    level_bonus: int
    perfect_bonus: int
    xp: int
    coins: int

    @property
    def score(self) -> int:
        return self.time_bonus + self.move_bonus + self.level_bonus + self.perfect_bonus


def completion_rewards(level: int, moves: int, retries: int, elapsed_ms: int) -> CompletionRewards:
    time_bonus = max(0, (PAR_TIME_MS - elapsed_ms) // 1000)
    move_bonus = max(0, (MOVE_PAR - moves) * 5)
    level_bonus = level * 100
    perfect_bonus = level * 50 if retries == 0 else 0
    return CompletionRewards(
        time_bonus=time_bonus,
        move_bonus=move_bonus,
        level_bonus=level_bonus,
        perfect_bonus=perfect_bonus,
        xp=level * 50 + perfect_bonus,
        coins=level * 20,
    )


def apply_trap_penalty(score: int) -> int:
    return max(0, score - TRAP_PENALTY)


def achievements_for(metrics: RunMetrics) -> List[str]:
    """Achievement labels earned by a completed run, in display order."""
    earned = []
    if metrics.retries == 0:
        earned.append(PERFECT_RUN)
    if metrics.elapsed_ms < SPEED_RUN_MS:
        earned.append(SPEED_RUNNER)
    if metrics.moves < EFFICIENT_MOVES:
        earned.append(EFFICIENT_NAVIGATOR)
    return earned


@dataclass(frozen=True)
class Milestone:
    id: str
    title: str
    description: str
    coins: int
    xp: int
    stat: str
    requirement: int

    def reached(self, profile) -> bool:
        return getattr(profile, self.stat) >= self.requirement


MILESTONES = {
    m.id: m
    for m in (
        Milestone("level_5_reward", "Level 5 Milestone", "Congratulations on reaching level 5!", 200, 100, "level", 5),
        Milestone("level_10_reward", "Level 10 Milestone", "Amazing! You've reached level 10!", 500, 250, "level", 10),
        Milestone("score_1000_reward", "Score Master", "You've scored over 1000 points!", 150, 75, "score", 1000),
        Milestone("coins_500_reward", "Coin Collector", "You've collected 500 coins!", 100, 100, "coins", 500),
    )
}


__all__ = [
    "CompletionRewards",
    "completion_rewards",
    "apply_trap_penalty",
    "achievements_for",
    "Milestone",
    "MILESTONES",
    "KEY_COINS",
    "DOOR_SCORE",
    "TRAP_PENALTY",
    "PERFECT_RUN",
    "SPEED_RUNNER",
    "EFFICIENT_NAVIGATOR",
]
