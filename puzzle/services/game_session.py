"""Interaction engine: one owned game session per player.

A ``GameSession`` holds the current grid and ``PlayerState`` and is the only
thing that mutates them. Every public operation runs to completion and
reports what happened through its return value (``MoveResult``,
``HintResult``) instead of UI side channels:

    session = GameSession(resolve_profile("hard"), seed=7)
    result = session.move(1, 0)
    if result.completion:
        store.record_completion(session.state, result.achievements)

Periodic effects are host-driven: the session holds no timers. The host calls
``relocate_traps()`` on its own schedule (``next_trap_interval()`` suggests the
delay), and hard-mode rotation happens inside ``move``.
"""

from __future__ import annotations

import random
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from puzzle.logging_utils import get_logger
from puzzle.maze.config import DifficultyProfile, PlacementCaps
from puzzle.maze.generator import START, GeneratedLevel, LevelGenerator
from puzzle.maze.grid import Coord2D, Grid
from puzzle.maze.hints import HintResult, find_hint
from puzzle.maze.metrics import RunMetrics
from puzzle.maze.tiles import DOOR, EMPTY, GOAL, KEY, TRAP, WALL
from puzzle.maze.transform import board_transform, relocate_traps
from puzzle.services import scoring

log = get_logger("services.game_session")

STATUS_PLAYING = "playing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

THEMES = ("forest", "cave", "cyber")
ROTATION_INTERVAL = 20
TRAP_INTERVAL_RANGE = (2.0, 3.0)

NOTICE_INVALID_DIRECTION = "invalid_direction"
NOTICE_NOT_PLAYING = "not_playing"
NOTICE_BLOCKED = "blocked"
NOTICE_DOOR_LOCKED = "door_locked"
NOTICE_KEY_COLLECTED = "key_collected"
NOTICE_DOOR_UNLOCKED = "door_unlocked"
NOTICE_TRAP_TRIGGERED = "trap_triggered"
NOTICE_LEVEL_COMPLETE = "level_complete"
NOTICE_BOARD_ROTATED = "board_rotated"

_UNIT_STEPS = {(0, 1), (0, -1), (1, 0), (-1, 0)}


def theme_for_level(level: int) -> str:
    return THEMES[(level - 1) % len(THEMES)]


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


@dataclass
class PlayerState:
    level: int = 1
    score: int = 0
    xp: int = 0
    coins: int = 0
    keys_collected: int = 0
    total_keys: int = 0
    moves: int = 0
    retries: int = 0
    hints_used: int = 0
    status: str = STATUS_PLAYING
    position: Coord2D = START
    theme: str = THEMES[0]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["position"] = list(self.position)
        return data


@dataclass
class MoveResult:
    accepted: bool
    position: Coord2D
    notices: List[str] = field(default_factory=list)
    delta: Dict[str, int] = field(default_factory=lambda: {"score": 0, "xp": 0, "coins": 0})
    completion: Optional[RunMetrics] = None
    achievements: List[str] = field(default_factory=list)
    rotated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "position": list(self.position),
            "notices": list(self.notices),
            "delta": dict(self.delta),
            "completion": self.completion.to_dict() if self.completion else None,
            "achievements": list(self.achievements),
            "rotated": self.rotated,
        }


class GameSession:
    def __init__(
        self,
        profile: DifficultyProfile,
        *,
        level: int = 1,
        score: int = 0,
        xp: int = 0,
        coins: int = 0,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        caps: Optional[PlacementCaps] = None,
        clock: Optional[Callable[[], int]] = None,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or uuid.uuid4().hex
        self.profile = profile
        self.rng = rng if rng is not None else random.Random(seed)
        self.clock = clock or _monotonic_ms
        self.caps = caps
        self.generator = LevelGenerator(profile, rng=self.rng, caps=caps)
        self.state = PlayerState(level=max(1, level), score=max(0, score), xp=max(0, xp), coins=max(0, coins))
        self.last_metrics: Optional[RunMetrics] = None
        self.difficulty = 0.0
        self.generation_metrics: Dict[str, Any] = {}
        self.started_at_ms = self.clock()
        self.grid: Grid
        self.start_level()

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------
    def start_level(self, profile: Optional[DifficultyProfile] = None) -> GeneratedLevel:
        """Generate a fresh grid for the current level and reset per-run state.

        Passing ``profile`` switches the difficulty before generating.
        """
        if profile is not None and profile is not self.profile:
            self.profile = profile
            self.generator = LevelGenerator(profile, rng=self.rng, caps=self.caps)
        level = self.generator.generate(self.last_metrics, self.state.level)
        self.difficulty = level.difficulty
        self.generation_metrics = level.metrics
        self._reset_board(level.grid, level.total_keys, level.start)
        log.info(
            event="level_started",
            session=self.id,
            game_level=self.state.level,
            difficulty_name=self.profile.name,
            total_keys=level.total_keys,
        )
        return level

    def load_grid(self, grid: Grid, total_keys: int = 0, position: Coord2D = START) -> None:
        """Replace the board with a prepared grid (fixtures, replays)."""
        self._reset_board(grid, total_keys, position)

    def _reset_board(self, grid: Grid, total_keys: int, position: Coord2D) -> None:
        self.grid = grid
        s = self.state
        s.total_keys = total_keys
        s.keys_collected = 0
        s.moves = 0
        s.status = STATUS_PLAYING
        s.position = position
        s.theme = theme_for_level(s.level)
        self.started_at_ms = self.clock()

    def restart(self, profile: Optional[DifficultyProfile] = None) -> None:
        """Count a retry and regenerate the current level."""
        self.state.retries += 1
        self.start_level(profile)

    def next_level(self, profile: Optional[DifficultyProfile] = None) -> bool:
        """Advance after a completed level; False (no-op) while still playing."""
        if self.state.status != STATUS_COMPLETED:
            return False
        s = self.state
        s.level += 1
        s.retries = 0
        s.hints_used = 0
        self.start_level(profile)
        return True

    def elapsed_ms(self) -> int:
        return max(0, self.clock() - self.started_at_ms)

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------
    def move(self, dx: int, dy: int) -> MoveResult:
        s = self.state
        result = MoveResult(accepted=False, position=s.position)
        if (dx, dy) not in _UNIT_STEPS:
            result.notices.append(NOTICE_INVALID_DIRECTION)
            return result
        if s.status != STATUS_PLAYING:
            result.notices.append(NOTICE_NOT_PLAYING)
            return result
        nx, ny = s.position[0] + dx, s.position[1] + dy
        if not self.grid.in_bounds(nx, ny):
            result.notices.append(NOTICE_BLOCKED)
            return result
        target = self.grid[nx][ny]
        if target == WALL:
            result.notices.append(NOTICE_BLOCKED)
            return result
        if target == DOOR and s.keys_collected == 0:
            result.notices.append(NOTICE_DOOR_LOCKED)
            return result

        result.accepted = True
        s.moves += 1
        s.position = (nx, ny)

        if target == KEY:
            self.grid[nx][ny] = EMPTY
            s.keys_collected += 1
            s.coins += scoring.KEY_COINS
            result.delta["coins"] += scoring.KEY_COINS
            result.notices.append(NOTICE_KEY_COLLECTED)
        elif target == DOOR:
            self.grid[nx][ny] = EMPTY
            s.keys_collected -= 1
            s.score += scoring.DOOR_SCORE
            result.delta["score"] += scoring.DOOR_SCORE
            result.notices.append(NOTICE_DOOR_UNLOCKED)
        elif target == TRAP:
            before = s.score
            s.position = START
            s.retries += 1
            s.score = scoring.apply_trap_penalty(s.score)
            result.delta["score"] += s.score - before
            result.notices.append(NOTICE_TRAP_TRIGGERED)
        elif target == GOAL:
            self._complete(result)

        if (
            self.profile.board_rotation
            and s.status == STATUS_PLAYING
            and s.moves > 0
            and s.moves % ROTATION_INTERVAL == 0
        ):
            self._rotate_board()
            result.rotated = True
            result.notices.append(NOTICE_BOARD_ROTATED)

        result.position = s.position
        return result

    def _complete(self, result: MoveResult) -> None:
        s = self.state
        elapsed = self.elapsed_ms()
        s.status = STATUS_COMPLETED
        rewards = scoring.completion_rewards(s.level, s.moves, s.retries, elapsed)
        s.score += rewards.score
        s.xp += rewards.xp
        s.coins += rewards.coins
        result.delta["score"] += rewards.score
        result.delta["xp"] += rewards.xp
        result.delta["coins"] += rewards.coins

        metrics = RunMetrics(
            elapsed_ms=elapsed,
            moves=s.moves,
            retries=s.retries,
            hints_used=s.hints_used,
            difficulty_score=s.level * 0.5,
        )
        self.last_metrics = metrics
        result.completion = metrics
        result.achievements = scoring.achievements_for(metrics)
        result.notices.append(NOTICE_LEVEL_COMPLETE)
        log.info(
            event="level_complete",
            session=self.id,
            game_level=s.level,
            elapsed_ms=elapsed,
            moves=s.moves,
            retries=s.retries,
            hints=s.hints_used,
            score_gain=rewards.score,
        )

    def _rotate_board(self) -> None:
        outcome = board_transform(self.grid, self.state.position, self.state.total_keys, self.rng)
        self.grid = outcome.grid
        self.state.position = outcome.player

    # ------------------------------------------------------------------
    # Hints and ambient effects
    # ------------------------------------------------------------------
    def hint(self) -> HintResult:
        self.state.hints_used += 1
        result = find_hint(self.grid, self.state.position, self.state.keys_collected)
        log.info(event="hint", session=self.id, kind=result.kind, hints=self.state.hints_used)
        return result

    def relocate_traps(self) -> int:
        """Shuffle traps if this difficulty has moving traps and the level is live."""
        if not self.profile.dynamic_traps or self.state.status != STATUS_PLAYING:
            return 0
        return relocate_traps(self.grid, self.state.position, self.rng)

    def next_trap_interval(self) -> float:
        lo, hi = TRAP_INTERVAL_RANGE
        return lo + self.rng.random() * (hi - lo)

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view for renderers and API clients."""
        return {
            "id": self.id,
            "difficulty": self.profile.name,
            "size": self.grid.size,
            "grid": self.grid.to_rows(),
            "player": self.state.to_dict(),
            "elapsed_ms": self.elapsed_ms(),
            "dynamic_traps": self.profile.dynamic_traps,
            "board_rotation": self.profile.board_rotation,
        }


__all__ = [
    "GameSession",
    "PlayerState",
    "MoveResult",
    "theme_for_level",
    "STATUS_PLAYING",
    "STATUS_COMPLETED",
    "STATUS_FAILED",
    "THEMES",
]
