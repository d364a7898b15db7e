from puzzle.maze.metrics import RunMetrics
from puzzle.services.scoring import (
    EFFICIENT_NAVIGATOR,
    PERFECT_RUN,
    SPEED_RUNNER,
    achievements_for,
    apply_trap_penalty,
    completion_rewards,
)


def test_completion_rewards_fast_perfect_run():
    r = completion_rewards(level=3, moves=20, retries=0, elapsed_ms=45_500)
    assert r.time_bonus == 74
    assert r.move_bonus == 400
    assert r.level_bonus == 300
    assert r.perfect_bonus == 150
    assert r.score == 924
    assert r.xp == 300
    assert r.coins == 60


def test_completion_rewards_floor_at_zero():
    r = completion_rewards(level=2, moves=140, retries=1, elapsed_ms=125_000)
    assert (r.time_bonus, r.move_bonus, r.perfect_bonus) == (0, 0, 0)
    assert r.score == 200
    assert r.xp == 100


def test_trap_penalty_never_goes_negative():
    assert apply_trap_penalty(100) == 75
    assert apply_trap_penalty(10) == 0
    assert apply_trap_penalty(0) == 0


def test_achievement_thresholds():
    best = RunMetrics(elapsed_ms=29_999, moves=24, retries=0, hints_used=3, difficulty_score=1.0)
    assert achievements_for(best) == [PERFECT_RUN, SPEED_RUNNER, EFFICIENT_NAVIGATOR]
    edge = RunMetrics(elapsed_ms=30_000, moves=25, retries=1, hints_used=0, difficulty_score=1.0)
    assert achievements_for(edge) == []


def test_level_three_reference_run():
    r = completion_rewards(level=3, moves=40, retries=0, elapsed_ms=50_000)
    assert (r.time_bonus, r.move_bonus, r.level_bonus, r.perfect_bonus) == (70, 300, 300, 150)
    assert r.score == 820
