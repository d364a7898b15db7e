from puzzle.maze.connectivity import flood, reachable
from puzzle.maze.tiles import DOOR, TRAP, WALL

from tests.maze_test_utils import OPEN_MAP, grid_from

SPLIT_MAP = """
    WWWWWW
    W..W.W
    W..W.W
    W..W.W
    W..WGW
    WWWWWW
"""


def test_open_board_is_reachable():
    g = grid_from(OPEN_MAP)
    assert reachable(g, (1, 1), (6, 6))


def test_wall_column_separates_regions():
    g = grid_from(SPLIT_MAP)
    assert not reachable(g, (1, 1), (4, 4))
    region = flood(g, (1, 1))
    assert (4, 4) not in region
    assert len(region) == 8


def test_start_equals_goal_is_reachable():
    g = grid_from(SPLIT_MAP)
    assert reachable(g, (4, 4), (4, 4))


def test_flood_includes_start_even_on_blocked_tile():
    g = grid_from(SPLIT_MAP)
    region = flood(g, (3, 1))
    assert (3, 1) in region
    assert (2, 1) in region and (4, 1) in region


def test_extra_blocked_kinds():
    g = grid_from(OPEN_MAP)
    for y in range(1, 7):
        g.set((3, y), TRAP)
    assert reachable(g, (1, 1), (6, 6))
    assert not reachable(g, (1, 1), (6, 6), blocked={WALL, TRAP})
    g.set((3, 3), DOOR)
    assert not reachable(g, (1, 1), (6, 6), blocked={WALL, TRAP, DOOR})
