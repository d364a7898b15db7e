"""Square tile matrix used for every maze level.

The grid is column-major (``grid[x][y]``), matching how positions are passed
around as ``(x, y)`` pairs. ``to_rows`` flips to row-major for clients that
index ``rows[y][x]``.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from .tiles import EMPTY, TILE_KINDS, WALL, char_to_type

Coord2D = Tuple[int, int]

# 4-way neighbourhood (S, E, N, W); search order matters for deterministic BFS output
DIRECTIONS: Tuple[Coord2D, ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))


class Grid:
    """N x N tile matrix with bounds-aware helpers."""

    __slots__ = ("size", "cells")

    def __init__(self, size: int, fill: str = EMPTY):
        if size < 3:
            raise ValueError("grid size must be at least 3")
        if fill not in TILE_KINDS:
            raise ValueError(f"unknown tile kind {fill!r}")
        self.size = size
        self.cells: List[List[str]] = [[fill for _ in range(size)] for _ in range(size)]

    def __getitem__(self, x: int) -> List[str]:
        return self.cells[x]

    def __len__(self) -> int:
        return self.size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.size == other.size and self.cells == other.cells

    def __repr__(self) -> str:
        return f"<Grid {self.size}x{self.size}>"

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def get(self, pos: Coord2D) -> str:
        x, y = pos
        return self.cells[x][y]

    def set(self, pos: Coord2D, kind: str) -> None:
        if kind not in TILE_KINDS:
            raise ValueError(f"unknown tile kind {kind!r}")
        x, y = pos
        self.cells[x][y] = kind

    def neighbors(self, pos: Coord2D) -> Iterator[Coord2D]:
        x, y = pos
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < self.size and 0 <= ny < self.size:
                yield (nx, ny)

    def positions(self) -> Iterator[Coord2D]:
        for x in range(self.size):
            for y in range(self.size):
                yield (x, y)

    def find(self, kind: str) -> List[Coord2D]:
        return [p for p in self.positions() if self.cells[p[0]][p[1]] == kind]

    def first(self, kind: str) -> Optional[Coord2D]:
        for p in self.positions():
            if self.cells[p[0]][p[1]] == kind:
                return p
        return None

    def count(self, kind: str) -> int:
        return sum(col.count(kind) for col in self.cells)

    def is_border(self, pos: Coord2D) -> bool:
        x, y = pos
        last = self.size - 1
        return x in (0, last) or y in (0, last)

    def fill_border(self, kind: str = WALL) -> None:
        last = self.size - 1
        for i in range(self.size):
            self.cells[i][0] = kind
            self.cells[i][last] = kind
            self.cells[0][i] = kind
            self.cells[last][i] = kind

    def copy(self) -> "Grid":
        clone = Grid.__new__(Grid)
        clone.size = self.size
        clone.cells = [col[:] for col in self.cells]
        return clone

    def to_rows(self) -> List[List[str]]:
        """Row-major tile names (``rows[y][x]``) for JSON clients."""
        return [[char_to_type(self.cells[x][y]) for x in range(self.size)] for y in range(self.size)]

    def to_ascii(self) -> str:
        return "\n".join("".join(self.cells[x][y] for x in range(self.size)) for y in range(self.size))

    @classmethod
    def from_ascii(cls, text: str) -> "Grid":
        """Build a grid from rows of storage codes, top row first.

        Blank lines and surrounding whitespace are ignored, so tests can use
        indented triple-quoted maps.
        """
        rows = [line.strip() for line in text.strip().splitlines() if line.strip()]
        size = len(rows)
        if any(len(r) != size for r in rows):
            raise ValueError("ascii grid must be square")
        grid = cls(size)
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                grid.set((x, y), ch)
        return grid


__all__ = ["Grid", "Coord2D", "DIRECTIONS"]
