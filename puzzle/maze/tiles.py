"""Tile vocabulary shared by the generator, engine and API layers.

Tiles are stored in the grid as single characters; the API exposes the long
names so clients never depend on the storage codes.
"""

EMPTY = "."
WALL = "W"
KEY = "K"
DOOR = "D"
GOAL = "G"
TRAP = "X"

TILE_KINDS = frozenset({EMPTY, WALL, KEY, DOOR, GOAL, TRAP})

_NAMES = {
    EMPTY: "empty",
    WALL: "wall",
    KEY: "key",
    DOOR: "door",
    GOAL: "goal",
    TRAP: "trap",
}
_CHARS = {name: ch for ch, name in _NAMES.items()}


def char_to_type(ch: str) -> str:
    """Return the public tile name for a storage code (unknown -> 'empty')."""
    return _NAMES.get(ch, "empty")


def type_to_char(name: str) -> str:
    try:
        return _CHARS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown tile type {name!r}") from None


__all__ = [
    "EMPTY",
    "WALL",
    "KEY",
    "DOOR",
    "GOAL",
    "TRAP",
    "TILE_KINDS",
    "char_to_type",
    "type_to_char",
]
