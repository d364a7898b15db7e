"""Small payload validation helpers for Socket.IO events and JSON bodies.

Schema mini-language (Python dict):
{
  'field_name': ('type', required: bool, extras: dict)
}
Supported types: 'str', 'int', 'bool', 'dict'
Extras: min_len / max_len (str), choices (str, compared lower-cased),
min / max (int).

    ok, data_or_err = validate({'dir': 'up'}, MOVE)

If invalid: (False, {'field': 'dir', 'error': 'not an allowed value', 'code': 'choices'})
If valid: (True, normalized_data)
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

PRIMITIVES = {
    "str": str,
    "int": int,
    "bool": bool,
    "dict": dict,
}


def _fail(field: str, message: str, code: str) -> Tuple[bool, Dict[str, Any]]:
    return False, {"field": field, "error": message, "code": code}


def validate(payload: Any, schema: Dict[str, tuple]) -> Tuple[bool, Dict[str, Any]]:
    if not isinstance(payload, dict):
        return _fail("__root__", "payload must be an object", "type")
    out: Dict[str, Any] = {}
    for name, rule in schema.items():
        type_name, required = rule[0], rule[1]
        extras = rule[2] if len(rule) > 2 else {}
        if name not in payload:
            if required:
                return _fail(name, "missing required field", "required")
            continue
        value = payload[name]
        # bool is an int subclass; keep the two apart
        if type_name == "int" and isinstance(value, bool):
            return _fail(name, "expected int", "type")
        if not isinstance(value, PRIMITIVES[type_name]):
            return _fail(name, f"expected {type_name}", "type")
        if type_name == "str":
            value = value.strip()
            if not value:
                return _fail(name, "must not be empty", "empty")
            if "max_len" in extras and len(value) > extras["max_len"]:
                return _fail(name, "too long", "max_len")
            if "min_len" in extras and len(value) < extras["min_len"]:
                return _fail(name, "too short", "min_len")
            if "choices" in extras:
                value = value.lower()
                if value not in extras["choices"]:
                    return _fail(name, "not an allowed value", "choices")
        elif type_name == "int":
            if "min" in extras and value < extras["min"]:
                return _fail(name, "too small", "min")
            if "max" in extras and value > extras["max"]:
                return _fail(name, "too large", "max")
        out[name] = value
    return True, out


DIRECTIONS = {
    "up": (0, -1),
    "w": (0, -1),
    "down": (0, 1),
    "s": (0, 1),
    "left": (-1, 0),
    "a": (-1, 0),
    "right": (1, 0),
    "d": (1, 0),
}

MOVE = {"dir": ("str", True, {"choices": tuple(DIRECTIONS)})}
DIFFICULTY = {"difficulty": ("str", True, {"choices": ("easy", "medium", "hard")})}
PROFILE_SETTINGS = {"settings": ("dict", True)}
JOIN_GAME = {"game_id": ("str", True, {"min_len": 1, "max_len": 64})}
LEAVE_GAME = JOIN_GAME
CUSTOM_CONTENT = {
    "kind": ("str", True, {"choices": ("image", "text")}),
    "title": ("str", True, {"max_len": 100}),
    "content": ("str", True, {"max_len": 500_000}),
}
