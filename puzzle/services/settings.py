"""Difficulty configuration source.

Lookup order: ``GameConfig`` row 'difficulty', then
``app.config['PUZZLE_DIFFICULTY']`` (env ``PUZZLE_DIFFICULTY``), then medium.
"""

from __future__ import annotations

from typing import Optional

from flask import current_app, has_app_context
from sqlalchemy.exc import SQLAlchemyError

from puzzle import db
from puzzle.logging_utils import get_logger
from puzzle.maze.config import DEFAULT_DIFFICULTY, PROFILES, DifficultyProfile, resolve_profile
from puzzle.models import GameConfig

log = get_logger("services.settings")

DIFFICULTY_KEY = "difficulty"


def get_difficulty() -> str:
    try:
        stored = GameConfig.get(DIFFICULTY_KEY)
    except SQLAlchemyError as exc:
        db.session.rollback()
        log.warn(event="difficulty_read_failed", error=type(exc).__name__)
        stored = None
    if stored and stored.lower() in PROFILES:
        return stored.lower()
    if has_app_context():
        configured = (current_app.config.get("PUZZLE_DIFFICULTY") or "").lower()
        if configured in PROFILES:
            return configured
    return DEFAULT_DIFFICULTY


def set_difficulty(name: str) -> Optional[str]:
    """Store the difficulty; None when the write fails."""
    key = (name or "").strip().lower()
    if key not in PROFILES:
        raise ValueError(f"unknown difficulty {name!r}; expected one of {', '.join(PROFILES)}")
    try:
        GameConfig.set(DIFFICULTY_KEY, key)
    except SQLAlchemyError as exc:
        db.session.rollback()
        log.warn(event="difficulty_write_failed", value=key, error=type(exc).__name__)
        return None
    return key


def current_profile() -> DifficultyProfile:
    return resolve_profile(get_difficulty())


__all__ = ["get_difficulty", "set_difficulty", "current_profile", "DIFFICULTY_KEY"]
