"""Local profile persistence with load / save(partial) / reset.

The store never lets a storage problem reach the game: database errors and
malformed JSON are logged and replaced by defaults (on load) or dropped (on
write). ``save`` has shallow-merge semantics; unspecified fields keep their
prior value and unknown keys are ignored.

User content entries (``custom_content``) are managed through
``add_custom_content`` / ``update_custom_content`` / ``remove_custom_content``.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from puzzle import db
from puzzle.logging_utils import get_logger
from puzzle.models import Profile
from puzzle.services.scoring import MILESTONES

log = get_logger("services.profile_store")

THEMES = ("light", "dark", "system")
_SCALAR_FIELDS = ("level", "score", "xp", "coins")
_JSON_FIELDS = ("achievements", "settings", "custom_content", "rewards")
CONTENT_KINDS = ("image", "text")


def _default_settings() -> Dict[str, Any]:
    return {"sound": True, "theme": "system"}


@dataclass
class ProfileRecord:
    level: int = 1
    score: int = 0
    xp: int = 0
    coins: int = 0
    achievements: List[str] = field(default_factory=list)
    settings: Dict[str, Any] = field(default_factory=_default_settings)
    custom_content: List[Dict[str, Any]] = field(default_factory=list)
    rewards: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _normalize_settings(raw: Any, base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    settings = dict(base or _default_settings())
    if not isinstance(raw, dict):
        return settings
    if "sound" in raw:
        settings["sound"] = bool(raw["sound"])
    theme = raw.get("theme")
    if isinstance(theme, str) and theme.lower() in THEMES:
        settings["theme"] = theme.lower()
    return settings


def _int(value: Any, floor: int) -> int:
    try:
        return max(floor, int(value))
    except (TypeError, ValueError):
        return floor


def _column(row: Profile, name: str, default: Any) -> Any:
    raw = getattr(row, name)
    if not raw:
        return default
    try:
        value = json.loads(raw)
    except ValueError:
        log.warn(event="profile_column_corrupt", column=name)
        return default
    return value if isinstance(value, type(default)) else default


def _record_from_row(row: Profile) -> ProfileRecord:
    """Decode a row column by column; a bad column falls back to its default."""
    return ProfileRecord(
        level=_int(row.level, 1),
        score=_int(row.score, 0),
        xp=_int(row.xp, 0),
        coins=_int(row.coins, 0),
        achievements=[str(a) for a in _column(row, "achievements", [])],
        settings=_normalize_settings(_column(row, "settings", {})),
        custom_content=[c for c in _column(row, "custom_content", []) if isinstance(c, dict)],
        rewards=[r for r in _column(row, "rewards", []) if isinstance(r, dict)],
    )


def _write_row(row: Profile, record: ProfileRecord) -> None:
    for name in _SCALAR_FIELDS:
        setattr(row, name, getattr(record, name))
    for name in _JSON_FIELDS:
        setattr(row, name, json.dumps(getattr(record, name)))


def _content_entry(content_id: str, kind: str, title: str, content: str) -> Dict[str, Any]:
    kind = (kind or "").strip().lower()
    if kind not in CONTENT_KINDS:
        raise ValueError(f"unknown content kind {kind!r}")
    title, content = (title or "").strip(), (content or "").strip()
    if not title or not content:
        raise ValueError("title and content are required")
    return {
        "id": content_id,
        "kind": kind,
        "title": title,
        "content": content,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }


class ProfileStore:
    def __init__(self, profile_id: int = 1):
        self.profile_id = profile_id

    def _row(self, create: bool = False) -> Optional[Profile]:
        row = db.session.get(Profile, self.profile_id)
        if row is None and create:
            row = Profile(
                id=self.profile_id,
                level=1,
                score=0,
                xp=0,
                coins=0,
                achievements="[]",
                settings=json.dumps(_default_settings()),
                custom_content="[]",
                rewards="[]",
            )
            db.session.add(row)
        return row

    def load(self) -> ProfileRecord:
        try:
            row = self._row()
            if row is None:
                return ProfileRecord()
            return _record_from_row(row)
        except (SQLAlchemyError, ValueError, TypeError) as exc:
            db.session.rollback()
            log.warn(event="profile_load_failed", error=type(exc).__name__)
            return ProfileRecord()

    def save(self, partial: Dict[str, Any]) -> Optional[ProfileRecord]:
        """Merge ``partial`` into the stored profile; returns the new record or None on failure.

        Every column is rewritten from the merged record, so a corrupt JSON
        column is replaced by its decoded fallback.
        """
        try:
            row = self._row(create=True)
            merged = _record_from_row(row)
            for name in _SCALAR_FIELDS:
                if name in partial:
                    floor = 1 if name == "level" else 0
                    setattr(merged, name, max(floor, int(partial[name])))
            if "achievements" in partial:
                merged.achievements = [str(a) for a in partial["achievements"]]
            if "settings" in partial:
                merged.settings = _normalize_settings(partial["settings"], merged.settings)
            for name in ("custom_content", "rewards"):
                if name in partial:
                    setattr(merged, name, [dict(item) for item in partial[name]])
            _write_row(row, merged)
            db.session.commit()
            return merged
        except (SQLAlchemyError, ValueError, TypeError) as exc:
            db.session.rollback()
            log.warn(event="profile_save_failed", error=type(exc).__name__, fields=",".join(sorted(partial)))
            return None

    def reset(self) -> None:
        try:
            row = self._row()
            if row is not None:
                db.session.delete(row)
                db.session.commit()
            log.info(event="profile_reset", profile=self.profile_id)
        except SQLAlchemyError as exc:
            db.session.rollback()
            log.warn(event="profile_reset_failed", error=type(exc).__name__)

    def append_achievements(self, labels: Iterable[str]) -> Optional[ProfileRecord]:
        labels = list(labels)
        if not labels:
            return self.load()
        current = self.load()
        return self.save({"achievements": current.achievements + labels})

    def record_completion(self, state, achievements: Iterable[str]) -> Optional[ProfileRecord]:
        """Persist progress after a completed level (state is a ``PlayerState``)."""
        current = self.load()
        partial: Dict[str, Any] = {
            "level": state.level,
            "score": state.score,
            "xp": state.xp,
            "coins": state.coins,
        }
        labels = list(achievements)
        if labels:
            partial["achievements"] = current.achievements + labels
        return self.save(partial)

    def add_custom_content(self, kind: str, title: str, content: str) -> Optional[Dict[str, Any]]:
        """Append a user content entry; returns it, or None when the write fails."""
        entry = _content_entry(uuid.uuid4().hex, kind, title, content)
        current = self.load()
        if self.save({"custom_content": current.custom_content + [entry]}) is None:
            return None
        log.info(event="custom_content_added", id=entry["id"], kind=entry["kind"])
        return entry

    def update_custom_content(self, content_id: str, kind: str, title: str, content: str) -> Optional[Dict[str, Any]]:
        """Replace an entry in place, keeping its id. Raises KeyError for an unknown id."""
        entry = _content_entry(content_id, kind, title, content)
        current = self.load()
        if not any(item.get("id") == content_id for item in current.custom_content):
            raise KeyError(content_id)
        items = [entry if item.get("id") == content_id else item for item in current.custom_content]
        if self.save({"custom_content": items}) is None:
            return None
        return entry

    def remove_custom_content(self, content_id: str) -> bool:
        """Drop an entry. Raises KeyError for an unknown id; False when the write fails."""
        current = self.load()
        items = [item for item in current.custom_content if item.get("id") != content_id]
        if len(items) == len(current.custom_content):
            raise KeyError(content_id)
        if self.save({"custom_content": items}) is None:
            return False
        log.info(event="custom_content_removed", id=content_id)
        return True

    def milestones(self) -> List[Dict[str, Any]]:
        """Milestone rewards with their claimed/available flags for the current profile."""
        current = self.load()
        claimed = {r.get("id") for r in current.rewards}
        out = []
        for m in MILESTONES.values():
            out.append(
                {
                    "id": m.id,
                    "title": m.title,
                    "description": m.description,
                    "coins": m.coins,
                    "xp": m.xp,
                    "claimed": m.id in claimed,
                    "available": m.id not in claimed and m.reached(current),
                }
            )
        return out

    def claim_milestone(self, milestone_id: str) -> Optional[ProfileRecord]:
        """Grant a reached milestone once and record it under ``rewards``.

        Raises KeyError for an unknown id and ValueError when the milestone is
        already claimed or not reached yet. Returns None when the write fails.
        """
        milestone = MILESTONES[milestone_id]
        current = self.load()
        if any(r.get("id") == milestone_id for r in current.rewards):
            raise ValueError(f"{milestone_id} already claimed")
        if not milestone.reached(current):
            raise ValueError(f"{milestone_id} not reached")
        entry = {
            "id": milestone.id,
            "kind": "milestone",
            "title": milestone.title,
            "description": milestone.description,
            "claimed": True,
            "earned_at": datetime.now(timezone.utc).isoformat(),
        }
        record = self.save(
            {
                "coins": current.coins + milestone.coins,
                "xp": current.xp + milestone.xp,
                "rewards": current.rewards + [entry],
            }
        )
        if record is not None:
            log.info(event="milestone_claimed", id=milestone.id, coins=milestone.coins, xp=milestone.xp)
        return record


__all__ = ["ProfileRecord", "ProfileStore"]
