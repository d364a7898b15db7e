"""
project: Puzzle Adventure
module: models.py
License: MIT

SQLAlchemy models for the local profile store and game configuration.
"""

import datetime

from puzzle import db


class Profile(db.Model):
    """Single-row player profile (id=1).

    Scalar progress lives in integer columns; list/dict fields are stored as
    JSON text and decoded by ``puzzle.services.profile_store``.
    """

    id = db.Column(db.Integer, primary_key=True, default=1)
    level = db.Column(db.Integer, nullable=False, default=1)
    score = db.Column(db.Integer, nullable=False, default=0)
    xp = db.Column(db.Integer, nullable=False, default=0)
    coins = db.Column(db.Integer, nullable=False, default=0)
    achievements = db.Column(db.Text, nullable=False, default="[]")
    settings = db.Column(db.Text, nullable=False, default="{}")
    custom_content = db.Column(db.Text, nullable=False, default="[]")
    rewards = db.Column(db.Text, nullable=False, default="[]")
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def __repr__(self):
        return f"<Profile {self.id} level={self.level} score={self.score}>"


class GameConfig(db.Model):
    """Key/value game configuration (e.g. key='difficulty', value='hard')."""

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(80), unique=True, nullable=False)
    value = db.Column(db.Text, nullable=False)

    @staticmethod
    def get(key: str):
        row = GameConfig.query.filter_by(key=key).first()
        return row.value if row else None

    @staticmethod
    def set(key: str, value: str):
        row = GameConfig.query.filter_by(key=key).first()
        if not row:
            row = GameConfig(key=key, value=value)
            db.session.add(row)
        else:
            row.value = value
        db.session.commit()
