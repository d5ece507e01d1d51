"""Daily sign-in and score keeping backed by SQLite."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from os import PathLike

LEVELS: tuple[int, ...] = (0, 1, 2, 5, 10, 20, 35, 55, 75, 100, 120)
SCORE_MAX = 120
SIGNIN_MAX = 1
SIGNIN_REWARD = 1

_SCHEMA = """
CREATE TABLE IF NOT EXISTS score (
    uid INTEGER PRIMARY KEY,
    score INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS sign_in (
    uid INTEGER PRIMARY KEY,
    count INTEGER NOT NULL DEFAULT 0,
    updated_at TEXT
);
"""


@dataclass
class ScoreRecord:
    """A user's accumulated score."""

    uid: int
    score: int = 0


@dataclass
class SignInRecord:
    """How many times a user signed in and when the record last changed."""

    uid: int
    count: int = 0
    updated_at: datetime | None = None


@dataclass(frozen=True)
class SignInResult:
    """Outcome of one sign-in attempt."""

    already_signed: bool
    count: int
    score: int
    level: int
    next_level: int
    added: int
    capped: bool
    hour_word: str
    date_word: str


def _stamp(t: datetime) -> str:
    return t.isoformat(timespec="microseconds")


class ScoreDB:
    """Score and sign-in tables in one SQLite file."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._conn = sqlite3.connect(str(path))
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def __enter__(self) -> "ScoreDB":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def get_score(self, uid: int) -> ScoreRecord:
        """Return the user's score, creating a zero record if there is none."""
        row = self._conn.execute("SELECT score FROM score WHERE uid = ?", (uid,)).fetchone()
        if row is None:
            with self._conn:
                self._conn.execute("INSERT INTO score (uid, score) VALUES (?, 0)", (uid,))
            return ScoreRecord(uid, 0)
        return ScoreRecord(uid, row[0])

    def set_score(self, uid: int, score: int) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT INTO score (uid, score) VALUES (?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET score = excluded.score",
                (uid, score),
            )

    def get_sign_in(self, uid: int) -> SignInRecord:
        """Return the user's sign-in record, creating an empty one if needed."""
        return self._get_sign_in(uid, datetime.now())

    def set_sign_in_count(self, uid: int, count: int) -> None:
        self._set_sign_in_count(uid, count, datetime.now())

    def top_scores(self, n: int) -> list[ScoreRecord]:
        """Return at most ``n`` records, highest score first."""
        rows = self._conn.execute(
            "SELECT uid, score FROM score ORDER BY score DESC LIMIT ?", (n,)
        ).fetchall()
        return [ScoreRecord(uid, score) for uid, score in rows]

    def _get_sign_in(self, uid: int, now: datetime) -> SignInRecord:
        row = self._conn.execute(
            "SELECT count, updated_at FROM sign_in WHERE uid = ?", (uid,)
        ).fetchone()
        if row is None:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO sign_in (uid, count, updated_at) VALUES (?, 0, ?)",
                    (uid, _stamp(now)),
                )
            return SignInRecord(uid, 0, now)
        count, updated = row
        return SignInRecord(uid, count, datetime.fromisoformat(updated) if updated else None)

    def _set_sign_in_count(self, uid: int, count: int, now: datetime) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT INTO sign_in (uid, count, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET count = excluded.count, "
                "updated_at = excluded.updated_at",
                (uid, count, _stamp(now)),
            )


def get_hour_word(t: datetime) -> str:
    """Greeting for the hour of ``t``."""
    h = t.hour
    if 6 <= h < 12:
        return "早上好"
    if 12 <= h < 14:
        return "中午好"
    if 14 <= h < 19:
        return "下午好"
    if 19 <= h < 24:
        return "晚上好"
    if 0 <= h < 6:
        return "凌晨好"
    return ""


def get_level(count: int) -> int:
    """Level reached with ``count`` points, or -1 when out of range."""
    for level, threshold in enumerate(LEVELS):
        if count == threshold:
            return level
        if count < threshold:
            return level - 1
    return -1


def next_level_score(level: int) -> int:
    """Points needed for the level after ``level``."""
    if level < len(LEVELS) - 1:
        return LEVELS[level + 1]
    return SCORE_MAX


def sign_in(db: ScoreDB, uid: int, now: datetime | None = None) -> SignInResult:
    """Sign ``uid`` in for the day of ``now`` and award points."""
    now = now or datetime.now()
    today = now.date()
    hour_word = get_hour_word(now)
    date_word = now.strftime("%m/%d")
    record = db._get_sign_in(uid, now)
    signed_today = record.updated_at is not None and record.updated_at.date() == today
    if record.count >= SIGNIN_MAX and signed_today:
        score = db.get_score(uid).score
        level = get_level(score)
        return SignInResult(
            already_signed=True,
            count=record.count,
            score=score,
            level=level,
            next_level=next_level_score(level),
            added=0,
            capped=False,
            hour_word=hour_word,
            date_word=date_word,
        )
    if not signed_today:
        db._set_sign_in_count(uid, 0, now)
    count = record.count + 1
    db._set_sign_in_count(uid, count, now)

    score = db.get_score(uid).score + SIGNIN_REWARD
    capped = score > SCORE_MAX
    if capped:
        score = SCORE_MAX
    db.set_score(uid, score)
    level = get_level(score)
    return SignInResult(
        already_signed=False,
        count=count,
        score=score,
        level=level,
        next_level=next_level_score(level),
        added=SIGNIN_REWARD,
        capped=capped,
        hour_word=hour_word,
        date_word=date_word,
    )