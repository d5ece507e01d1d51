"""A small store of diary entries picked at random."""

from __future__ import annotations

import random
import sqlite3
from os import PathLike

_SCHEMA = """
CREATE TABLE IF NOT EXISTS tiangou (
    id INTEGER PRIMARY KEY,
    text TEXT NOT NULL
);
"""


class DiaryDB:
    """Diary entries in one SQLite table."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._conn = sqlite3.connect(str(path))
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def __enter__(self) -> "DiaryDB":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def add(self, text: str) -> int:
        """Store an entry and return its id."""
        with self._conn:
            cur = self._conn.execute("INSERT INTO tiangou (text) VALUES (?)", (text,))
        return int(cur.lastrowid)

    def count(self) -> int:
        (n,) = self._conn.execute("SELECT COUNT(*) FROM tiangou").fetchone()
        return int(n)

    def pick(self, rng: random.Random | None = None) -> str:
        """One entry chosen at random."""
        total = self.count()
        if total == 0:
            raise LookupError("no diary entries")
        offset = (rng or random).randrange(total)
        (text,) = self._conn.execute(
            "SELECT text FROM tiangou ORDER BY id LIMIT 1 OFFSET ?", (offset,)
        ).fetchone()
        return text