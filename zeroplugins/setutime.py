"""Categorised illustrations with an in-memory queue of ready-to-send pictures."""

from __future__ import annotations

import json
import random
import sqlite3
import threading
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass
from os import PathLike
from typing import Any

DEFAULT_CATEGORIES = ("涩图", "二次元", "风景", "车万")
FILL_BATCH = 2

_COLUMNS = "pid, title, user_id, user_name, image_urls"


def _table(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class Illust:
    """An illustration and the URLs of its pages."""

    pid: int
    title: str = ""
    user_id: int = 0
    user_name: str = ""
    image_urls: tuple[str, ...] = ()


class ImagePool:
    """Illustrations stored per category, plus a queue of prepared pictures."""

    def __init__(self, db_path: str | PathLike[str], maximum: int = 10) -> None:
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._dblock = threading.RLock()
        self._poollock = threading.Lock()
        self._pool: dict[str, deque[Any]] = defaultdict(deque)
        self.maximum = maximum

    def __enter__(self) -> "ImagePool":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def categories(self) -> list[str]:
        """Names of the stored categories; the defaults if they cannot be listed."""
        try:
            with self._dblock:
                rows = self._conn.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
                ).fetchall()
        except sqlite3.Error:
            return list(DEFAULT_CATEGORIES)
        return [name for (name,) in rows]

    def size(self, imgtype: str) -> int:
        """Number of prepared pictures waiting in a category."""
        return len(self._pool.get(imgtype, ()))

    def push(self, imgtype: str, item: Any) -> None:
        """Queue a prepared picture."""
        with self._poollock:
            self._pool[imgtype].append(item)

    def pop(self, imgtype: str) -> Any | None:
        """Take the oldest prepared picture, or None when there is none."""
        with self._poollock:
            queue = self._pool.get(imgtype)
            if not queue:
                return None
            return queue.popleft()

    def _pick(self, imgtype: str) -> Illust:
        with self._dblock:
            try:
                (count,) = self._conn.execute(
                    f"SELECT COUNT(*) FROM {_table(imgtype)}"
                ).fetchone()
                if count == 0:
                    raise LookupError(f"no illustrations in {imgtype}")
                row = self._conn.execute(
                    f"SELECT {_COLUMNS} FROM {_table(imgtype)} ORDER BY pid LIMIT 1 OFFSET ?",
                    (random.randrange(count),),
                ).fetchone()
            except sqlite3.OperationalError as exc:
                raise LookupError(str(exc)) from exc
        pid, title, user_id, user_name, urls = row
        return Illust(pid, title, user_id, user_name, tuple(json.loads(urls)))

    def fill(self, imgtype: str, fetch: Callable[[Illust], Any]) -> int:
        """Prepare up to two more pictures with ``fetch``; return how many were queued."""
        times = min(self.maximum - self.size(imgtype), FILL_BATCH)
        added = 0
        for _ in range(times):
            try:
                illust = self._pick(imgtype)
            except LookupError:
                continue
            self.push(imgtype, fetch(illust))
            added += 1
        return added

    def add(self, imgtype: str, illust: Illust) -> None:
        """Store an illustration in a category, creating the category if needed."""
        with self._dblock, self._conn:
            self._conn.execute(
                f"CREATE TABLE IF NOT EXISTS {_table(imgtype)} ("
                "pid INTEGER PRIMARY KEY, title TEXT NOT NULL DEFAULT '', "
                "user_id INTEGER NOT NULL DEFAULT 0, user_name TEXT NOT NULL DEFAULT '', "
                "image_urls TEXT NOT NULL DEFAULT '[]')"
            )
            self._conn.execute(
                f"REPLACE INTO {_table(imgtype)} ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                (
                    illust.pid,
                    illust.title,
                    illust.user_id,
                    illust.user_name,
                    json.dumps(list(illust.image_urls)),
                ),
            )

    def remove(self, imgtype: str, pid: int) -> None:
        """Delete an illustration from a category."""
        with self._dblock, self._conn:
            self._conn.execute(f"DELETE FROM {_table(imgtype)} WHERE pid = ?", (int(pid),))

    def _count(self, imgtype: str) -> int:
        try:
            with self._dblock:
                (n,) = self._conn.execute(
                    f"SELECT COUNT(*) FROM {_table(imgtype)}"
                ).fetchone()
        except sqlite3.Error:
            return 0
        return int(n)

    def status_text(self) -> str:
        """Number of stored illustrations in every category."""
        return "[SetuTime]" + "".join(
            f"\n{name}: {self._count(name)}" for name in self.categories()
        )