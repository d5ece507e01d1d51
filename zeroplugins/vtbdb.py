"""Storage of vtuber voice clips: streamers, clip categories and clips."""

from __future__ import annotations

import json
import random
import re
import sqlite3
import threading
from dataclasses import dataclass
from os import PathLike
from typing import Any

import requests

VTB_LIST_URL = "https://vtbkeyboard.moe/api/get_vtb_list"
VTB_PAGE_URL = "https://vtbkeyboard.moe/api/get_vtb_page?uid="

FIRST_HEADER = "请选择一个vtb并发送序号:\n"
SECOND_HEADER = "请选择一个语录类别并发送序号:\n"
THIRD_HEADER = "请选择一个语录并发送序号:\n"

_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/15.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64; rv:94.0) Gecko/20100101 Firefox/94.0",
    "Mozilla/5.0 (Windows NT 6.1; WOW64; rv:6.0) Gecko/20100101 Firefox/6.0",
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS first_category (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    first_category_index INTEGER NOT NULL DEFAULT 0,
    first_category_name TEXT NOT NULL DEFAULT '',
    first_category_uid TEXT NOT NULL DEFAULT '',
    first_category_description TEXT NOT NULL DEFAULT '',
    first_category_icon_path TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS second_category (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    second_category_index INTEGER NOT NULL DEFAULT 0,
    first_category_uid TEXT NOT NULL DEFAULT '',
    second_category_name TEXT NOT NULL DEFAULT '',
    second_category_author TEXT NOT NULL DEFAULT '',
    second_category_description TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS third_category (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    third_category_index INTEGER NOT NULL DEFAULT 0,
    second_category_index INTEGER NOT NULL DEFAULT 0,
    first_category_uid TEXT NOT NULL DEFAULT '',
    third_category_name TEXT NOT NULL DEFAULT '',
    third_category_path TEXT NOT NULL DEFAULT '',
    third_category_author TEXT NOT NULL DEFAULT '',
    third_category_description TEXT NOT NULL DEFAULT ''
);
"""

_FIRST_COLUMNS = (
    "id, first_category_index, first_category_name, first_category_uid, "
    "first_category_description, first_category_icon_path"
)
_SECOND_COLUMNS = (
    "id, second_category_index, first_category_uid, second_category_name, "
    "second_category_author, second_category_description"
)
_THIRD_COLUMNS = (
    "id, third_category_index, second_category_index, first_category_uid, "
    "third_category_name, third_category_path, third_category_author, "
    "third_category_description"
)

_ESCAPE = re.compile(r"\\u(.{0,4})", re.S)
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")


@dataclass(frozen=True)
class FirstCategory:
    """A streamer."""

    id: int = 0
    first_category_index: int = 0
    first_category_name: str = ""
    first_category_uid: str = ""
    first_category_description: str = ""
    first_category_icon_path: str = ""


@dataclass(frozen=True)
class SecondCategory:
    """A category of one streamer's clips."""

    id: int = 0
    second_category_index: int = 0
    first_category_uid: str = ""
    second_category_name: str = ""
    second_category_author: str = ""
    second_category_description: str = ""


@dataclass(frozen=True)
class ThirdCategory:
    """A single clip."""

    id: int = 0
    third_category_index: int = 0
    second_category_index: int = 0
    first_category_uid: str = ""
    third_category_name: str = ""
    third_category_path: str = ""
    third_category_author: str = ""
    third_category_description: str = ""


def decode_escaped(text: str) -> str:
    """Turn literal ``\\uXXXX`` sequences in ``text`` into the characters they name."""

    def convert(m: re.Match[str]) -> str:
        digits = m.group(1)
        if not _HEX4.fullmatch(digits):
            raise ValueError(f"invalid escape \\u{digits}")
        code = int(digits, 16)
        if 0xD800 <= code <= 0xDFFF:
            raise ValueError(f"invalid escape \\u{digits}")
        return chr(code)

    return _ESCAPE.sub(convert, text)


def _text(value: Any, *keys: str) -> str:
    for key in keys:
        if not isinstance(value, dict) or key not in value:
            return ""
        value = value[key]
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _list_at(value: Any, *keys: str) -> list[Any]:
    for key in keys:
        if not isinstance(value, dict) or key not in value:
            return []
        value = value[key]
    return value if isinstance(value, list) else []


def _get(session: requests.Session | None, url: str) -> str:
    client = session if session is not None else requests
    resp = client.get(url, headers={"User-Agent": random.choice(_USER_AGENTS)}, timeout=30)
    return resp.content.decode("utf-8", errors="replace")


class VtbDB:
    """Streamers, clip categories and clips in one SQLite file."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.executescript(_SCHEMA)
        self._conn.commit()
        self._lock = threading.RLock()

    def __enter__(self) -> "VtbDB":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def _first_by_index(self, first_index: int) -> FirstCategory | None:
        row = self._conn.execute(
            f"SELECT {_FIRST_COLUMNS} FROM first_category "
            "WHERE first_category_index = ? ORDER BY id LIMIT 1",
            (first_index,),
        ).fetchone()
        return FirstCategory(*row) if row else None

    def _uid_of(self, first_index: int) -> str:
        fc = self._first_by_index(first_index)
        return fc.first_category_uid if fc else ""

    def first_category_message(self) -> str:
        """Numbered list of all streamers."""
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_FIRST_COLUMNS} FROM first_category ORDER BY id"
            ).fetchall()
        return FIRST_HEADER + "".join(
            f"{fc.first_category_index}. {fc.first_category_name}\n"
            for fc in (FirstCategory(*r) for r in rows)
        )

    def second_category_message(self, first_index: int) -> str:
        """Numbered list of one streamer's categories, or "" when there are none."""
        with self._lock:
            uid = self._uid_of(first_index)
            rows = self._conn.execute(
                f"SELECT {_SECOND_COLUMNS} FROM second_category "
                "WHERE first_category_uid = ? ORDER BY id",
                (uid,),
            ).fetchall()
        if not rows:
            return ""
        return SECOND_HEADER + "".join(
            f"{sc.second_category_index}. {sc.second_category_name}\n"
            for sc in (SecondCategory(*r) for r in rows)
        )

    def third_category_message(self, first_index: int, second_index: int) -> str:
        """Numbered list of the clips in one category, or "" when there are none."""
        with self._lock:
            uid = self._uid_of(first_index)
            rows = self._conn.execute(
                f"SELECT {_THIRD_COLUMNS} FROM third_category "
                "WHERE first_category_uid = ? AND second_category_index = ? ORDER BY id",
                (uid, second_index),
            ).fetchall()
        if not rows:
            return ""
        return THIRD_HEADER + "".join(
            f"{tc.third_category_index}. {tc.third_category_name}\n"
            for tc in (ThirdCategory(*r) for r in rows)
        )

    def third_category(
        self, first_index: int, second_index: int, third_index: int
    ) -> ThirdCategory | None:
        """The clip at the given three indexes, or None."""
        with self._lock:
            uid = self._uid_of(first_index)
            row = self._conn.execute(
                f"SELECT {_THIRD_COLUMNS} FROM third_category WHERE first_category_uid = ? "
                "AND second_category_index = ? AND third_category_index = ? LIMIT 1",
                (uid, second_index, third_index),
            ).fetchone()
        return ThirdCategory(*row) if row else None

    def random_vtb(self, rng: random.Random | None = None) -> ThirdCategory | None:
        """A clip chosen at random, or None when there are no clips."""
        with self._lock:
            (count,) = self._conn.execute("SELECT COUNT(*) FROM third_category").fetchone()
            if count == 0:
                return None
            offset = (rng or random).randrange(count)
            row = self._conn.execute(
                f"SELECT {_THIRD_COLUMNS} FROM third_category ORDER BY id LIMIT 1 OFFSET ?",
                (offset,),
            ).fetchone()
        return ThirdCategory(*row)

    def first_category_by_uid(self, uid: str) -> FirstCategory | None:
        """The streamer with ``uid``, or None."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_FIRST_COLUMNS} FROM first_category "
                "WHERE first_category_uid = ? LIMIT 1",
                (uid,),
            ).fetchone()
        return FirstCategory(*row) if row else None

    def store_vtb_list(self, data: str | bytes) -> list[str]:
        """Store the streamer list JSON; return the uids in list order."""
        items = json.loads(data)
        if not isinstance(items, list):
            items = []
        uids: list[str] = []
        with self._lock, self._conn:
            for i, item in enumerate(items):
                uid = _text(item, "uid")
                values = (
                    i,
                    _text(item, "name"),
                    _text(item, "description"),
                    _text(item, "icon_path"),
                )
                exists = self._conn.execute(
                    "SELECT 1 FROM first_category WHERE first_category_uid = ? LIMIT 1",
                    (uid,),
                ).fetchone()
                if exists is None:
                    self._conn.execute(
                        "INSERT INTO first_category (first_category_index, first_category_name, "
                        "first_category_description, first_category_icon_path, "
                        "first_category_uid) VALUES (?, ?, ?, ?, ?)",
                        (*values, uid),
                    )
                else:
                    self._conn.execute(
                        "UPDATE first_category SET first_category_index = ?, "
                        "first_category_name = ?, first_category_description = ?, "
                        "first_category_icon_path = ? WHERE first_category_uid = ?",
                        (*values, uid),
                    )
                uids.append(uid)
        return uids

    def store_vtb_page(self, uid: str, data: str | bytes) -> None:
        """Store the categories and clips of one streamer from its page JSON."""
        page = json.loads(data)
        with self._lock, self._conn:
            for second_index, second in enumerate(_list_at(page, "data", "voices")):
                self._store_second(uid, second_index, second)
                for third_index, third in enumerate(_list_at(second, "voiceList")):
                    self._store_third(uid, second_index, third_index, third)

    def _store_second(self, uid: str, second_index: int, item: Any) -> None:
        values = (
            _text(item, "categoryName"),
            _text(item, "author"),
            _text(item, "categoryDescription", "zh-CN"),
        )
        exists = self._conn.execute(
            "SELECT 1 FROM second_category WHERE first_category_uid = ? "
            "AND second_category_index = ? LIMIT 1",
            (uid, second_index),
        ).fetchone()
        if exists is None:
            self._conn.execute(
                "INSERT INTO second_category (second_category_name, second_category_author, "
                "second_category_description, first_category_uid, second_category_index) "
                "VALUES (?, ?, ?, ?, ?)",
                (*values, uid, second_index),
            )
        else:
            self._conn.execute(
                "UPDATE second_category SET second_category_name = ?, "
                "second_category_author = ?, second_category_description = ? "
                "WHERE first_category_uid = ? AND second_category_index = ?",
                (*values, uid, second_index),
            )

    def _store_third(self, uid: str, second_index: int, third_index: int, item: Any) -> None:
        values = (
            _text(item, "name"),
            _text(item, "description", "zh-CN"),
            _text(item, "path"),
            _text(item, "author"),
        )
        key = (uid, second_index, third_index)
        exists = self._conn.execute(
            "SELECT 1 FROM third_category WHERE first_category_uid = ? "
            "AND second_category_index = ? AND third_category_index = ? LIMIT 1",
            key,
        ).fetchone()
        if exists is None:
            self._conn.execute(
                "INSERT INTO third_category (third_category_name, third_category_description, "
                "third_category_path, third_category_author, first_category_uid, "
                "second_category_index, third_category_index) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (*values, *key),
            )
        else:
            self._conn.execute(
                "UPDATE third_category SET third_category_name = ?, "
                "third_category_description = ?, third_category_path = ?, "
                "third_category_author = ? WHERE first_category_uid = ? "
                "AND second_category_index = ? AND third_category_index = ?",
                (*values, *key),
            )

    def fetch_vtb_list(self, session: requests.Session | None = None) -> list[str]:
        """Download and store the streamer list; return the uids."""
        return self.store_vtb_list(decode_escaped(_get(session, VTB_LIST_URL)))

    def fetch_vtb(self, uid: str, session: requests.Session | None = None) -> None:
        """Download and store the clips of one streamer."""
        self.store_vtb_page(uid, decode_escaped(_get(session, VTB_PAGE_URL + uid)))