"""Good-morning and good-night bookkeeping per group."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta
from os import PathLike

_SCHEMA = """
CREATE TABLE IF NOT EXISTS sleep_manage (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    group_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    sleep_time TEXT NOT NULL
);
"""

_HOUR_US = 3600 * 1_000_000
_MINUTE_US = 60 * 1_000_000
_SECOND_US = 1_000_000


def _stamp(t: datetime) -> str:
    return t.isoformat(timespec="microseconds")


class SleepDB:
    """Last sleep or wake time of every user in every group."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._conn = sqlite3.connect(str(path))
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def __enter__(self) -> "SleepDB":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def sleep(self, gid: int, uid: int, now: datetime | None = None) -> tuple[int, timedelta]:
        """Record a good night; return the rank tonight and the time awake."""
        now = now or datetime.now()
        back = timedelta(minutes=now.minute, seconds=now.second)
        if now.hour >= 21:
            since = now - timedelta(hours=now.hour - 21) - back
        elif now.hour <= 3:
            since = now - timedelta(hours=now.hour + 3) - back
        else:
            since = datetime.min
        return self._touch(gid, uid, now, since)

    def get_up(self, gid: int, uid: int, now: datetime | None = None) -> tuple[int, timedelta]:
        """Record a good morning; return the rank today and the time asleep."""
        now = now or datetime.now()
        since = now - timedelta(hours=now.hour - 6, minutes=now.minute, seconds=now.second)
        return self._touch(gid, uid, now, since)

    def _touch(
        self, gid: int, uid: int, now: datetime, since: datetime
    ) -> tuple[int, timedelta]:
        elapsed = timedelta(0)
        with self._conn:
            row = self._conn.execute(
                "SELECT sleep_time FROM sleep_manage WHERE group_id = ? AND user_id = ? "
                "ORDER BY id LIMIT 1",
                (gid, uid),
            ).fetchone()
            if row is None:
                self._conn.execute(
                    "INSERT INTO sleep_manage (group_id, user_id, sleep_time) VALUES (?, ?, ?)",
                    (gid, uid, _stamp(now)),
                )
            else:
                elapsed = now - datetime.fromisoformat(row[0])
                self._conn.execute(
                    "UPDATE sleep_manage SET sleep_time = ? WHERE group_id = ? AND user_id = ?",
                    (_stamp(now), gid, uid),
                )
        (position,) = self._conn.execute(
            "SELECT COUNT(*) FROM sleep_manage "
            "WHERE group_id = ? AND sleep_time <= ? AND sleep_time >= ?",
            (gid, _stamp(now), _stamp(since)),
        ).fetchone()
        return position, elapsed


def time_duration(delta: timedelta) -> tuple[int, int, int]:
    """Split ``delta`` into hours, minutes and seconds, truncating toward zero."""
    total = delta // timedelta(microseconds=1)
    sign = -1 if total < 0 else 1
    rest = abs(total)
    hours, rest = divmod(rest, _HOUR_US)
    minutes, rest = divmod(rest, _MINUTE_US)
    seconds = rest // _SECOND_US
    return sign * hours, sign * minutes, sign * seconds


def is_morning(now: datetime | None = None) -> bool:
    """Good mornings count from 06:00 to 12:59."""
    hour = (now or datetime.now()).hour
    return 6 <= hour <= 12


def is_evening(now: datetime | None = None) -> bool:
    """Good nights count from 21:00 to 03:59."""
    hour = (now or datetime.now()).hour
    return hour >= 21 or hour <= 3


def _no_duration(hour: int, minute: int, second: int) -> bool:
    return (hour == 0 and minute == 0 and second == 0) or hour >= 24


def good_morning_text(position: int, elapsed: timedelta) -> str:
    hour, minute, second = time_duration(elapsed)
    if _no_duration(hour, minute, second):
        return f"早安成功！你是今天第{position}个起床的"
    return f"早安成功！你的睡眠时长为{hour}时{minute}分{second}秒,你是今天第{position}个起床的"


def good_night_text(position: int, elapsed: timedelta) -> str:
    hour, minute, second = time_duration(elapsed)
    if _no_duration(hour, minute, second):
        return f"晚安成功！你是今天第{position}个睡觉的"
    return f"晚安成功！你的清醒时长为{hour}时{minute}分{second}秒,你是今天第{position}个睡觉的"