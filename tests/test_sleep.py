from datetime import datetime, timedelta

import pytest

from zeroplugins.sleep import (
    SleepDB,
    good_morning_text,
    good_night_text,
    is_evening,
    is_morning,
    time_duration,
)


@pytest.fixture
def db(tmp_path):
    database = SleepDB(tmp_path / "manage.db")
    yield database
    database.close()


NIGHT = datetime(2024, 5, 1, 22, 0, 0)


def test_first_sleep_has_no_elapsed(db):
    position, elapsed = db.sleep(100, 1, NIGHT)
    assert elapsed == timedelta(0)
    assert position == 1


def test_repeated_sleep_reports_elapsed(db):
    db.sleep(100, 1, NIGHT)
    later = NIGHT + timedelta(minutes=40)
    _, elapsed = db.sleep(100, 1, later)
    assert elapsed == later - NIGHT


def test_sleep_rank_increases_in_group(db):
    p1, _ = db.sleep(100, 1, NIGHT)
    p2, _ = db.sleep(100, 2, NIGHT + timedelta(minutes=30))
    assert p2 == p1 + 1


def test_sleep_rank_is_per_group(db):
    p1, _ = db.sleep(100, 1, NIGHT)
    db.sleep(100, 2, NIGHT + timedelta(minutes=30))
    other, _ = db.sleep(200, 3, NIGHT + timedelta(minutes=45))
    assert other == p1


def test_sleep_after_midnight_counts_previous_evening(db):
    p1, _ = db.sleep(100, 1, NIGHT)
    p2, _ = db.sleep(100, 2, NIGHT + timedelta(hours=3))
    assert p2 == p1 + 1


def test_get_up_counts_from_six(db):
    db.get_up(100, 1, datetime(2024, 5, 2, 5, 0, 0))
    pb, _ = db.get_up(100, 2, datetime(2024, 5, 2, 7, 0, 0))
    pc, _ = db.get_up(100, 3, datetime(2024, 5, 2, 7, 30, 0))
    assert pb == 1
    assert pc == pb + 1


def test_get_up_reports_sleep_length(db):
    db.sleep(100, 1, NIGHT)
    morning = datetime(2024, 5, 2, 7, 15, 0)
    _, elapsed = db.get_up(100, 1, morning)
    assert elapsed == morning - NIGHT


@pytest.mark.parametrize("h, m, s", [(0, 0, 0), (7, 5, 9), (25, 59, 59)])
def test_time_duration_round_trip(h, m, s):
    assert time_duration(timedelta(hours=h, minutes=m, seconds=s)) == (h, m, s)


def test_time_duration_drops_fractions():
    assert time_duration(timedelta(seconds=3, milliseconds=999)) == (0, 0, 3)


def test_time_duration_negative_truncates_toward_zero():
    assert time_duration(-timedelta(minutes=90)) == (-1, -30, 0)


@pytest.mark.parametrize("hour, expected", [(5, False), (6, True), (12, True), (13, False)])
def test_is_morning(hour, expected):
    assert is_morning(datetime(2024, 1, 1, hour)) is expected


@pytest.mark.parametrize("hour, expected", [(20, False), (21, True), (0, True), (3, True), (4, False)])
def test_is_evening(hour, expected):
    assert is_evening(datetime(2024, 1, 1, hour)) is expected


def test_morning_text_without_duration():
    text = good_morning_text(3, timedelta(0))
    assert "第3个起床" in text
    assert "睡眠时长" not in text


def test_morning_text_with_duration():
    text = good_morning_text(2, timedelta(hours=7, minutes=5, seconds=9))
    assert "7时5分9秒" in text
    assert "第2个起床" in text


def test_night_text_long_duration_is_short_form():
    text = good_night_text(4, timedelta(hours=30))
    assert "清醒时长" not in text
    assert "第4个睡觉" in text


def test_night_text_with_duration():
    text = good_night_text(1, timedelta(hours=2, seconds=1))
    assert "清醒时长为2时0分1秒" in text