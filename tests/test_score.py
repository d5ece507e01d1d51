from datetime import datetime, timedelta

import pytest

from zeroplugins.score import (
    LEVELS,
    SCORE_MAX,
    ScoreDB,
    get_hour_word,
    get_level,
    next_level_score,
    sign_in,
)


@pytest.fixture
def db(tmp_path):
    database = ScoreDB(tmp_path / "score.db")
    yield database
    database.close()


NOW = datetime(2024, 5, 1, 9, 30)


def test_get_score_creates_zero_record(db):
    assert db.get_score(42).score == 0
    assert [r.uid for r in db.top_scores(10)] == [42]


def test_set_score_round_trip(db):
    db.set_score(7, 55)
    assert db.get_score(7).score == 55
    db.set_score(7, 60)
    assert db.get_score(7).score == 60


def test_top_scores_sorted_and_limited(db):
    for uid, score in [(1, 5), (2, 50), (3, 20), (4, 100)]:
        db.set_score(uid, score)
    top = db.top_scores(3)
    assert len(top) == 3
    scores = [r.score for r in top]
    assert scores == sorted(scores, reverse=True)
    assert top[0].uid == 4


def test_sign_in_count_round_trip(db):
    db.set_sign_in_count(9, 4)
    assert db.get_sign_in(9).count == 4


def test_first_sign_in_awards_points(db):
    before = db.get_score(1).score
    result = sign_in(db, 1, NOW)
    assert not result.already_signed
    assert result.score == before + result.added
    assert db.get_score(1).score == result.score
    assert result.level == get_level(result.score)


def test_second_sign_in_same_day_is_rejected(db):
    first = sign_in(db, 1, NOW)
    second = sign_in(db, 1, NOW + timedelta(hours=2))
    assert second.already_signed
    assert second.score == first.score
    assert db.get_score(1).score == first.score


def test_sign_in_next_day_allowed(db):
    first = sign_in(db, 1, NOW)
    second = sign_in(db, 1, NOW + timedelta(days=1))
    assert not second.already_signed
    assert second.score == first.score + second.added
    assert second.count == first.count + 1


def test_sign_in_caps_score(db):
    db.set_score(5, SCORE_MAX)
    result = sign_in(db, 5, NOW)
    assert result.capped
    assert result.score == SCORE_MAX
    assert db.get_score(5).score == SCORE_MAX


def test_sign_in_words(db):
    result = sign_in(db, 3, NOW)
    assert result.hour_word == get_hour_word(NOW)
    assert result.date_word == NOW.strftime("%m/%d")


@pytest.mark.parametrize(
    "hour, word",
    [(6, "早上好"), (11, "早上好"), (12, "中午好"), (14, "下午好"), (19, "晚上好"), (23, "晚上好"), (0, "凌晨好"), (5, "凌晨好")],
)
def test_hour_word(hour, word):
    assert get_hour_word(datetime(2024, 1, 1, hour)) == word


def test_level_thresholds_round_trip():
    for level, threshold in enumerate(LEVELS):
        assert get_level(threshold) == level


def test_level_between_thresholds():
    for level in range(len(LEVELS) - 1):
        lo, hi = LEVELS[level], LEVELS[level + 1]
        for count in range(lo, hi):
            assert get_level(count) == level


def test_level_out_of_range():
    assert get_level(-1) == -1
    assert get_level(SCORE_MAX + 1) == -1


def test_next_level_score():
    for level in range(len(LEVELS) - 1):
        assert next_level_score(level) == LEVELS[level + 1]
    assert next_level_score(len(LEVELS) - 1) == SCORE_MAX