import random

import pytest

from zeroplugins.tiangou import DiaryDB


def test_add_and_count(tmp_path):
    with DiaryDB(tmp_path / "t.db") as db:
        first = db.add("one")
        second = db.add("two")
        assert second > first
        assert db.count() == 2


def test_pick_returns_stored_entry(tmp_path):
    entries = ["a", "b", "c"]
    with DiaryDB(tmp_path / "t.db") as db:
        for e in entries:
            db.add(e)
        rng = random.Random(3)
        picks = {db.pick(rng) for _ in range(50)}
        assert picks <= set(entries)
        assert len(picks) == 3


def test_pick_empty_raises(tmp_path):
    with DiaryDB(tmp_path / "t.db") as db:
        with pytest.raises(LookupError):
            db.pick()


def test_persists_across_reopen(tmp_path):
    path = tmp_path / "t.db"
    with DiaryDB(path) as db:
        db.add("kept")
    with DiaryDB(path) as db:
        assert db.count() == 1
        assert db.pick() == "kept"