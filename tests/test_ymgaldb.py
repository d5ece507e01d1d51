import random
from types import SimpleNamespace

import pytest

from zeroplugins.ymgaldb import (
    CG_TYPE,
    CG_URL,
    EMOTICON_TYPE,
    EMOTICON_URL,
    WEB_PIC_URL,
    YmgalDB,
    parse_cg_page,
    parse_emoticon_page,
    parse_page_number,
    parse_picset_ids,
    update_pictures,
)


def search_page(ids, last_page):
    links = "".join(
        f'<div><div><a href="/co/picset/{i}">set</a></div></div>' for i in ids
    )
    return (
        "<html><body>"
        f'<div id="pager-box"><div><a class="icon item">{last_page}</a>'
        '<a class="icon item pager-next">next</a></div></div>'
        f'<div id="picset-result-list"><ul>{links}</ul></div>'
        "</body></html>"
    )


def cg_page(title, urls):
    items = "".join(f'<div data-x="p" data-src="{u}"></div>' for u in urls)
    return (
        "<html><head>"
        f'<meta name="name" content="{title}">'
        f'<meta name="description" content="about {title}">'
        "</head><body>"
        '<div class="meta-info"><div class="meta-right"><span>by</span>'
        f"<span>{len(urls)} pictures</span></div></div>"
        '<div id="main-picset-warp"><div><div>head</div><div><div>'
        f'<div class="swiper-wrapper">{items}</div>'
        "</div></div></div></div>"
        "</body></html>"
    )


def emoticon_page(title, urls):
    items = "".join(f'<div><img alt="e" src="{u}"></div>' for u in urls)
    return (
        "<html><head>"
        f'<meta name="name" content="{title}">'
        f'<meta name="description" content="about {title}">'
        "</head><body>"
        '<div class="meta-info"><div class="meta-right"><span>by</span>'
        f"<span>{len(urls)} pictures</span></div></div>"
        '<div id="main-picset-warp"><div>'
        f'<div class="stream-list">{items}</div>'
        "</div></div>"
        "</body></html>"
    )


class FakeSession:
    def __init__(self, pages):
        self.pages = pages
        self.requested = []

    def get(self, url, **kwargs):
        self.requested.append(url)
        return SimpleNamespace(content=self.pages[url].encode("utf-8"), status_code=200)


@pytest.fixture
def db(tmp_path):
    with YmgalDB(tmp_path / "ymgal.db") as d:
        yield d


def test_upsert_and_get(db):
    db.upsert(7, "T", CG_TYPE, "D", "a,b")
    got = db.get_by_id("7")
    assert (got.id, got.title, got.picture_type, got.picture_list) == (7, "T", CG_TYPE, "a,b")
    db.upsert(7, "T2", CG_TYPE, "D2", "c")
    assert db.get_by_id(7).title == "T2"
    assert db.get_by_id(7).picture_list == "c"


def test_get_missing(db):
    assert db.get_by_id(1) is None


def test_random_filters_by_type(db):
    db.upsert(1, "cg", CG_TYPE, "", "x")
    db.upsert(2, "emo", EMOTICON_TYPE, "", "y")
    rng = random.Random(5)
    for _ in range(5):
        assert db.random(EMOTICON_TYPE, rng).id == 2
    assert db.random("none", rng) is None


def test_search_title_or_description(db):
    db.upsert(1, "Summer", CG_TYPE, "beach scene", "x")
    db.upsert(2, "Winter", CG_TYPE, "snow", "y")
    db.upsert(3, "Summer", EMOTICON_TYPE, "", "z")
    rng = random.Random(0)
    assert db.search(CG_TYPE, "beach", rng).id == 1
    assert db.search(CG_TYPE, "Wint", rng).id == 2
    assert db.search(EMOTICON_TYPE, "Summer", rng).id == 3
    assert db.search(CG_TYPE, "autumn", rng) is None


def test_parse_page_number():
    assert parse_page_number(search_page([1], 12)) == 12


def test_parse_page_number_missing():
    with pytest.raises(ValueError):
        parse_page_number("<html><body></body></html>")


def test_parse_picset_ids():
    assert parse_picset_ids(search_page([101, 102], 1)) == ["101", "102"]


def test_parse_cg_page():
    urls = ["https://img.example.com/1.jpg", "https://img.example.com/2.jpg"]
    assert parse_cg_page(cg_page("Title A", urls)) == ("Title A", "about Title A", ",".join(urls))


def test_parse_emoticon_page():
    urls = ["https://img.example.com/e.png"]
    assert parse_emoticon_page(emoticon_page("Stickers", urls)) == (
        "Stickers",
        "about Stickers",
        urls[0],
    )


def pages():
    return {
        CG_URL + "1": search_page([101, 102], 1),
        EMOTICON_URL + "1": search_page([201], 1),
        WEB_PIC_URL + "101": cg_page("A", ["https://img.example.com/a.jpg"]),
        WEB_PIC_URL + "102": cg_page("B", ["https://img.example.com/b.jpg"]),
        WEB_PIC_URL + "201": emoticon_page("E", ["https://img.example.com/e.png"]),
    }


def test_update_pictures_stores_new_sets(db):
    assert update_pictures(db, FakeSession(pages()), delay=0) == 3
    assert db.get_by_id(101).picture_type == CG_TYPE
    assert db.get_by_id(102).picture_list == "https://img.example.com/b.jpg"
    assert db.get_by_id(201).picture_type == EMOTICON_TYPE


def test_update_pictures_stops_at_known_sets(db):
    update_pictures(db, FakeSession(pages()), delay=0)
    session = FakeSession(pages())
    assert update_pictures(db, session, delay=0) == 0
    assert not any(url.startswith(WEB_PIC_URL) for url in session.requested)