"""Galgame picture sets: local storage and scraping of the picture site."""

from __future__ import annotations

import random
import re
import sqlite3
import threading
import time
from dataclasses import dataclass
from os import PathLike
from urllib.parse import quote_plus

import requests
from lxml import html as lxml_html

WEB_URL = "https://www.ymgal.games"
CG_TYPE = "Gal CG"
EMOTICON_TYPE = "其他"
WEB_PIC_URL = WEB_URL + "/co/picset/"
CG_URL = WEB_URL + "/search?type=picset&sort=default&category=" + quote_plus(CG_TYPE) + "&page="
EMOTICON_URL = (
    WEB_URL + "/search?type=picset&sort=default&category=" + quote_plus(EMOTICON_TYPE) + "&page="
)

PAGE_NUMBER_XPATH = (
    "//*[@id='pager-box']/div/a[@class='icon item pager-next']/preceding-sibling::a[1]/text()"
)
_PICSET_XPATH = "//*[@id='picset-result-list']/ul/div/div[1]/a"
_TITLE_XPATH = "//meta[@name='name']"
_DESCRIPTION_XPATH = "//meta[@name='description']"
_COUNT_XPATH = "//div[@class='meta-info']/div[@class='meta-right']/span[2]/text()"
_CG_ITEM_XPATH = (
    "//*[@id='main-picset-warp']/div/div[2]/div/div[@class='swiper-wrapper']/div[{}]"
)
_EMOTICON_ITEM_XPATH = "//*[@id='main-picset-warp']/div/div[@class='stream-list']/div[{}]/img"

_NUMBER = re.compile(r"\d+")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS ymgal (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    picture_type TEXT NOT NULL DEFAULT '',
    picture_description VARCHAR(1024) NOT NULL DEFAULT '',
    picture_list VARCHAR(20000) NOT NULL DEFAULT ''
);
"""

_COLUMNS = "id, title, picture_type, picture_description, picture_list"


@dataclass(frozen=True)
class Ymgal:
    """One picture set and the comma-separated URLs of its pictures."""

    id: int = 0
    title: str = ""
    picture_type: str = ""
    picture_description: str = ""
    picture_list: str = ""


class YmgalDB:
    """Picture sets in one SQLite file."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.executescript(_SCHEMA)
        self._conn.commit()
        self._lock = threading.RLock()

    def __enter__(self) -> "YmgalDB":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def upsert(
        self,
        id_: int,
        title: str,
        picture_type: str,
        description: str,
        picture_list: str,
    ) -> None:
        """Insert the set or replace its fields."""
        with self._lock, self._conn:
            self._conn.execute(
                f"INSERT INTO ymgal ({_COLUMNS}) VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET title = excluded.title, "
                "picture_type = excluded.picture_type, "
                "picture_description = excluded.picture_description, "
                "picture_list = excluded.picture_list",
                (int(id_), title, picture_type, description, picture_list),
            )

    def get_by_id(self, id_: int | str) -> Ymgal | None:
        """The set with ``id_``, or None."""
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM ymgal WHERE id = ?", (int(id_),)
            ).fetchone()
        return Ymgal(*row) if row else None

    def _pick(self, where: str, params: tuple, rng: random.Random | None) -> Ymgal | None:
        with self._lock:
            (count,) = self._conn.execute(
                f"SELECT COUNT(*) FROM ymgal WHERE {where}", params
            ).fetchone()
            if count == 0:
                return None
            offset = (rng or random).randrange(count)
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM ymgal WHERE {where} ORDER BY id LIMIT 1 OFFSET ?",
                (*params, offset),
            ).fetchone()
        return Ymgal(*row)

    def random(self, picture_type: str, rng: random.Random | None = None) -> Ymgal | None:
        """A set of the given type chosen at random, or None."""
        return self._pick("picture_type = ?", (picture_type,), rng)

    def search(
        self, picture_type: str, key: str, rng: random.Random | None = None
    ) -> Ymgal | None:
        """A random set of the type whose title or description contains ``key``."""
        pattern = "%" + key + "%"
        return self._pick(
            "picture_type = ? AND (picture_description LIKE ? OR title LIKE ?)",
            (picture_type, pattern, pattern),
            rng,
        )


def _parse(document: str | bytes):
    data = document.encode("utf-8") if isinstance(document, str) else document
    return lxml_html.fromstring(data, parser=lxml_html.HTMLParser(encoding="utf-8"))


def _one(doc, xpath: str):
    found = doc.xpath(xpath)
    if not found:
        raise ValueError(f"nothing found at {xpath}")
    return found[0]


def _attr(element, index: int) -> str:
    values = list(element.attrib.values())
    if len(values) <= index:
        raise ValueError(f"element <{element.tag}> has no attribute number {index}")
    return values[index]


def parse_page_number(html: str | bytes) -> int:
    """Number of the last result page in a search page."""
    return int(str(_one(_parse(html), PAGE_NUMBER_XPATH)))


def parse_picset_ids(html: str | bytes) -> list[str]:
    """Ids of the picture sets listed in a search page."""
    ids = []
    for link in _parse(html).xpath(_PICSET_XPATH):
        m = _NUMBER.search(_attr(link, 0))
        ids.append(m.group(0) if m else "")
    return ids


def _parse_set(html: str | bytes, item_xpath: str) -> tuple[str, str, str]:
    doc = _parse(html)
    title = _attr(_one(doc, _TITLE_XPATH), 1)
    description = _attr(_one(doc, _DESCRIPTION_XPATH), 1)
    m = _NUMBER.search(str(_one(doc, _COUNT_XPATH)))
    if m is None:
        raise ValueError("picture count not found")
    urls = [_attr(_one(doc, item_xpath.format(i)), 1) for i in range(1, int(m.group(0)) + 1)]
    return title, description, ",".join(urls)


def parse_cg_page(html: str | bytes) -> tuple[str, str, str]:
    """Title, description and picture list of a CG set page."""
    return _parse_set(html, _CG_ITEM_XPATH)


def parse_emoticon_page(html: str | bytes) -> tuple[str, str, str]:
    """Title, description and picture list of a sticker set page."""
    return _parse_set(html, _EMOTICON_ITEM_XPATH)


def _fetch(session: requests.Session | None, url: str) -> bytes:
    client = session if session is not None else requests
    return client.get(url, timeout=30).content


def update_pictures(
    db: YmgalDB, session: requests.Session | None = None, delay: float = 0.5
) -> int:
    """Scrape sets newer than the ones already stored; return how many were stored."""
    cg_pages = parse_page_number(_fetch(session, CG_URL + "1"))
    emoticon_pages = parse_page_number(_fetch(session, EMOTICON_URL + "1"))

    sources = (
        (CG_TYPE, CG_URL, cg_pages, parse_cg_page),
        (EMOTICON_TYPE, EMOTICON_URL, emoticon_pages, parse_emoticon_page),
    )
    id_lists: dict[str, list[str]] = {}
    for picture_type, base, pages, _ in sources:
        ids: list[str] = []
        for page in range(1, pages + 1):
            ids.extend(parse_picset_ids(_fetch(session, base + str(page))))
            time.sleep(delay)
        id_lists[picture_type] = ids

    stored = 0
    for picture_type, _, _, parse in sources:
        for pic_id in reversed(id_lists[picture_type]):
            number = int(pic_id)
            existing = db.get_by_id(number)
            if existing is not None and existing.picture_list:
                break
            title, description, picture_list = parse(_fetch(session, WEB_PIC_URL + pic_id))
            db.upsert(number, title, picture_type, description, picture_list)
            stored += 1
            time.sleep(delay)
    return stored