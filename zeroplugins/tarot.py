"""Tarot card draws, card explanations and spreads."""

from __future__ import annotations

import json
import random
from collections.abc import Mapping
from dataclasses import dataclass, field

BED = "https://gitcode.net/shudorcl/zbp-tarot/-/raw/master/"
REVERSE_DIR = "Reverse/"
POSITIONS = ("『正位』", "『逆位』")
REASONS = ("您抽到的是~\n", "锵锵锵，塔罗牌的预言是~\n", "诶，让我看看您抽到了~\n")
MAX_DRAW = 20
MAJOR_COUNT = 22


class TarotError(Exception):
    """A request the tarot reader cannot serve."""


@dataclass(frozen=True)
class CardInfo:
    """Meanings of a card and where its picture lives."""

    description: str = ""
    reverse_description: str = ""
    img_url: str = ""


@dataclass(frozen=True)
class Card:
    """A named tarot card."""

    name: str
    info: CardInfo = field(default_factory=CardInfo)


@dataclass(frozen=True)
class Formation:
    """A spread: how many cards it takes and what each position stands for."""

    cards_num: int
    is_cut: bool = False
    represent: tuple[tuple[str, ...], ...] = ()


def image_url(card: Card, reversed_: bool) -> str:
    """Remote URL of the card's picture, upright or reversed."""
    return BED + (REVERSE_DIR if reversed_ else "") + card.info.img_url


def image_name(name: str, reversed_: bool) -> str:
    """Cache name of the card's picture, upright or reversed."""
    return REVERSE_DIR[:-1] + name if reversed_ else name


@dataclass(frozen=True)
class DrawnCard:
    """A card as it came out of the deck, upright or reversed."""

    card: Card
    reversed_: bool

    @property
    def position(self) -> str:
        return POSITIONS[1] if self.reversed_ else POSITIONS[0]

    @property
    def description(self) -> str:
        info = self.card.info
        return info.reverse_description if self.reversed_ else info.description

    @property
    def image_url(self) -> str:
        return image_url(self.card, self.reversed_)

    @property
    def image_name(self) -> str:
        return image_name(self.card.name, self.reversed_)

    def describe(self) -> str:
        """Position, name and meaning of the card."""
        return f"{self.position}的『{self.card.name}』\n其释义为: {self.description}"


def card_range(card_type: str) -> tuple[int, int]:
    """First card index and number of cards for a card type."""
    if "小" in card_type:
        return 22, 55
    if card_type == "混合":
        return 0, 77
    return 0, MAJOR_COUNT


def _check_count(n: int) -> None:
    if n <= 0:
        raise TarotError("张数必须为正")
    if n > MAX_DRAW:
        raise TarotError("抽取张数过多")


def parse_draw_count(text: str) -> int:
    """Number of cards in a phrase such as "3张"; an empty phrase means one."""
    if not text:
        return 1
    digits = text[:-1] if text.endswith("张") else text
    try:
        n = int(digits)
    except ValueError:
        raise TarotError(f"invalid card count {text!r}") from None
    _check_count(n)
    return n


class Deck:
    """All cards and spreads known to the reader."""

    def __init__(self, cards: Mapping[str, Card], formations: Mapping[str, Formation]) -> None:
        self._cards = dict(cards)
        self._formations = dict(formations)
        self._by_name = {card.name: card.info for card in self._cards.values()}

    @property
    def formation_names(self) -> list[str]:
        return list(self._formations)

    def _card(self, index: int) -> Card:
        try:
            return self._cards[str(index)]
        except KeyError:
            raise TarotError(f"no card numbered {index}") from None

    def major_arcana_names(self) -> list[str]:
        """Names of the 22 major arcana in order."""
        return [self._card(i).name for i in range(MAJOR_COUNT)]

    def explain(self, name: str) -> str:
        """Both meanings of the card called ``name``."""
        info = self._by_name.get(name)
        if info is None:
            raise TarotError(f"没有找到{name}噢~")
        return (
            f"{name}的含义是~\n『正位』:{info.description}"
            f"\n『逆位』:{info.reverse_description}"
        )

    def card_list_text(self) -> str:
        """Overview of all card names."""
        major = self.major_arcana_names()
        return (
            "塔罗牌列表\n大阿尔卡纳:\n"
            + " ".join(major[:7])
            + "\n"
            + " ".join(major[7:14])
            + "\n"
            + " ".join(major[14:22])
            + "\n小阿尔卡纳:\n[圣杯|星币|宝剑|权杖] [0-10|侍从|骑士|王后|国王]"
        )

    def _draw_distinct(self, n: int, start: int, length: int, rng: random.Random) -> list[DrawnCard]:
        if n > length:
            raise TarotError("抽取张数过多")
        drawn = []
        for j in rng.sample(range(length), n):
            drawn.append(DrawnCard(self._card(j + start), rng.randrange(2) == 1))
        return drawn

    def draw(self, n: int, card_type: str, rng: random.Random | None = None) -> list[DrawnCard]:
        """Draw ``n`` distinct cards of the given type."""
        _check_count(n)
        rng = rng or random.Random()
        start, length = card_range(card_type)
        return self._draw_distinct(n, start, length, rng)

    def formation_reading(
        self,
        formation_name: str,
        card_type: str,
        name: str,
        rng: random.Random | None = None,
    ) -> tuple[list[DrawnCard], str]:
        """Lay out a spread for ``name``; return the cards and the reading text."""
        formation = self._formations.get(formation_name)
        if formation is None:
            raise TarotError(
                f"没有找到{formation_name}噢~\n现有牌阵列表: \n" + "\n".join(self._formations)
            )
        rng = rng or random.Random()
        start, length = card_range(card_type)
        cards = self._draw_distinct(formation.cards_num, start, length, rng)
        parts = [f"{name}---{formation_name}\n"]
        for label, drawn in zip(formation.represent[0], cards):
            parts.append(
                f"{label}:{drawn.position}的『{drawn.card.name}』\n其释义为: \n{drawn.description}\n"
            )
        return cards, "".join(parts)


def load_deck(cards_json: str | bytes, formations_json: str | bytes) -> Deck:
    """Build a deck from the card and spread JSON documents."""
    cards = {}
    for key, raw in json.loads(cards_json).items():
        info = raw.get("info") or {}
        cards[key] = Card(
            name=raw.get("name", ""),
            info=CardInfo(
                description=info.get("description", ""),
                reverse_description=info.get("reverseDescription", ""),
                img_url=info.get("imgUrl", ""),
            ),
        )
    formations = {
        key: Formation(
            cards_num=int(raw.get("cards_num", 0)),
            is_cut=bool(raw.get("is_cut", False)),
            represent=tuple(tuple(row) for row in raw.get("represent", ())),
        )
        for key, raw in json.loads(formations_json).items()
    }
    return Deck(cards, formations)