import json
import random

import pytest

from zeroplugins.tarot import (
    BED,
    Card,
    CardInfo,
    DrawnCard,
    TarotError,
    card_range,
    image_name,
    image_url,
    load_deck,
    parse_draw_count,
)


def _cards_json():
    return json.dumps(
        {
            str(i): {
                "name": f"card{i}",
                "info": {
                    "description": f"up{i}",
                    "reverseDescription": f"down{i}",
                    "imgUrl": f"img{i}.png",
                },
            }
            for i in range(77)
        }
    )


def _formations_json():
    return json.dumps(
        {"圣三角": {"cards_num": 3, "is_cut": False, "represent": [["过去", "现在", "未来"]]}}
    )


@pytest.fixture
def deck():
    return load_deck(_cards_json(), _formations_json())


def test_major_arcana_names(deck):
    assert deck.major_arcana_names() == [f"card{i}" for i in range(22)]


def test_card_range():
    assert card_range("塔罗牌") == (0, 22)
    assert card_range("小阿尔卡纳") == (22, 55)
    assert card_range("混合") == (0, 77)


def test_parse_draw_count():
    assert parse_draw_count("") == 1
    assert parse_draw_count("3张") == 3
    with pytest.raises(TarotError):
        parse_draw_count("0张")
    with pytest.raises(TarotError):
        parse_draw_count("21张")


def test_image_helpers():
    card = Card("愚者", CardInfo("a", "b", "fool.png"))
    assert image_url(card, False) == BED + "fool.png"
    assert image_url(card, True) == BED + "Reverse/fool.png"
    assert image_name("愚者", True) == "Reverse愚者"
    assert image_name("愚者", False) == "愚者"


def test_describe_uses_orientation():
    card = Card("c", CardInfo("upright", "reversed", "x.png"))
    assert DrawnCard(card, False).describe() == "『正位』的『c』\n其释义为: upright"
    assert DrawnCard(card, True).describe() == "『逆位』的『c』\n其释义为: reversed"


def test_draw_minor_distinct(deck):
    drawn = deck.draw(20, "小阿卡纳", random.Random(1))
    names = [d.card.name for d in drawn]
    assert len(set(names)) == 20
    assert all(22 <= int(n[4:]) < 77 for n in names)


def test_draw_single_major(deck):
    (one,) = deck.draw(1, "塔罗牌", random.Random(5))
    assert int(one.card.name[4:]) < 22
    idx = one.card.name[4:]
    assert one.description == (f"down{idx}" if one.reversed_ else f"up{idx}")


def test_draw_rejects_bad_counts(deck):
    with pytest.raises(TarotError):
        deck.draw(0, "塔罗牌")
    with pytest.raises(TarotError):
        deck.draw(21, "塔罗牌")


def test_explain(deck):
    assert deck.explain("card3") == "card3的含义是~\n『正位』:up3\n『逆位』:down3"
    with pytest.raises(TarotError):
        deck.explain("nothing")


def test_card_list_text(deck):
    text = deck.card_list_text()
    assert text.startswith("塔罗牌列表\n大阿尔卡纳:\n")
    assert "card0 card1" in text
    assert "card21" in text


def test_formation_reading(deck):
    cards, text = deck.formation_reading("圣三角", "塔罗", "alice", random.Random(2))
    assert len(cards) == 3
    assert text.startswith("alice---圣三角\n")
    for label, drawn in zip(["过去", "现在", "未来"], cards):
        assert f"{label}:{drawn.position}的『{drawn.card.name}』" in text


def test_formation_unknown(deck):
    with pytest.raises(TarotError, match="圣三角"):
        deck.formation_reading("missing", "塔罗", "alice")