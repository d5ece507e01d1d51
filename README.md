# zeroplugins

The logic behind a set of chat-bot plugins, as plain Python modules. None of
them talks to a messaging protocol: they take values in, return text, data or
images, and keep their state in SQLite files. Call them from whatever bot
framework you use.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

| Module | What it does |
| --- | --- |
| `zeroplugins.score` | Daily sign-in with a score cap of 120 and levels (`ScoreDB`, `sign_in`, `get_level`, `next_level_score`, `get_hour_word`) |
| `zeroplugins.sleep` | Good-morning and good-night ranking per group (`SleepDB`, `time_duration`, `is_morning`, `is_evening`, `good_morning_text`, `good_night_text`) |
| `zeroplugins.thesaurus` | Canned replies looked up by exact phrase (`load_thesaurus`, `Thesaurus`) |
| `zeroplugins.wordle` | Word-guessing game with a coloured grid and a PNG board (`WordleGame`, `GuessResult`, `LetterState`, `load_word_list`, `class_for`) |
| `zeroplugins.wtf` | Catalogue of personality-test generators and the call to run one (`TABLE`, `new_wtf`, `list_text`, `Wtf.url`, `Wtf.predict`) |
| `zeroplugins.tarot` | Tarot draws, card meanings and spreads (`load_deck`, `Deck`, `DrawnCard`, `parse_draw_count`, `card_range`) |
| `zeroplugins.tiangou` | Diary entries picked at random from SQLite (`DiaryDB`) |
| `zeroplugins.vtbdb` | Store of streamers, clip categories and clips, with the numbered menus for picking one and download of the listings (`VtbDB`, `decode_escaped`) |
| `zeroplugins.ymgaldb` | Store of galgame picture sets and a scraper for the picture site (`YmgalDB`, `parse_page_number`, `parse_picset_ids`, `parse_cg_page`, `parse_emoticon_page`, `update_pictures`) |
| `zeroplugins.ymgal` | Turns a stored picture set into forwardable messages (`resolve_type`, `build_messages`) |
| `zeroplugins.setutime` | Illustrations stored per category plus an in-memory queue of prepared pictures (`ImagePool`, `Illust`) |

## Examples

Sign a user in and read the result:

```python
from datetime import datetime
from zeroplugins.score import ScoreDB, sign_in

with ScoreDB("score.db") as db:
    result = sign_in(db, 10001, datetime.now())
    print(result.score, result.level, result.next_level)
```

Play a round of the word game:

```python
from zeroplugins.wordle import WordleGame, UnknownWordError

game = WordleGame("apple", ["apple", "angle", "ample"])
print(game.guess("angle"))      # GuessResult(win=False, out_of_guesses=False)
try:
    game.guess("zzzzz")
except UnknownWordError:
    print("not a word")
png = game.render()             # bytes of a PNG image of the board
```

Draw tarot cards:

```python
import random
from zeroplugins.tarot import load_deck

deck = load_deck(open("tarots.json").read(), open("formation.json").read())
for card in deck.draw(3, "塔罗牌", random.Random(1)):
    print(card.describe())
```

Queue prepared pictures for a category:

```python
from zeroplugins.setutime import ImagePool, Illust

with ImagePool("setu.db") as pool:
    pool.add("风景", Illust(pid=1, title="sky", image_urls=("https://example.com/1.png",)))
    pool.fill("风景", lambda illust: illust.image_urls[0])
    print(pool.pop("风景"))
    print(pool.status_text())
```

## Errors

Failures are raised, not returned: `wordle` raises `LengthNotEnoughError` and
`UnknownWordError` (both `WordleError`), `tarot` raises `TarotError`,
`Wtf.predict` raises `RuntimeError` with the service's message, and lookups
with nothing to return raise `LookupError` (`DiaryDB.pick`, `build_messages`)
or return `None` (`VtbDB.third_category`, `YmgalDB.random`, `ImagePool.pop`).

## What this package does not do

- It does not connect to any chat service, parse commands or send messages;
  wiring the functions to a bot is up to you.
- It does not draw the sign-in card or the score ranking chart; `sign_in`
  returns the numbers and words that would go on them.
- It does not download its data files (word lists, tarot JSON, thesaurus JSON,
  clip and diary databases); you pass their contents or paths in.
- There is no hot-word ranking of chat history, no joke or quote fetchers, no
  API-key and quota store for an image or text generation service, and no
  interactive three-step clip picker or clip downloader; `VtbDB` provides only
  the storage and the menu texts such a picker would show.