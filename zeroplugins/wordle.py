"""A word-guessing game with a coloured grid of past guesses."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from io import BytesIO

from PIL import Image, ImageDraw, ImageFont

_SIDE = 20
_SPACE = 10
_STEP = _SIDE + 4
_WHITE = (255, 255, 255)

_CLASSES = {"": 5, "五阶": 5, "六阶": 6, "七阶": 7}


class LetterState(Enum):
    """How one letter of a guess relates to the target word."""

    MATCH = 0
    EXIST = 1
    NOT_EXIST = 2
    UNDONE = 3

    @property
    def color(self) -> tuple[int, int, int]:
        return _COLORS[self]


_COLORS = {
    LetterState.MATCH: (125, 166, 108),
    LetterState.EXIST: (199, 183, 96),
    LetterState.NOT_EXIST: (123, 123, 123),
    LetterState.UNDONE: (219, 219, 219),
}


class WordleError(Exception):
    """A guess that the game does not accept."""


class LengthNotEnoughError(WordleError):
    """The guess does not have as many letters as the target."""


class UnknownWordError(WordleError):
    """The guess is not in the dictionary."""


@dataclass(frozen=True)
class GuessResult:
    """Outcome of one accepted guess."""

    win: bool
    out_of_guesses: bool

    @property
    def finished(self) -> bool:
        return self.win or self.out_of_guesses


class WordleGame:
    """One round: a target word and the guesses made so far."""

    def __init__(self, target: str, dictionary: Iterable[str]) -> None:
        self.target = target.lower()
        self.length = len(self.target)
        self.max_guesses = self.length + 1
        self._dictionary = frozenset(w.lower() for w in dictionary)
        self._record: list[str] = []
        self._finished = False

    @property
    def guesses(self) -> list[str]:
        return list(self._record)

    @property
    def finished(self) -> bool:
        return self._finished

    def guess(self, word: str) -> GuessResult:
        """Record a guess; raise if it has the wrong length or is unknown."""
        if self._finished:
            raise WordleError("game is over")
        s = word.lower()
        win = s == self.target
        if not win:
            if len(s) != self.length:
                raise LengthNotEnoughError("length not enough")
            if s not in self._dictionary:
                raise UnknownWordError("unknown word")
        self._record.append(s)
        out = len(self._record) >= self.max_guesses
        self._finished = win or out
        return GuessResult(win=win, out_of_guesses=out and not win)

    def _state(self, position: int, letter: str) -> LetterState:
        if self.target[position] == letter:
            return LetterState.MATCH
        if letter in self.target:
            return LetterState.EXIST
        return LetterState.NOT_EXIST

    def grid(self) -> list[list[tuple[str, LetterState]]]:
        """Every row of the board: guessed letters with their state, then empty rows."""
        rows = [
            [(c.upper(), self._state(j, c)) for j, c in enumerate(word)]
            for word in self._record
        ]
        empty = [("", LetterState.UNDONE)] * self.length
        rows.extend(list(empty) for _ in range(self.max_guesses - len(rows)))
        return rows

    def render(self) -> bytes:
        """Draw the board as a PNG image."""
        width = _STEP * self.length + _SPACE * 2 - 4
        height = _STEP * self.max_guesses + _SPACE * 2 - 4
        img = Image.new("RGB", (width, height), _WHITE)
        draw = ImageDraw.Draw(img)
        font = ImageFont.load_default()
        for i, row in enumerate(self.grid()):
            for j, (letter, state) in enumerate(row):
                x = _SPACE + j * _STEP
                y = _SPACE + i * _STEP
                if state is LetterState.UNDONE:
                    draw.rectangle(
                        [x + 1, y + 1, x + _SIDE - 2, y + _SIDE - 2],
                        outline=state.color,
                        width=1,
                    )
                else:
                    draw.rectangle([x, y, x + _SIDE - 1, y + _SIDE - 1], fill=state.color)
                    draw.text((x + 7, y + 4), letter, fill=_WHITE, font=font)
        buf = BytesIO()
        img.save(buf, "PNG")
        return buf.getvalue()


def load_word_list(text: str) -> list[str]:
    """Sorted, non-empty lines of a word list."""
    return sorted(line.strip() for line in text.splitlines() if line.strip())


def class_for(name: str) -> int:
    """Word length for a difficulty name such as "六阶"; the empty name means five."""
    try:
        return _CLASSES[name]
    except KeyError:
        raise ValueError(f"unknown difficulty {name!r}") from None