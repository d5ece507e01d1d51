"""Canned replies looked up by exact message text."""

from __future__ import annotations

import json
import random
from collections.abc import Iterable, Mapping


class Thesaurus:
    """Maps a trigger phrase to the replies it may get."""

    def __init__(self, mapping: Mapping[str, Iterable[str]]) -> None:
        self._replies: dict[str, tuple[str, ...]] = {
            key: tuple(values) for key, values in mapping.items()
        }

    def __contains__(self, key: object) -> bool:
        return key in self._replies

    def __len__(self) -> int:
        return len(self._replies)

    def keys(self) -> list[str]:
        """All trigger phrases."""
        return list(self._replies)

    def reply(self, key: str, rng: random.Random | None = None) -> str:
        """Pick one reply for ``key`` at random."""
        replies = self._replies[key]
        if not replies:
            raise ValueError(f"no replies for {key!r}")
        return (rng or random).choice(replies)


def load_thesaurus(data: str | bytes) -> Thesaurus:
    """Build a thesaurus from a JSON object of phrase to list of replies."""
    mapping = json.loads(data)
    if not isinstance(mapping, dict):
        raise ValueError("thesaurus data must be a JSON object")
    return Thesaurus(mapping)