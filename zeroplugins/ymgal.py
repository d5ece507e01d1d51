"""Turning stored galgame picture sets into chat messages."""

from __future__ import annotations

from .ymgaldb import CG_TYPE, EMOTICON_TYPE, Ymgal

_TYPES = {"CG": CG_TYPE, "表情包": EMOTICON_TYPE}


def resolve_type(name: str) -> str:
    """Stored picture type for the command word "CG" or "表情包"."""
    try:
        return _TYPES[name]
    except KeyError:
        raise ValueError(f"unknown picture type {name!r}") from None


def build_messages(y: Ymgal | None, nickname: str) -> list[tuple[str, str]]:
    """Forwarded messages for a set: title, description if any, then every picture.

    Each message is a ``(kind, data)`` pair where kind is "text" or "image".
    """
    if y is None or not y.picture_list:
        raise LookupError(nickname + "暂时没有这样的图呢")
    messages = [("text", y.title)]
    if y.picture_description:
        messages.append(("text", y.picture_description))
    messages.extend(("image", url) for url in y.picture_list.split(","))
    return messages