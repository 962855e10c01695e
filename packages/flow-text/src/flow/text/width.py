"""Text measurement for hosts that lay text out in terminal cells.

``visible_width`` is the default ``measure_text_width`` capability used to
place the hashtag dropdown; graphical hosts pass their own measure function
(pixel widths from their text layout engine) instead.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Callable

import grapheme
import wcwidth

MeasureFn = Callable[[str], int]

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[mGKHJ]|\x1b\]8;;[^\x07]*\x07")

# A cluster holding one of these is an emoji sequence drawn in two cells.
_EMOJI_SEQUENCE_CHARS = frozenset("\ufe0f\u200d")


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def _cluster_width(cluster: str) -> int:
    if len(cluster) > 1 and not _EMOJI_SEQUENCE_CHARS.isdisjoint(cluster):
        return 2
    # Combining marks after the base character take no cells of their own.
    return max(wcwidth.wcwidth(cluster[0]), 0)


@lru_cache(maxsize=512)
def _text_width(text: str) -> int:
    return sum(_cluster_width(c) for c in grapheme.graphemes(text))


def visible_width(text: str) -> int:
    """Terminal cell width of ``text``; ANSI codes are ignored, tabs count as 3."""
    plain = strip_ansi(text).replace("\t", "   ")
    if plain.isascii() and plain.isprintable():
        return len(plain)
    return _text_width(plain)


def truncate_to_width(text: str, max_width: int, ellipsis: str = "...") -> str:
    """Cut plain ``text`` to at most ``max_width`` cells, appending ``ellipsis`` if cut."""
    if visible_width(text) <= max_width:
        return text

    budget = max(0, max_width - visible_width(ellipsis))
    kept = ""
    for cluster in grapheme.graphemes(text):
        if visible_width(kept + cluster) > budget:
            break
        kept += cluster
    return kept + ellipsis


def anchor_position(
    text: str, index: int, measure: MeasureFn = visible_width
) -> tuple[int, int]:
    """``(x, line)`` of character ``index``: width of its line up to it, and its line number."""
    index = max(0, min(index, len(text)))
    before = text[:index]
    line = before.count("\n")
    line_start = before.rfind("\n") + 1
    return measure(before[line_start:]), line
