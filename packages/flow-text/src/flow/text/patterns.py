"""Inline pattern scanner for live description styling.

Finds bold, italic, hashtag and image-reference spans in raw text. Kinds
are scanned in a fixed order and a later candidate that overlaps an
already accepted span is dropped, so in ambiguous text bold beats italic,
italic beats hashtags, and hashtags beat image references.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class PatternKind(str, Enum):
    BOLD = "bold"
    ITALIC = "italic"
    HASHTAG = "hashtag"
    IMAGE = "image"


@dataclass(frozen=True)
class PatternMatch:
    """A styled span: ``[start, end)`` into the scanned text."""

    kind: PatternKind
    start: int
    end: int
    content: str
    full_text: str

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end and self.start < end


# Bold content may hold single stars ("**a*b*c**") but never starts or ends with one.
BOLD_RE = re.compile(r"\*\*([^*](?:.*?[^*])?)\*\*", re.DOTALL)
ITALIC_RE = re.compile(r"(?<!\*)\*([^*]+)\*(?!\*)")
HASHTAG_RE = re.compile(r"#[A-Za-z0-9_]+(?:/[A-Za-z0-9_]+)?")
IMAGE_REF_RE = re.compile(r"\[img([0-9]+|\.\.\.)\]")

# Precedence order. Content group is 1 for every kind except hashtags.
_SCAN_ORDER: tuple[tuple[PatternKind, re.Pattern[str], int], ...] = (
    (PatternKind.BOLD, BOLD_RE, 1),
    (PatternKind.ITALIC, ITALIC_RE, 1),
    (PatternKind.HASHTAG, HASHTAG_RE, 0),
    (PatternKind.IMAGE, IMAGE_REF_RE, 1),
)


def scan(text: str) -> list[PatternMatch]:
    """Return the accepted matches in ``text``, sorted by start offset."""
    if not text:
        return []

    accepted: list[PatternMatch] = []
    for kind, regex, group in _SCAN_ORDER:
        for m in regex.finditer(text):
            start, end = m.span()
            if any(p.overlaps(start, end) for p in accepted):
                continue
            accepted.append(
                PatternMatch(
                    kind=kind,
                    start=start,
                    end=end,
                    content=m.group(group),
                    full_text=m.group(0),
                )
            )

    accepted.sort(key=lambda p: p.start)
    return accepted


def image_index(match: PatternMatch) -> int | None:
    """1-based image number of an ``[imgN]`` match, ``None`` for ``[img...]``."""
    if match.kind is not PatternKind.IMAGE or not match.content.isdigit():
        return None
    return int(match.content)
