"""Span renderer: turns scanner matches into styled segments.

Markers stay visible. Concatenating the segments of ``render(text, ...)``
always gives back ``text``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from flow.text.patterns import PatternKind, PatternMatch, scan


class SegmentStyle(str, Enum):
    PLAIN = "plain"
    MARKER = "marker"
    BOLD = "bold"
    ITALIC = "italic"
    HASHTAG = "hashtag"
    IMAGE = "image"


@dataclass(frozen=True)
class StyledSegment:
    text: str
    style: SegmentStyle = SegmentStyle.PLAIN


_WRAPPED = {
    PatternKind.BOLD: ("**", SegmentStyle.BOLD),
    PatternKind.ITALIC: ("*", SegmentStyle.ITALIC),
}

_WHOLE = {
    PatternKind.HASHTAG: SegmentStyle.HASHTAG,
    PatternKind.IMAGE: SegmentStyle.IMAGE,
}


def render(text: str, matches: list[PatternMatch]) -> list[StyledSegment]:
    """Emit styled segments for ``text`` given sorted, non-overlapping ``matches``."""
    segments: list[StyledSegment] = []
    current = 0

    for match in matches:
        if match.start > current:
            segments.append(StyledSegment(text[current : match.start]))

        if match.kind in _WRAPPED:
            marker, style = _WRAPPED[match.kind]
            segments.append(StyledSegment(marker, SegmentStyle.MARKER))
            segments.append(StyledSegment(match.content, style))
            segments.append(StyledSegment(marker, SegmentStyle.MARKER))
        else:
            segments.append(StyledSegment(match.full_text, _WHOLE[match.kind]))

        current = match.end

    if current < len(text):
        segments.append(StyledSegment(text[current:]))

    return segments


def annotate(text: str) -> list[StyledSegment]:
    """Scan and render in one step."""
    return render(text, scan(text))


def join_segments(segments: list[StyledSegment]) -> str:
    return "".join(s.text for s in segments)
