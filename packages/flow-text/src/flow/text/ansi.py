"""ANSI rendering of live segments and preview blocks, for terminal hosts and the CLI."""

from __future__ import annotations

import re
from dataclasses import dataclass

from flow.text.preview import BlockKind, PreviewBlock, RunStyle
from flow.text.spans import SegmentStyle, StyledSegment
from flow.text.width import visible_width

# ---------------------------------------------------------------------------
# ANSI helpers
# ---------------------------------------------------------------------------

_RESET = "\x1b[0m"
_BOLD = "\x1b[1m"
_DIM = "\x1b[2m"
_ITALIC = "\x1b[3m"
_UNDERLINE = "\x1b[4m"
_STRIKETHROUGH = "\x1b[9m"

_PIECE_RE = re.compile(r"\n| +|[^ \n]+")


@dataclass
class LiveTheme:
    """Escape codes per style. Empty string means unstyled."""

    marker: str = _DIM
    bold: str = _BOLD
    italic: str = _ITALIC
    hashtag: str = "\x1b[38;5;33m"
    image: str = "\x1b[38;5;208m"
    heading: str = _BOLD
    code: str = "\x1b[38;5;245m"
    link: str = "\x1b[38;5;39m" + _UNDERLINE
    strike: str = _STRIKETHROUGH
    quote: str = _DIM
    rule: str = _DIM

    @classmethod
    def plain(cls) -> LiveTheme:
        return cls(**{name: "" for name in cls.__dataclass_fields__})


def _style(text: str, code: str) -> str:
    return f"{code}{text}{_RESET}" if code and text else text


def _segment_code(style: SegmentStyle, theme: LiveTheme) -> str:
    return {
        SegmentStyle.PLAIN: "",
        SegmentStyle.MARKER: theme.marker,
        SegmentStyle.BOLD: theme.bold,
        SegmentStyle.ITALIC: theme.italic,
        SegmentStyle.HASHTAG: theme.hashtag,
        SegmentStyle.IMAGE: theme.image,
    }[style]


def segments_to_ansi(segments: list[StyledSegment], theme: LiveTheme | None = None) -> str:
    """Live view: the raw text with markers dimmed and spans coloured."""
    theme = theme or LiveTheme()
    return "".join(_style(s.text, _segment_code(s.style, theme)) for s in segments)


def _run_code(style: RunStyle, theme: LiveTheme) -> str:
    return {
        RunStyle.PLAIN: "",
        RunStyle.BOLD: theme.bold,
        RunStyle.ITALIC: theme.italic,
        RunStyle.BOLD_ITALIC: theme.bold + theme.italic,
        RunStyle.STRIKE: theme.strike,
        RunStyle.CODE: theme.code,
        RunStyle.LINK: theme.link,
        RunStyle.HASHTAG: theme.hashtag,
    }[style]


# ---------------------------------------------------------------------------
# Wrapping
# ---------------------------------------------------------------------------


def _wrap_styled(pieces: list[tuple[str, str]], width: int) -> list[str]:
    """Word-wrap ``(text, code)`` runs to ``width`` cells, styling each word separately."""
    lines: list[str] = []
    current: list[str] = []
    used = 0
    pending = ""

    def flush() -> None:
        nonlocal current, used, pending
        lines.append("".join(current))
        current, used, pending = [], 0, ""

    for text, code in pieces:
        for part in _PIECE_RE.findall(text):
            if part == "\n":
                flush()
                continue
            if part.startswith(" "):
                if current:
                    pending += part
                continue

            w = visible_width(part)
            if current and used + len(pending) + w > width:
                flush()
            if pending:
                current.append(pending)
                used += len(pending)
                pending = ""
            current.append(_style(part, code))
            used += w

    if current or not lines:
        flush()
    return lines


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def _image_label(block: PreviewBlock) -> str:
    if block.pending:
        return "[uploading image...]"
    if block.broken:
        return f"[image {block.image_index} unavailable]"
    return f"[image {block.image_index}] {block.image_url}"


def _render_block(block: PreviewBlock, width: int, theme: LiveTheme) -> list[str]:
    pieces = [(run.text, _run_code(run.style, theme)) for run in block.runs]

    if block.kind is BlockKind.HEADING:
        code = theme.heading + (_UNDERLINE if block.level == 1 and theme.heading else "")
        return _wrap_styled([(block.text, code)], width)

    if block.kind is BlockKind.LIST_ITEM:
        indent = "  " * max(block.level - 1, 0)
        if block.checked is not None:
            bullet = "[x] " if block.checked else "[ ] "
        else:
            bullet = f"{block.marker or '-'} "
        lead = indent + bullet
        body = _wrap_styled(pieces, max(width - len(lead), 1))
        pad = " " * len(lead)
        return [lead + body[0]] + [pad + line for line in body[1:]]

    if block.kind is BlockKind.QUOTE:
        bar = _style("│ ", theme.quote) * max(block.level, 1)
        body = _wrap_styled(pieces, max(width - 2 * max(block.level, 1), 1))
        return [bar + line for line in body]

    if block.kind is BlockKind.CODE:
        return ["  " + _style(line, theme.code) for line in block.text.split("\n")]

    if block.kind is BlockKind.RULE:
        return [_style("─" * width, theme.rule)]

    if block.kind is BlockKind.IMAGE:
        return [_style(_image_label(block), theme.image)]

    return _wrap_styled(pieces, width)


def preview_to_lines(
    blocks: list[PreviewBlock], width: int = 80, theme: LiveTheme | None = None
) -> list[str]:
    """Rendered view as terminal lines; blank lines separate blocks except within a list."""
    theme = theme or LiveTheme()
    lines: list[str] = []
    for i, block in enumerate(blocks):
        lines.extend(_render_block(block, width, theme))
        following = blocks[i + 1] if i + 1 < len(blocks) else None
        if following is None:
            break
        if block.kind is BlockKind.LIST_ITEM and following.kind is BlockKind.LIST_ITEM:
            continue
        lines.append("")
    return lines
