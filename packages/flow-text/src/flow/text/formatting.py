"""Markdown editing commands: marker toggling, list continuation, checkboxes.

Each command takes the current ``TextValue`` and returns the value to
apply, or ``None`` when it does not apply.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from flow.text.types import TextValue

BOLD_MARKER = "**"
ITALIC_MARKER = "*"

_BULLET_RE = re.compile(r"^(\s*)([-*])\s")
_CHECKBOX_RE = re.compile(r"^(\s*)- \[[x ]\]\s")
_EMPTY_CHECKBOX_RE = re.compile(r"^(\s*)- \[[x ]\]\s*$")
_NUMBERED_RE = re.compile(r"^(\s*)(\d+)\.\s")
_EMPTY_NUMBERED_RE = re.compile(r"^(\s*)\d+\.\s*$")
_QUOTE_RE = re.compile(r"^(\s*)>\s")
_CHECKBOX_ANYWHERE_RE = re.compile(r"^[ \t]*(- \[([x ])\])", re.MULTILINE)


def toggle_wrap(
    value: TextValue,
    before: str,
    after: str,
    fallback_selection: tuple[int, int] | None = None,
) -> TextValue | None:
    """Wrap the selection in ``before``/``after``, or unwrap it if already wrapped.

    A collapsed selection uses ``fallback_selection`` (the last non-empty
    selection) when it is still inside the text.
    """
    text = value.text
    if value.is_valid and not value.is_collapsed:
        start, end = value.selection_start, value.selection_end or value.selection_start
    elif fallback_selection is not None:
        start, end = fallback_selection
        if not (0 <= start < end <= len(text)):
            return None
    else:
        return None

    selected = text[start:end]
    if start >= len(before) and end + len(after) <= len(text):
        if text[start - len(before) : start] == before and text[end : end + len(after)] == after:
            new_text = text[: start - len(before)] + selected + text[end + len(after) :]
            return TextValue(new_text, start - len(before), end - len(before))

    new_text = text[:start] + before + selected + after + text[end:]
    new_start = start + len(before)
    return TextValue(new_text, new_start, new_start + len(selected))


def toggle_bold(value: TextValue, fallback_selection: tuple[int, int] | None = None) -> TextValue | None:
    return toggle_wrap(value, BOLD_MARKER, BOLD_MARKER, fallback_selection)


def toggle_italic(value: TextValue, fallback_selection: tuple[int, int] | None = None) -> TextValue | None:
    return toggle_wrap(value, ITALIC_MARKER, ITALIC_MARKER, fallback_selection)


def _clear_line_prefix(value: TextValue) -> TextValue:
    text = value.text
    cursor = value.selection_start
    line_start = text.rfind("\n", 0, cursor) + 1
    return TextValue.collapsed(text[:line_start] + text[cursor:], line_start)


def continue_list(value: TextValue) -> TextValue | None:
    """Handle Enter inside a list item or quote.

    Continues bullets, checkboxes, numbered items and quotes on the next
    line. Pressing Enter on an empty item clears its prefix instead.
    Returns ``None`` when the cursor line is not a list item.
    """
    if not value.is_valid:
        return None

    text = value.text
    before_cursor = text[: value.selection_start]
    line = before_cursor.split("\n")[-1]
    continuation: str | None = None

    # Order matters: a checkbox line is also a bullet line.
    bullet = _BULLET_RE.match(line)
    if bullet:
        if line.strip() in ("-", "*"):
            return _clear_line_prefix(value)
        continuation = f"{bullet.group(1)}{bullet.group(2)} "

    checkbox = _CHECKBOX_RE.match(line)
    if checkbox:
        if _EMPTY_CHECKBOX_RE.match(line):
            return _clear_line_prefix(value)
        continuation = f"{checkbox.group(1)}- [ ] "

    numbered = _NUMBERED_RE.match(line)
    if numbered:
        if _EMPTY_NUMBERED_RE.match(line):
            return _clear_line_prefix(value)
        continuation = f"{numbered.group(1)}{int(numbered.group(2)) + 1}. "

    quote = _QUOTE_RE.match(line)
    if quote:
        if line.strip() == ">":
            return _clear_line_prefix(value)
        continuation = f"{quote.group(1)}> "

    if continuation is None:
        return None

    end = value.selection_end if value.selection_end is not None else value.selection_start
    new_text = f"{before_cursor}\n{continuation}{text[end:]}"
    return TextValue.collapsed(new_text, value.selection_start + 1 + len(continuation))


@dataclass(frozen=True)
class Checkbox:
    start: int  # offset of "- [ ]" / "- [x]"
    checked: bool
    line: int


def find_checkboxes(text: str) -> list[Checkbox]:
    return [
        Checkbox(
            start=m.start(1),
            checked=m.group(2) == "x",
            line=text.count("\n", 0, m.start(1)),
        )
        for m in _CHECKBOX_ANYWHERE_RE.finditer(text)
    ]


def toggle_checkbox(text: str, start: int) -> str:
    """Flip the checkbox at ``start``. Text without a checkbox there is returned unchanged."""
    marker = text[start : start + 5]
    if marker == "- [x]":
        replacement = "- [ ]"
    elif marker == "- [ ]":
        replacement = "- [x]"
    else:
        return text
    return text[:start] + replacement + text[start + 5 :]
