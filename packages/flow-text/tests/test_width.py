"""Tests for flow.text.width -- cell widths, truncation and dropdown anchoring."""

from __future__ import annotations

from flow.text.width import anchor_position, strip_ansi, truncate_to_width, visible_width


class TestVisibleWidth:
    def test_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_empty(self) -> None:
        assert visible_width("") == 0

    def test_wide_chars(self) -> None:
        assert visible_width("日本") == 4

    def test_emoji(self) -> None:
        assert visible_width("🎉") == 2

    def test_emoji_sequences(self) -> None:
        assert visible_width("\u2764\ufe0f") == 2
        assert visible_width("\U0001f469\u200d\U0001f4bb") == 2

    def test_combining_mark(self) -> None:
        assert visible_width("e\u0301") == 1

    def test_ansi_ignored(self) -> None:
        assert visible_width("\x1b[1mbold\x1b[0m") == 4
        assert strip_ansi("\x1b[2m**\x1b[0m") == "**"

    def test_tab(self) -> None:
        assert visible_width("\t") == 3


class TestTruncate:
    def test_short_text_unchanged(self) -> None:
        assert truncate_to_width("abc", 5) == "abc"

    def test_truncates_with_ellipsis(self) -> None:
        assert truncate_to_width("abcdefgh", 6) == "abc..."

    def test_wide_chars(self) -> None:
        assert truncate_to_width("日本語テキスト", 7) == "日本..."


class TestAnchorPosition:
    def test_first_line(self) -> None:
        assert anchor_position("hi #tag", 3) == (3, 0)

    def test_later_line(self) -> None:
        assert anchor_position("one\ntwo #x", 8) == (4, 1)

    def test_index_clamped(self) -> None:
        assert anchor_position("abc", 99) == (3, 0)

    def test_measure_in_pixels(self) -> None:
        assert anchor_position("ab#", 2, lambda s: len(s) * 8) == (16, 0)
