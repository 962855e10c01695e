"""Tests for flow.text.patterns -- inline pattern scanning."""

from __future__ import annotations

import pytest

from flow.text.patterns import PatternKind, PatternMatch, image_index, scan


def _kinds(text: str) -> list[tuple[PatternKind, str]]:
    return [(m.kind, m.full_text) for m in scan(text)]


# ---------------------------------------------------------------------------
# Individual pattern kinds
# ---------------------------------------------------------------------------


class TestScanKinds:
    def test_empty_text(self) -> None:
        assert scan("") == []

    def test_plain_text_has_no_matches(self) -> None:
        assert scan("just some words") == []

    def test_bold(self) -> None:
        (m,) = scan("a **strong** b")
        assert m.kind is PatternKind.BOLD
        assert (m.start, m.end) == (2, 12)
        assert m.content == "strong"
        assert m.full_text == "**strong**"

    def test_italic(self) -> None:
        (m,) = scan("an *emphasis* here")
        assert m.kind is PatternKind.ITALIC
        assert m.content == "emphasis"
        assert m.full_text == "*emphasis*"

    def test_hashtag_content_includes_hash(self) -> None:
        (m,) = scan("see #work")
        assert m.kind is PatternKind.HASHTAG
        assert m.content == "#work"
        assert m.full_text == "#work"

    def test_hashtag_with_sublist(self) -> None:
        (m,) = scan("text #proj/sub more")
        assert (m.start, m.end) == (5, 14)
        assert m.full_text == "#proj/sub"

    def test_hashtag_takes_at_most_one_slash(self) -> None:
        (m,) = scan("#a/b/c")
        assert m.full_text == "#a/b"

    def test_lone_hash_is_not_a_hashtag(self) -> None:
        assert scan("# heading") == []
        assert scan("issue #") == []

    def test_image_reference(self) -> None:
        (m,) = scan("look [img12] here")
        assert m.kind is PatternKind.IMAGE
        assert m.content == "12"
        assert image_index(m) == 12

    def test_uploading_placeholder(self) -> None:
        (m,) = scan("[img...]")
        assert m.kind is PatternKind.IMAGE
        assert m.content == "..."
        assert image_index(m) is None

    def test_image_index_of_other_kinds_is_none(self) -> None:
        (m,) = scan("#tag")
        assert image_index(m) is None

    def test_malformed_markers_are_plain(self) -> None:
        assert scan("****") == []
        assert scan("a * b") == []
        assert scan("**unclosed") == []
        assert scan("[img]") == []
        assert scan("[imgx]") == []


# ---------------------------------------------------------------------------
# Precedence and overlap
# ---------------------------------------------------------------------------


class TestScanPrecedence:
    def test_bold_with_inner_stars_is_one_match(self) -> None:
        assert _kinds("**a*b*c**") == [(PatternKind.BOLD, "**a*b*c**")]
        assert scan("**a*b*c**")[0].content == "a*b*c"

    def test_italic_beats_hashtag(self) -> None:
        assert _kinds("*#tag*") == [(PatternKind.ITALIC, "*#tag*")]

    def test_bold_beats_hashtag(self) -> None:
        assert _kinds("**#tag**") == [(PatternKind.BOLD, "**#tag**")]

    def test_bold_is_not_also_italic(self) -> None:
        assert _kinds("**x**") == [(PatternKind.BOLD, "**x**")]

    def test_mixed_line(self) -> None:
        text = "**bold** and *ital* #x [img2] [img...]"
        assert [(m.kind, m.start, m.end) for m in scan(text)] == [
            (PatternKind.BOLD, 0, 8),
            (PatternKind.ITALIC, 13, 19),
            (PatternKind.HASHTAG, 20, 22),
            (PatternKind.IMAGE, 23, 29),
            (PatternKind.IMAGE, 30, 38),
        ]

    def test_bold_spans_lines(self) -> None:
        (m,) = scan("**one\ntwo**")
        assert m.content == "one\ntwo"

    @pytest.mark.parametrize(
        "text",
        [
            "**a** *b* #c [img1]",
            "***x***",
            "*a**b*",
            "#a#b#c",
            "**#x** *[img1]* [img...]#tag",
            "- [ ] task #home/chores with **bold *and* mixed**",
        ],
    )
    def test_matches_are_sorted_and_disjoint(self, text: str) -> None:
        matches = scan(text)
        for a, b in zip(matches, matches[1:]):
            assert a.end <= b.start
        for m in matches:
            assert text[m.start : m.end] == m.full_text


class TestPatternMatch:
    def test_overlaps(self) -> None:
        m = PatternMatch(PatternKind.HASHTAG, 3, 6, "#ab", "#ab")
        assert m.overlaps(0, 4)
        assert m.overlaps(5, 9)
        assert m.overlaps(4, 5)
        assert not m.overlaps(0, 3)
        assert not m.overlaps(6, 9)
