"""Tests for flow.text.editor -- the description editor facade."""

from __future__ import annotations

import pytest

from flow.text.editor import DescriptionEditor
from flow.text.preview import BlockKind
from flow.text.settings import EditorSettings
from flow.text.spans import SegmentStyle, join_segments
from flow.text.tags import Tag, TagIndex
from flow.text.types import TextValue


class _Uploader:
    def __init__(self, result: int | None) -> None:
        self.result = result

    async def upload(self, data: bytes, mime_type: str) -> int | None:
        return self.result


class _Resolver:
    def resolve(self, index: int) -> str | None:
        return f"https://cdn.test/{index}.png"


def _editor(text: str = "", **kwargs) -> tuple[DescriptionEditor, list[str]]:
    changes: list[str] = []
    tags = TagIndex([Tag(name="groceries"), Tag(name="work")])
    return DescriptionEditor(text, tags=tags, on_change=changes.append, **kwargs), changes


def _type(editor: DescriptionEditor, text: str) -> None:
    for ch in text:
        editor.insert_text(ch)


class TestHashtagFlow:
    def test_typing_then_enter_commits(self) -> None:
        editor, changes = _editor()
        _type(editor, "Buy #gro")
        assert editor.autocomplete.is_visible

        assert editor.handle_key("enter") is True
        assert editor.value == TextValue.collapsed("Buy #groceries ", 15)
        assert changes[-1] == "Buy #groceries "
        assert not editor.autocomplete.is_visible

    def test_space_closes_dropdown(self) -> None:
        editor, _ = _editor()
        _type(editor, "#gro")
        _type(editor, " ")
        assert not editor.autocomplete.is_visible

    def test_select_suggestion_by_row(self) -> None:
        editor, _ = _editor()
        _type(editor, "x #wo")
        assert editor.select_suggestion(0) is True
        assert editor.text == "x #work "

    def test_select_suggestion_out_of_range(self) -> None:
        editor, _ = _editor()
        _type(editor, "#wo")
        assert editor.select_suggestion(5) is False
        assert editor.text == "#wo"

    def test_focus_loss_closes_dropdown(self) -> None:
        editor, _ = _editor()
        _type(editor, "#gro")
        editor.focus_lost()
        assert not editor.autocomplete.is_visible

    def test_pointer_selection_survives_focus_loss(self) -> None:
        editor, _ = _editor()
        _type(editor, "#gro")
        editor.begin_pointer_selection()
        editor.focus_lost()
        assert editor.select_suggestion(editor.autocomplete.suggestions[0]) is True
        assert editor.text == "#groceries "

    def test_dropdown_anchor(self) -> None:
        editor, _ = _editor()
        _type(editor, "ab #g")
        assert editor.dropdown_anchor() == (3, 0)


class TestFormattingKeys:
    def test_bold_toggle(self) -> None:
        editor, changes = _editor()
        editor.set_value(TextValue("hello", 0, 5))
        assert editor.handle_key("ctrl+b") is True
        assert editor.value == TextValue("**hello**", 2, 7)
        assert editor.handle_key("ctrl+b") is True
        assert editor.value == TextValue("hello", 0, 5)
        assert changes == ["**hello**", "hello"]

    def test_italic_uses_last_selection(self) -> None:
        editor, _ = _editor()
        editor.set_value(TextValue("hello world", 6, 11))
        editor.set_value(TextValue.collapsed("hello world", 0))
        editor.handle_key("cmd+i")
        assert editor.text == "hello *world*"

    def test_toggle_forgets_last_selection(self) -> None:
        editor, changes = _editor()
        editor.set_value(TextValue("hello world", 0, 5))
        editor.handle_key("ctrl+b")
        editor.set_value(TextValue.collapsed("**hello** world", 15))
        assert editor.handle_key("ctrl+b") is True
        assert editor.text == "**hello** world"
        assert changes == ["**hello** world"]

    def test_enter_continues_list(self) -> None:
        editor, _ = _editor()
        editor.set_value(TextValue.collapsed("- item", 6))
        assert editor.handle_key("enter") is True
        assert editor.value == TextValue.collapsed("- item\n- ", 9)

    def test_enter_on_plain_line_falls_through(self) -> None:
        editor, changes = _editor()
        editor.set_value(TextValue.collapsed("plain", 5))
        assert editor.handle_key("enter") is False
        assert changes == []

    def test_custom_keybindings_from_settings(self) -> None:
        settings = EditorSettings(keybindings={"toggleBold": "ctrl+shift+b"})
        editor, _ = _editor(settings=settings)
        editor.set_value(TextValue("x", 0, 1))
        assert editor.handle_key("ctrl+b") is False
        assert editor.handle_key("ctrl+shift+b") is True
        assert editor.text == "**x**"

    def test_host_changes_do_not_notify(self) -> None:
        editor, changes = _editor()
        editor.set_value(TextValue.collapsed("typed by host", 13))
        assert changes == []

    def test_toggle_checkbox(self) -> None:
        editor, changes = _editor("- [ ] milk")
        editor.toggle_checkbox(0)
        assert editor.text == "- [x] milk"
        editor.toggle_checkbox(3)
        assert changes == ["- [x] milk"]


class TestImagesAndViews:
    @pytest.mark.asyncio
    async def test_paste_image(self) -> None:
        editor, changes = _editor("see ", uploader=_Uploader(2))
        assert await editor.paste_image(b"png") is True
        assert editor.text == "see [img2]"
        assert changes == ["see [img...]", "see [img2]"]
        assert not editor.uploading

    @pytest.mark.asyncio
    async def test_paste_failure(self) -> None:
        editor, _ = _editor("see ", uploader=_Uploader(None))
        assert await editor.paste_image(b"png") is False
        assert editor.text == "see "

    @pytest.mark.asyncio
    async def test_paste_without_uploader(self) -> None:
        editor, changes = _editor("x")
        assert await editor.paste_image(b"png") is False
        assert changes == []

    def test_paste_key_requests_clipboard(self) -> None:
        editor, _ = _editor()
        requests: list[bool] = []
        editor.on_paste_request = lambda: requests.append(True)
        assert editor.handle_key("ctrl+v") is True
        assert requests == [True]

    def test_paste_key_without_listener_falls_through(self) -> None:
        editor, _ = _editor()
        assert editor.handle_key("ctrl+v") is False

    def test_custom_placeholder(self) -> None:
        editor, _ = _editor(settings=EditorSettings(placeholder="[img…]"))
        assert editor._paste.placeholder == "[img…]"

    def test_segments(self) -> None:
        editor, _ = _editor("**a** #work")
        segments = editor.segments()
        assert join_segments(segments) == "**a** #work"
        assert [s.style for s in segments] == [
            SegmentStyle.MARKER,
            SegmentStyle.BOLD,
            SegmentStyle.MARKER,
            SegmentStyle.PLAIN,
            SegmentStyle.HASHTAG,
        ]

    def test_preview(self) -> None:
        editor, _ = _editor("Photo:\n\n[img1]", resolver=_Resolver())
        blocks = editor.preview()
        assert [b.kind for b in blocks] == [BlockKind.PARAGRAPH, BlockKind.IMAGE]
        assert blocks[1].image_url == "https://cdn.test/1.png"
