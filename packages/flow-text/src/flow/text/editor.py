"""Description editor: one object wiring the live-styling pieces to a host text field.

The host forwards its text/selection changes (``set_value``), key presses
(``handle_key``) and pointer/focus events; the editor keeps the hashtag
dropdown in sync and applies formatting commands, calling ``on_change``
whenever it rewrites the text itself.
"""

from __future__ import annotations

import logging
from typing import Callable

from flow.text.autocomplete import HashtagAutocomplete
from flow.text.formatting import continue_list, toggle_bold, toggle_checkbox, toggle_italic
from flow.text.keybindings import EditorKeybindingsManager
from flow.text.paste import ImagePaste, ImageResolver, UploadService
from flow.text.preview import PreviewBlock, build_preview
from flow.text.settings import EditorSettings
from flow.text.spans import StyledSegment, annotate
from flow.text.tags import Tag, TagIndex, TagSource
from flow.text.types import TextValue
from flow.text.width import MeasureFn, visible_width

logger = logging.getLogger(__name__)


class DescriptionEditor:
    def __init__(
        self,
        text: str = "",
        *,
        tags: TagSource | None = None,
        uploader: UploadService | None = None,
        resolver: ImageResolver | None = None,
        keybindings: EditorKeybindingsManager | None = None,
        settings: EditorSettings | None = None,
        on_change: Callable[[str], None] | None = None,
    ) -> None:
        self._settings = settings or EditorSettings()
        if keybindings is None and self._settings.keybindings:
            keybindings = EditorKeybindingsManager(self._settings.keybindings)
        self._keybindings = keybindings or EditorKeybindingsManager()

        self._value = TextValue.collapsed(text, len(text))
        self._last_selection: tuple[int, int] | None = None
        self._resolver = resolver
        self.on_change = on_change
        # Called on the pasteImage key; the host reads its clipboard and calls paste_image.
        self.on_paste_request: Callable[[], None] | None = None

        self.autocomplete = HashtagAutocomplete(
            tags if tags is not None else TagIndex(limit=self._settings.max_suggestions),
            keybindings=self._keybindings,
        )
        self._paste = ImagePaste(
            uploader,
            placeholder=self._settings.placeholder,
            default_mime_type=self._settings.paste_mime_type,
        )

    # -- TextBuffer -----------------------------------------------------------

    @property
    def value(self) -> TextValue:
        return self._value

    @property
    def text(self) -> str:
        return self._value.text

    def apply(self, value: TextValue) -> None:
        """Replace the text/selection from inside the editor; notifies ``on_change``."""
        changed = value.text != self._value.text
        self.set_value(value)
        if changed and self.on_change is not None:
            self.on_change(value.text)

    def set_value(self, value: TextValue) -> None:
        """Take a text/selection change reported by the host."""
        self._value = value
        if value.is_valid and not value.is_collapsed:
            self._last_selection = (value.selection_start, value.selection_end or value.selection_start)
        self.autocomplete.update(value.text, value.selection_start, value.selection_end)

    # -- editing --------------------------------------------------------------

    def insert_text(self, inserted: str) -> None:
        """Type ``inserted`` over the current selection."""
        value = self._value
        if value.is_valid:
            start, end = value.selection_start, value.selection_end or value.selection_start
        else:
            start = end = len(value.text)
        new_text = value.text[:start] + inserted + value.text[end:]
        self.apply(TextValue.collapsed(new_text, start + len(inserted)))

    def handle_key(self, key: str) -> bool:
        """Handle a key press. Returns False when the host should run its default action."""
        result = self.autocomplete.handle_key(key, self._value.text)
        if result.handled:
            if result.value is not None:
                self.apply(result.value)
            return True

        kb = self._keybindings
        if kb.matches(key, "toggleBold"):
            self._toggle(toggle_bold)
            return True
        if kb.matches(key, "toggleItalic"):
            self._toggle(toggle_italic)
            return True
        if kb.matches(key, "newLine"):
            continued = continue_list(self._value)
            if continued is None:
                return False
            self.apply(continued)
            return True
        if kb.matches(key, "pasteImage"):
            if self.on_paste_request is None:
                return False
            self.on_paste_request()
            return True
        return False

    def _toggle(self, command: Callable[[TextValue, tuple[int, int] | None], TextValue | None]) -> None:
        value = command(self._value, self._last_selection)
        if value is not None:
            self.apply(value)
        # The remembered range belongs to the text before the toggle.
        self._last_selection = None

    def toggle_checkbox(self, start: int) -> None:
        text = toggle_checkbox(self._value.text, start)
        if text != self._value.text:
            self.apply(self._value.with_text(text))

    # -- hashtag dropdown -----------------------------------------------------

    def select_suggestion(self, tag: Tag | int) -> bool:
        """Commit a dropdown row (by tag or row index). Returns True if the text changed."""
        if isinstance(tag, int):
            suggestions = self.autocomplete.suggestions
            if not 0 <= tag < len(suggestions):
                return False
            tag = suggestions[tag]
        value = self.autocomplete.commit(tag, self._value.text)
        if value is None:
            return False
        self.apply(value)
        return True

    def begin_pointer_selection(self) -> None:
        self.autocomplete.begin_pointer_selection()

    def focus_lost(self) -> None:
        if self.autocomplete.focus_lost():
            logger.debug("Hashtag dropdown closed on focus loss")

    def dropdown_anchor(self, measure: MeasureFn = visible_width) -> tuple[int, int] | None:
        return self.autocomplete.anchor(self._value.text, measure)

    # -- images ---------------------------------------------------------------

    @property
    def uploading(self) -> bool:
        return self._paste.busy

    async def paste_image(self, data: bytes, mime_type: str | None = None) -> bool:
        return await self._paste.paste(self, data, mime_type)

    # -- views ----------------------------------------------------------------

    def segments(self) -> list[StyledSegment]:
        """Live-styled segments of the current text (markers visible)."""
        return annotate(self._value.text)

    def preview(self) -> list[PreviewBlock]:
        """Rendered view shown when the editor is not focused."""
        return build_preview(self._value.text, self._resolver)
