"""Hashtag autocomplete for the description editor.

Tracks an in-progress ``#query`` at the cursor, keeps the suggestion list
and the highlighted row, and splices the chosen tag into the text.

States::

    IDLE --(# typed, no whitespace up to cursor)--> COMPOSING
    COMPOSING --(query edited)--> COMPOSING
    COMPOSING --(whitespace, escape, focus loss, no suggestions)--> IDLE
    COMPOSING --(selection)--> COMMITTING --(splice applied)--> IDLE

The controller never touches the host's text; ``commit`` returns the new
``TextValue`` for the host to apply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from flow.text.keybindings import EditorKeybindingsManager, get_editor_keybindings
from flow.text.tags import Tag, TagSource
from flow.text.types import TextValue
from flow.text.width import MeasureFn, anchor_position, visible_width

logger = logging.getLogger(__name__)


class AutocompleteState(str, Enum):
    IDLE = "idle"
    COMPOSING = "composing"
    COMMITTING = "committing"


@dataclass(frozen=True)
class HashtagQuery:
    start: int  # index of the '#'
    cursor: int
    query: str


def find_hashtag_query(
    text: str, cursor: int, selection_end: int | None = None
) -> HashtagQuery | None:
    """Find the ``#query`` being typed at ``cursor``, if any."""
    if cursor < 0 or cursor > len(text):
        return None
    if selection_end is not None and selection_end != cursor:
        return None

    before = text[:cursor]
    hash_index = before.rfind("#")
    if hash_index == -1:
        return None

    query = before[hash_index + 1 :]
    if any(ch.isspace() for ch in query):
        return None
    return HashtagQuery(start=hash_index, cursor=cursor, query=query)


def splice_hashtag(text: str, query_start: int, cursor: int, tag: Tag) -> TextValue | None:
    """Replace ``text[query_start:cursor]`` with ``#<full_path> ``.

    Returns ``None`` when the tracked ``#`` is no longer where it was.
    """
    if not 0 <= query_start < len(text) or text[query_start] != "#":
        return None

    end = max(query_start, min(cursor, len(text)))
    inserted = f"#{tag.full_path} "
    new_text = text[:query_start] + inserted + text[end:]
    return TextValue.collapsed(new_text, query_start + len(inserted))


@dataclass
class AutocompleteSession:
    query_start: int
    cursor_at_query_time: int
    query: str
    suggestions: list[Tag] = field(default_factory=list)
    selected_index: int = 0

    @property
    def selected(self) -> Tag | None:
        if 0 <= self.selected_index < len(self.suggestions):
            return self.suggestions[self.selected_index]
        return None


@dataclass(frozen=True)
class KeyResult:
    handled: bool
    value: TextValue | None = None


class HashtagAutocomplete:
    """Autocomplete session owner, driven by the host's change and key events."""

    def __init__(
        self,
        source: TagSource,
        *,
        keybindings: EditorKeybindingsManager | None = None,
    ) -> None:
        self._source = source
        self._keybindings = keybindings
        self._session: AutocompleteSession | None = None
        self._state = AutocompleteState.IDLE

    # -- state ----------------------------------------------------------------

    @property
    def state(self) -> AutocompleteState:
        return self._state

    @property
    def session(self) -> AutocompleteSession | None:
        return self._session

    @property
    def is_visible(self) -> bool:
        """Whether the host should show the dropdown."""
        return self._session is not None and bool(self._session.suggestions)

    @property
    def suggestions(self) -> list[Tag]:
        return list(self._session.suggestions) if self._session else []

    @property
    def selected_index(self) -> int:
        return self._session.selected_index if self._session else 0

    def _kb(self) -> EditorKeybindingsManager:
        return self._keybindings or get_editor_keybindings()

    def _reset(self) -> None:
        self._session = None
        self._state = AutocompleteState.IDLE

    def _fetch(self, query: str) -> list[Tag]:
        try:
            return list(self._source.query(query))
        except Exception:
            logger.warning("Tag suggestions failed for %r", query, exc_info=True)
            return []

    # -- transitions ----------------------------------------------------------

    def update(
        self, text: str, cursor: int, selection_end: int | None = None
    ) -> AutocompleteSession | None:
        """Re-evaluate the session after a text or cursor change."""
        found = find_hashtag_query(text, cursor, selection_end)
        if found is None:
            self._reset()
            return None

        current = self._session
        if current is not None and current.query_start == found.start and current.query == found.query:
            current.cursor_at_query_time = found.cursor
            return current

        suggestions = self._fetch(found.query) if found.query else []
        if found.query and not suggestions:
            self._reset()
            return None

        self._session = AutocompleteSession(
            query_start=found.start,
            cursor_at_query_time=found.cursor,
            query=found.query,
            suggestions=suggestions,
        )
        self._state = AutocompleteState.COMPOSING
        return self._session

    def move_selection(self, delta: int) -> None:
        """Move the highlighted row, wrapping at both ends."""
        if not self.is_visible:
            return
        assert self._session is not None
        count = len(self._session.suggestions)
        self._session.selected_index = (self._session.selected_index + delta) % count

    def begin_pointer_selection(self) -> None:
        """A pointer went down on a suggestion; focus loss must not cancel now."""
        if self._session is not None:
            self._state = AutocompleteState.COMMITTING

    def commit(self, tag: Tag, text: str) -> TextValue | None:
        """Splice ``tag`` into ``text`` and end the session."""
        session = self._session
        if session is None:
            self._reset()
            return None

        self._state = AutocompleteState.COMMITTING
        value = splice_hashtag(text, session.query_start, session.cursor_at_query_time, tag)
        if value is None:
            logger.debug(
                "Dropped hashtag commit: '#' no longer at %d", session.query_start
            )
        self._reset()
        return value

    def cancel(self) -> None:
        self._reset()

    def focus_lost(self) -> bool:
        """Handle focus leaving the editor. Returns True if the session was dropped."""
        if self._state is AutocompleteState.COMMITTING:
            return False
        had_session = self._session is not None
        self._reset()
        return had_session

    def handle_key(self, key: str, text: str) -> KeyResult:
        """Dropdown navigation. Unhandled keys fall through to the editor."""
        if not self.is_visible:
            return KeyResult(handled=False)
        assert self._session is not None

        kb = self._kb()
        if kb.matches(key, "selectDown"):
            self.move_selection(1)
            return KeyResult(handled=True)
        if kb.matches(key, "selectUp"):
            self.move_selection(-1)
            return KeyResult(handled=True)
        if kb.matches(key, "selectConfirm"):
            selected = self._session.selected
            if selected is None:
                return KeyResult(handled=False)
            return KeyResult(handled=True, value=self.commit(selected, text))
        if kb.matches(key, "selectCancel"):
            self.cancel()
            return KeyResult(handled=True)
        return KeyResult(handled=False)

    def anchor(self, text: str, measure: MeasureFn = visible_width) -> tuple[int, int] | None:
        """Where to hang the dropdown: ``(x, line)`` of the tracked ``#``."""
        if self._session is None:
            return None
        return anchor_position(text, self._session.query_start, measure)
