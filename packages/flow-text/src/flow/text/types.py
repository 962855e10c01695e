"""Value types shared by the editor components.

The host editing surface owns the text; everything here is a snapshot of
it (text plus selection) or an edit to apply back.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Protocol


@dataclass(frozen=True)
class TextValue:
    """Text plus selection, as reported by (and returned to) the host."""

    text: str = ""
    selection_start: int = 0
    selection_end: int | None = None

    def __post_init__(self) -> None:
        if self.selection_end is None:
            object.__setattr__(self, "selection_end", self.selection_start)

    @classmethod
    def collapsed(cls, text: str, offset: int) -> TextValue:
        return cls(text=text, selection_start=offset, selection_end=offset)

    @property
    def cursor(self) -> int:
        return self.selection_start

    @property
    def is_collapsed(self) -> bool:
        return self.selection_start == self.selection_end

    @property
    def is_valid(self) -> bool:
        end = self.selection_end if self.selection_end is not None else -1
        return 0 <= self.selection_start <= end <= len(self.text)

    @property
    def selected_text(self) -> str:
        return self.text[self.selection_start : self.selection_end]

    def with_text(self, text: str) -> TextValue:
        return replace(self, text=text)


class TextBuffer(Protocol):
    """Anything holding a mutable ``TextValue`` (the editor facade, a host adapter)."""

    @property
    def value(self) -> TextValue: ...

    def apply(self, value: TextValue) -> None: ...
