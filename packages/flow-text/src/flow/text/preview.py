"""Rendered (read-only) view of a description.

Parses the markdown with markdown-it and flattens it into blocks of styled
inline runs. Hashtags stay inline; ``[imgN]`` references become
block-level image blocks, resolved to URLs through an ``ImageResolver``.

markdown-it uses an open/close token model (``paragraph_open`` /
``paragraph_close``) with inline content in ``token.children``; this
module keeps a small stack of open containers (quotes, list items) to
know what kind of block each inline token belongs to.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from markdown_it import MarkdownIt
from markdown_it.token import Token

from flow.text.formatting import find_checkboxes
from flow.text.paste import ImageResolver
from flow.text.patterns import HASHTAG_RE, IMAGE_REF_RE


class RunStyle(str, Enum):
    PLAIN = "plain"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "bold_italic"
    STRIKE = "strike"
    CODE = "code"
    LINK = "link"
    HASHTAG = "hashtag"


class BlockKind(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST_ITEM = "list_item"
    QUOTE = "quote"
    CODE = "code"
    RULE = "rule"
    IMAGE = "image"


@dataclass
class PreviewRun:
    text: str
    style: RunStyle = RunStyle.PLAIN
    href: str | None = None


@dataclass
class PreviewBlock:
    kind: BlockKind
    runs: list[PreviewRun] = field(default_factory=list)
    level: int = 0  # heading level, list nesting or quote depth
    marker: str | None = None  # "-" or "3." for list items
    checked: bool | None = None
    checkbox_start: int | None = None  # source offset, for toggle_checkbox
    language: str | None = None
    image_index: int | None = None
    image_url: str | None = None
    pending: bool = False

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs)

    @property
    def broken(self) -> bool:
        return self.kind is BlockKind.IMAGE and not self.pending and self.image_url is None


_SPECIAL_RE = re.compile(f"(?P<tag>{HASHTAG_RE.pattern})|(?P<img>{IMAGE_REF_RE.pattern})")
_TASK_PREFIX_RE = re.compile(r"^\[([ x])\](?: |$)")

_md_parser = MarkdownIt("commonmark").enable("strikethrough")


@dataclass
class _InlineState:
    bold: bool = False
    italic: bool = False
    strike: bool = False
    link_href: str | None = None

    def style(self) -> RunStyle:
        if self.link_href is not None:
            return RunStyle.LINK
        if self.bold and self.italic:
            return RunStyle.BOLD_ITALIC
        if self.bold:
            return RunStyle.BOLD
        if self.italic:
            return RunStyle.ITALIC
        if self.strike:
            return RunStyle.STRIKE
        return RunStyle.PLAIN


@dataclass
class _Container:
    kind: BlockKind
    level: int
    item: PreviewBlock | None = None  # list items only
    line: int | None = None
    used: bool = False


def _append_run(block: PreviewBlock, run: PreviewRun) -> None:
    if not run.text:
        return
    if block.runs:
        last = block.runs[-1]
        if last.style is run.style and last.href == run.href and run.style is not RunStyle.HASHTAG:
            last.text += run.text
            return
    block.runs.append(run)


class _PreviewBuilder:
    def __init__(self, source: str, resolver: ImageResolver | None) -> None:
        self._source = source
        self._resolver = resolver
        self._checkbox_lines = {c.line: c.start for c in find_checkboxes(source)}
        self._containers: list[_Container] = []
        self._list_depth = 0
        self._quote_depth = 0
        self._heading_level = 0
        self.blocks: list[PreviewBlock] = []

    # -- blocks ---------------------------------------------------------------

    def _open_text_block(self) -> tuple[PreviewBlock, _Container | None]:
        if self._heading_level:
            return PreviewBlock(BlockKind.HEADING, level=self._heading_level), None
        if not self._containers:
            return PreviewBlock(BlockKind.PARAGRAPH), None

        top = self._containers[-1]
        if top.item is not None and not top.used:
            top.used = True
            return top.item, top
        # Continuation paragraphs of a list item carry no marker.
        return PreviewBlock(top.kind, level=top.level), None

    def _close(self, block: PreviewBlock, *, keep_empty: bool = False) -> None:
        if not (keep_empty or block.text.strip()):
            return
        if block.runs:
            block.runs[0].text = block.runs[0].text.lstrip(" ")
            block.runs[-1].text = block.runs[-1].text.rstrip(" ")
            block.runs = [r for r in block.runs if r.text]
        self.blocks.append(block)

    def _image_block(self, ref: str) -> PreviewBlock:
        m = IMAGE_REF_RE.fullmatch(ref)
        assert m is not None
        if not m.group(1).isdigit():
            return PreviewBlock(BlockKind.IMAGE, pending=True)
        index = int(m.group(1))
        url = self._resolver.resolve(index) if self._resolver is not None else None
        return PreviewBlock(BlockKind.IMAGE, image_index=index, image_url=url)

    # -- inline ---------------------------------------------------------------

    def _emit_text(
        self, block: PreviewBlock, text: str, state: _InlineState, keep_empty: bool
    ) -> tuple[PreviewBlock, bool]:
        """Add ``text`` to ``block``, splitting out hashtags and block-level images."""
        if state.link_href is not None:
            _append_run(block, PreviewRun(text, RunStyle.LINK, state.link_href))
            return block, keep_empty

        last = 0
        for m in _SPECIAL_RE.finditer(text):
            _append_run(block, PreviewRun(text[last : m.start()], state.style()))
            if m.group("tag"):
                _append_run(block, PreviewRun(m.group(0), RunStyle.HASHTAG))
            else:
                self._close(block, keep_empty=keep_empty)
                self.blocks.append(self._image_block(m.group(0)))
                block = PreviewBlock(block.kind, level=block.level)
                keep_empty = False
            last = m.end()
        _append_run(block, PreviewRun(text[last:], state.style()))
        return block, keep_empty

    def _inline(self, token: Token) -> None:
        block, container = self._open_text_block()
        keep_empty = container is not None
        state = _InlineState()

        for i, child in enumerate(token.children or []):
            kind = child.type
            if kind == "text":
                text = child.content
                if i == 0 and container is not None:
                    task = _TASK_PREFIX_RE.match(text)
                    if task:
                        block.checked = task.group(1) == "x"
                        block.checkbox_start = self._checkbox_lines.get(container.line or 0)
                        text = text[task.end() :]
                block, keep_empty = self._emit_text(block, text, state, keep_empty)
            elif kind == "softbreak":
                block, keep_empty = self._emit_text(block, " ", state, keep_empty)
            elif kind == "hardbreak":
                _append_run(block, PreviewRun("\n", state.style()))
            elif kind == "code_inline":
                _append_run(block, PreviewRun(child.content, RunStyle.CODE))
            elif kind == "html_inline":
                block, keep_empty = self._emit_text(block, child.content, state, keep_empty)
            elif kind == "image":
                _append_run(block, PreviewRun(child.content, state.style()))
            elif kind in ("strong_open", "strong_close"):
                state.bold = kind == "strong_open"
            elif kind in ("em_open", "em_close"):
                state.italic = kind == "em_open"
            elif kind in ("s_open", "s_close"):
                state.strike = kind == "s_open"
            elif kind == "link_open":
                href = child.attrGet("href")
                state.link_href = str(href) if href is not None else ""
            elif kind == "link_close":
                state.link_href = None

        self._close(block, keep_empty=keep_empty)

    # -- block tokens ---------------------------------------------------------

    def build(self) -> list[PreviewBlock]:
        for token in _md_parser.parse(self._source):
            t = token.type
            if t == "heading_open":
                self._heading_level = int(token.tag[1:])
            elif t == "heading_close":
                self._heading_level = 0
            elif t == "blockquote_open":
                self._quote_depth += 1
                self._containers.append(_Container(BlockKind.QUOTE, self._quote_depth))
            elif t == "blockquote_close":
                self._quote_depth -= 1
                self._containers.pop()
            elif t in ("bullet_list_open", "ordered_list_open"):
                self._list_depth += 1
            elif t in ("bullet_list_close", "ordered_list_close"):
                self._list_depth -= 1
            elif t == "list_item_open":
                marker = f"{token.info}." if token.info else "-"
                item = PreviewBlock(BlockKind.LIST_ITEM, level=self._list_depth, marker=marker)
                line = token.map[0] if token.map else None
                self._containers.append(
                    _Container(BlockKind.LIST_ITEM, self._list_depth, item=item, line=line)
                )
            elif t == "list_item_close":
                container = self._containers.pop()
                if container.item is not None and not container.used:
                    self.blocks.append(container.item)
            elif t == "inline":
                self._inline(token)
            elif t in ("fence", "code_block"):
                self.blocks.append(
                    PreviewBlock(
                        BlockKind.CODE,
                        runs=[PreviewRun(token.content.rstrip("\n"), RunStyle.CODE)],
                        language=token.info.strip() or None,
                    )
                )
            elif t == "hr":
                self.blocks.append(PreviewBlock(BlockKind.RULE))
            elif t == "html_block":
                block, keep = self._emit_text(
                    PreviewBlock(BlockKind.PARAGRAPH), token.content.strip(), _InlineState(), False
                )
                self._close(block, keep_empty=keep)
        return self.blocks


def build_preview(text: str, resolver: ImageResolver | None = None) -> list[PreviewBlock]:
    """Flatten ``text`` into preview blocks, in document order."""
    if not text.strip():
        return []
    return _PreviewBuilder(text, resolver).build()
