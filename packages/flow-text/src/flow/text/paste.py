"""Paste-to-upload for images.

Pasting an image drops a ``[img...]`` placeholder at the cursor right away,
uploads in the background, then swaps the placeholder for ``[imgN]`` (or
removes it if the upload fails). One upload at a time.
"""

from __future__ import annotations

import logging
from typing import Protocol

from flow.text.types import TextBuffer, TextValue

logger = logging.getLogger(__name__)

UPLOAD_PLACEHOLDER = "[img...]"
DEFAULT_IMAGE_MIME_TYPE = "image/png"


class UploadService(Protocol):
    """Stores image bytes; returns the new image's 1-based index, or None on failure."""

    async def upload(self, data: bytes, mime_type: str) -> int | None: ...


class ImageResolver(Protocol):
    """Maps a 1-based image index to a displayable URL."""

    def resolve(self, index: int) -> str | None: ...


def image_reference(index: int) -> str:
    return f"[img{index}]"


def _replace_first(value: TextValue, old: str, new: str) -> TextValue:
    pos = value.text.find(old)
    if pos == -1:
        return value

    text = value.text[:pos] + new + value.text[pos + len(old) :]
    delta = len(new) - len(old)

    def shift(offset: int) -> int:
        if offset >= pos + len(old):
            return offset + delta
        return min(offset, pos + len(new))

    end = value.selection_end if value.selection_end is not None else value.selection_start
    return TextValue(text, shift(value.selection_start), shift(end))


class ImagePaste:
    """Runs the placeholder → upload → substitution cycle against a text buffer."""

    def __init__(
        self,
        uploader: UploadService | None,
        *,
        placeholder: str = UPLOAD_PLACEHOLDER,
        default_mime_type: str = DEFAULT_IMAGE_MIME_TYPE,
    ) -> None:
        self._uploader = uploader
        self._placeholder = placeholder
        self._default_mime_type = default_mime_type
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def placeholder(self) -> str:
        return self._placeholder

    def _insert_placeholder(self, buffer: TextBuffer) -> None:
        value = buffer.value
        text = value.text
        if value.is_valid:
            start = value.selection_start
            end = value.selection_end if value.selection_end is not None else start
        else:
            start = end = len(text)
        new_text = text[:start] + self._placeholder + text[end:]
        buffer.apply(TextValue.collapsed(new_text, start + len(self._placeholder)))

    async def paste(
        self, buffer: TextBuffer, data: bytes, mime_type: str | None = None
    ) -> bool:
        """Upload ``data`` and reference it in ``buffer``.

        Returns True once ``[imgN]`` is in the text. Returns False after
        removing the placeholder if the upload failed, and False without
        touching the text when nothing can be uploaded (no uploader, empty
        data, or an upload already running).
        """
        if self._uploader is None or not data:
            return False
        if self._busy:
            logger.debug("Image paste ignored: upload already in progress")
            return False

        self._busy = True
        try:
            self._insert_placeholder(buffer)
            try:
                index = await self._uploader.upload(data, mime_type or self._default_mime_type)
            except Exception:
                logger.warning("Image upload failed", exc_info=True)
                index = None

            if index is not None:
                buffer.apply(_replace_first(buffer.value, self._placeholder, image_reference(index)))
            else:
                buffer.apply(_replace_first(buffer.value, self._placeholder, ""))
            return index is not None
        finally:
            self._busy = False
