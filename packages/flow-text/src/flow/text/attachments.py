"""Task attachment client: the upload service and image resolver for pasted images.

Talks to the Flow Tasks REST API::

    GET  {base}/tasks/{task_id}/attachments   -> {"success": true, "data": [Attachment, ...]}
    POST {base}/tasks/{task_id}/attachments   multipart "file" -> {"success": true, "data": Attachment}

Image references in descriptions are 1-based positions among the task's
image attachments, oldest first: ``[img1]`` is the first image uploaded.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Literal
from urllib.parse import urljoin

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

AttachmentType = Literal["link", "document", "image"]


class AttachmentError(Exception):
    """The API answered with ``success: false`` or an unreadable body."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class Attachment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    task_id: str = Field(alias="taskId")
    type: AttachmentType = "link"
    name: str
    url: str = ""
    mime_type: str | None = Field(default=None, alias="mimeType")
    size_bytes: int | None = Field(default=None, alias="sizeBytes")
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @property
    def is_image(self) -> bool:
        return self.type == "image"

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Attachment:
        return cls.model_validate(
            {
                "id": payload.get("id"),
                "taskId": payload.get("task_id"),
                "type": payload.get("type") or "link",
                "name": payload.get("name"),
                "url": payload.get("url") or "",
                "mimeType": payload.get("mime_type"),
                "sizeBytes": payload.get("size_bytes"),
                "thumbnailUrl": payload.get("thumbnail_url"),
                "createdAt": payload.get("created_at"),
            }
        )


def _unwrap(response: httpx.Response) -> Any:
    """Return ``data`` from the API envelope, raising on HTTP or API errors."""
    response.raise_for_status()
    try:
        body = response.json()
    except ValueError as e:
        raise AttachmentError(f"Invalid JSON from {response.request.url}") from e

    if not isinstance(body, dict) or not body.get("success", False):
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            raise AttachmentError(str(error.get("message", "request failed")), error.get("code"))
        raise AttachmentError("request failed")
    return body.get("data")


def _image_order_key(attachment: Attachment) -> float:
    return attachment.created_at.timestamp() if attachment.created_at else 0.0


class AttachmentClient:
    """``UploadService`` + ``ImageResolver`` backed by a task's attachments."""

    def __init__(
        self,
        base_url: str,
        task_id: str,
        *,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/") + "/"
        self._task_id = task_id
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(headers=headers, timeout=timeout)
        if client is not None and headers:
            self._client.headers.update(headers)
        self._images: list[Attachment] = []

    @property
    def images(self) -> list[Attachment]:
        """Cached image attachments, oldest first."""
        return list(self._images)

    def _url(self, path: str) -> str:
        return urljoin(self._base_url, path.lstrip("/"))

    async def list_attachments(self) -> list[Attachment]:
        """Fetch the task's attachments and refresh the image cache."""
        response = await self._client.get(self._url(f"tasks/{self._task_id}/attachments"))
        data = _unwrap(response) or []
        try:
            attachments = [Attachment.from_api(item) for item in data]
        except ValidationError as e:
            raise AttachmentError(f"Unexpected attachment payload: {e}") from e

        self._images = sorted((a for a in attachments if a.is_image), key=_image_order_key)
        return attachments

    async def upload(self, data: bytes, mime_type: str) -> int | None:
        """Upload pasted image bytes; returns the new image's 1-based index or None."""
        ext = mime_type.split("/")[-1] or "bin"
        filename = f"pasted-image-{int(time.time() * 1000)}.{ext}"
        try:
            await self.list_attachments()
            previous = len(self._images)

            response = await self._client.post(
                self._url(f"tasks/{self._task_id}/attachments"),
                files={"file": (filename, data, mime_type)},
            )
            payload = _unwrap(response)
            if not isinstance(payload, dict):
                raise AttachmentError("Upload response has no attachment")
            created = Attachment.from_api(payload)
        except (httpx.HTTPError, AttachmentError, ValidationError) as e:
            logger.warning("Failed to upload image for task %s: %s", self._task_id, e)
            return None

        self._images.append(created)
        logger.debug("Uploaded %s as image %d", created.name, previous + 1)
        return previous + 1

    def resolve(self, index: int) -> str | None:
        """URL of image ``index`` (1-based) from the cache; relative URLs are made absolute."""
        if not 1 <= index <= len(self._images):
            return None
        url = self._images[index - 1].url
        if not url:
            return None
        if url.startswith(("http://", "https://", "data:")):
            return url
        return self._url(url)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AttachmentClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
