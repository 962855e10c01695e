"""Task-list tags and the in-memory suggestion source.

Tags are the ``#List`` / ``#List/Sublist`` labels a description can
reference. ``TagIndex`` ranks them for an in-progress ``#query`` with a
subsequence match: every query character must appear in order in the
tag's full path. Lower score = better match.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Protocol

from pydantic import BaseModel, ConfigDict, Field

_BOUNDARY_RE = re.compile(r"[\s\-_./]")


class Tag(BaseModel):
    """A task list addressable as ``#<full_path>``."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str
    full_path: str = Field(default="", alias="fullPath")
    depth: int = 0
    parent_id: str | None = Field(default=None, alias="parentId")
    children: list[Tag] = Field(default_factory=list)

    def model_post_init(self, __context: Any) -> None:
        if not self.full_path:
            self.full_path = self.name

    @property
    def hashtag(self) -> str:
        return f"#{self.full_path}"

    @property
    def is_sublist(self) -> bool:
        return self.depth > 0

    @property
    def label(self) -> str:
        """Dropdown label: sublists show as ``/name`` under their parent."""
        return f"/{self.name}" if self.is_sublist else self.name

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Tag:
        """Parse the API's snake_case list JSON (``full_path``, ``parent_id``)."""
        data = dict(payload)
        if "full_path" in data:
            data["fullPath"] = data.pop("full_path")
        if "parent_id" in data:
            data["parentId"] = data.pop("parent_id")
        data["children"] = [cls.from_api(c) for c in data.get("children") or []]
        return cls.model_validate(data)


class TagSource(Protocol):
    """Supplies ordered tag suggestions for a query (the text after ``#``)."""

    def query(self, prefix: str) -> list[Tag]: ...


def match_score(query: str, text: str) -> float | None:
    """Score ``query`` as an in-order subsequence of ``text``; ``None`` if it isn't one."""
    query = query.lower()
    text = text.lower()
    if not query:
        return 0.0
    if len(query) > len(text):
        return None

    qi = 0
    score = 0.0
    last = -1
    run = 0
    for i, ch in enumerate(text):
        if qi >= len(query):
            break
        if ch != query[qi]:
            continue

        if last == i - 1:
            run += 1
            score -= run * 5
        else:
            run = 0
            if last >= 0:
                score += (i - last - 1) * 2

        if i == 0 or _BOUNDARY_RE.match(text[i - 1]):
            score -= 10
        score += i * 0.1

        last = i
        qi += 1

    if qi < len(query):
        return None
    return score


def flatten_tags(tags: Iterable[Tag]) -> list[Tag]:
    """Depth-first, parents before their sublists."""
    out: list[Tag] = []
    for tag in tags:
        out.append(tag)
        out.extend(flatten_tags(tag.children))
    return out


class TagIndex:
    """In-memory ``TagSource`` over a (possibly nested) set of tags."""

    def __init__(self, tags: Iterable[Tag] = (), *, limit: int = 8) -> None:
        self._tags = flatten_tags(tags)
        self._limit = limit

    @classmethod
    def from_api(cls, payload: list[dict[str, Any]], *, limit: int = 8) -> TagIndex:
        return cls([Tag.from_api(item) for item in payload], limit=limit)

    @property
    def tags(self) -> list[Tag]:
        return list(self._tags)

    def set_tags(self, tags: Iterable[Tag]) -> None:
        self._tags = flatten_tags(tags)

    def query(self, prefix: str) -> list[Tag]:
        if not prefix:
            return self._tags[: self._limit]

        scored: list[tuple[float, int, Tag]] = []
        for order, tag in enumerate(self._tags):
            score = match_score(prefix, tag.full_path)
            if score is None:
                continue
            # An exact name hit always wins.
            if tag.name.lower() == prefix.lower() or tag.full_path.lower() == prefix.lower():
                score -= 1000
            scored.append((score, order, tag))

        scored.sort(key=lambda item: (item[0], item[1]))
        return [tag for _, _, tag in scored[: self._limit]]
