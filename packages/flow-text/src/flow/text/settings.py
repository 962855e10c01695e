"""Editor settings with JSON persistence.

Settings live in ``~/.flow/editor.json`` with camelCase keys. Keyword
overrides (from the CLI or a host) win over the file; ``None`` overrides
are ignored.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from flow.text.paste import DEFAULT_IMAGE_MIME_TYPE, UPLOAD_PLACEHOLDER

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".flow"
SETTINGS_FILE_NAME = "editor.json"


@dataclass
class EditorSettings:
    """Description editor options."""

    max_suggestions: int = 8
    placeholder: str = UPLOAD_PLACEHOLDER
    paste_mime_type: str = DEFAULT_IMAGE_MIME_TYPE
    api_base_url: str = "http://localhost:8080/api/v1"
    api_token: str | None = None
    task_id: str | None = None
    keybindings: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {_camel(k): v for k, v in asdict(self).items() if v is not None}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


_FIELD_BY_KEY = {_camel(f.name): f.name for f in fields(EditorSettings)}


def default_settings_path() -> str:
    """``~/.flow/editor.json``."""
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME, SETTINGS_FILE_NAME)


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        content = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(content, dict):
        return {}, ValueError(f"{path}: expected a JSON object")
    return content, None


def load_settings(path: str | None = None, **overrides: Any) -> EditorSettings:
    """Read settings from ``path`` (default ``~/.flow/editor.json``) and apply overrides.

    A missing file gives the defaults. An unreadable file is logged and
    treated as empty. Unknown keys are ignored.
    """
    settings_path = path or default_settings_path()
    raw, error = _load_from_file(settings_path)
    if error is not None:
        logger.warning("Ignoring unreadable settings file %s: %s", settings_path, error)

    values: dict[str, Any] = {}
    for key, value in raw.items():
        name = _FIELD_BY_KEY.get(key)
        if name is None:
            logger.debug("Unknown settings key %r in %s", key, settings_path)
            continue
        values[name] = value

    for name, value in overrides.items():
        if value is None:
            continue
        if name not in _FIELD_BY_KEY.values():
            raise TypeError(f"Unknown setting: {name}")
        values[name] = value

    return EditorSettings(**values)


def save_settings(settings: EditorSettings, path: str | None = None) -> None:
    """Write ``settings`` as camelCase JSON, creating the directory if needed."""
    settings_path = path or default_settings_path()
    os.makedirs(os.path.dirname(settings_path) or ".", exist_ok=True)
    Path(settings_path).write_text(
        json.dumps(settings.to_json(), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
