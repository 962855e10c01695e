"""Editor keybindings manager.

Hosts report keys as ids such as ``"down"``, ``"enter"`` or ``"ctrl+b"``.
Modifier order does not matter and ``super``/``meta``/``cmd`` are treated as
``ctrl`` so the same bindings work on macOS.
"""

from __future__ import annotations

from typing import Literal

EditorAction = Literal[
    # Hashtag dropdown
    "selectUp",
    "selectDown",
    "selectConfirm",
    "selectCancel",
    # Formatting
    "toggleBold",
    "toggleItalic",
    # Text input
    "newLine",
    "pasteImage",
]

KeyId = str

EditorKeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    "selectUp": "up",
    "selectDown": "down",
    "selectConfirm": ["enter", "tab"],
    "selectCancel": "escape",
    "toggleBold": "ctrl+b",
    "toggleItalic": "ctrl+i",
    "newLine": "enter",
    "pasteImage": "ctrl+v",
}

_MODIFIER_ALIASES = {
    "cmd": "ctrl",
    "meta": "ctrl",
    "super": "ctrl",
    "control": "ctrl",
    "option": "alt",
}

_KEY_ALIASES = {
    "return": "enter",
    "esc": "escape",
    "arrowup": "up",
    "arrowdown": "down",
}


def normalize_key(key: KeyId) -> str:
    """Canonical form of a key id: lowercase, aliased, modifiers sorted."""
    parts = [p for p in key.strip().lower().split("+") if p]
    if not parts:
        return ""
    *mods, base = parts
    base = _KEY_ALIASES.get(base, base)
    canon_mods = sorted({_MODIFIER_ALIASES.get(m, m) for m in mods})
    return "+".join([*canon_mods, base])


class EditorKeybindingsManager:
    """Maps editor actions to the keys that trigger them."""

    def __init__(self, config: EditorKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[EditorAction, list[str]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: EditorKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for source in (DEFAULT_EDITOR_KEYBINDINGS, config):
            for action, keys in source.items():
                key_array = keys if isinstance(keys, list) else [keys]
                self._action_to_keys[action] = [normalize_key(k) for k in key_array]

    def matches(self, key: KeyId, action: EditorAction) -> bool:
        """Check if a key triggers a specific action."""
        return normalize_key(key) in self._action_to_keys.get(action, [])

    def get_keys(self, action: EditorAction) -> list[str]:
        return list(self._action_to_keys.get(action, []))

    def set_config(self, config: EditorKeybindingsConfig) -> None:
        self._build_maps(config)


_global_editor_keybindings: EditorKeybindingsManager | None = None


def get_editor_keybindings() -> EditorKeybindingsManager:
    global _global_editor_keybindings
    if _global_editor_keybindings is None:
        _global_editor_keybindings = EditorKeybindingsManager()
    return _global_editor_keybindings


def set_editor_keybindings(manager: EditorKeybindingsManager) -> None:
    global _global_editor_keybindings
    _global_editor_keybindings = manager
