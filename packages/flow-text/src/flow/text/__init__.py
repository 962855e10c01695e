"""flow-text: live markdown styling, hashtag autocomplete and image paste for task descriptions."""

# Hashtag autocomplete
from flow.text.autocomplete import (
    AutocompleteSession,
    AutocompleteState,
    HashtagAutocomplete,
    HashtagQuery,
    KeyResult,
    find_hashtag_query,
    splice_hashtag,
)

# Editor facade
from flow.text.editor import DescriptionEditor

# Formatting commands
from flow.text.formatting import (
    Checkbox,
    continue_list,
    find_checkboxes,
    toggle_bold,
    toggle_checkbox,
    toggle_italic,
    toggle_wrap,
)

# Keybindings
from flow.text.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    EditorKeybindingsManager,
    get_editor_keybindings,
    set_editor_keybindings,
)

# Image paste
from flow.text.paste import (
    UPLOAD_PLACEHOLDER,
    ImagePaste,
    ImageResolver,
    UploadService,
    image_reference,
)

# Pattern scanning and live segments
from flow.text.patterns import PatternKind, PatternMatch, image_index, scan

# Rendered view
from flow.text.preview import BlockKind, PreviewBlock, PreviewRun, RunStyle, build_preview

# Settings
from flow.text.settings import EditorSettings, load_settings, save_settings
from flow.text.spans import SegmentStyle, StyledSegment, annotate, join_segments, render

# Tags
from flow.text.tags import Tag, TagIndex, TagSource, match_score

# Shared types
from flow.text.types import TextBuffer, TextValue

# Width utilities
from flow.text.width import MeasureFn, anchor_position, truncate_to_width, visible_width

__all__ = [
    # Autocomplete
    "AutocompleteSession",
    "AutocompleteState",
    "HashtagAutocomplete",
    "HashtagQuery",
    "KeyResult",
    "find_hashtag_query",
    "splice_hashtag",
    # Editor
    "DescriptionEditor",
    # Formatting
    "Checkbox",
    "continue_list",
    "find_checkboxes",
    "toggle_bold",
    "toggle_checkbox",
    "toggle_italic",
    "toggle_wrap",
    # Keybindings
    "DEFAULT_EDITOR_KEYBINDINGS",
    "EditorAction",
    "EditorKeybindingsManager",
    "get_editor_keybindings",
    "set_editor_keybindings",
    # Image paste
    "UPLOAD_PLACEHOLDER",
    "ImagePaste",
    "ImageResolver",
    "UploadService",
    "image_reference",
    # Patterns and segments
    "PatternKind",
    "PatternMatch",
    "image_index",
    "scan",
    "SegmentStyle",
    "StyledSegment",
    "annotate",
    "join_segments",
    "render",
    # Preview
    "BlockKind",
    "PreviewBlock",
    "PreviewRun",
    "RunStyle",
    "build_preview",
    # Settings
    "EditorSettings",
    "load_settings",
    "save_settings",
    # Tags
    "Tag",
    "TagIndex",
    "TagSource",
    "match_score",
    # Types
    "TextBuffer",
    "TextValue",
    # Width
    "MeasureFn",
    "anchor_position",
    "truncate_to_width",
    "visible_width",
]
