"""
Richtext component - editor pooling, textarea fallback and HTML sanitizing.
"""

from ._impl import (
    DEFAULT_CONFIG,
    RichTextConfig,
    build_link_rel,
    clean_paste_ops,
    html_to_text,
    is_safe_url,
    parse_attributes,
    sanitize,
    sanitize_html,
)
from .component import EditorLifecycleManager
from .models import (
    DEFAULT_EDITOR_OPTIONS,
    FALLBACK_FAILED,
    FALLBACK_WARNING,
    EditorEntry,
    RichTextValidationError,
    WidgetInitError,
    editor_key,
)
from .ports import EditorFactoryPort, EditorHandle

__all__ = [
    # Sanitizer
    "DEFAULT_CONFIG",
    "RichTextConfig",
    "build_link_rel",
    "clean_paste_ops",
    "html_to_text",
    "is_safe_url",
    "parse_attributes",
    "sanitize",
    "sanitize_html",
    # Editors
    "EditorLifecycleManager",
    "EditorEntry",
    "EditorFactoryPort",
    "EditorHandle",
    "WidgetInitError",
    "DEFAULT_EDITOR_OPTIONS",
    "FALLBACK_FAILED",
    "FALLBACK_WARNING",
    "editor_key",
    # Models
    "RichTextValidationError",
]
