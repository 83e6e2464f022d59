"""
Rich text sanitizer.

Everything that enters or leaves a rich-text widget passes through
sanitize_html, which keeps a fixed allowlist of formatting tags:

- Only allowlisted tags survive; others are dropped but their text is kept
- script/style elements and comments are removed with their contents
- Only allowlisted attributes survive
- Links with forbidden protocols lose their href
- Links get rel="noopener noreferrer"
- Text outside tags is re-escaped, so a stray "<" can never open a tag
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from src.rules.models import RichTextRules

from .models import RichTextValidationError

# --- Configuration ---


@dataclass(frozen=True)
class RichTextConfig:
    """Sanitizer allowlists and paste filter."""

    allow_tags: frozenset[str] = field(
        default_factory=lambda: frozenset(
            [
                "p",
                "br",
                "strong",
                "b",
                "em",
                "i",
                "u",
                "h1",
                "h2",
                "h3",
                "h4",
                "h5",
                "h6",
                "ol",
                "ul",
                "li",
                "a",
            ]
        )
    )

    allow_attrs: dict[str, frozenset[str]] = field(
        default_factory=lambda: {
            "a": frozenset(["href", "target", "title"]),
        }
    )

    forbid_protocols: frozenset[str] = field(
        default_factory=lambda: frozenset(["javascript:", "data:", "vbscript:"])
    )

    add_noopener: bool = True
    add_noreferrer: bool = True

    paste_formats: frozenset[str] = field(
        default_factory=lambda: frozenset(
            ["bold", "italic", "underline", "link", "list", "header"]
        )
    )

    @classmethod
    def from_rules(cls, rules: RichTextRules) -> RichTextConfig:
        defaults = cls()
        return cls(
            allow_tags=frozenset(rules.allow_tags) or defaults.allow_tags,
            allow_attrs=(
                {tag: frozenset(attrs) for tag, attrs in rules.allow_attrs.items()}
                or defaults.allow_attrs
            ),
            forbid_protocols=frozenset(rules.forbid_protocols) or defaults.forbid_protocols,
            paste_formats=frozenset(rules.paste_formats) or defaults.paste_formats,
        )


DEFAULT_CONFIG = RichTextConfig()


# --- URLs ---

_URL_NOISE = re.compile(r"[\x00-\x20]+")


def is_safe_url(url: str, config: RichTextConfig = DEFAULT_CONFIG) -> bool:
    """False if the URL uses a forbidden protocol, however it is obfuscated."""
    if not url:
        return True
    normalized = _URL_NOISE.sub("", html.unescape(url)).lower()
    return not any(normalized.startswith(p) for p in config.forbid_protocols)


def build_link_rel(config: RichTextConfig = DEFAULT_CONFIG) -> str:
    parts = []
    if config.add_noopener:
        parts.append("noopener")
    if config.add_noreferrer:
        parts.append("noreferrer")
    return " ".join(parts)


# --- HTML Sanitizer ---

TAG_PATTERN = re.compile(r"<(/?)([a-zA-Z][a-zA-Z0-9]*)([^>]*)>")
ATTR_PATTERN = re.compile(r'([\w-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|([^\s>]+))')
STRIP_BLOCK_PATTERN = re.compile(
    r"<!--.*?-->|<(script|style)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)


def parse_attributes(attr_string: str) -> dict[str, str]:
    attrs = {}
    for match in ATTR_PATTERN.finditer(attr_string):
        name = match.group(1).lower()
        value = match.group(2) or match.group(3) or match.group(4) or ""
        attrs[name] = html.unescape(value)
    return attrs


def _escape_text(text: str) -> str:
    return html.escape(html.unescape(text), quote=False)


def sanitize_html(
    html_content: str,
    config: RichTextConfig = DEFAULT_CONFIG,
) -> tuple[str, list[RichTextValidationError]]:
    """
    Sanitize HTML content against the allowlist.

    Returns:
        Tuple of (sanitized_html, list of what was stripped)
    """
    errors: list[RichTextValidationError] = []

    def drop_block(match: re.Match[str]) -> str:
        errors.append(
            RichTextValidationError(
                code="stripped_block",
                message=f"Removed {match.group(1) or 'comment'} content",
            )
        )
        return ""

    def process_tag(match: re.Match[str]) -> str:
        is_closing = bool(match.group(1))
        tag_name = match.group(2).lower()

        if tag_name not in config.allow_tags:
            errors.append(
                RichTextValidationError(
                    code="stripped_tag", message=f"Tag '{tag_name}' was stripped"
                )
            )
            return ""

        if is_closing:
            return f"</{tag_name}>"

        allowed_attrs = config.allow_attrs.get(tag_name, frozenset())
        filtered: dict[str, str] = {}
        for name, value in parse_attributes(match.group(3)).items():
            if name in allowed_attrs:
                filtered[name] = value
            else:
                errors.append(
                    RichTextValidationError(
                        code="stripped_attribute",
                        message=f"Attribute '{name}' stripped from '{tag_name}'",
                    )
                )

        if tag_name == "a":
            href = filtered.get("href", "")
            if not is_safe_url(href, config):
                errors.append(
                    RichTextValidationError(
                        code="unsafe_url",
                        message=f"Unsafe URL protocol in href: {href[:50]}",
                    )
                )
                del filtered["href"]
            rel = build_link_rel(config)
            if rel:
                filtered["rel"] = rel

        if filtered:
            attr_parts = [f'{name}="{html.escape(value)}"' for name, value in filtered.items()]
            return f"<{tag_name} {' '.join(attr_parts)}>"
        return f"<{tag_name}>"

    content = STRIP_BLOCK_PATTERN.sub(drop_block, html_content)

    parts: list[str] = []
    pos = 0
    for match in TAG_PATTERN.finditer(content):
        parts.append(_escape_text(content[pos : match.start()]))
        parts.append(process_tag(match))
        pos = match.end()
    parts.append(_escape_text(content[pos:]))

    return "".join(parts), errors


def sanitize(html_content: str, config: RichTextConfig = DEFAULT_CONFIG) -> str:
    return sanitize_html(html_content, config)[0]


# --- Plain text ---

_BREAK_PATTERN = re.compile(r"<br\s*/?>|</(p|h[1-6]|li)\s*>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]*>")


def html_to_text(html_content: str) -> str:
    """Plain text of an HTML fragment, one line per block."""
    text = STRIP_BLOCK_PATTERN.sub("", html_content)
    text = _BREAK_PATTERN.sub("\n", text)
    text = _ANY_TAG.sub("", text)
    return html.unescape(text)


# --- Paste cleaning ---


def clean_paste_ops(
    ops: Iterable[Mapping[str, Any]],
    config: RichTextConfig = DEFAULT_CONFIG,
) -> list[dict[str, Any]]:
    """Keep only allowed formatting attributes on pasted text inserts."""
    cleaned: list[dict[str, Any]] = []
    for op in ops:
        insert = op.get("insert")
        if not isinstance(insert, str):
            cleaned.append(dict(op))
            continue
        attributes = {
            key: value
            for key, value in (op.get("attributes") or {}).items()
            if key in config.paste_formats
        }
        cleaned_op: dict[str, Any] = {"insert": insert}
        if attributes:
            cleaned_op["attributes"] = attributes
        cleaned.append(cleaned_op)
    return cleaned
