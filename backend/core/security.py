# backend/core/security.py
"""
Input sanitization for storage and output escaping for display.

The two are not interchangeable: ``sanitize_text_field`` runs on values
before they reach a store, ``esc_html`` runs on values placed in markup
outside a template. Templates rely on Jinja2 autoescape for text and
attribute values alike.
"""
import re
from typing import Any

from markupsafe import Markup, escape

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")


def is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def sanitize_text_field(value: Any) -> str:
    """Clean a single-line text value for storage"""
    if value is None:
        return ""

    text = str(value)
    text = _SCRIPT_STYLE_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    # Leftover angle brackets from broken tags
    text = text.replace("<", "").replace(">", "")
    text = _OCTET_RE.sub("", text)
    text = _CONTROL_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def esc_html(value: Any) -> Markup:
    """Escape a value for use as HTML text content"""
    if value is None:
        return Markup("")
    return escape(str(value))
