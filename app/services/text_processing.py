"""
Text processing for search results: markup stripping, link normalization, and
query normalization.

Search snippets come back as HTML fragments with <b> highlights and entities;
storage links come back as gs:// URIs the browser cannot open.
"""

import html
import re

from app.core.config import GCS_SCHEME, PUBLIC_STORAGE_BASE_URL, SNIPPET_PLACEHOLDER

_TAG_RE = re.compile(r"<[^>]*>")
_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


def strip_markup(text: str | None) -> str:
    """Decode HTML entities, then remove markup tags; returns "" for empty input."""
    if not text:
        return ""
    return _TAG_RE.sub("", html.unescape(text)).strip()


def normalize_link(uri: str | None, public_base: str = PUBLIC_STORAGE_BASE_URL) -> str | None:
    """
    Rewrite a gs:// URI onto the public storage base; other URIs pass through.

    The path after the scheme is kept verbatim, so gs://bucket/a b.docx becomes
    https://storage.googleapis.com/bucket/a b.docx.
    """
    if not uri:
        return None
    if uri.startswith(GCS_SCHEME):
        base = public_base if public_base.endswith("/") else public_base + "/"
        return base + uri[len(GCS_SCHEME):]
    return uri


def is_placeholder_snippet(snippet: str | None, placeholder: str = SNIPPET_PLACEHOLDER) -> bool:
    """True when the snippet is blank or is the service's 'no snippet' placeholder."""
    if not snippet or not snippet.strip():
        return True
    if not placeholder:
        return False
    return placeholder.lower() in snippet.lower()


def normalize_query(text: str | None) -> str:
    """Lowercase, drop punctuation, collapse whitespace. Used for phrase matching."""
    if not text:
        return ""
    text = _PUNCT_RE.sub(" ", text.lower())
    return _SPACE_RE.sub(" ", text).strip()
