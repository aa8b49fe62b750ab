"""
Input sanitization and markdown file validation.

Anything a user types or uploads is echoed back into the calculator page
and into saved reports, so it is passed through these helpers first.
"""

import html
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, List

from rental_analysis.config import get_settings

DANGEROUS_TAGS = (
    "script", "iframe", "object", "embed", "link", "style",
    "meta", "title", "head", "html", "body", "base", "form",
)

EVENT_HANDLERS = (
    "onclick", "onload", "onerror", "onmouseover", "onmouseout",
    "onfocus", "onblur", "onchange", "onsubmit", "onkeydown",
    "onkeyup", "onkeypress", "onresize", "onscroll",
)

ALLOWED_TAGS = frozenset(
    ("strong", "em", "b", "i", "u", "p", "br", "h1", "h2", "h3", "h4", "h5", "h6")
)

MAX_ADDRESS_LENGTH = 500
MAX_CUSTOM_FIELD_LENGTH = 100

_FLAGS = re.IGNORECASE | re.DOTALL

_DANGEROUS_BLOCKS = [
    re.compile(rf"<{tag}[^>]*>.*?</{tag}>", _FLAGS) for tag in DANGEROUS_TAGS
]
_DANGEROUS_SINGLES = [re.compile(rf"<{tag}[^>]*/?>", _FLAGS) for tag in DANGEROUS_TAGS]
_EVENT_HANDLER_ATTRS = [
    re.compile(rf"{handler}\s*=\s*[\"'][^\"']*[\"']", _FLAGS) for handler in EVENT_HANDLERS
]
_JAVASCRIPT_URL = re.compile(r"javascript:", re.IGNORECASE)
_ENCODED_SCRIPT = re.compile(r"&lt;script.*?&gt;.*?&lt;/script&gt;", re.IGNORECASE)
_ENCODED_IFRAME = re.compile(r"&lt;iframe.*?&gt;.*?&lt;/iframe&gt;", re.IGNORECASE)
_ALERT_CALL = re.compile(r"alert\s*\(\s*[^)]*\s*\)", re.IGNORECASE)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_HTML_DOCUMENT = re.compile(r"<html|<body|<head|<!DOCTYPE", re.IGNORECASE)
_MARKDOWN_HEADER = re.compile(r"^#+\s", re.MULTILINE)
_MARKDOWN_BOLD = re.compile(r"\*\*[^*]+\*\*")
# Matches both "**Field:** value" and "**Field**: value"
FIELD_LINE = re.compile(r"\*\*([^*]+?):?\*\*:?\s*(.+)$")
_NUMERIC = re.compile(r"^\d+(?:\.\d+)?$")

NUMERIC_FIELDS = {
    "purchase price": "Purchase price",
    "monthly rent": "Monthly rent",
}


class _AllowListFilter(HTMLParser):
    """Rebuild markup keeping only allow-listed tags, without attributes."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in ALLOWED_TAGS:
            self.parts.append(f"<{tag}>")

    def handle_startendtag(self, tag, attrs):
        if tag in ALLOWED_TAGS:
            self.parts.append(f"<{tag}>")

    def handle_endtag(self, tag):
        if tag in ALLOWED_TAGS and tag != "br":
            self.parts.append(f"</{tag}>")

    def handle_data(self, data):
        self.parts.append(html.escape(data, quote=False))

    def result(self) -> str:
        return "".join(self.parts)


def sanitize_html(value: Any) -> str:
    """
    Strip scripting from user-supplied text.

    Dangerous elements are removed with their content, javascript: URLs,
    quoted event handlers and alert() calls are dropped, and only simple
    formatting tags survive. Plain text is returned unchanged.
    """
    if not value or not isinstance(value, str):
        return ""

    sanitized = value
    for block, single in zip(_DANGEROUS_BLOCKS, _DANGEROUS_SINGLES):
        sanitized = block.sub("", sanitized)
        sanitized = single.sub("", sanitized)

    sanitized = _JAVASCRIPT_URL.sub("", sanitized)

    for handler in _EVENT_HANDLER_ATTRS:
        sanitized = handler.sub("", sanitized)

    sanitized = _ENCODED_SCRIPT.sub("", sanitized)
    sanitized = _ENCODED_IFRAME.sub("", sanitized)
    sanitized = _ALERT_CALL.sub("", sanitized)

    if "<" not in sanitized:
        return sanitized

    parser = _AllowListFilter()
    parser.feed(sanitized)
    parser.close()
    return parser.result()


def _truncate(value: str, limit: int) -> str:
    if len(value) > limit:
        return value[:limit] + "..."
    return value


def sanitize_property_address(address: Any) -> str:
    if not address or not isinstance(address, str):
        return ""
    return _truncate(sanitize_html(address).strip(), MAX_ADDRESS_LENGTH)


def sanitize_custom_field_name(field_name: Any) -> str:
    if not field_name or not isinstance(field_name, str):
        return ""

    sanitized = sanitize_html(field_name)
    # Spreadsheet formula injection
    sanitized = re.sub(r"^[=@+\-]", "", sanitized)
    return _truncate(sanitized.strip(), MAX_CUSTOM_FIELD_LENGTH)


@dataclass
class MarkdownValidation:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)

    def fail(self, message: str) -> "MarkdownValidation":
        self.is_valid = False
        self.errors.append(message)
        return self


def validate_markdown_structure(markdown: Any) -> MarkdownValidation:
    """Check that an uploaded file is a plausible, safe markdown report."""
    settings = get_settings()
    result = MarkdownValidation()

    if not markdown or not isinstance(markdown, str):
        return result.fail("Invalid or empty markdown content")

    if len(markdown) > settings.markdown_max_bytes:
        return result.fail("File size too large. Maximum size is 1MB.")

    if _CONTROL_CHARS.search(markdown):
        return result.fail(
            "File contains invalid characters. Please ensure it is a valid text file."
        )

    if _HTML_DOCUMENT.search(markdown):
        return result.fail("File appears to be HTML, not markdown format.")

    if not _MARKDOWN_HEADER.search(markdown) and not _MARKDOWN_BOLD.search(markdown):
        return result.fail("File does not appear to be in proper markdown format.")

    for line in markdown.splitlines():
        match = FIELD_LINE.search(line)
        if not match:
            continue
        field_name = match.group(1).strip().lower()
        raw_value = match.group(2).strip()

        if len(raw_value) > settings.markdown_max_field_length:
            result.errors.append(
                "One or more fields exceed maximum length limit of 1000 characters."
            )

        if field_name in NUMERIC_FIELDS:
            cleaned = re.sub(r"[$,\s]", "", raw_value)
            if not cleaned or not _NUMERIC.match(cleaned):
                result.errors.append(
                    f"{NUMERIC_FIELDS[field_name]} contains invalid numeric format."
                )

    if result.errors:
        result.is_valid = False

    return result
