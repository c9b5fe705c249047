"""Content normalization: HTML to scannable text, attachment payload decoding."""

import base64
import binascii
import html
import re

from agenticmail_guard.protection.models import ProtectionConfig

_STYLE_BLOCK = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_SCRIPT_BLOCK = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]+>")


def html_to_text(markup: str) -> str:
    """Convert HTML to plain text for rule matching.

    Script and style blocks are dropped, remaining tags are removed without
    inserting whitespace so values split across tags
    (``AKI<b>A</b>IOSFODNN7EXAMPLE``) stay contiguous, then all entities
    are decoded so encoded digits and hyphens cannot hide a match.

    Args:
        markup: HTML content.

    Returns:
        Plain text extracted from the HTML.
    """
    if not markup:
        return ""
    text = _STYLE_BLOCK.sub("", markup)
    text = _SCRIPT_BLOCK.sub("", text)
    text = _TAG.sub("", text)
    return html.unescape(text).replace("\xa0", " ")


def file_extension(filename: str | None) -> str:
    """Return the lower-cased last extension including the dot, or ``""``."""
    if not filename or "." not in filename:
        return ""
    return "." + filename.lower().rsplit(".", 1)[1]


def is_text_scannable(
    filename: str | None,
    content_type: str | None,
    config: ProtectionConfig,
) -> bool:
    """Check whether an attachment's payload should go through the text rules.

    The declared content type decides first; the extension is the fallback.
    Anything not on either allowlist is left alone.
    """
    if content_type:
        base = content_type.split(";", 1)[0].strip().lower()
        if base in config.scannable_content_types or base.startswith("text/"):
            return True
    return file_extension(filename) in config.scannable_extensions


def decode_attachment_text(content: str | bytes | None, encoding: str | None = None) -> str:
    """Extract attachment text, decoding base64 payloads when declared.

    Args:
        content: Raw attachment content.
        encoding: Transfer encoding of a string payload (only "base64" is decoded).

    Returns:
        The decoded text, or an empty string when there is no content.
    """
    if not content:
        return ""
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    if encoding and encoding.lower() == "base64":
        try:
            payload = "".join(content.split())
            return base64.b64decode(payload, validate=True).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            return content
    return content
