"""Inbound sanitizer: strips invisible and hidden content from received mail.

Sanitization never blocks. Every pass that removes something records a
Detection so the gateway can tell the agent what was hidden in the message.
"""

import re
from typing import NamedTuple

import structlog

from agenticmail_guard.email.models import ParsedEmail
from agenticmail_guard.protection.models import Detection, SanitizeResult

logger = structlog.get_logger()


class _StripPass(NamedTuple):
    pattern: re.Pattern[str]
    type: str
    description: str
    # pattern matches an opening tag; the whole element is removed
    element: bool = False


# Unicode passes run on both channels; the channel name is appended to the type
_UNICODE_PASSES: tuple[_StripPass, ...] = (
    _StripPass(
        re.compile("[\U000e0001-\U000e007f]"),
        "invisible_tags",
        "Unicode tag characters (U+E0001-E007F)",
    ),
    _StripPass(re.compile("[\u200b\u200c\u200d\ufeff]"), "zero_width", "Zero-width characters"),
    _StripPass(
        re.compile("[\u202a-\u202e\u2066-\u2069]"), "bidi_control", "Bidi control characters"
    ),
    _StripPass(re.compile("\u00ad"), "soft_hyphen", "Soft hyphens"),
    _StripPass(re.compile("\u2060"), "word_joiner", "Word joiners"),
)

_I_S = re.IGNORECASE | re.DOTALL

# Opening tags whose inline style hides the element
_OPEN_TAG = r"<(?P<tag>[a-zA-Z][\w:-]*)\b[^>]*style\s*=\s*[\"'][^\"']*"

_HTML_PASSES: tuple[_StripPass, ...] = (
    _StripPass(
        re.compile(
            _OPEN_TAG + r"(?:display\s*:\s*none|visibility\s*:\s*hidden"
            r"|font-size\s*:\s*0(?:px|em|rem|%)?|opacity\s*:\s*0)(?:\s*;|\s*[\"'])[^>]*>",
            re.IGNORECASE,
        ),
        "hidden_css",
        "Elements with display:none, visibility:hidden, font-size:0, or opacity:0",
        element=True,
    ),
    _StripPass(
        re.compile(
            _OPEN_TAG + r"(?<![-\w])color\s*:\s*"
            r"(?:white|#fff(?:fff)?\b|rgb\(255\s*,\s*255\s*,\s*255\))"
            r"[^\"']*[\"'][^>]*>",
            re.IGNORECASE,
        ),
        "white_on_white",
        "White-on-white or same-color hidden text",
        element=True,
    ),
    _StripPass(
        re.compile(
            _OPEN_TAG + r"(?:position\s*:\s*(?:absolute|fixed)[^\"']*"
            r"(?:left|top)\s*:\s*-\d{4,}|clip\s*:\s*rect\(0)[^\"']*[\"'][^>]*>",
            re.IGNORECASE,
        ),
        "offscreen",
        "Off-screen positioned elements",
        element=True,
    ),
    _StripPass(
        re.compile(r"<script\b[^>]*>.*?</script>", _I_S),
        "script_tags",
        "Script tags",
    ),
    _StripPass(
        re.compile(r"<style\b[^>]*>.*?</style>", _I_S),
        "style_tags",
        "Style blocks",
    ),
    _StripPass(
        re.compile(
            r"\b(?:src|href|action)\s*=\s*[\"'](?:data:|javascript:)[^\"']*[\"']",
            re.IGNORECASE,
        ),
        "data_uri",
        "Suspicious data: or javascript: URIs in attributes",
    ),
    _StripPass(
        re.compile(r"<!--(?:(?!-->).)*?(?:ignore|system|instruction|prompt|inject).*?-->", _I_S),
        "suspicious_comment",
        "HTML comments containing injection-related keywords",
    ),
    _StripPass(
        re.compile(
            r"<iframe\b[^>]*(?:width\s*=\s*[\"']?0|height\s*=\s*[\"']?0"
            r"|style\s*=\s*[\"'][^\"']*display\s*:\s*none)[^>]*>.*?</iframe>",
            _I_S,
        ),
        "hidden_iframe",
        "Zero-size or hidden iframes",
    ),
)

_EXCESSIVE_NEWLINES = re.compile(r"\n{3,}")

_TAG = re.compile(r"<(?P<close>/?)(?P<tag>[a-zA-Z][\w:-]*)\b[^>]*?(?P<self>/?)>")

_VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"}
)


def _element_end(content: str, opening: re.Match[str]) -> int:
    """Return the offset just past the element opened by ``opening``.

    Nested elements with the same tag name are tracked by depth. An element
    that is never closed runs to the end of the document.
    """
    tag = opening.group("tag").lower()
    if tag in _VOID_ELEMENTS or opening.group(0).endswith("/>"):
        return opening.end()
    depth = 1
    for token in _TAG.finditer(content, opening.end()):
        if token.group("tag").lower() != tag or token.group("self"):
            continue
        depth += -1 if token.group("close") else 1
        if depth == 0:
            return token.end()
    return len(content)


def _remove_elements(opening: re.Pattern[str], content: str) -> tuple[str, int]:
    kept: list[str] = []
    pos = count = 0
    while True:
        match = opening.search(content, pos)
        if match is None:
            break
        kept.append(content[pos : match.start()])
        pos = _element_end(content, match)
        count += 1
    kept.append(content[pos:])
    return "".join(kept), count


def _apply(
    passes: tuple[_StripPass, ...],
    content: str,
    detections: list[Detection],
    channel: str | None = None,
) -> str:
    """Run strip passes over ``content``, logging a Detection per pass that hits."""
    for strip in passes:
        if strip.element:
            content, count = _remove_elements(strip.pattern, content)
        else:
            content, count = strip.pattern.subn("", content)
        if count:
            if channel is None:
                detection_type, description = strip.type, strip.description
            else:
                detection_type = f"{strip.type}_{channel}"
                description = f"{strip.description} in {channel}"
            detections.append(Detection(type=detection_type, description=description, count=count))
    return content


class InboundSanitizer:
    """Removes adversarial content from inbound text and HTML bodies."""

    def sanitize(self, email: ParsedEmail) -> SanitizeResult:
        """Sanitize both bodies of a received message.

        Args:
            email: The parsed message; missing bodies count as empty.

        Returns:
            SanitizeResult with cleaned text and html and a detection log.
        """
        original_text = email.text or ""
        original_html = email.html or ""
        detections: list[Detection] = []

        text = _apply(_UNICODE_PASSES, original_text, detections, "text")
        html = _apply(_UNICODE_PASSES, original_html, detections, "html")
        html = _apply(_HTML_PASSES, html, detections)

        text = _EXCESSIVE_NEWLINES.sub("\n\n", text).strip()
        html = html.strip()

        was_modified = text != original_text or html != original_html
        if detections:
            logger.warning(
                "Stripped hidden content from inbound email",
                message_id=email.message_id,
                detections=[d.type for d in detections],
            )
        return SanitizeResult(
            text=text,
            html=html,
            was_modified=was_modified,
            detections=detections,
        )


_default_sanitizer = InboundSanitizer()


def sanitize_email(email: ParsedEmail) -> SanitizeResult:
    """Sanitize a received message with the default sanitizer."""
    return _default_sanitizer.sanitize(email)
