"""Inbound security advisory builder.

Combines filename-based attachment risk with selected signals from the
external spam/phishing scorer. The advisory is informational only; it is
attached to the delivered message and never changes delivery.
"""

from collections.abc import Iterable

from agenticmail_guard.email.models import InboundAttachment
from agenticmail_guard.protection.models import (
    AttachmentRisk,
    AttachmentWarning,
    InboundSecurityAdvisory,
    LinkWarning,
    SpamResult,
)
from agenticmail_guard.protection.normalizer import file_extension

EXECUTABLE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".exe", ".bat", ".cmd", ".ps1", ".sh", ".msi", ".scr", ".com", ".vbs",
        ".js", ".wsf", ".hta", ".cpl", ".jar", ".app", ".dmg", ".run",
    }
)

ARCHIVE_EXTENSIONS: frozenset[str] = frozenset(
    {".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".cab", ".iso"}
)

HTML_EXTENSIONS: frozenset[str] = frozenset({".html", ".htm"})

# Scorer rule ids surfaced to the agent; anything else is ignored
LINK_WARNING_DETAILS: dict[str, str] = {
    "ph_mismatched_display_url": (
        "Mismatched display URL: link text shows a different domain than the "
        "actual destination (PHISHING)"
    ),
    "ph_data_uri": "data: URI in link, may execute embedded code (PHISHING)",
    "ph_homograph": (
        "Homograph/punycode domain: international characters used to mimic a "
        "legitimate domain (PHISHING)"
    ),
    "ph_spoofed_sender": (
        "Sender claims to be a known brand but uses a suspicious domain (PHISHING)"
    ),
    "ph_credential_harvest": "Email requests credentials with suspicious links (PHISHING)",
    "de_webhook_exfil": (
        "Contains suspicious webhook/tunneling URL, potential data exfiltration (PHISHING)"
    ),
    "pi_invisible_unicode": (
        "Contains invisible unicode characters that may hide injected instructions (PHISHING)"
    ),
}


def classify_attachment(filename: str | None) -> AttachmentWarning | None:
    """Classify an inbound attachment by its filename alone.

    The disguised-executable check runs first: ``invoice.pdf.exe`` is
    CRITICAL, a plain ``setup.exe`` is HIGH, archives are MEDIUM and HTML
    files are HIGH. Everything else, including names without an extension,
    yields no warning.

    Args:
        filename: Attachment filename, may be None.

    Returns:
        AttachmentWarning, or None if the file type is not considered risky.
    """
    name = filename or "unknown"
    parts = name.lower().split(".")
    ext = file_extension(name)

    if len(parts) > 2 and ext in EXECUTABLE_EXTENSIONS:
        cover = parts[-2]
        if cover and f".{cover}" not in EXECUTABLE_EXTENSIONS:
            return AttachmentWarning(
                filename=name,
                risk=AttachmentRisk.CRITICAL,
                detail=(
                    f"DOUBLE EXTENSION: disguised executable "
                    f"(appears as .{cover} but is {ext})"
                ),
            )

    if ext in EXECUTABLE_EXTENSIONS:
        return AttachmentWarning(
            filename=name,
            risk=AttachmentRisk.HIGH,
            detail=f"EXECUTABLE file ({ext}). DO NOT open or trust",
        )
    if ext in ARCHIVE_EXTENSIONS:
        return AttachmentWarning(
            filename=name,
            risk=AttachmentRisk.MEDIUM,
            detail=(
                f"ARCHIVE file ({ext}). May contain malware; "
                "do not extract or execute contents."
            ),
        )
    if ext in HTML_EXTENSIONS:
        return AttachmentWarning(
            filename=name,
            risk=AttachmentRisk.HIGH,
            detail="HTML file attachment. May contain phishing content or scripts",
        )
    return None


def link_warnings_for(spam_result: SpamResult | None) -> list[LinkWarning]:
    """Map scorer rule hits to advisory lines, dropping unknown rule ids."""
    if spam_result is None:
        return []
    warnings: list[LinkWarning] = []
    for match in spam_result.matches:
        detail = LINK_WARNING_DETAILS.get(match.rule_id)
        if detail is not None:
            warnings.append(LinkWarning(rule_id=match.rule_id, detail=detail))
    return warnings


def _format_score(score: float | None) -> str:
    return "n/a" if score is None else f"{score:g}"


def _spam_line(spam_result: SpamResult | None) -> str | None:
    if spam_result is None:
        return None
    score = _format_score(spam_result.score)
    category = spam_result.category or "unknown"
    if spam_result.is_spam:
        return f"[SPAM] Score: {score}, Category: {category}. Email was moved to Spam"
    if spam_result.is_warning:
        return f"[WARNING] Score: {score}, Category: {category}. Treat with caution"
    return None


def build_inbound_security_advisory(
    spam_result: SpamResult | None = None,
    attachments: Iterable[InboundAttachment] | None = None,
) -> InboundSecurityAdvisory:
    """Build the advisory attached to a received message.

    Args:
        spam_result: Output of the external spam/phishing scorer, if any.
        attachments: Attachments of the received message, if any.

    Returns:
        InboundSecurityAdvisory; ``summary`` is empty when there is nothing
        to report.
    """
    attachment_warnings: list[AttachmentWarning] = []
    for attachment in attachments or []:
        warning = classify_attachment(attachment.filename)
        if warning is not None:
            attachment_warnings.append(warning)

    link_warnings = link_warnings_for(spam_result)

    lines: list[str] = []
    spam_line = _spam_line(spam_result)
    if spam_line:
        lines.append(spam_line)
    if attachment_warnings:
        lines.append(f"{len(attachment_warnings)} attachment warning(s):")
        lines.extend(f'  [{w.risk.value}] "{w.filename}": {w.detail}' for w in attachment_warnings)
    if link_warnings:
        lines.append(f"{len(link_warnings)} link/content warning(s):")
        lines.extend(f"  [!] {w.detail}" for w in link_warnings)

    return InboundSecurityAdvisory(
        attachment_warnings=attachment_warnings,
        link_warnings=link_warnings,
        is_spam=spam_result.is_spam if spam_result else None,
        spam_score=spam_result.score if spam_result else None,
        spam_category=spam_result.category if spam_result else None,
        is_warning=spam_result.is_warning if spam_result else None,
        summary="\n".join(lines),
    )
