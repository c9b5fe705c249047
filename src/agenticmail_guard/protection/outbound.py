"""Outbound scanner: data loss prevention for mail the agent sends."""

import structlog

from agenticmail_guard.email.models import OutboundMessage, OutgoingAttachment
from agenticmail_guard.protection.models import (
    OutboundScanResult,
    OutboundWarning,
    ProtectionConfig,
    Rule,
    Severity,
)
from agenticmail_guard.protection.normalizer import (
    decode_attachment_text,
    file_extension,
    html_to_text,
    is_text_scannable,
)
from agenticmail_guard.protection.rules import DEFAULT_CATALOG, RuleCatalog

logger = structlog.get_logger()


def truncate_match(snippet: str, max_length: int) -> str:
    """Cut a matched snippet to ``max_length`` characters plus "..."."""
    if len(snippet) > max_length:
        return snippet[:max_length] + "..."
    return snippet


def build_summary(warnings: list[OutboundWarning]) -> str:
    """Build the human-readable verdict line for a list of warnings.

    Returns an empty string when there are no warnings.
    """
    if not warnings:
        return ""

    high = sum(1 for w in warnings if w.severity == Severity.HIGH)
    medium = sum(1 for w in warnings if w.severity == Severity.MEDIUM)
    parts: list[str] = []
    if high:
        parts.append(f"{high} HIGH severity")
    if medium:
        parts.append(f"{medium} MEDIUM severity")
    counts = ", ".join(parts)

    if high:
        return (
            f"OUTBOUND GUARD BLOCKED: {len(warnings)} warning(s) ({counts}). "
            "Email NOT sent. Remove sensitive content and retry."
        )
    return (
        f"OUTBOUND GUARD: {len(warnings)} warning(s) ({counts}). "
        "Review before sending to external recipients."
    )


class OutboundScanner:
    """Applies the rule catalog to an outbound message.

    All rules run independently over a single buffer built from subject,
    text and de-tagged HTML, so a value split across those parts or across
    adjacent HTML tags is still found. Text-like attachments are scanned
    with the same rules.
    """

    def __init__(
        self,
        catalog: RuleCatalog = DEFAULT_CATALOG,
        config: ProtectionConfig | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            catalog: Rules to apply. Defaults to the built-in catalog.
            config: Protection settings. Defaults to ProtectionConfig().
        """
        self._config = config or ProtectionConfig()
        self._catalog = catalog.without(self._config.disabled_rules)
        self._internal_domains = frozenset(self._config.internal_domains)

    @property
    def catalog(self) -> RuleCatalog:
        return self._catalog

    def is_internal_only(self, message: OutboundMessage) -> bool:
        """Return True if every recipient is on an internal domain."""
        recipients = message.recipients()
        if not recipients:
            return False
        return all(r.domain in self._internal_domains for r in recipients)

    def scan(self, message: OutboundMessage) -> OutboundScanResult:
        """Scan an outbound message for sensitive content.

        Args:
            message: The message about to be sent.

        Returns:
            OutboundScanResult; ``blocked`` is True iff a HIGH rule matched.
        """
        if self.is_internal_only(message):
            logger.debug("Skipping outbound scan for internal recipients")
            return OutboundScanResult()

        combined = "\n".join(
            [message.subject or "", message.text or "", html_to_text(message.html or "")]
        )
        warnings = self._scan_text(combined)

        for attachment in message.attachments:
            warnings.extend(self._scan_attachment(attachment))

        has_high = any(w.severity == Severity.HIGH for w in warnings)
        has_medium = any(w.severity == Severity.MEDIUM for w in warnings)
        result = OutboundScanResult(
            warnings=warnings,
            has_high_severity=has_high,
            has_medium_severity=has_medium,
            blocked=has_high,
            summary=build_summary(warnings),
        )

        if result.blocked:
            logger.warning(
                "Outbound message blocked",
                warning_count=len(warnings),
                rule_ids=result.rule_ids,
            )
        elif warnings:
            logger.info(
                "Outbound message has warnings",
                warning_count=len(warnings),
                rule_ids=result.rule_ids,
            )
        return result

    def _scan_text(self, text: str, source: str | None = None) -> list[OutboundWarning]:
        if not text.strip():
            return []

        warnings: list[OutboundWarning] = []
        for rule in self._catalog:
            snippet = rule.test(text)
            if snippet:
                warnings.append(self._warning(rule, snippet, source))
        return warnings

    def _warning(self, rule: Rule, snippet: str, source: str | None) -> OutboundWarning:
        description = rule.description
        if source is not None:
            description = f"{description} (in attachment: {source})"
        return OutboundWarning(
            rule_id=rule.id,
            category=rule.category,
            severity=rule.severity,
            description=description,
            match=truncate_match(snippet, self._config.max_match_length),
        )

    def _scan_attachment(self, attachment: OutgoingAttachment) -> list[OutboundWarning]:
        name = attachment.filename or ""
        ext = file_extension(name)
        warnings: list[OutboundWarning] = []

        if ext:
            for ext_rule in self._catalog.attachment_rules:
                if ext_rule.matches(ext):
                    warnings.append(
                        OutboundWarning(
                            rule_id=ext_rule.id,
                            category=ext_rule.category,
                            severity=ext_rule.severity,
                            description=f"{ext_rule.label}: {ext}",
                            match=name,
                        )
                    )
                    break

        if is_text_scannable(attachment.filename, attachment.content_type, self._config):
            content = decode_attachment_text(attachment.content, attachment.encoding)
            warnings.extend(self._scan_text(content, source=name or "unnamed"))

        return warnings


_default_scanner = OutboundScanner()


def scan_outbound_email(message: OutboundMessage) -> OutboundScanResult:
    """Scan an outbound message with the default catalog and settings."""
    return _default_scanner.scan(message)
