"""Guard service orchestrating the outbound and inbound pipelines."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agenticmail_guard.email.models import OutboundMessage, ParsedEmail
from agenticmail_guard.exceptions import OutboundBlockedError
from agenticmail_guard.models import SecureInboundEmail
from agenticmail_guard.protection.advisory import build_inbound_security_advisory
from agenticmail_guard.protection.models import OutboundScanResult, SpamResult
from agenticmail_guard.protection.outbound import OutboundScanner
from agenticmail_guard.protection.rules import DEFAULT_CATALOG, RuleCatalog
from agenticmail_guard.protection.sanitizer import InboundSanitizer

if TYPE_CHECKING:
    from agenticmail_guard.config import Settings

logger = logging.getLogger(__name__)


class GuardService:
    """Entry point used by the mail gateway.

    Outbound mail goes through the scanner before transmission; inbound mail
    is sanitized and annotated with a security advisory before it reaches
    the agent's mailbox.
    """

    def __init__(
        self,
        scanner: OutboundScanner | None = None,
        sanitizer: InboundSanitizer | None = None,
    ) -> None:
        """Initialize the guard service.

        Args:
            scanner: Outbound scanner to use. Defaults to the built-in catalog.
            sanitizer: Inbound sanitizer to use. Defaults to standard sanitizer.
        """
        self._scanner = scanner or OutboundScanner()
        self._sanitizer = sanitizer or InboundSanitizer()

    @classmethod
    def from_settings(
        cls, settings: Settings, catalog: RuleCatalog = DEFAULT_CATALOG
    ) -> GuardService:
        """Build a service from loaded settings."""
        return cls(scanner=OutboundScanner(catalog=catalog, config=settings.protection))

    def check_outbound(self, message: OutboundMessage) -> OutboundScanResult:
        """Scan an outbound message. Never raises; callers gate on ``blocked``.

        Args:
            message: The message about to be sent.

        Returns:
            OutboundScanResult with warnings and the block verdict.
        """
        result = self._scanner.scan(message)
        if result.blocked:
            logger.info("Outbound message held for owner approval: %s", result.summary)
        return result

    def enforce_outbound(self, message: OutboundMessage) -> OutboundScanResult:
        """Scan an outbound message and raise if it must not be sent.

        Returns:
            OutboundScanResult for messages that may be sent (possibly with
            MEDIUM warnings).

        Raises:
            OutboundBlockedError: If any HIGH severity rule matched.
        """
        result = self.check_outbound(message)
        if result.blocked:
            raise OutboundBlockedError(result)
        return result

    def secure_inbound(
        self,
        email: ParsedEmail,
        spam_result: SpamResult | None = None,
    ) -> SecureInboundEmail:
        """Sanitize a received message and attach its security advisory.

        Args:
            email: Parsed message from the relay or IMAP collaborator.
            spam_result: Verdict of the external spam/phishing scorer, if any.

        Returns:
            SecureInboundEmail ready for mailbox delivery.
        """
        sanitized = self._sanitizer.sanitize(email)
        advisory = build_inbound_security_advisory(spam_result, email.attachments)
        if advisory.summary:
            logger.debug(
                "Security advisory for %s: %d attachment, %d link warning(s)",
                email.message_id,
                len(advisory.attachment_warnings),
                len(advisory.link_warnings),
            )
        return SecureInboundEmail(
            message_id=email.message_id,
            subject=email.subject,
            text=sanitized.text,
            html=sanitized.html,
            was_modified=sanitized.was_modified,
            detections=sanitized.detections,
            advisory=advisory,
        )
