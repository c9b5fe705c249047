"""Content security pipeline for an AI-agent mail gateway."""

from agenticmail_guard.config import Settings, get_settings_eager
from agenticmail_guard.email.models import (
    EmailAddress,
    InboundAttachment,
    OutboundMessage,
    OutgoingAttachment,
    ParsedEmail,
)
from agenticmail_guard.exceptions import ConfigError, GuardError, OutboundBlockedError
from agenticmail_guard.models import SecureInboundEmail
from agenticmail_guard.protection.advisory import build_inbound_security_advisory
from agenticmail_guard.protection.models import (
    InboundSecurityAdvisory,
    OutboundScanResult,
    SanitizeResult,
    SpamResult,
)
from agenticmail_guard.protection.outbound import OutboundScanner, scan_outbound_email
from agenticmail_guard.protection.sanitizer import InboundSanitizer, sanitize_email
from agenticmail_guard.protection.service import GuardService

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "EmailAddress",
    "GuardError",
    "GuardService",
    "InboundAttachment",
    "InboundSanitizer",
    "InboundSecurityAdvisory",
    "OutboundBlockedError",
    "OutboundMessage",
    "OutboundScanResult",
    "OutboundScanner",
    "OutgoingAttachment",
    "ParsedEmail",
    "SanitizeResult",
    "SecureInboundEmail",
    "Settings",
    "SpamResult",
    "build_inbound_security_advisory",
    "get_settings_eager",
    "sanitize_email",
    "scan_outbound_email",
]
