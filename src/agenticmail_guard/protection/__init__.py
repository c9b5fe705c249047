"""Content security components: outbound DLP, inbound sanitizer and advisory."""

from agenticmail_guard.protection.advisory import build_inbound_security_advisory
from agenticmail_guard.protection.models import (
    InboundSecurityAdvisory,
    OutboundScanResult,
    ProtectionConfig,
    SanitizeResult,
    SpamResult,
)
from agenticmail_guard.protection.outbound import OutboundScanner, scan_outbound_email
from agenticmail_guard.protection.rules import DEFAULT_CATALOG, RuleCatalog
from agenticmail_guard.protection.sanitizer import InboundSanitizer, sanitize_email

__all__ = [
    "DEFAULT_CATALOG",
    "InboundSanitizer",
    "InboundSecurityAdvisory",
    "OutboundScanResult",
    "OutboundScanner",
    "ProtectionConfig",
    "RuleCatalog",
    "SanitizeResult",
    "SpamResult",
    "build_inbound_security_advisory",
    "sanitize_email",
    "scan_outbound_email",
]
