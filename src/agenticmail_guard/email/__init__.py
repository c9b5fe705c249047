"""Email models for agenticmail-guard."""

from agenticmail_guard.email.models import (
    EmailAddress,
    InboundAttachment,
    OutboundMessage,
    OutgoingAttachment,
    ParsedEmail,
)

__all__ = [
    "EmailAddress",
    "InboundAttachment",
    "OutboundMessage",
    "OutgoingAttachment",
    "ParsedEmail",
]
