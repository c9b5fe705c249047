"""Data models for agenticmail-guard."""

from pydantic import BaseModel

from agenticmail_guard.protection.models import Detection, InboundSecurityAdvisory


class SecureInboundEmail(BaseModel):
    """Received message as it is delivered to the agent's mailbox.

    Bodies are the sanitized versions; the advisory rides along so the agent
    can weigh the content without the gateway altering delivery.
    """

    message_id: str | None = None
    subject: str = ""
    text: str
    html: str
    was_modified: bool = False
    detections: list[Detection] = []
    advisory: InboundSecurityAdvisory
