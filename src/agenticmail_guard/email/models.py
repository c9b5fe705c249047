"""Email data models handed to the guard by the surrounding mail gateway."""

from datetime import datetime
from email.utils import getaddresses

from pydantic import BaseModel, ConfigDict, Field


class EmailAddress(BaseModel):
    """Parsed email address with optional display name."""

    name: str | None = None
    address: str

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address

    @property
    def domain(self) -> str:
        """Lower-cased domain part, or an empty string when there is none."""
        _, sep, domain = self.address.rpartition("@")
        return domain.lower() if sep else ""

    @classmethod
    def parse_list(cls, value: str) -> list["EmailAddress"]:
        """Parse a comma-separated header value into one address per entry.

        A value the parser cannot split is kept whole so that it still takes
        part in recipient checks.
        """
        parsed = [(name, address) for name, address in getaddresses([value]) if address]
        if not parsed:
            return [cls(address=value.strip())]
        return [cls(name=name or None, address=address) for name, address in parsed]


class OutgoingAttachment(BaseModel):
    """Attachment on a message the agent wants to send.

    ``content`` may be text or raw bytes. A string with ``encoding="base64"``
    is decoded before content scanning. All fields are optional so that
    partially described attachments never break a scan.
    """

    filename: str | None = None
    content_type: str | None = None
    content: str | bytes | None = None
    encoding: str | None = None


class OutboundMessage(BaseModel):
    """Message composed by the agent, scanned before transmission."""

    to: str | list[str]
    cc: str | list[str] | None = None
    bcc: str | list[str] | None = None
    subject: str | None = None
    text: str | None = None
    html: str | None = None
    attachments: list[OutgoingAttachment] = []

    def recipients(self) -> list[EmailAddress]:
        """Return every non-empty recipient across to, cc and bcc."""
        result: list[EmailAddress] = []
        for field in (self.to, self.cc, self.bcc):
            if field is None:
                continue
            values = [field] if isinstance(field, str) else field
            for value in values:
                if value and value.strip():
                    result.extend(EmailAddress.parse_list(value))
        return result


class InboundAttachment(BaseModel):
    """Attachment on a received message."""

    filename: str | None = None
    content_type: str | None = None
    size: int | None = None
    content: bytes | None = None


class ParsedEmail(BaseModel):
    """Received message as parsed by the relay or IMAP collaborator."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: str | None = None
    subject: str = ""
    from_: list[EmailAddress] = Field(default=[], alias="from")
    to: list[EmailAddress] = []
    date: datetime | None = None
    text: str | None = None
    html: str | None = None
    attachments: list[InboundAttachment] = []
    headers: dict[str, str] = {}
