"""Protection-related data models."""

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agenticmail_guard.defaults import (
    DEFAULT_INTERNAL_DOMAINS,
    DEFAULT_MAX_MATCH_LENGTH,
    DEFAULT_SCANNABLE_CONTENT_TYPES,
    DEFAULT_SCANNABLE_EXTENSIONS,
)


class Severity(str, Enum):
    """Severity of an outbound warning. Only HIGH blocks."""

    HIGH = "high"
    MEDIUM = "medium"


class Category(str, Enum):
    """Data category an outbound rule protects."""

    PII = "pii"
    CREDENTIAL = "credential"
    SYSTEM_INTERNAL = "system_internal"
    OWNER_PRIVACY = "owner_privacy"
    FINANCIAL = "financial"
    ATTACHMENT_RISK = "attachment_risk"


class AttachmentRisk(str, Enum):
    """Risk level of an inbound attachment, derived from its filename."""

    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ProtectionConfig(BaseModel):
    """Configuration for the guard pipeline.

    Attributes:
        internal_domains: Recipient domains treated as internal. A message
            whose recipients are all internal is not scanned.
        max_match_length: Matched snippets longer than this are truncated
            and suffixed with "...".
        scannable_content_types: Attachment content types whose payload is
            scanned with the text rules (any "text/*" type also qualifies).
        scannable_extensions: Extensions used when the content type does
            not qualify or is missing.
        disabled_rules: Rule ids removed from the catalog.
    """

    internal_domains: list[str] = Field(default_factory=lambda: list(DEFAULT_INTERNAL_DOMAINS))
    max_match_length: int = Field(
        default=DEFAULT_MAX_MATCH_LENGTH,
        gt=0,
        description="Maximum reported length of a matched snippet.",
    )
    scannable_content_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SCANNABLE_CONTENT_TYPES)
    )
    scannable_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SCANNABLE_EXTENSIONS)
    )
    disabled_rules: list[str] = []

    @field_validator("internal_domains", "scannable_content_types")
    @classmethod
    def _lowercase(cls, v: list[str]) -> list[str]:
        return [item.strip().lower() for item in v if item.strip()]

    @field_validator("scannable_extensions")
    @classmethod
    def _normalize_extensions(cls, v: list[str]) -> list[str]:
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized


class Rule(BaseModel):
    """A single outbound detection rule.

    ``test`` receives the scan buffer and returns the matched snippet, or
    None when the rule does not apply.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    category: Category
    severity: Severity
    description: str
    test: Callable[[str], str | None]


class OutboundWarning(BaseModel):
    """One rule hit on an outbound message."""

    rule_id: str
    category: Category
    severity: Severity
    description: str
    match: str


class OutboundScanResult(BaseModel):
    """Verdict of the outbound scanner for one message."""

    warnings: list[OutboundWarning] = []
    has_high_severity: bool = False
    has_medium_severity: bool = False
    blocked: bool = False
    summary: str = ""

    @property
    def rule_ids(self) -> list[str]:
        """Rule ids of all warnings, in detection order."""
        return [w.rule_id for w in self.warnings]


class Detection(BaseModel):
    """Content stripped by the inbound sanitizer.

    ``type`` names the stripped category; Unicode passes append the channel
    (``_text`` or ``_html``).
    """

    type: str
    description: str = ""
    count: int = 1


class SanitizeResult(BaseModel):
    """Cleaned inbound content plus a log of what was removed."""

    text: str
    html: str
    was_modified: bool
    detections: list[Detection] = []


class SpamMatch(BaseModel):
    """A rule hit reported by the external spam/phishing scorer."""

    rule_id: str


class SpamResult(BaseModel):
    """Output of the external spam/phishing scorer.

    Every field is optional; partial results are common.
    """

    score: float | None = None
    category: str | None = None
    is_spam: bool | None = None
    is_warning: bool | None = None
    matches: list[SpamMatch] = []


class AttachmentWarning(BaseModel):
    """Filename-based warning for an inbound attachment."""

    filename: str
    risk: AttachmentRisk
    detail: str


class LinkWarning(BaseModel):
    """Advisory line derived from an external phishing rule hit."""

    rule_id: str
    detail: str


class InboundSecurityAdvisory(BaseModel):
    """Informational summary surfaced to the agent alongside inbound mail."""

    attachment_warnings: list[AttachmentWarning] = []
    link_warnings: list[LinkWarning] = []
    is_spam: bool | None = None
    spam_score: float | None = None
    spam_category: str | None = None
    is_warning: bool | None = None
    summary: str = ""
