"""Outbound rule catalog.

Every text rule is independent: the scanner runs all of them over the scan
buffer and each hit becomes one warning. Attachment rules look only at the
filename extension.
"""

import re
from collections.abc import Callable, Collection, Iterable, Iterator

from pydantic import BaseModel, ConfigDict

from agenticmail_guard.protection.models import Category, Rule, Severity

Matcher = Callable[[str], str | None]


class ExtensionRule(BaseModel):
    """Content-independent rule keyed on an attachment's file extension."""

    model_config = ConfigDict(frozen=True)

    id: str
    category: Category
    severity: Severity
    label: str
    extensions: frozenset[str]

    def matches(self, extension: str) -> bool:
        return extension in self.extensions


def _search(pattern: str, flags: int = 0, limit: int | None = None) -> Matcher:
    """Build a matcher returning the first match of ``pattern``.

    Args:
        pattern: Regex pattern.
        flags: Regex flags.
        limit: Optional cap on the returned snippet length.
    """
    compiled = re.compile(pattern, flags)

    def test(text: str) -> str | None:
        match = compiled.search(text)
        if match is None:
            return None
        return match.group(0)[:limit] if limit else match.group(0)

    return test


def _first_of(*matchers: Matcher) -> Matcher:
    """Combine matchers; the first one that hits wins."""

    def test(text: str) -> str | None:
        for matcher in matchers:
            snippet = matcher(text)
            if snippet:
                return snippet
        return None

    return test


_WIRE_VERB = re.compile(r"\bwire\s+(?:transfer|funds?|payment|to)\b", re.IGNORECASE)
_WIRE_DETAILS = re.compile(r"\b(?:routing|account|swift|iban|beneficiary)\b", re.IGNORECASE)


def _wire_transfer(text: str) -> str | None:
    if _WIRE_VERB.search(text) and _WIRE_DETAILS.search(text):
        return "wire transfer instructions with account details"
    return None


_ENV_LINE = re.compile(r"^[A-Z][A-Z0-9_]{2,}\s*=\s*\S+")
_ENV_BLOCK_MIN_LINES = 3


def _env_block(text: str) -> str | None:
    # Blank lines and comments do not break a block
    consecutive = 0
    first = ""
    for line in text.split("\n"):
        stripped = line.strip()
        if _ENV_LINE.match(stripped):
            consecutive += 1
            if consecutive == 1:
                first = stripped
            if consecutive >= _ENV_BLOCK_MIN_LINES:
                return f"{first}... (multiple env vars)"
        elif stripped and not stripped.startswith("#"):
            consecutive = 0
    return None


_I = re.IGNORECASE
_ID_SUFFIX = r"\s*(?:#|number|num|no)?[\s:]*"

TEXT_RULES: tuple[Rule, ...] = (
    # PII
    Rule(
        id="ob_ssn",
        category=Category.PII,
        severity=Severity.HIGH,
        description="Social Security Number detected",
        test=_search(r"\b\d{3}-\d{2}-\d{4}\b"),
    ),
    Rule(
        id="ob_ssn_obfuscated",
        category=Category.PII,
        severity=Severity.HIGH,
        description="Social Security Number detected (obfuscated format)",
        test=_first_of(
            _search(r"\b\d{3}\.\d{2}\.\d{4}\b"),
            _search(r"\b\d{3}\s\d{2}\s\d{4}\b"),
            # Bare nine digits only count next to an SSN keyword
            _search(r"\b(?:ssn|social\s*security|soc\s*sec)" + _ID_SUFFIX + r"\d{9}\b", _I),
        ),
    ),
    Rule(
        id="ob_credit_card",
        category=Category.PII,
        severity=Severity.HIGH,
        description="Credit card number detected",
        test=_search(r"\b(?:\d{4}[-\s]?){3}\d{4}\b"),
    ),
    Rule(
        id="ob_phone",
        category=Category.PII,
        severity=Severity.MEDIUM,
        description="US phone number detected",
        test=_search(r"\b(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b"),
    ),
    Rule(
        id="ob_bank_routing",
        category=Category.PII,
        severity=Severity.HIGH,
        description="Bank routing or account number detected",
        test=_search(r"\b(?:routing|account|acct)" + _ID_SUFFIX + r"\d{6,17}\b", _I),
    ),
    Rule(
        id="ob_drivers_license",
        category=Category.PII,
        severity=Severity.HIGH,
        description="Driver's license number detected",
        test=_search(
            r"\b(?:driver'?s?\s*(?:license|licence|lic)|DL)\b"
            + _ID_SUFFIX
            + r"[A-Z0-9][A-Z0-9-]{4,14}\b",
            _I,
        ),
    ),
    Rule(
        id="ob_dob",
        category=Category.PII,
        severity=Severity.MEDIUM,
        description="Date of birth detected",
        test=_first_of(
            _search(
                r"\b(?:date\s+of\s+birth|DOB|born\s+on|birthday|birthdate)\s*[:=]?\s*"
                r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b",
                _I,
            ),
            _search(
                r"\b(?:date\s+of\s+birth|DOB|born\s+on|birthday|birthdate)\s*[:=]?\s*"
                r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+\d{1,2},?\s+\d{4}\b",
                _I,
            ),
        ),
    ),
    Rule(
        id="ob_passport",
        category=Category.PII,
        severity=Severity.HIGH,
        description="Passport number detected",
        test=_search(r"\bpassport" + _ID_SUFFIX + r"[A-Z0-9]{6,12}\b", _I),
    ),
    Rule(
        id="ob_tax_id",
        category=Category.PII,
        severity=Severity.HIGH,
        description="Tax ID / EIN detected",
        test=_search(
            r"\b(?:EIN|TIN|tax\s*(?:id|identification)|employer\s*id)"
            + _ID_SUFFIX
            + r"\d{2}-?\d{7}\b",
            _I,
        ),
    ),
    Rule(
        id="ob_itin",
        category=Category.PII,
        severity=Severity.HIGH,
        description="ITIN detected (Individual Taxpayer Identification Number)",
        test=_search(r"\bITIN" + _ID_SUFFIX + r"9\d{2}-?\d{2}-?\d{4}\b", _I),
    ),
    Rule(
        id="ob_medicare",
        category=Category.PII,
        severity=Severity.HIGH,
        description="Medicare/Medicaid/health insurance ID detected",
        test=_search(
            r"\b(?:medicare|medicaid|health\s*(?:insurance|plan))\s*(?:#|id|number|num|no)?[\s:]*"
            r"[A-Z0-9]{8,14}\b",
            _I,
        ),
    ),
    Rule(
        id="ob_immigration",
        category=Category.PII,
        severity=Severity.HIGH,
        description="Immigration A-number detected",
        test=_search(
            r"\b(?:A-?number|alien\s*(?:#|number|num|no)?|USCIS)\s*[:=\s]*A?-?\d{8,9}\b", _I
        ),
    ),
    Rule(
        id="ob_pin",
        category=Category.PII,
        severity=Severity.MEDIUM,
        description="PIN code detected",
        test=_search(r"\b(?:PIN|pin\s*code|pin\s*number)\s*[:=]\s*\d{4,8}\b", _I),
    ),
    Rule(
        id="ob_iban",
        category=Category.PII,
        severity=Severity.HIGH,
        description="IBAN number detected",
        test=_search(r"\b[A-Z]{2}\d{2}\s?[A-Z0-9]{4}\s?(?:[A-Z0-9]{4}\s?){2,7}[A-Z0-9]{1,4}\b"),
    ),
    # Financial / crypto
    Rule(
        id="ob_swift",
        category=Category.FINANCIAL,
        severity=Severity.HIGH,
        description="SWIFT/BIC code detected",
        # Keyword is case-insensitive, the code itself must be upper case
        test=_search(
            r"(?i:\b(?:SWIFT|BIC|swift\s*code|bic\s*code))\s*[:=]?\s*"
            r"[A-Z]{6}[A-Z0-9]{2}(?:[A-Z0-9]{3})?\b"
        ),
    ),
    Rule(
        id="ob_crypto_wallet",
        category=Category.FINANCIAL,
        severity=Severity.HIGH,
        description="Cryptocurrency wallet address detected",
        test=_search(
            r"\b(?:bc1[a-z0-9]{39,59}|[13][a-km-zA-HJ-NP-Z1-9]{25,34}|0x[a-fA-F0-9]{40})\b"
        ),
    ),
    Rule(
        id="ob_wire_transfer",
        category=Category.FINANCIAL,
        severity=Severity.HIGH,
        description="Wire transfer instructions detected",
        test=_wire_transfer,
    ),
    Rule(
        id="ob_security_qa",
        category=Category.FINANCIAL,
        severity=Severity.HIGH,
        description="Security question and answer detected",
        test=_first_of(
            _search(
                r"\b(?:security\s*question|secret\s*question|challenge\s*question)\s*[:=]?\s*"
                r".{5,80}(?:answer|response)\s*[:=]?\s*\S+",
                _I,
                limit=80,
            ),
            _search(
                r"\b(?:security\s*(?:answer|response)|mother['\u2019]?s?\s*maiden\s*name"
                r"|first\s*pet['\u2019]?s?\s*name)\s*[:=]?\s*\S{2,}",
                _I,
                limit=80,
            ),
        ),
    ),
    # Credentials
    Rule(
        id="ob_api_key",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="API key pattern detected",
        test=_first_of(
            _search(r"\b(?:sk_|pk_|rk_|api_key_|apikey_)[a-zA-Z0-9_]{20,}\b", _I),
            _search(r"\bsk-(?:proj|ant|live|test)-[a-zA-Z0-9_-]{20,}"),
        ),
    ),
    Rule(
        id="ob_aws_key",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="AWS access key detected",
        test=_first_of(
            _search(r"\bAKIA[A-Z0-9]{16}\b"),
            _search(r"\bAWS_(?:ACCESS_KEY_ID|SECRET_ACCESS_KEY)\s*[:=]\s*[A-Za-z0-9/+=]{16,}"),
        ),
    ),
    Rule(
        id="ob_password_value",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="Password value in text",
        # Leet variants: p@ssword, p4ssw0rd, p@ss
        test=_search(r"\bp[a@4]ss(?:w[o0]rd)?\s*[:=]\s*\S+", _I),
    ),
    Rule(
        id="ob_private_key",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="Private key block detected",
        test=_search(r"-----BEGIN\s+(?:RSA\s+|EC\s+|DSA\s+|OPENSSH\s+)?PRIVATE\s+KEY-----", _I),
    ),
    Rule(
        id="ob_bearer_token",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="Bearer token detected",
        test=_search(r"\bBearer\s+[a-zA-Z0-9_\-.]{20,}\b"),
    ),
    Rule(
        id="ob_connection_string",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="Database connection string detected",
        test=_search(
            r"\b(?:mongodb(?:\+srv)?|postgres|postgresql|mysql|redis|amqp)://\S+", _I
        ),
    ),
    Rule(
        id="ob_github_token",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="GitHub token detected",
        test=_search(r"\b(?:ghp_|gho_|ghu_|ghs_|ghr_|github_pat_)[a-zA-Z0-9_]{20,}\b"),
    ),
    Rule(
        id="ob_stripe_key",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="Stripe API key detected",
        test=_search(r"\b(?:sk|pk|rk)_(?:live|test)_[a-zA-Z0-9]{20,}\b"),
    ),
    Rule(
        id="ob_jwt",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="JWT token detected",
        test=_search(
            r"\beyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}", limit=80
        ),
    ),
    Rule(
        id="ob_webhook_url",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="Webhook URL with token detected",
        test=_search(
            r"\bhttps?://(?:hooks\.slack\.com/services|discord(?:app)?\.com/api/webhooks"
            r"|[\w.-]+\.webhook\.site)/\S+",
            _I,
        ),
    ),
    Rule(
        id="ob_env_block",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="Multiple environment variable assignments detected (possible .env leak)",
        test=_env_block,
    ),
    Rule(
        id="ob_seed_phrase",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="Recovery/seed phrase detected",
        test=_search(
            r"\b(?:seed\s*phrase|recovery\s*phrase|mnemonic|backup\s*words)\s*[:=]?\s*.{10,}",
            _I,
            limit=80,
        ),
    ),
    Rule(
        id="ob_2fa_codes",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="2FA backup/recovery codes detected",
        test=_search(
            r"\b(?:2fa|two.factor|backup|recovery)\s*(?:code|key)s?\s*[:=]?\s*"
            r"(?:[A-Z0-9]{4,8}[\s,;-]+){2,}",
            _I,
            limit=80,
        ),
    ),
    Rule(
        id="ob_credential_pair",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="Username/email + password pair detected",
        test=_search(
            r"\b(?:user(?:name)?|email|login)\s*[:=]\s*\S+[\s,;]+"
            r"(?:password|passwd|pass|pwd)\s*[:=]\s*\S+",
            _I,
            limit=80,
        ),
    ),
    Rule(
        id="ob_oauth_token",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="OAuth access/refresh token detected",
        test=_search(
            r"\b(?:access_token|refresh_token|oauth_token)\s*[:=]\s*[a-zA-Z0-9_\-.]{20,}",
            _I,
            limit=80,
        ),
    ),
    Rule(
        id="ob_vpn_creds",
        category=Category.CREDENTIAL,
        severity=Severity.HIGH,
        description="VPN credentials detected",
        test=_search(
            r"\b(?:vpn|openvpn|wireguard|ipsec)\b.*"
            r"\b(?:password|key|secret|credential|pre.?shared)\b",
            _I,
            limit=80,
        ),
    ),
    # System internals
    Rule(
        id="ob_private_ip",
        category=Category.SYSTEM_INTERNAL,
        severity=Severity.MEDIUM,
        description="Private IP address detected",
        test=_search(
            r"\b(?:10\.\d{1,3}\.\d{1,3}\.\d{1,3}|192\.168\.\d{1,3}\.\d{1,3}"
            r"|172\.(?:1[6-9]|2\d|3[01])\.\d{1,3}\.\d{1,3})\b"
        ),
    ),
    Rule(
        id="ob_file_path",
        category=Category.SYSTEM_INTERNAL,
        severity=Severity.MEDIUM,
        description="Local file path detected",
        test=_search(r"(?:/Users/|/home/|/etc/|/var/|C:\\Users\\|C:\\Windows\\)\S+", _I),
    ),
    Rule(
        id="ob_env_variable",
        category=Category.SYSTEM_INTERNAL,
        severity=Severity.MEDIUM,
        description="Environment variable assignment detected",
        test=_search(
            r"\b[A-Z][A-Z0-9_]{2,}(?:_URL|_KEY|_SECRET|_TOKEN|_PASSWORD|_HOST|_PORT|_DSN)\s*=\s*\S+"
        ),
    ),
    # Owner privacy
    Rule(
        id="ob_owner_info",
        category=Category.OWNER_PRIVACY,
        severity=Severity.HIGH,
        description="May be revealing owner personal information",
        test=_search(
            r"\b(?:my\s+)?owner['\u2019]?s?\s+(?:name|address|phone|email|password|social|ssn"
            r"|credit\s+card|bank|account)\b",
            _I,
        ),
    ),
    Rule(
        id="ob_personal_reveal",
        category=Category.OWNER_PRIVACY,
        severity=Severity.HIGH,
        description="Agent revealing personal details about its operator",
        test=_search(
            r"\b(?:the\s+person\s+who\s+(?:owns|runs|operates)\s+me"
            r"|my\s+(?:human|creator|operator)\s+(?:is|lives|works|named))\b",
            _I,
        ),
    ),
)

ATTACHMENT_RULES: tuple[ExtensionRule, ...] = (
    ExtensionRule(
        id="ob_sensitive_file",
        category=Category.ATTACHMENT_RISK,
        severity=Severity.HIGH,
        label="Sensitive file type",
        extensions=frozenset(
            {".pem", ".key", ".p12", ".pfx", ".env", ".credentials", ".keystore", ".jks", ".p8"}
        ),
    ),
    ExtensionRule(
        id="ob_data_file",
        category=Category.ATTACHMENT_RISK,
        severity=Severity.MEDIUM,
        label="Data file type",
        extensions=frozenset(
            {
                ".db", ".sqlite", ".sqlite3", ".sql", ".csv", ".tsv",
                ".json", ".yml", ".yaml", ".conf", ".config", ".ini",
            }
        ),
    ),
)


class RuleCatalog:
    """Immutable, ordered set of outbound rules.

    Built once and shared by reference; scanners take a catalog so tests
    and deployments can substitute their own.
    """

    def __init__(
        self,
        rules: Iterable[Rule],
        attachment_rules: Iterable[ExtensionRule] = (),
    ) -> None:
        """Initialize the catalog.

        Args:
            rules: Text rules applied to subject, body and attachment content.
            attachment_rules: Extension rules applied to attachment filenames.

        Raises:
            ValueError: If two rules share an id.
        """
        self._rules = tuple(rules)
        self._attachment_rules = tuple(attachment_rules)
        seen: set[str] = set()
        for rule in (*self._rules, *self._attachment_rules):
            if rule.id in seen:
                raise ValueError(f"Duplicate rule id: {rule.id}")
            seen.add(rule.id)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules) + len(self._attachment_rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def attachment_rules(self) -> tuple[ExtensionRule, ...]:
        return self._attachment_rules

    def ids(self) -> list[str]:
        """Return all rule ids in catalog order."""
        return [r.id for r in (*self._rules, *self._attachment_rules)]

    def get(self, rule_id: str) -> Rule | ExtensionRule | None:
        for rule in (*self._rules, *self._attachment_rules):
            if rule.id == rule_id:
                return rule
        return None

    def without(self, rule_ids: Collection[str]) -> "RuleCatalog":
        """Return a copy of the catalog with the given rules removed."""
        if not rule_ids:
            return self
        return RuleCatalog(
            (r for r in self._rules if r.id not in rule_ids),
            (r for r in self._attachment_rules if r.id not in rule_ids),
        )


DEFAULT_CATALOG = RuleCatalog(TEXT_RULES, ATTACHMENT_RULES)
