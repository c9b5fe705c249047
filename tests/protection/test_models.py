"""Tests for protection models."""

import pytest
from pydantic import ValidationError

from agenticmail_guard.defaults import DEFAULT_MAX_MATCH_LENGTH
from agenticmail_guard.protection.models import (
    Category,
    OutboundScanResult,
    OutboundWarning,
    ProtectionConfig,
    Severity,
    SpamResult,
)


class TestProtectionConfig:
    def test_defaults(self) -> None:
        config = ProtectionConfig()
        assert config.internal_domains == ["localhost"]
        assert config.max_match_length == DEFAULT_MAX_MATCH_LENGTH
        assert "text/plain" in config.scannable_content_types
        assert ".env" in config.scannable_extensions
        assert config.disabled_rules == []

    def test_domains_are_lowercased(self) -> None:
        config = ProtectionConfig(internal_domains=[" Corp.Example.COM ", ""])
        assert config.internal_domains == ["corp.example.com"]

    def test_extensions_are_normalized(self) -> None:
        config = ProtectionConfig(scannable_extensions=["TXT", ".Log", " "])
        assert config.scannable_extensions == [".txt", ".log"]

    def test_content_types_are_lowercased(self) -> None:
        config = ProtectionConfig(scannable_content_types=["Text/CSV"])
        assert config.scannable_content_types == ["text/csv"]

    def test_max_match_length_zero_raises(self) -> None:
        with pytest.raises(ValidationError):
            ProtectionConfig(max_match_length=0)


class TestOutboundScanResult:
    def test_defaults_are_clean(self) -> None:
        result = OutboundScanResult()
        assert result.warnings == []
        assert not result.blocked
        assert result.summary == ""

    def test_rule_ids(self) -> None:
        warning = OutboundWarning(
            rule_id="ob_ssn",
            category=Category.PII,
            severity=Severity.HIGH,
            description="Social Security Number detected",
            match="123-45-6789",
        )
        result = OutboundScanResult(warnings=[warning, warning], blocked=True)
        assert result.rule_ids == ["ob_ssn", "ob_ssn"]


class TestSpamResult:
    def test_all_fields_optional(self) -> None:
        result = SpamResult()
        assert result.score is None
        assert result.matches == []

    def test_parses_matches(self) -> None:
        result = SpamResult.model_validate(
            {"score": 4.5, "matches": [{"rule_id": "ph_homograph"}]}
        )
        assert result.matches[0].rule_id == "ph_homograph"
