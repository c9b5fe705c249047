"""Custom exceptions for agenticmail-guard."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agenticmail_guard.protection.models import OutboundScanResult


class GuardError(Exception):
    """Base exception for agenticmail-guard."""


class ConfigError(GuardError):
    """Raised when the configuration cannot be loaded or is invalid.

    Carries the offending file and, for YAML syntax errors, the location.
    """

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        line: int | None = None,
        col: int | None = None,
    ) -> None:
        self.file_path = file_path
        self.line = line
        self.col = col
        full_message = message
        if file_path:
            location = f" in {file_path}"
            if line is not None:
                location += f" at line {line}"
                if col is not None:
                    location += f", column {col}"
            full_message = f"Configuration error{location}: {message}"
        super().__init__(full_message)


class OutboundBlockedError(GuardError):
    """Raised by the opt-in outbound gate when a message must not be sent."""

    def __init__(self, scan_result: OutboundScanResult) -> None:
        self.scan_result = scan_result
        rule_ids = ", ".join(sorted({w.rule_id for w in scan_result.warnings}))
        super().__init__(f"{scan_result.summary} Rules: {rule_ids}")
