"""
Outbound leak detection tests.

Each YAML payload describes a message the agent might send and the rules
that must fire on it:

- expected_rules: rule ids that MUST be reported (others may fire too)
- blocked: required verdict, when given
- clean: true means no rule may fire at all (false-positive guard)
"""

from typing import Any

import pytest

from agenticmail_guard.email.models import OutboundMessage, OutgoingAttachment
from agenticmail_guard.protection.outbound import OutboundScanner


def _build_message(payload: dict[str, Any]) -> OutboundMessage:
    return OutboundMessage(
        to=payload.get("to", "partner@example.com"),
        subject=payload.get("subject"),
        text=payload.get("text"),
        html=payload.get("html"),
        attachments=[OutgoingAttachment(**a) for a in payload.get("attachments", [])],
    )


@pytest.mark.integration
class TestOutboundLeakDetection:
    """Corpus-driven checks for the outbound rule catalog."""

    def test_payload_detection(
        self,
        payload: dict[str, Any],
        outbound_scanner: OutboundScanner,
    ) -> None:
        payload_id = payload.get("id", "unknown")
        result = outbound_scanner.scan(_build_message(payload))
        found = set(result.rule_ids)

        if payload.get("clean"):
            assert not found, f"FALSE POSITIVE: {payload_id} triggered {sorted(found)}"
            return

        missing = set(payload.get("expected_rules", [])) - found
        assert not missing, (
            f"REGRESSION: {payload_id} did not trigger {sorted(missing)}.\n"
            f"  Found: {sorted(found)}\n"
            f"  Category: {payload.get('_category', 'unknown')}\n"
            f"  Notes: {payload.get('notes', '')}"
        )

        if "blocked" in payload:
            assert result.blocked is payload["blocked"], (
                f"{payload_id}: expected blocked={payload['blocked']}, summary: {result.summary}"
            )
