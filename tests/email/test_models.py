"""Tests for email models."""

from agenticmail_guard.email.models import EmailAddress, OutboundMessage, ParsedEmail


class TestEmailAddress:
    def test_parse_list_with_name(self) -> None:
        [address] = EmailAddress.parse_list("Alice <Alice@Example.COM>")
        assert address.name == "Alice"
        assert address.address == "Alice@Example.COM"
        assert address.domain == "example.com"

    def test_parse_list_bare(self) -> None:
        [address] = EmailAddress.parse_list("bob@example.com")
        assert address.name is None
        assert str(address) == "bob@example.com"

    def test_parse_list_comma_joined(self) -> None:
        addresses = EmailAddress.parse_list("agent@localhost, Eve <evil@example.com>")
        assert [a.address for a in addresses] == ["agent@localhost", "evil@example.com"]
        assert addresses[1].name == "Eve"

    def test_parse_list_quoted_comma_in_name(self) -> None:
        addresses = EmailAddress.parse_list('"Doe, Jane" <jane@example.com>')
        assert [a.address for a in addresses] == ["jane@example.com"]
        assert addresses[0].name == "Doe, Jane"

    def test_str_with_name(self) -> None:
        assert str(EmailAddress(name="Bob", address="bob@example.com")) == "Bob <bob@example.com>"

    def test_domain_missing(self) -> None:
        assert EmailAddress(address="postmaster").domain == ""


class TestOutboundMessageRecipients:
    def test_single_string(self) -> None:
        message = OutboundMessage(to="bob@example.com")
        assert [r.address for r in message.recipients()] == ["bob@example.com"]

    def test_flattens_to_cc_bcc(self) -> None:
        message = OutboundMessage(
            to=["a@example.com", "  "],
            cc="b@example.com",
            bcc=["Carol <c@example.com>"],
        )
        assert [r.address for r in message.recipients()] == [
            "a@example.com",
            "b@example.com",
            "c@example.com",
        ]

    def test_splits_comma_joined_strings(self) -> None:
        message = OutboundMessage(
            to="agent@localhost, evil@example.com",
            cc=["a@example.com, b@example.com"],
        )
        assert [r.address for r in message.recipients()] == [
            "agent@localhost",
            "evil@example.com",
            "a@example.com",
            "b@example.com",
        ]

    def test_empty(self) -> None:
        assert OutboundMessage(to=[]).recipients() == []


class TestParsedEmail:
    def test_from_alias(self) -> None:
        email = ParsedEmail.model_validate(
            {"from": [{"address": "sender@example.com"}], "subject": "Hi"}
        )
        assert email.from_[0].address == "sender@example.com"

    def test_defaults(self) -> None:
        email = ParsedEmail()
        assert email.subject == ""
        assert email.text is None
        assert email.attachments == []
