"""
Unit tests for request and response models.
"""

import base64

import pytest
from pydantic import ValidationError

from postal_client import (
    Attachment,
    DetailsInterest,
    EmailAddress,
    Message,
    MessageDetails,
    RawMessage,
    SendResult,
)


def _full_message() -> Message:
    return (
        Message()
        .with_to("a@example.com", "b@example.com")
        .with_cc("c@example.com")
        .with_bcc("d@example.com")
        .with_from("sender@example.com")
        .with_reply_to("reply@example.com")
        .with_subject("Quarterly report")
        .with_text("See attached.")
        .with_html("<p>See attached.</p>")
        .with_attachment("report.csv", "text/csv", b"a,b\n1,2\n")
        .with_header("X-Campaign", "q3")
        .with_tag("reports")
    )


class TestMessageBuilder:
    """Fluent construction of outbound messages."""

    def test_builder_sets_every_field(self):
        message = _full_message()

        assert message.to == ("a@example.com", "b@example.com")
        assert message.cc == ("c@example.com",)
        assert message.bcc == ("d@example.com",)
        assert message.from_address == "sender@example.com"
        assert message.reply_to == "reply@example.com"
        assert message.subject == "Quarterly report"
        assert message.plain_body == "See attached."
        assert message.html_body == "<p>See attached.</p>"
        assert dict(message.headers) == {"X-Campaign": "q3"}
        assert message.tag == "reports"

    def test_recipients_accumulate_in_order(self):
        message = Message().with_to("a@example.com").with_to("b@example.com", "c@example.com")

        assert message.to == ("a@example.com", "b@example.com", "c@example.com")

    def test_builder_returns_new_instance(self):
        original = Message().with_subject("first")
        updated = original.with_subject("second")

        assert original.subject == "first"
        assert updated.subject == "second"
        assert original is not updated

    def test_message_is_frozen(self):
        message = Message().with_subject("hello")

        with pytest.raises(ValidationError):
            message.subject = "changed"

    def test_email_address_is_rendered_with_name(self):
        message = Message().with_to(EmailAddress(email="alice@example.com", name="Alice")).with_from(
            EmailAddress(email="bot@example.com")
        )

        assert message.to == ("Alice <alice@example.com>",)
        assert message.from_address == "bot@example.com"

    def test_attachment_bytes_are_base64_encoded(self):
        message = Message().with_attachment("hello.txt", "text/plain", b"hello")

        attachment = message.attachments[0]
        assert attachment.name == "hello.txt"
        assert attachment.content_type == "text/plain"
        assert base64.b64decode(attachment.data) == b"hello"

    def test_attachment_string_data_is_kept_as_is(self):
        message = Message().with_attachment("hello.txt", "text/plain", "aGVsbG8=")

        assert message.attachments[0].data == "aGVsbG8="

    def test_attachment_object_is_accepted(self):
        attachment = Attachment(name="a.bin", content_type="application/octet-stream", data="AAE=")

        assert Message().with_attachment(attachment).attachments == (attachment,)

    def test_attachment_by_name_requires_data(self):
        with pytest.raises(TypeError):
            Message().with_attachment("a.txt")

    def test_headers_merge(self):
        message = Message().with_header("X-One", "1").with_header("X-Two", "2").with_header("X-One", "one")

        assert dict(message.headers) == {"X-One": "one", "X-Two": "2"}

    def test_headers_are_not_shared_between_copies(self):
        first = Message().with_header("X-A", "1")
        second = first.with_subject("s").with_header("X-B", "2")

        assert dict(first.headers) == {"X-A": "1"}
        assert dict(second.headers) == {"X-A": "1", "X-B": "2"}
        assert first.to_payload() == {"headers": {"X-A": "1"}}

    def test_headers_cannot_be_mutated(self):
        message = Message().with_header("X-A", "1")

        with pytest.raises(TypeError):
            message.headers["X-A"] = "changed"  # type: ignore[index]

        assert message.to_payload() == {"headers": {"X-A": "1"}}

    def test_headers_accept_a_mapping(self):
        message = Message.model_validate({"headers": {"X-A": "1"}})

        assert message.headers == (("X-A", "1"),)

    def test_no_local_body_validation(self):
        message = Message().with_to("a@example.com").with_subject("empty")

        assert message.has_body is False
        assert message.to_payload() == {"to": ["a@example.com"], "subject": "empty"}


class TestMessagePayload:
    """JSON payload for the send endpoint."""

    def test_payload_uses_from_key_and_omits_unset(self):
        payload = Message().with_to("a@example.com").with_from("me@example.com").with_text("hi").to_payload()

        assert payload == {"to": ["a@example.com"], "from": "me@example.com", "plain_body": "hi"}

    def test_payload_attachment_shape(self):
        payload = Message().with_attachment("x.txt", "text/plain", b"x").to_payload()

        assert payload["attachments"] == [{"name": "x.txt", "content_type": "text/plain", "data": "eA=="}]

    def test_payload_round_trips(self):
        message = _full_message().with_sender("relay@example.com").with_bounce()

        restored = Message.model_validate(message.to_payload())

        assert restored.model_dump() == message.model_dump()
        assert restored.to_payload() == message.to_payload()


class TestRawMessage:
    def test_from_bytes_encodes_message(self):
        raw = RawMessage.from_bytes("me@example.com", ["a@example.com"], b"Subject: hi\r\n\r\nbody")

        assert raw.rcpt_to == ("a@example.com",)
        assert base64.b64decode(raw.data) == b"Subject: hi\r\n\r\nbody"
        assert raw.to_payload() == {"mail_from": "me@example.com", "rcpt_to": ["a@example.com"], "data": raw.data}


class TestDetailsInterest:
    def test_none_has_no_expansions(self):
        assert DetailsInterest.NONE.expansions == []

    def test_combined_flags_keep_declaration_order(self):
        interest = DetailsInterest.HEADERS | DetailsInterest.STATUS | DetailsInterest.DETAILS

        assert interest.expansions == ["status", "details", "headers"]

    def test_all_lists_every_section(self):
        assert DetailsInterest.ALL.expansions == [
            "status",
            "details",
            "inspection",
            "plain_body",
            "html_body",
            "attachments",
            "headers",
            "raw_message",
            "activity_entries",
        ]


class TestResponses:
    def test_send_result_lookup(self):
        result = SendResult.model_validate(
            {
                "message_id": "abc@postal.example.com",
                "messages": {"a@example.com": {"id": 42, "token": "tok"}},
            }
        )

        assert result["a@example.com"].id == 42
        assert result["a@example.com"].token == "tok"
        assert "a@example.com" in result
        assert result.recipients == ["a@example.com"]

    def test_message_details_sections_default_to_none(self):
        details = MessageDetails.model_validate({"id": 42, "token": "tok"})

        assert details.status is None
        assert details.details is None
        assert details.plain_body is None
        assert details.headers is None

    def test_message_details_keeps_unknown_fields(self):
        details = MessageDetails.model_validate({"id": 42, "token": "tok", "spam_checks": []})

        assert details.model_extra == {"spam_checks": []}
