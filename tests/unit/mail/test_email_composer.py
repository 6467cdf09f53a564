"""Unit tests for email validation and MIME composition."""

import base64

import pytest

from apitools.config import EmailConfig
from apitools.mail import (
    Attachment,
    AttachmentDecodeError,
    InvalidHeaderError,
    MissingContentError,
    MissingRecipientError,
    MissingSubjectError,
    SendEmailRequest,
    compose_message,
    validate_email_request,
)

DEFAULTS = EmailConfig(
    host="smtp.test", from_address="noreply@example.com", from_name="API Tools"
)


def _request(**overrides) -> SendEmailRequest:
    values = {"to": ["a@example.com"], "subject": "Hello", "content": "Body"}
    values.update(overrides)
    return SendEmailRequest(**values)


class TestValidation:
    def test_missing_recipient(self):
        with pytest.raises(MissingRecipientError):
            validate_email_request(_request(to=[]))

    def test_missing_subject(self):
        with pytest.raises(MissingSubjectError):
            validate_email_request(_request(subject=""))

    def test_missing_content(self):
        with pytest.raises(MissingContentError):
            validate_email_request(_request(content=""))

    def test_recipient_checked_first(self):
        with pytest.raises(MissingRecipientError):
            validate_email_request(_request(to=[], subject="", content=""))

    @pytest.mark.parametrize(
        "field, value",
        [
            ("subject", "Hi\r\nBcc: x@evil.example"),
            ("to", ["a@example.com\r\nBcc: x@evil.example"]),
            ("cc", ["c@example.com\nX-Injected: 1"]),
            ("reply_to", "r@example.com\r\nX-Injected: 1"),
            ("from_name", "Me\r\nBcc: x@evil.example"),
        ],
    )
    def test_line_breaks_in_headers_are_rejected(self, field, value):
        with pytest.raises(InvalidHeaderError):
            compose_message(_request(**{field: value}), DEFAULTS)

    def test_invalid_header_is_a_validation_error(self):
        from apitools.mail import EmailValidationError

        assert issubclass(InvalidHeaderError, EmailValidationError)


class TestHeaders:
    def test_from_uses_config_defaults(self):
        message, _ = compose_message(_request(), DEFAULTS)

        assert message["From"] == "API Tools <noreply@example.com>"

    def test_request_from_overrides_defaults(self):
        message, _ = compose_message(
            _request(from_address="me@example.com", from_name="Me"), DEFAULTS
        )

        assert message["From"] == "Me <me@example.com>"

    def test_bare_from_without_name(self):
        message, _ = compose_message(_request(), EmailConfig(from_address="x@example.com"))

        assert message["From"] == "x@example.com"

    def test_recipients_cc_bcc_and_reply_to(self):
        message, recipients = compose_message(
            _request(
                to=["a@example.com", "b@example.com"],
                cc=["c@example.com"],
                bcc=["hidden@example.com"],
                reply_to="reply@example.com",
            ),
            DEFAULTS,
        )

        assert message["To"] == "a@example.com, b@example.com"
        assert message["Cc"] == "c@example.com"
        assert message["Reply-To"] == "reply@example.com"
        assert message["Bcc"] is None
        assert recipients == [
            "a@example.com",
            "b@example.com",
            "c@example.com",
            "hidden@example.com",
        ]

    def test_subject(self):
        message, _ = compose_message(_request(subject="Weekly report"), DEFAULTS)

        assert message["Subject"] == "Weekly report"

    @pytest.mark.parametrize(
        "priority, x_priority, ms_priority",
        [(1, "1", "High"), (3, "3", "Normal"), (5, "5", "Low"), (2, "3", "Normal")],
    )
    def test_priority_headers(self, priority, x_priority, ms_priority):
        message, _ = compose_message(_request(priority=priority), DEFAULTS)

        assert message["X-Priority"] == x_priority
        assert message["X-MSMail-Priority"] == ms_priority

    def test_no_priority_headers_when_unset(self):
        message, _ = compose_message(_request(), DEFAULTS)

        assert message["X-Priority"] is None


class TestBody:
    def test_plain_text_by_default(self):
        message, _ = compose_message(_request(), DEFAULTS)

        assert message.get_content_type() == "text/plain"
        assert message.get_content().strip() == "Body"

    def test_html_is_case_insensitive(self):
        message, _ = compose_message(
            _request(content="<b>hi</b>", content_type="TEXT/HTML"), DEFAULTS
        )

        assert message.get_content_type() == "text/html"

    def test_unknown_content_type_falls_back_to_plain(self):
        message, _ = compose_message(_request(content_type="text/markdown"), DEFAULTS)

        assert message.get_content_type() == "text/plain"


class TestAttachments:
    def test_attachment_decodes_to_original_bytes(self):
        original = b"\x00\x01binary\xffpayload"
        request = _request(
            attachments=[
                Attachment(
                    file_name="data.bin",
                    content=base64.b64encode(original).decode(),
                    content_type="application/octet-stream",
                    size=len(original),
                )
            ]
        )

        message, _ = compose_message(request, DEFAULTS)

        parts = list(message.iter_attachments())
        assert len(parts) == 1
        assert parts[0].get_filename() == "data.bin"
        assert parts[0].get_content() == original

    def test_content_type_guessed_from_file_name(self):
        request = _request(
            attachments=[
                Attachment(file_name="report.pdf", content=base64.b64encode(b"%PDF").decode())
            ]
        )

        message, _ = compose_message(request, DEFAULTS)

        part = next(message.iter_attachments())
        assert part.get_content_type() == "application/pdf"

    def test_incomplete_attachments_are_ignored(self):
        request = _request(
            attachments=[
                Attachment(file_name="", content="aGVsbG8="),
                Attachment(file_name="empty.txt", content=""),
            ]
        )

        message, _ = compose_message(request, DEFAULTS)

        assert list(message.iter_attachments()) == []

    def test_bad_base64_raises(self):
        request = _request(
            attachments=[Attachment(file_name="bad.txt", content="not base64!!")]
        )

        with pytest.raises(AttachmentDecodeError) as exc_info:
            compose_message(request, DEFAULTS)

        assert exc_info.value.file_name == "bad.txt"


class TestWireFormat:
    def test_camel_case_and_from_alias(self):
        request = SendEmailRequest.model_validate(
            {
                "to": ["a@example.com"],
                "subject": "s",
                "content": "c",
                "contentType": "text/html",
                "from": "me@example.com",
                "fromName": "Me",
                "replyTo": "r@example.com",
                "attachments": [{"fileName": "a.txt", "content": "YQ==", "size": 1}],
            }
        )

        assert request.from_address == "me@example.com"
        assert request.from_name == "Me"
        assert request.reply_to == "r@example.com"
        assert request.attachments[0].file_name == "a.txt"

        dumped = request.model_dump(by_alias=True)
        assert dumped["from"] == "me@example.com"
        assert dumped["contentType"] == "text/html"
