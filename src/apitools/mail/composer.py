"""Build MIME messages from SendEmailRequest."""

import base64
import binascii
import logging
import mimetypes
from email.errors import HeaderParseError
from email.message import EmailMessage
from email.utils import formataddr
from typing import List, Tuple

from ..config import EmailConfig
from .models import PRIORITY_HIGH, PRIORITY_LOW, SendEmailRequest

logger = logging.getLogger(__name__)

DEFAULT_ATTACHMENT_TYPE = "application/octet-stream"


class EmailError(Exception):
    """Base exception for email composition and delivery."""

    pass


class EmailValidationError(EmailError):
    pass


class MissingRecipientError(EmailValidationError):
    pass


class MissingSubjectError(EmailValidationError):
    pass


class MissingContentError(EmailValidationError):
    pass


class InvalidHeaderError(EmailValidationError):
    """Exception raised when a header value cannot be encoded (e.g. contains CR or LF)."""

    pass


class AttachmentDecodeError(EmailError):
    """Exception raised when attachment content is not valid base64."""

    def __init__(self, file_name: str, reason: str):
        super().__init__(f"Failed to decode attachment {file_name}: {reason}")
        self.file_name = file_name


class SendFailedError(EmailError):
    """Exception raised when the message could not be handed to the server."""

    pass


def validate_email_request(request: SendEmailRequest) -> None:
    if not request.to:
        raise MissingRecipientError("recipient list cannot be empty")
    if not request.subject:
        raise MissingSubjectError("subject cannot be empty")
    if not request.content:
        raise MissingContentError("content cannot be empty")


def decode_attachment(file_name: str, content: str) -> bytes:
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AttachmentDecodeError(file_name, str(e))


def _set_header(message: EmailMessage, name: str, value: str) -> None:
    try:
        message[name] = value
    except (ValueError, HeaderParseError) as e:
        raise InvalidHeaderError(f"invalid {name} header: {e}")


def _priority_headers(priority: int) -> Tuple[str, str]:
    if priority == PRIORITY_HIGH:
        return "1", "High"
    if priority == PRIORITY_LOW:
        return "5", "Low"
    return "3", "Normal"


def _split_content_type(content_type: str, file_name: str) -> Tuple[str, str]:
    if not content_type or "/" not in content_type:
        content_type = mimetypes.guess_type(file_name)[0] or DEFAULT_ATTACHMENT_TYPE
    maintype, _, subtype = content_type.partition("/")
    return maintype, subtype


def compose_message(
    request: SendEmailRequest, defaults: EmailConfig
) -> Tuple[EmailMessage, List[str]]:
    """Build the message and the envelope recipient list.

    Bcc addresses go only into the envelope, never into a header.

    Raises:
        EmailValidationError: If recipients, subject or content are missing,
            or a header value cannot be encoded
        AttachmentDecodeError: If an attachment is not valid base64
    """
    validate_email_request(request)

    message = EmailMessage()

    from_address = request.from_address or defaults.from_address
    from_name = request.from_name or defaults.from_name
    if from_name:
        _set_header(message, "From", formataddr((from_name, from_address)))
    else:
        _set_header(message, "From", from_address)

    _set_header(message, "To", ", ".join(request.to))
    if request.cc:
        _set_header(message, "Cc", ", ".join(request.cc))
    if request.reply_to:
        _set_header(message, "Reply-To", request.reply_to)
    _set_header(message, "Subject", request.subject)

    if request.priority > 0:
        x_priority, ms_priority = _priority_headers(request.priority)
        message["X-Priority"] = x_priority
        message["X-MSMail-Priority"] = ms_priority

    subtype = "html" if request.content_type.lower() == "text/html" else "plain"
    message.set_content(request.content, subtype=subtype)

    for attachment in request.attachments:
        if not attachment.file_name or not attachment.content:
            continue
        data = decode_attachment(attachment.file_name, attachment.content)
        maintype, subtype = _split_content_type(
            attachment.content_type, attachment.file_name
        )
        try:
            message.add_attachment(
                data, maintype=maintype, subtype=subtype, filename=attachment.file_name
            )
        except (ValueError, HeaderParseError) as e:
            raise InvalidHeaderError(
                f"invalid attachment {attachment.file_name!r}: {e}"
            )
        logger.debug(f"Attached {attachment.file_name} ({len(data)} bytes)")

    recipients = list(request.to) + list(request.cc) + list(request.bcc)
    return message, recipients
