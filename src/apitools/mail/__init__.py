"""Email composition and delivery."""

from .composer import (
    AttachmentDecodeError,
    EmailError,
    EmailValidationError,
    InvalidHeaderError,
    MissingContentError,
    MissingRecipientError,
    MissingSubjectError,
    SendFailedError,
    compose_message,
    decode_attachment,
    validate_email_request,
)
from .models import Attachment, SendEmailRequest, SendEmailResponse
from .senders import (
    EmailSender,
    RemoteEmailSender,
    SMTPEmailSender,
    connect_to_rpc,
    create_email_sender,
)

__all__ = [
    "AttachmentDecodeError",
    "EmailError",
    "EmailValidationError",
    "InvalidHeaderError",
    "MissingContentError",
    "MissingRecipientError",
    "MissingSubjectError",
    "SendFailedError",
    "compose_message",
    "decode_attachment",
    "validate_email_request",
    "Attachment",
    "SendEmailRequest",
    "SendEmailResponse",
    "EmailSender",
    "RemoteEmailSender",
    "SMTPEmailSender",
    "connect_to_rpc",
    "create_email_sender",
]
