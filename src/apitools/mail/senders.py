"""EmailSender implementations.

``SMTPEmailSender`` delivers directly; ``RemoteEmailSender`` hands the
request to the RPC mail tier, which runs its own ``SMTPEmailSender``.
Both return the same SendEmailResponse contract.
"""

import logging
import smtplib
import ssl
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import rpyc
from rpyc.utils.factory import unix_connect

from ..config import AppConfig, EmailConfig, EmailRpcConfig
from ..utils.exception_logger import log_exception
from .composer import (
    AttachmentDecodeError,
    EmailValidationError,
    SendFailedError,
    compose_message,
    validate_email_request,
)
from .models import SendEmailRequest, SendEmailResponse

logger = logging.getLogger(__name__)

SMTP_SSL_PORT = 465


class EmailSender(ABC):
    """Capability to send one email and report a business result."""

    def send_email(self, request: SendEmailRequest) -> SendEmailResponse:
        """Send ``request`` and translate failures into business codes."""
        try:
            validate_email_request(request)
            response = self._deliver(request)
        except EmailValidationError as e:
            logger.info(f"Rejected email request: {e}")
            return SendEmailResponse(code=400, message=str(e))
        except AttachmentDecodeError as e:
            logger.error(str(e))
            return SendEmailResponse(code=400, message=str(e))
        except SendFailedError as e:
            logger.error(f"Failed to send email: {e}")
            log_exception(e, context={"recipients": request.to})
            return SendEmailResponse(code=500, message=f"Failed to send email: {e}")

        return response

    @abstractmethod
    def _deliver(self, request: SendEmailRequest) -> SendEmailResponse:
        """Deliver a validated request.

        Raises:
            AttachmentDecodeError: If an attachment cannot be decoded
            SendFailedError: If delivery fails
        """


class SMTPEmailSender(EmailSender):
    """Sends mail through an SMTP server; port 465 uses implicit SSL."""

    def __init__(
        self,
        config: EmailConfig,
        smtp_factory: Optional[Callable[..., smtplib.SMTP]] = None,
        smtp_ssl_factory: Optional[Callable[..., smtplib.SMTP]] = None,
    ):
        self.config = config
        self._smtp_factory = smtp_factory or smtplib.SMTP
        self._smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send_email(self, request: SendEmailRequest) -> SendEmailResponse:
        if not self.config.is_configured:
            logger.error("SMTP sender used without host/port configuration")
            return SendEmailResponse(code=500, message="email service is not configured")
        return super().send_email(request)

    def _connect(self) -> smtplib.SMTP:
        timeout = self.config.timeout_seconds
        if self.config.port == SMTP_SSL_PORT:
            return self._smtp_ssl_factory(
                self.config.host,
                self.config.port,
                timeout=timeout,
                context=ssl.create_default_context(),
            )

        smtp = self._smtp_factory(self.config.host, self.config.port, timeout=timeout)
        try:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls(context=ssl.create_default_context())
                smtp.ehlo()
        except (smtplib.SMTPException, OSError):
            smtp.close()
            raise
        return smtp

    def _deliver(self, request: SendEmailRequest) -> SendEmailResponse:
        message, recipients = compose_message(request, self.config)
        sender = request.from_address or self.config.from_address

        try:
            with self._connect() as smtp:
                if self.config.username:
                    smtp.login(self.config.username, self.config.password)
                smtp.send_message(message, from_addr=sender, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            raise SendFailedError(str(e)) from e

        email_id = str(uuid.uuid4())
        logger.info(f"Email sent, id: {email_id}, recipients: {request.to}")
        return SendEmailResponse(
            code=200,
            message="email sent",
            email_id=email_id,
            send_time=int(time.time()),
        )


class RemoteEmailSender(EmailSender):
    """Delegates sending to the RPC mail tier over rpyc."""

    def __init__(
        self,
        config: EmailRpcConfig,
        connect: Optional[Callable[[EmailRpcConfig], Any]] = None,
    ):
        self.config = config
        self._connect = connect or connect_to_rpc

    def _deliver(self, request: SendEmailRequest) -> SendEmailResponse:
        payload = request.model_dump_json(by_alias=True)
        try:
            conn = self._connect(self.config)
        except (OSError, EOFError) as e:
            raise SendFailedError(f"email RPC service unavailable: {e}") from e

        try:
            result = conn.root.send_email(payload)
        except (OSError, EOFError, TimeoutError) as e:
            raise SendFailedError(f"email RPC call failed: {e}") from e
        finally:
            conn.close()

        response = SendEmailResponse.model_validate_json(str(result))
        logger.info(
            f"Email RPC returned code {response.code}, id: {response.email_id or '-'}"
        )
        return response


def connect_to_rpc(config: EmailRpcConfig) -> Any:
    """Open an rpyc connection to the mail tier (Unix socket if configured)."""
    rpc_config = {"sync_request_timeout": config.timeout_seconds}
    if config.socket_path:
        return unix_connect(config.socket_path, config=rpc_config)
    return rpyc.connect(config.host, config.port, config=rpc_config)


def create_email_sender(config: AppConfig) -> EmailSender:
    """Pick the EmailSender named by ``config.email_backend``."""
    if config.email_backend == "smtp":
        logger.info(f"Email backend: SMTP {config.email.host}:{config.email.port}")
        return SMTPEmailSender(config.email)

    target = config.email_rpc.socket_path or f"{config.email_rpc.host}:{config.email_rpc.port}"
    logger.info(f"Email backend: RPC at {target}")
    return RemoteEmailSender(config.email_rpc)
