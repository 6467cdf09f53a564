"""Email RPC Service - rpyc service that sends mail on behalf of the API tier.

Payloads cross the wire as JSON strings so no netrefs leak between tiers.
"""

import logging
from typing import Optional

from pydantic import ValidationError
from rpyc import Service

from ..config import EmailConfig
from ..mail import EmailSender, SendEmailRequest, SendEmailResponse, SMTPEmailSender
from ..utils.exception_logger import log_exception

logger = logging.getLogger(__name__)


class EmailRpcService(Service):
    """rpyc service exposing ``send_email`` and ``ping``.

    One instance is shared by every connection; it holds no per-request
    state.
    """

    def __init__(
        self, config: EmailConfig, sender: Optional[EmailSender] = None
    ):
        super().__init__()
        self.config = config
        self.sender = sender or SMTPEmailSender(config)
        logger.info(
            f"EmailRpcService initialized (SMTP {config.host or '<unset>'}:{config.port})"
        )

    def on_connect(self, conn):
        logger.debug("Email RPC client connected")

    def on_disconnect(self, conn):
        logger.debug("Email RPC client disconnected")

    def exposed_send_email(self, payload: str) -> str:
        """Send one email.

        Args:
            payload: SendEmailRequest as camelCase JSON

        Returns:
            SendEmailResponse as camelCase JSON
        """
        try:
            request = SendEmailRequest.model_validate_json(payload)
        except ValidationError as e:
            logger.info(f"Rejected malformed email payload: {e.error_count()} errors")
            response = SendEmailResponse(code=400, message=f"Invalid request: {e}")
            return response.model_dump_json(by_alias=True)

        logger.info(f"exposed_send_email: to={request.to} subject={request.subject!r}")
        try:
            response = self.sender.send_email(request)
        except Exception as e:
            logger.error(f"Email send failed in RPC tier: {e}")
            log_exception(e, context={"recipients": request.to})
            response = SendEmailResponse(code=500, message=f"Failed to send email: {e}")
        return response.model_dump_json(by_alias=True)

    def exposed_ping(self) -> str:
        return "pong"
