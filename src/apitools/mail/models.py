"""Email request/response models shared by the API and the RPC tier."""

from typing import List

from pydantic import Field

from ..server.models.api_models import BusinessResponse, CamelModel

PRIORITY_HIGH = 1
PRIORITY_NORMAL = 3
PRIORITY_LOW = 5


class Attachment(CamelModel):
    file_name: str = Field(default="", description="File name shown to recipients")
    content: str = Field(default="", description="Base64-encoded file content")
    content_type: str = Field(default="", description="MIME type, guessed if empty")
    size: int = Field(default=0, description="Declared size in bytes (informational)")


class SendEmailRequest(CamelModel):
    to: List[str] = Field(default_factory=list)
    cc: List[str] = Field(default_factory=list)
    bcc: List[str] = Field(default_factory=list)
    subject: str = ""
    content: str = ""
    content_type: str = Field(default="text/plain", description="text/plain or text/html")
    from_address: str = Field(default="", alias="from")
    from_name: str = ""
    reply_to: str = ""
    priority: int = Field(default=0, description="0 unset, 1 high, 3 normal, 5 low")
    attachments: List[Attachment] = Field(default_factory=list)


class SendEmailResponse(BusinessResponse):
    email_id: str = ""
    send_time: int = 0
