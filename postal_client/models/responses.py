from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PostalResponse(BaseModel):
    status: str
    time: float | None = None
    flags: dict[str, Any] = Field(default_factory=dict)
    data: dict[str, Any] | list[Any] | None = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def error_code(self) -> str:
        if self.status == "parameter-error":
            return "ParameterError"
        if isinstance(self.data, dict):
            return str(self.data.get("code", "UnknownError"))
        return "UnknownError"

    @property
    def error_message(self) -> str:
        if isinstance(self.data, dict) and self.data.get("message"):
            return str(self.data["message"])
        return f"Postal responded with status {self.status!r}"


class MessageStatus(BaseModel):
    id: int
    token: str


class SendResult(BaseModel):
    """Postal's acknowledgment of a send, keyed by recipient address.

    This only means the server accepted the message, not that it was delivered.
    """

    message_id: str
    messages: dict[str, MessageStatus]

    def __getitem__(self, recipient: str) -> MessageStatus:
        return self.messages[recipient]

    @property
    def recipients(self) -> list[str]:
        return list(self.messages)

    def __contains__(self, recipient: object) -> bool:
        return recipient in self.messages


class _Section(BaseModel):
    model_config = ConfigDict(extra="allow")


class DeliveryStatus(_Section):
    status: str | None = None
    last_delivery_attempt: float | None = None
    held: bool | None = None
    hold_expiry: float | None = None


class MessageInfo(_Section):
    rcpt_to: str | None = None
    mail_from: str | None = None
    subject: str | None = None
    message_id: str | None = None
    timestamp: float | None = None
    direction: str | None = None
    size: int | None = None
    bounce: bool | None = None
    bounce_for_id: int | None = None
    tag: str | None = None
    received_with_ssl: bool | None = None


class Inspection(_Section):
    inspected: bool | None = None
    spam: bool | None = None
    spam_score: float | None = None
    threat: bool | None = None
    threat_details: str | None = None


class AttachmentDetails(_Section):
    filename: str | None = None
    content_type: str | None = None
    data: str | None = None
    size: int | None = None
    hash: str | None = None


class ActivityEntries(_Section):
    loads: list[dict[str, Any]] = Field(default_factory=list)
    clicks: list[dict[str, Any]] = Field(default_factory=list)


class MessageDetails(_Section):
    """A message record from ``/api/v1/messages/message``.

    Only ``id`` and ``token`` are always present; every other section stays
    ``None`` unless it was requested through ``DetailsInterest``.
    """

    id: int
    token: str | None = None
    status: DeliveryStatus | None = None
    details: MessageInfo | None = None
    inspection: Inspection | None = None
    plain_body: str | None = None
    html_body: str | None = None
    attachments: list[AttachmentDetails] | None = None
    headers: dict[str, list[str]] | None = None
    raw_message: str | None = None
    activity_entries: ActivityEntries | None = None


class Delivery(_Section):
    id: int
    status: str | None = None
    details: str | None = None
    output: str | None = None
    sent_with_ssl: bool | None = None
    log_id: str | None = None
    time: float | None = None
    timestamp: float | None = None
