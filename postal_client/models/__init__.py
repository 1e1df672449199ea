from .common import Attachment, EmailAddress
from .requests import DetailsInterest, Message, RawMessage
from .responses import (
    ActivityEntries,
    AttachmentDetails,
    Delivery,
    DeliveryStatus,
    Inspection,
    MessageDetails,
    MessageInfo,
    MessageStatus,
    PostalResponse,
    SendResult,
)


__all__ = [
    "ActivityEntries",
    "Attachment",
    "AttachmentDetails",
    "Delivery",
    "DeliveryStatus",
    "DetailsInterest",
    "EmailAddress",
    "Inspection",
    "Message",
    "MessageDetails",
    "MessageInfo",
    "MessageStatus",
    "PostalResponse",
    "RawMessage",
    "SendResult",
]
