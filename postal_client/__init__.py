from .client import PostalClient
from .exceptions import (
    PostalApiError,
    PostalAuthenticationError,
    PostalConfigurationError,
    PostalDecodeError,
    PostalError,
    PostalRateLimitError,
    PostalTransportError,
    PostalValidationError,
)
from .models import (
    Attachment,
    Delivery,
    DetailsInterest,
    EmailAddress,
    Message,
    MessageDetails,
    MessageStatus,
    RawMessage,
    SendResult,
)


__all__ = [
    "Attachment",
    "Delivery",
    "DetailsInterest",
    "EmailAddress",
    "Message",
    "MessageDetails",
    "MessageStatus",
    "PostalApiError",
    "PostalAuthenticationError",
    "PostalClient",
    "PostalConfigurationError",
    "PostalDecodeError",
    "PostalError",
    "PostalRateLimitError",
    "PostalTransportError",
    "PostalValidationError",
    "RawMessage",
    "SendResult",
]
