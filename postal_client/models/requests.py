import base64
from enum import Flag
from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .common import Attachment, EmailAddress


Address = str | EmailAddress


def _address(value: Address) -> str:
    return value.to_string() if isinstance(value, EmailAddress) else value


class Message(BaseModel):
    """An outbound e-mail for ``/api/v1/send/message``.

    Instances are immutable: every ``with_*`` method returns an updated copy,
    so a message handed to the client can't change under it. Nothing is
    validated locally, Postal rejects bad addresses or a missing body itself.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    to: tuple[str, ...] = ()
    cc: tuple[str, ...] = ()
    bcc: tuple[str, ...] = ()
    from_address: str | None = Field(default=None, alias="from")
    sender: str | None = None
    reply_to: str | None = None
    subject: str | None = None
    plain_body: str | None = None
    html_body: str | None = None
    attachments: tuple[Attachment, ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    tag: str | None = None
    bounce: bool | None = None

    @field_validator("headers", mode="before")
    @classmethod
    def _headers_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return tuple(value.items())
        return value

    @field_serializer("headers")
    def _headers_to_mapping(self, headers: tuple[tuple[str, str], ...]) -> dict[str, str]:
        return dict(headers)

    def _update(self, **changes: Any) -> Self:
        return self.model_copy(update=changes)

    def with_to(self, *addresses: Address) -> Self:
        return self._update(to=(*self.to, *map(_address, addresses)))

    def with_cc(self, *addresses: Address) -> Self:
        return self._update(cc=(*self.cc, *map(_address, addresses)))

    def with_bcc(self, *addresses: Address) -> Self:
        return self._update(bcc=(*self.bcc, *map(_address, addresses)))

    def with_from(self, address: Address) -> Self:
        return self._update(from_address=_address(address))

    def with_sender(self, address: Address) -> Self:
        return self._update(sender=_address(address))

    def with_reply_to(self, address: Address) -> Self:
        return self._update(reply_to=_address(address))

    def with_subject(self, subject: str) -> Self:
        return self._update(subject=subject)

    def with_text(self, body: str) -> Self:
        return self._update(plain_body=body)

    def with_html(self, body: str) -> Self:
        return self._update(html_body=body)

    def with_attachment(
        self,
        attachment: Attachment | str,
        content_type: str | None = None,
        data: bytes | str | None = None,
    ) -> Self:
        """Attach a file.

        Accepts a ready ``Attachment`` or ``name, content_type, data`` where
        ``data`` is raw bytes (encoded here) or an already base64-encoded string.
        """
        if not isinstance(attachment, Attachment):
            if content_type is None or data is None:
                raise TypeError("content_type and data are required when attaching by name")
            if isinstance(data, bytes):
                attachment = Attachment.from_bytes(attachment, content_type, data)
            else:
                attachment = Attachment(name=attachment, content_type=content_type, data=data)
        return self._update(attachments=(*self.attachments, attachment))

    def with_header(self, name: str, value: str) -> Self:
        merged = {**dict(self.headers), name: value}
        return self._update(headers=tuple(merged.items()))

    def with_tag(self, tag: str) -> Self:
        return self._update(tag=tag)

    def with_bounce(self, bounce: bool = True) -> Self:
        return self._update(bounce=bounce)

    @property
    def has_body(self) -> bool:
        return self.plain_body is not None or self.html_body is not None

    def to_payload(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return {key: value for key, value in data.items() if value != [] and value != {}}


class RawMessage(BaseModel):
    """A complete RFC 2822 message for ``/api/v1/send/raw``."""

    model_config = ConfigDict(frozen=True)

    mail_from: str
    rcpt_to: tuple[str, ...]
    data: str
    bounce: bool | None = None

    @classmethod
    def from_bytes(cls, mail_from: Address, rcpt_to: list[Address], raw: bytes) -> "RawMessage":
        return cls(
            mail_from=_address(mail_from),
            rcpt_to=tuple(_address(address) for address in rcpt_to),
            data=base64.b64encode(raw).decode("ascii"),
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class DetailsInterest(Flag):
    """Optional sections to expand in a message details lookup."""

    NONE = 0
    STATUS = 1
    DETAILS = 2
    INSPECTION = 4
    PLAIN_BODY = 8
    HTML_BODY = 16
    ATTACHMENTS = 32
    HEADERS = 64
    RAW_MESSAGE = 128
    ACTIVITY_ENTRIES = 256
    ALL = 511

    @property
    def expansions(self) -> list[str]:
        return [member.name.lower() for member in type(self) if member in self]
