from http import HTTPStatus
from types import TracebackType
from typing import TYPE_CHECKING, Any, Self, TypeVar

import niquests
import structlog
from niquests import AsyncSession
from pydantic import HttpUrl, TypeAdapter, ValidationError

from .exceptions import (
    PostalApiError,
    PostalAuthenticationError,
    PostalConfigurationError,
    PostalDecodeError,
    PostalRateLimitError,
    PostalTransportError,
    PostalValidationError,
)
from .models import (
    Delivery,
    DetailsInterest,
    Message,
    MessageDetails,
    PostalResponse,
    RawMessage,
    SendResult,
)


if TYPE_CHECKING:
    from .settings import PostalSettings


logger = structlog.get_logger()

T = TypeVar("T")

SEND_MESSAGE_ENDPOINT = "/api/v1/send/message"
SEND_RAW_ENDPOINT = "/api/v1/send/raw"
MESSAGE_DETAILS_ENDPOINT = "/api/v1/messages/message"
MESSAGE_DELIVERIES_ENDPOINT = "/api/v1/messages/deliveries"

_http_url = TypeAdapter(HttpUrl)
_send_result = TypeAdapter(SendResult)
_message_details = TypeAdapter(MessageDetails)
_deliveries = TypeAdapter(list[Delivery])

_STATUS_ERRORS: dict[int, type[PostalApiError]] = {
    HTTPStatus.UNAUTHORIZED: PostalAuthenticationError,
    HTTPStatus.UNPROCESSABLE_ENTITY: PostalValidationError,
    HTTPStatus.TOO_MANY_REQUESTS: PostalRateLimitError,
}

_CODE_ERRORS: dict[str, type[PostalApiError]] = {
    "InvalidServerAPIKey": PostalAuthenticationError,
    "AccessDenied": PostalAuthenticationError,
    "ParameterError": PostalValidationError,
    "ValidationError": PostalValidationError,
    "NoRecipients": PostalValidationError,
    "NoContent": PostalValidationError,
    "TooManyToAddresses": PostalValidationError,
    "TooManyCCAddresses": PostalValidationError,
    "TooManyBCCAddresses": PostalValidationError,
    "FromAddressMissing": PostalValidationError,
    "UnauthenticatedFromAddress": PostalValidationError,
    "AttachmentMissingName": PostalValidationError,
    "AttachmentMissingData": PostalValidationError,
}


class PostalClient:
    """Async client for Postal's HTTP API.

    The client keeps only its credentials. Used as an async context manager it
    shares one session across calls; otherwise every call opens and closes its
    own. Each call is a single request: failures are raised, never retried.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout: float | None = None,
        session: AsyncSession | None = None,
    ) -> None:
        try:
            _http_url.validate_python(api_url)
        except ValidationError as e:
            raise PostalConfigurationError(f"Invalid Postal address: {api_url!r}") from e
        if not api_key:
            raise PostalConfigurationError("Postal API key must not be empty")

        self._api_url = api_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._session = session
        self._owned_session = session is None

        self.logger = logger.bind(
            service="postal_client",
            api_url=self._api_url,
        )

    @classmethod
    def from_settings(cls, settings: "PostalSettings", session: AsyncSession | None = None) -> Self:
        return cls(
            api_url=settings.address,
            api_key=settings.token.get_secret_value(),
            timeout=settings.timeout,
            session=session,
        )

    @property
    def api_url(self) -> str:
        return self._api_url

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def __repr__(self) -> str:
        return f"{type(self).__name__}(api_url={self._api_url!r})"

    async def __aenter__(self) -> Self:
        if self._session is None:
            self._session = AsyncSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._owned_session and self._session:
            await self._session.close()
            self._session = None

    async def send(self, message: Message) -> SendResult:
        self.logger.debug(
            "sending_message",
            to=message.to,
            subject=message.subject,
            has_attachments=bool(message.attachments),
        )
        if not message.has_body:
            self.logger.warning("message_without_body", subject=message.subject)

        data = await self._make_request(SEND_MESSAGE_ENDPOINT, message.to_payload())
        result = self._parse(data, _send_result)

        self.logger.debug(
            "message_sent_successfully",
            message_id=result.message_id,
            recipients=result.recipients,
        )
        return result

    async def send_raw(self, message: RawMessage) -> SendResult:
        self.logger.debug("sending_raw_message", mail_from=message.mail_from, rcpt_to=message.rcpt_to)

        data = await self._make_request(SEND_RAW_ENDPOINT, message.to_payload())
        result = self._parse(data, _send_result)

        self.logger.debug(
            "message_sent_successfully",
            message_id=result.message_id,
            recipients=result.recipients,
        )
        return result

    async def details(
        self,
        message_id: int,
        interest: DetailsInterest = DetailsInterest.NONE,
    ) -> MessageDetails:
        """Fetch a message record.

        Postal returns only ``id`` and ``token`` by default; every flag set in
        ``interest`` adds the matching section to the response.
        """
        payload: dict[str, Any] = {"id": message_id}
        if expansions := interest.expansions:
            payload["_expansions"] = expansions

        data = await self._make_request(MESSAGE_DETAILS_ENDPOINT, payload)
        return self._parse(data, _message_details)

    async def deliveries(self, message_id: int) -> list[Delivery]:
        data = await self._make_request(MESSAGE_DELIVERIES_ENDPOINT, {"id": message_id})
        return self._parse(data, _deliveries)

    def _get_headers(self) -> dict[str, str]:
        return {
            "X-Server-API-Key": self._api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _parse(self, data: Any, adapter: TypeAdapter[T]) -> T:
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            self.logger.error("unexpected_response_data", errors=e.errors(include_url=False))
            raise PostalDecodeError(f"Unexpected response data: {e}") from e

    def _handle_response_errors(self, response: niquests.Response) -> None:
        status_code = response.status_code
        if HTTPStatus.OK <= status_code < HTTPStatus.MULTIPLE_CHOICES:
            return

        message = _error_message(response)
        error_class = _STATUS_ERRORS.get(status_code, PostalApiError)

        if error_class is PostalRateLimitError:
            self.logger.warning("rate_limit_exceeded", status_code=status_code)
        elif error_class is PostalAuthenticationError:
            self.logger.error("authentication_failed", status_code=status_code)
        else:
            self.logger.error("request_failed", status_code=status_code, error=message)

        raise error_class(status_code=status_code, message=message)

    def _decode_envelope(self, response: niquests.Response) -> PostalResponse:
        try:
            body = response.json()
        except ValueError as e:
            self.logger.error("invalid_json_response", status_code=response.status_code)
            raise PostalDecodeError(f"Response body is not valid JSON: {e}") from e

        try:
            return PostalResponse.model_validate(body)
        except ValidationError as e:
            self.logger.error("unexpected_response_shape", status_code=response.status_code)
            raise PostalDecodeError(f"Unexpected response shape: {e}") from e

    async def _make_request(self, endpoint: str, json_data: dict[str, Any]) -> Any:
        url = f"{self._api_url}/{endpoint.lstrip('/')}"
        request_kwargs: dict[str, Any] = {
            "method": "POST",
            "url": url,
            "json": json_data,
            "headers": self._get_headers(),
        }
        if self._timeout is not None:
            request_kwargs["timeout"] = self._timeout

        self.logger.debug("making_request", method="POST", url=url)

        try:
            if self._session is not None:
                response = await self._session.request(**request_kwargs)
            else:
                async with AsyncSession() as session:
                    response = await session.request(**request_kwargs)

        except niquests.exceptions.Timeout as e:
            self.logger.error("request_timeout", url=url, error=str(e))
            raise PostalTransportError(f"Request timeout: {e}") from e

        except niquests.exceptions.RequestException as e:
            self.logger.error("request_exception", url=url, error=str(e))
            raise PostalTransportError(f"Request failed: {e}") from e

        self._handle_response_errors(response)
        envelope = self._decode_envelope(response)

        if not envelope.is_success:
            code = envelope.error_code
            self.logger.error(
                "postal_error",
                status=envelope.status,
                code=code,
                error=envelope.error_message,
            )
            error_class = _CODE_ERRORS.get(code, PostalApiError)
            raise error_class(
                status_code=response.status_code,
                message=envelope.error_message,
                code=code,
            )

        self.logger.debug("request_successful", url=url, status_code=response.status_code)
        return envelope.data


def _error_message(response: niquests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        if isinstance(body.get("error"), str):
            return body["error"]
        data = body.get("data")
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        if body.get("message"):
            return str(body["message"])

    return response.text or response.reason or f"HTTP {response.status_code}"
