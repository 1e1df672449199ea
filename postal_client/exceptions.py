class PostalError(Exception):
    pass


class PostalConfigurationError(PostalError):
    pass


class PostalTransportError(PostalError):
    pass


class PostalDecodeError(PostalError):
    pass


class PostalApiError(PostalError):
    def __init__(self, status_code: int, message: str, code: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.code = code
        detail = f"{code}: {message}" if code else message
        super().__init__(f"Postal API error ({status_code}): {detail}")


class PostalAuthenticationError(PostalApiError):
    pass


class PostalValidationError(PostalApiError):
    pass


class PostalRateLimitError(PostalApiError):
    pass
