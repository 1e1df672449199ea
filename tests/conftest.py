import json
from typing import Any
from unittest.mock import AsyncMock

import pytest

from postal_client import PostalClient


API_URL = "https://postal.example.com"
API_KEY = "test-server-key"


class FakeResponse:
    """Stands in for ``niquests.Response`` with only what the client reads."""

    def __init__(
        self,
        status_code: int = 200,
        json_body: Any = None,
        text: str | None = None,
        reason: str = "",
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        if text is None:
            text = json.dumps(json_body) if json_body is not None else ""
        self.text = text

    def json(self) -> Any:
        return json.loads(self.text)


def envelope(data: Any, status: str = "success") -> dict[str, Any]:
    return {"status": status, "time": 0.02, "flags": {}, "data": data}


@pytest.fixture()
def session() -> AsyncMock:
    return AsyncMock()


@pytest.fixture()
def client(session: AsyncMock) -> PostalClient:
    return PostalClient(api_url=API_URL, api_key=API_KEY, session=session)
