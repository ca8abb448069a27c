from __future__ import annotations

import threading
import time
from typing import Any, Callable

import httpx
import pytest

from akeneo_client.core.config import ClientSettings
from akeneo_client.session import Session


BASE_URL = "https://pim.example.test"


class FakeTokenResponse:
    def __init__(self, *, status_code: int = 200, payload: Any = None, reason: str = "OK") -> None:
        self.status_code = status_code
        self._payload = payload
        self.reason = reason

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json body")
        return self._payload


class FakeTokenEndpoint:
    """Stands in for ``requests.post`` against the OAuth token endpoint.

    Queued actions are consumed first (responses are returned, exceptions
    raised); once the queue is empty every call succeeds with a numbered
    token pair.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.actions: list[Any] = []
        self.delay_seconds = 0.0
        self._lock = threading.Lock()

    def __call__(self, url: str, json: dict[str, Any], headers: dict[str, str], timeout: float):  # noqa: A002
        with self._lock:
            self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
            number = len(self.calls)
            action = self.actions.pop(0) if self.actions else None
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if isinstance(action, Exception):
            raise action
        if action is not None:
            return action
        return FakeTokenResponse(
            payload={
                "access_token": f"access-{number}",
                "refresh_token": f"refresh-{number}",
                "expires_in": 3600,
                "token_type": "bearer",
            }
        )

    def queue_response(self, *, status_code: int = 200, payload: Any = None) -> None:
        self.actions.append(FakeTokenResponse(status_code=status_code, payload=payload))

    def queue_error(self, exc: Exception) -> None:
        self.actions.append(exc)

    def grant_types(self) -> list[str]:
        return [call["json"]["grant_type"] for call in self.calls]


@pytest.fixture
def token_endpoint(monkeypatch) -> FakeTokenEndpoint:
    endpoint = FakeTokenEndpoint()
    monkeypatch.setattr("akeneo_client.services.token_service.requests.post", endpoint)
    return endpoint


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(
        base_url=BASE_URL,
        client_id="client-id",
        secret="client-secret",
        username="admin",
        password="admin-password",
        rate_limit=1000,
        retry_count=2,
        retry_wait_seconds=0.0,
        retry_max_wait_seconds=0.0,
    )


@pytest.fixture
def make_session(settings, token_endpoint) -> Callable[..., Session]:
    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> Session:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return Session(settings, http_client=client, **kwargs)

    return _make
