from __future__ import annotations

import base64
import threading

import pytest
import requests  # type: ignore[import-untyped]

from akeneo_client.services.token_service import Credentials, TokenManager
from akeneo_client.transport.errors import AuthError


BASE_URL = "https://pim.example.test"
CREDENTIALS = Credentials(client_id="client-id", secret="client-secret", username="admin", password="admin-password")


class _Clock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _manager(clock: _Clock | None = None) -> TokenManager:
    return TokenManager(
        base_url=BASE_URL,
        credentials=CREDENTIALS,
        timeout_seconds=7.0,
        user_agent="akeneo-client/test",
        clock=clock or _Clock(),
    )


def test_password_grant_sends_basic_auth_and_json_body(token_endpoint) -> None:
    manager = _manager()
    state = manager.grant_by_password()

    call = token_endpoint.calls[0]
    assert call["url"] == f"{BASE_URL}/api/oauth/v1/token"
    assert call["json"] == {"grant_type": "password", "username": "admin", "password": "admin-password"}
    expected = base64.b64encode(b"client-id:client-secret").decode("ascii")
    assert call["headers"]["Authorization"] == f"Basic {expected}"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["timeout"] == 7.0
    assert state.access_token == "access-1"
    assert state.refresh_token == "refresh-1"
    assert state.expires_at == 1000.0 + 3600


def test_needs_refresh_honours_five_minute_margin(token_endpoint) -> None:
    clock = _Clock(1000.0)
    manager = _manager(clock)
    assert manager.needs_refresh() is True

    manager.grant_by_password()
    assert manager.needs_refresh() is False

    clock.now = 1000.0 + 3600 - 300 - 1
    assert manager.needs_refresh() is False
    clock.now = 1000.0 + 3600 - 300
    assert manager.needs_refresh() is True


def test_refresh_grant_uses_held_refresh_token(token_endpoint) -> None:
    manager = _manager()
    manager.grant_by_password()
    state = manager.grant_by_refresh_token()

    assert token_endpoint.calls[1]["json"] == {"grant_type": "refresh_token", "refresh_token": "refresh-1"}
    assert state.access_token == "access-2"


def test_refresh_grant_without_refresh_token_fails(token_endpoint) -> None:
    with pytest.raises(AuthError) as exc:
        _manager().grant_by_refresh_token()
    assert exc.value.reason_code == "refresh_token_missing"
    assert token_endpoint.calls == []


@pytest.mark.parametrize(
    "payload",
    [
        {"refresh_token": "r", "expires_in": 3600},
        {"access_token": "a", "expires_in": 3600},
        {"access_token": "a", "refresh_token": "r", "expires_in": 0},
        {"access_token": "a", "refresh_token": "r"},
    ],
)
def test_incomplete_grant_response_is_rejected(token_endpoint, payload) -> None:
    token_endpoint.queue_response(payload=payload)
    manager = _manager()
    with pytest.raises(AuthError) as exc:
        manager.grant_by_password()
    assert exc.value.reason_code == "token_response_invalid"
    assert manager.state is None


def test_rejected_grant_carries_upstream_message(token_endpoint) -> None:
    token_endpoint.queue_response(
        status_code=422, payload={"code": 422, "message": "This combination of username and password is invalid."}
    )
    with pytest.raises(AuthError) as exc:
        _manager().grant_by_password()
    assert exc.value.reason_code == "grant_rejected"
    assert "username and password is invalid" in str(exc.value)


def test_transport_failure_during_grant_is_auth_error(token_endpoint) -> None:
    token_endpoint.queue_error(requests.ConnectTimeout("slow"))
    with pytest.raises(AuthError) as exc:
        _manager().grant_by_password()
    assert exc.value.reason_code == "timeout"
    assert isinstance(exc.value.__cause__, requests.ConnectTimeout)


def test_ensure_valid_grants_once_then_reuses_token(token_endpoint) -> None:
    manager = _manager()
    assert manager.ensure_valid() == "access-1"
    assert manager.ensure_valid() == "access-1"
    assert token_endpoint.grant_types() == ["password"]


def test_ensure_valid_refreshes_stale_token(token_endpoint) -> None:
    clock = _Clock()
    manager = _manager(clock)
    manager.ensure_valid()
    clock.now += 3600

    assert manager.ensure_valid() == "access-2"
    assert token_endpoint.grant_types() == ["password", "refresh_token"]


def test_ensure_valid_falls_back_to_password_grant(token_endpoint) -> None:
    clock = _Clock()
    manager = _manager(clock)
    manager.ensure_valid()
    clock.now += 3600
    token_endpoint.queue_response(status_code=400, payload={"message": "Refresh token expired"})

    assert manager.ensure_valid() == "access-3"
    assert token_endpoint.grant_types() == ["password", "refresh_token", "password"]


def test_ensure_valid_propagates_when_fallback_fails(token_endpoint) -> None:
    clock = _Clock()
    manager = _manager(clock)
    manager.ensure_valid()
    clock.now += 3600
    token_endpoint.queue_response(status_code=400, payload={"message": "Refresh token expired"})
    token_endpoint.queue_error(requests.ConnectionError("down"))

    with pytest.raises(AuthError) as exc:
        manager.ensure_valid()
    assert exc.value.reason_code == "connection_error"


def test_concurrent_ensure_valid_performs_single_exchange(token_endpoint) -> None:
    token_endpoint.delay_seconds = 0.1
    manager = _manager()
    barrier = threading.Barrier(8)
    tokens: list[str] = []

    def _worker() -> None:
        barrier.wait()
        tokens.append(manager.ensure_valid())

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(token_endpoint.calls) == 1
    assert tokens == ["access-1"] * 8


def test_concurrent_waiters_share_failed_outcome(token_endpoint) -> None:
    token_endpoint.delay_seconds = 0.2
    token_endpoint.queue_response(status_code=401, payload={"message": "bad client"})
    manager = _manager()
    barrier = threading.Barrier(5)
    errors: list[AuthError] = []

    def _worker() -> None:
        barrier.wait()
        try:
            manager.ensure_valid()
        except AuthError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=_worker) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(token_endpoint.calls) == 1
    assert len(errors) == 5
    assert len({id(err) for err in errors}) == 1


def test_credentials_repr_hides_secrets() -> None:
    text = repr(CREDENTIALS)
    assert "client-secret" not in text
    assert "admin-password" not in text
